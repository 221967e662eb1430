"""Pytest configuration and shared fixtures for finledger tests."""

from datetime import date
from decimal import Decimal

import pytest
import yaml

from finledger.account import Account
from finledger.schema import InterestEntry, Schedule
from finledger.types import ScheduleType

# ============================================================================
# Schedule and Interest Builders
# ============================================================================


def make_schedule(
    schedule_type: ScheduleType = ScheduleType.MONTHLY_DAY,
    param: int = 1,
    amount: Decimal = Decimal("-100.00"),
    next_date: date = date(2024, 1, 1),
    category: str = "Other",
    note: str = "Test schedule",
    auto_allocate: bool = False,
    enabled: bool = True,
) -> Schedule:
    """Create a Schedule with sensible defaults (monthly on the 1st)."""
    return Schedule(
        type=schedule_type,
        param=param,
        amount=amount,
        note=note,
        category=category,
        auto_allocate=auto_allocate,
        next_date=next_date,
        enabled=enabled,
    )


def make_interest_entry(
    category: str = "saving",
    rate_pct: Decimal = Decimal("1.0"),
    monthly: bool = True,
    start_date: date = date(2024, 1, 1),
    next_date: date = None,
) -> InterestEntry:
    """Create an InterestEntry with sensible defaults (1% monthly)."""
    return InterestEntry(
        category=category,
        rate_pct=rate_pct,
        monthly=monthly,
        start_date=start_date,
        next_date=next_date,
    )


def make_account(
    allocations: dict[str, Decimal] = None,
    schedules: list[Schedule] = None,
) -> Account:
    """Create an Account with default categories plus optional schedules."""
    account = Account()
    if allocations is not None:
        account.set_allocation(allocations)
    for schedule in schedules or []:
        account.add_schedule(schedule)
    return account


def transactions_for(account: Account, category: str, note_prefix: str = "") -> list:
    """Transactions in ``category`` whose note starts with ``note_prefix``."""
    key = account.categories.key_for(category)
    return [t for t in account.transactions if t.category == key and t.note.startswith(note_prefix)]


# ============================================================================
# Pytest Fixtures
# ============================================================================


@pytest.fixture
def sample_schedule():
    """Fixture providing a schedule builder function."""
    return make_schedule


@pytest.fixture
def sample_interest_entry():
    """Fixture providing an interest entry builder function."""
    return make_interest_entry


@pytest.fixture
def account():
    """Fixture providing a fresh Account with the default categories."""
    return make_account()


@pytest.fixture
def state_file(tmp_path):
    """Fixture providing a path for a temporary ledger state file."""
    return tmp_path / "finledger.yaml"


@pytest.fixture
def sample_state_dict():
    """Fixture providing a persisted ledger as a dictionary."""
    return {
        "version": "1.0",
        "balance": "1500.00",
        "settings": {
            "auto_process_on_startup": False,
            "fallback_category": "Other",
        },
        "categories": {
            "emergency": "Emergency",
            "saving": "Saving",
            "other": "Other",
        },
        "allocations": {
            "emergency": "30",
            "saving": "20",
            "other": "50",
        },
        "category_balances": {
            "emergency": "0",
            "saving": "1000.00",
            "other": "500.00",
        },
        "interests": [
            {
                "category": "saving",
                "rate_pct": "1.0",
                "monthly": True,
                "start_date": "2024-01-01",
                "next_date": "2024-02-01",
            },
        ],
        "schedules": [
            {
                "type": "MONTHLY_DAY",
                "param": 15,
                "amount": "-200.00",
                "note": "Rent",
                "category": "other",
                "auto_allocate": False,
                "next_date": "2024-02-15",
                "enabled": True,
            },
        ],
        "transactions": [
            {"date": "2024-01-01", "amount": "1000.00", "category": "saving", "note": "Opening"},
            {"date": "2024-01-02", "amount": "500.00", "category": "other", "note": "Cash"},
        ],
    }


@pytest.fixture
def write_state(state_file):
    """Fixture providing a function that writes a dict as the YAML state file."""

    def _write(data) -> None:
        with open(state_file, "w") as f:
            yaml.safe_dump(data, f)
        return state_file

    return _write
