"""Account: the ledger, its categories, schedules and interest rules.

The Account owns all mutable state. The schedule advancer and the interest
engine only operate through the primitives defined here
(:meth:`Account.post_transaction`, :meth:`Account.allocate` and
:meth:`Account.category_balance`).
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal
from typing import Optional

from . import constants
from .categories import CategoryRegistry
from .interest import InterestEngine
from .scheduler import ScheduleAdvancer
from .schema import InterestEntry, Schedule, Settings, Transaction
from .types import ProcessingReport

logger = logging.getLogger(__name__)


class Account:
    """Single-user ledger with category balances, allocation and accrual rules.

    Example:
        >>> account = Account()
        >>> _ = account.allocate(date(2024, 1, 1), Decimal("1000"), "Salary")
        >>> account.category_balance("saving")
        Decimal('200.0')
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        default_allocations: Iterable[tuple[str, Decimal]] = constants.DEFAULT_ALLOCATIONS,
        schedule_advancer: Optional[ScheduleAdvancer] = None,
        interest_engine: Optional[InterestEngine] = None,
    ):
        """Create an account with zero balances.

        Args:
            settings: User settings (defaults if omitted)
            default_allocations: (display name, percent) pairs to start with
            schedule_advancer: Advancer used by process_schedules_up_to
            interest_engine: Engine used by apply_interest_up_to
        """
        self.settings = settings or Settings()
        self.categories = CategoryRegistry()
        self.balance = constants.ZERO
        self.transactions: list[Transaction] = []
        self.schedules: list[Schedule] = []
        self.allocations: dict[str, Decimal] = {}
        self.category_balances: dict[str, Decimal] = {}
        self.interests: dict[str, InterestEntry] = {}
        self.schedule_advancer = schedule_advancer or ScheduleAdvancer()
        self.interest_engine = interest_engine or InterestEngine()

        for name, pct in default_allocations:
            key = self.ensure_category(name)
            self.allocations[key] = Decimal(pct)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    @property
    def fallback_category(self) -> str:
        """Key of the catch-all category (not registered by reading it)."""
        return self.categories.key_for(self.settings.fallback_category)

    def ensure_category(self, name: str) -> str:
        """Register a category (zero balance) if needed and return its key."""
        key = self.categories.intern(name)
        self.category_balances.setdefault(key, constants.ZERO)
        return key

    def display_name(self, key: str) -> str:
        return self.categories.display_name(key)

    # ------------------------------------------------------------------
    # Ledger primitives
    # ------------------------------------------------------------------

    def post_transaction(
        self,
        txn_date: date,
        amount: Decimal,
        category: str,
        note: str = "",
    ) -> Transaction:
        """
        Append a transaction and update the overall and category balances.

        Unknown categories are created on the fly.

        Args:
            txn_date: Date of the transaction
            amount: Signed amount (positive = credit, negative = debit)
            category: Category display name or key
            note: Free text provenance marker

        Returns:
            The committed Transaction
        """
        key = self.ensure_category(category)
        txn = Transaction(date=txn_date, amount=amount, category=key, note=note)

        self.transactions.append(txn)
        self.balance += txn.amount
        self.category_balances[key] += txn.amount

        logger.debug("Posted %s to %s on %s (%s)", txn.amount, key, txn_date, note)
        return txn

    def allocation_total(self) -> Decimal:
        return sum(self.allocations.values(), constants.ZERO)

    def allocate(self, txn_date: date, amount: Decimal, note: str = "") -> list[Transaction]:
        """
        Split ``amount`` across categories in proportion to their allocation.

        Percentages are normalised by their total, so they do not need to add
        up to 100. When the total is zero (or negative) the whole amount goes
        to the fallback category. No remainder correction is applied.

        Args:
            txn_date: Date of the postings
            amount: Amount to distribute
            note: Base note; a provenance suffix is appended

        Returns:
            The posted transactions, one per category with a non-zero share
        """
        total_pct = self.allocation_total()

        if total_pct <= constants.ALLOCATION_EPSILON:
            logger.info(
                "Allocation total is %s; posting %s to %s",
                total_pct,
                amount,
                self.settings.fallback_category,
            )
            return [
                self.post_transaction(
                    txn_date,
                    amount,
                    self.settings.fallback_category,
                    note + constants.AUTO_ALLOC_FALLBACK_SUFFIX,
                ),
            ]

        posted = []
        for key, pct in list(self.allocations.items()):
            if pct == 0:
                continue
            share = amount * (pct / total_pct)
            posted.append(
                self.post_transaction(txn_date, share, key, note + constants.AUTO_ALLOC_SUFFIX),
            )

        return posted

    def set_allocation(self, allocations: Mapping[str, Decimal]) -> None:
        """Replace all allocation percentages (names or keys -> percent)."""
        self.allocations.clear()
        for name, pct in allocations.items():
            key = self.ensure_category(name)
            self.allocations[key] = Decimal(pct)

        total = self.allocation_total()
        if total != constants.PERCENT:
            logger.info("Allocation percentages add up to %s%%, shares will be normalised", total)

    def category_balance(self, category: str, as_of: Optional[date] = None) -> Decimal:
        """
        Balance of a category.

        Without ``as_of`` this is the running balance. With ``as_of`` it is the
        sum of the category's transactions dated on or before that day, read
        from the live ledger (so it includes anything posted earlier in the
        same batch run).
        """
        key = self.categories.key_for(category)
        if as_of is None:
            return self.category_balances.get(key, constants.ZERO)

        return sum(
            (t.amount for t in self.transactions if t.category == key and t.date <= as_of),
            constants.ZERO,
        )

    def recompute_balances(self) -> Decimal:
        """
        Re-derive category balances and the overall balance from transactions.

        Categories without transactions keep a zero balance.

        Returns:
            The recomputed overall balance
        """
        balances = {key: constants.ZERO for key in self.category_balances}
        for key in self.allocations:
            balances.setdefault(key, constants.ZERO)

        total = constants.ZERO
        for txn in self.transactions:
            self.categories.add(txn.category, txn.category)
            balances[txn.category] = balances.get(txn.category, constants.ZERO) + txn.amount
            total += txn.amount

        self.category_balances = balances
        self.balance = total
        return total

    def recent_transactions(
        self,
        count: int = constants.DEFAULT_RECENT_TRANSACTIONS,
    ) -> list[Transaction]:
        """Most recently posted transactions, newest first."""
        if count <= 0:
            return []
        return list(reversed(self.transactions[-count:]))

    # ------------------------------------------------------------------
    # Schedules
    # ------------------------------------------------------------------

    def add_schedule(self, schedule: Schedule) -> Schedule:
        """Add a schedule, interning its category."""
        if schedule.category:
            schedule.category = self.ensure_category(schedule.category)
        self.schedules.append(schedule)
        logger.info(
            "Added %s schedule (param=%d, amount=%s) due %s",
            schedule.type.value,
            schedule.param,
            schedule.amount,
            schedule.next_date,
        )
        return schedule

    def remove_schedule(self, index: int) -> Schedule:
        """
        Remove the schedule at ``index``.

        Raises:
            IndexError: If no schedule exists at that index
        """
        if index < 0 or index >= len(self.schedules):
            raise IndexError(f"No schedule at index {index}")
        return self.schedules.pop(index)

    def process_schedules_up_to(self, target: date) -> ProcessingReport:
        """Post every schedule occurrence due on or before ``target``."""
        return self.schedule_advancer.process(self, target)

    # ------------------------------------------------------------------
    # Interest
    # ------------------------------------------------------------------

    def set_interest(
        self,
        category: str,
        rate_pct: Decimal,
        monthly: bool,
        start_date: date,
    ) -> InterestEntry:
        """
        Add or replace the interest rule for a category.

        Replacing a rule restarts its cursor at the new ``start_date``.
        """
        key = self.ensure_category(category)
        entry = InterestEntry(category=key, rate_pct=rate_pct, monthly=monthly, start_date=start_date)
        self.interests[key] = entry
        return entry

    def remove_interest(self, category: str) -> InterestEntry:
        """
        Remove the interest rule for a category.

        Raises:
            KeyError: If the category has no interest rule
        """
        key = self.categories.key_for(category)
        if key not in self.interests:
            raise KeyError(f"No interest rule for category '{category}'")
        return self.interests.pop(key)

    def apply_interest_up_to(self, target: date) -> ProcessingReport:
        """Accrue interest for every whole month elapsed up to ``target``."""
        return self.interest_engine.apply(self, target)

    def process_up_to(self, target: date) -> ProcessingReport:
        """Run schedules, then interest, so scheduled deposits earn interest."""
        report = self.process_schedules_up_to(target)
        return report.combine(self.apply_interest_up_to(target))
