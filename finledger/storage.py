"""YAML state file loader and writer."""

import logging
import os
from pathlib import Path
from typing import Any, Optional, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from . import constants
from .account import Account
from .schema import InterestEntry, LedgerFile, Schedule, Transaction

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def find_state_file() -> Path:
    """
    Locate the ledger state file.

    Search order (highest to lowest priority):
    1. FINLEDGER_FILE environment variable
    2. finledger.yaml in current directory
    3. ~/.finledger/finledger.yaml (returned even if it does not exist yet)

    Returns:
        Path to the state file to load from and save to
    """
    if env_file := os.getenv(constants.ENV_STATE_FILE):
        return Path(env_file)

    cwd_file = Path.cwd() / constants.DEFAULT_STATE_FILENAME
    if cwd_file.is_file():
        return cwd_file

    return Path.home() / constants.DEFAULT_STATE_DIR / constants.DEFAULT_STATE_FILENAME


def _validate_items(
    items: Optional[list[Any]],
    model: type[ModelT],
    section: str,
    filepath: Path,
) -> list[ModelT]:
    """Validate list entries one by one, dropping (and logging) invalid ones."""
    valid = []
    for position, item in enumerate(items or []):
        try:
            valid.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(
                "Skipping invalid %s entry #%d in '%s': %s",
                section,
                position,
                filepath,
                e,
            )
    return valid


def parse_ledger_data(data: Optional[dict[str, Any]], filepath: Path) -> LedgerFile:
    """
    Build a LedgerFile from raw YAML data.

    Invalid schedules, interest rules and transactions are dropped with a
    warning so one bad line does not make the whole ledger unreadable.

    Raises:
        pydantic.ValidationError: If the top-level structure is invalid
    """
    if data is None:
        logger.warning("Empty state file: %s", filepath)
        return LedgerFile()

    data = dict(data)
    schedules = _validate_items(data.pop("schedules", None), Schedule, "schedule", filepath)
    interests = _validate_items(data.pop("interests", None), InterestEntry, "interest", filepath)
    transactions = _validate_items(
        data.pop("transactions", None),
        Transaction,
        "transaction",
        filepath,
    )

    ledger_file = LedgerFile.model_validate(data)
    ledger_file.schedules = schedules
    ledger_file.interests = interests
    ledger_file.transactions = transactions
    return ledger_file


def account_from_ledger_file(ledger_file: LedgerFile) -> Account:
    """
    Rebuild an Account from persisted state.

    Balances are recomputed from the transactions. A saved overall balance
    that disagrees with the recomputed one is reported and ignored.
    """
    account = Account(settings=ledger_file.settings, default_allocations=())

    for key, display in ledger_file.categories.items():
        account.categories.add(account.categories.key_for(key), display)

    for key in ledger_file.category_balances:
        account.ensure_category(key)

    for key, pct in ledger_file.allocations.items():
        account.allocations[account.ensure_category(key)] = pct

    for entry in ledger_file.interests:
        entry.category = account.ensure_category(entry.category)
        account.interests[entry.category] = entry

    for schedule in ledger_file.schedules:
        if schedule.category:
            schedule.category = account.ensure_category(schedule.category)
        account.schedules.append(schedule)

    # Hand-edited files may use display names or odd casing for categories
    account.transactions = [
        txn.model_copy(update={"category": account.ensure_category(txn.category)})
        for txn in ledger_file.transactions
    ]
    computed = account.recompute_balances()

    saved = ledger_file.balance
    if saved is not None and abs(saved - computed) > constants.BALANCE_DRIFT_TOLERANCE:
        logger.warning(
            "Saved balance (%s) differs from recomputed balance (%s), using recomputed",
            saved,
            computed,
        )

    return account


def account_to_ledger_file(account: Account) -> LedgerFile:
    """Snapshot an Account (including cursors) for persistence."""
    return LedgerFile(
        balance=account.balance,
        settings=account.settings,
        categories=account.categories.as_dict(),
        allocations=dict(account.allocations),
        category_balances=dict(account.category_balances),
        interests=list(account.interests.values()),
        schedules=list(account.schedules),
        transactions=list(account.transactions),
    )


def load_account(filepath: Path) -> Optional[Account]:
    """
    Load an Account from a YAML state file.

    Args:
        filepath: Path to the state file

    Returns:
        Account, or None if the file does not exist

    Raises:
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If the top-level structure is invalid
    """
    if not filepath.is_file():
        logger.info("No state file at %s", filepath)
        return None

    logger.info("Loading ledger from: %s", filepath)

    try:
        with filepath.open() as f:
            data = yaml.safe_load(f)

        if data is not None and not isinstance(data, dict):
            raise ValueError(f"expected a mapping at the top level, got {type(data).__name__}")

        account = account_from_ledger_file(parse_ledger_data(data, filepath))

    except yaml.YAMLError as e:
        logger.error("YAML parsing error in %s: %s", filepath, e)
        raise
    except Exception as e:
        logger.error("Error loading ledger from %s: %s", filepath, e)
        raise

    logger.info(
        "Loaded %d transactions, %d schedules, %d interest rules",
        len(account.transactions),
        len(account.schedules),
        len(account.interests),
    )

    return account


def save_account(account: Account, filepath: Path) -> Path:
    """
    Write an Account to a YAML state file, creating parent directories.

    Returns:
        The path written
    """
    filepath.parent.mkdir(parents=True, exist_ok=True)

    data = account_to_ledger_file(account).model_dump(mode="json")
    with filepath.open("w") as f:
        yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)

    logger.info("Saved ledger to %s", filepath)
    return filepath
