"""finledger - personal finance ledger with schedules and interest accrual.

This package records manual and scheduled transactions, splits income across
categories by percentage, and accrues monthly compounding interest on
category balances. State is kept in a single YAML file.

Main exports:
    Account: The ledger and its processing entry points
    load_account / save_account: State file persistence
"""

from .account import Account
from .storage import load_account, save_account

__all__ = ["Account", "load_account", "save_account"]
__version__ = "1.0.0"
