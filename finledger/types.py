"""Type definitions and enums for the finledger package."""

from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from .schema import Transaction


class ScheduleType(str, Enum):
    """Recurrence types for scheduled transactions."""

    EVERY_X_DAYS = "EVERY_X_DAYS"  # param = interval length in days
    MONTHLY_DAY = "MONTHLY_DAY"  # param = day of month (1-31)


class ProcessingReport(NamedTuple):
    """Outcome of a batch run of the schedule advancer or interest engine.

    Failures never raise out of a batch run; they are collected here (and
    logged) so the caller can show them.
    """

    transactions: list["Transaction"]
    skipped: list[str]
    warnings: list[str]

    @property
    def ok(self) -> bool:
        """True when nothing was skipped and no warning was raised."""
        return not self.skipped and not self.warnings

    def combine(self, other: "ProcessingReport") -> "ProcessingReport":
        """Concatenate two reports, keeping order."""
        return ProcessingReport(
            transactions=self.transactions + other.transactions,
            skipped=self.skipped + other.skipped,
            warnings=self.warnings + other.warnings,
        )
