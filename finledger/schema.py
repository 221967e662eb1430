"""Pydantic schema models for ledger state and validation."""

import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from . import constants
from .types import ScheduleType


class Transaction(BaseModel):
    """A committed ledger entry. Never mutated once posted."""

    model_config = ConfigDict(frozen=True)

    date: datetime.date = Field(..., description="Calendar day of the transaction")
    amount: Decimal = Field(..., description="Signed amount (positive = credit)")
    category: str = Field(..., description="Category key")
    note: str = Field("", description="Free text / provenance marker")

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        """Ensure category key is not blank."""
        if not v or not v.strip():
            raise ValueError("category cannot be empty")
        return v


class Schedule(BaseModel):
    """Recurring transaction definition with its forward-moving cursor.

    ``param`` is the interval in days for ``EVERY_X_DAYS`` and the day of the
    month for ``MONTHLY_DAY``. Its range is checked by the schedule advancer
    rather than here, so a stored schedule with a bad value still loads and is
    reported (and skipped) when schedules are processed.
    """

    type: ScheduleType = Field(..., description="Recurrence type")
    param: int = Field(..., description="Interval in days or day of month")
    amount: Decimal = Field(..., description="Signed amount per occurrence")
    note: str = Field("", description="Note appended to generated transactions")
    category: Optional[str] = Field(
        None,
        description="Target category (null = allocate or fallback category)",
    )
    auto_allocate: bool = Field(False, description="Allocate positive amounts across categories")
    next_date: datetime.date = Field(..., description="Next date this schedule is due")
    enabled: bool = Field(True, description="Whether schedule is processed")

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank category as unset."""
        if v is not None and not v.strip():
            return None
        return v


class InterestEntry(BaseModel):
    """Per-category interest accrual rule.

    ``next_date`` uses "next to apply" semantics: it is the start of the first
    monthly period that has not been accrued yet. It starts at ``start_date``
    and only ever moves forward.
    """

    category: str = Field(..., description="Category key")
    rate_pct: Decimal = Field(..., description="Rate in percent (0.5 = 0.5%)")
    monthly: bool = Field(True, description="True = monthly rate, False = annual rate")
    start_date: datetime.date = Field(..., description="Date the rule becomes active")
    next_date: Optional[datetime.date] = Field(
        None,
        description="Start of the next period to accrue (defaults to start_date)",
    )

    @model_validator(mode="after")
    def default_next_date(self) -> "InterestEntry":
        """Initialise the cursor to start_date."""
        if self.next_date is None:
            self.next_date = self.start_date
        return self


class Settings(BaseModel):
    """User preferences stored alongside the ledger."""

    model_config = ConfigDict(validate_assignment=True)

    auto_process_on_startup: bool = Field(
        False,
        description="Process schedules and interest up to today whenever the state is loaded",
    )
    fallback_category: str = Field(
        constants.FALLBACK_CATEGORY,
        description="Category for unallocated or uncategorised amounts",
    )

    @field_validator("fallback_category")
    @classmethod
    def validate_fallback_category(cls, v: str) -> str:
        """Ensure fallback category is not blank."""
        if not v or not v.strip():
            raise ValueError("fallback_category cannot be empty")
        return v


class LedgerFile(BaseModel):
    """Root state file structure."""

    version: str = Field(constants.STATE_FILE_VERSION, description="State file format version")
    balance: Optional[Decimal] = Field(
        None,
        description="Overall balance when saved (advisory, recomputed on load)",
    )
    settings: Settings = Field(default_factory=Settings, description="User settings")
    categories: dict[str, str] = Field(
        default_factory=dict,
        description="Category key -> display name",
    )
    allocations: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Category key -> allocation percent",
    )
    category_balances: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Category key -> balance when saved (advisory)",
    )
    interests: list[InterestEntry] = Field(default_factory=list, description="Interest rules")
    schedules: list[Schedule] = Field(default_factory=list, description="Recurring schedules")
    transactions: list[Transaction] = Field(
        default_factory=list,
        description="Committed transactions in insertion order",
    )
