"""Parameter types and builders shared by CLI commands."""

from datetime import date
from decimal import Decimal
from typing import Optional

import click

from finledger import constants
from finledger.account import Account
from finledger.dates import days_in_month, next_day_of_month_on_or_after
from finledger.schema import Schedule
from finledger.types import ScheduleType
from finledger.utils import parse_allocation, parse_decimal, parse_rate


class DecimalParamType(click.ParamType):
    """Click parameter accepting decimal numbers (comma or dot separator)."""

    name = "amount"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            return parse_decimal(str(value))
        except ValueError as e:
            self.fail(str(e), param, ctx)


class RateParamType(click.ParamType):
    """Click parameter accepting percentages such as ``1.5``, ``1,5`` or ``1.5%``."""

    name = "rate"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            return parse_rate(str(value))
        except ValueError as e:
            self.fail(str(e), param, ctx)


DECIMAL = DecimalParamType()
RATE = RateParamType()
DATE = click.DateTime(formats=["%Y-%m-%d"])


def build_allocation(
    account: Account,
    items: tuple[str, ...],
    fill_fallback: bool,
) -> dict[str, Decimal]:
    """
    Turn ``Name=percent`` items into an allocation mapping.

    When ``fill_fallback`` is set, whatever is left of 100% goes to the
    fallback category.

    Raises:
        click.BadParameter: If an item is malformed or the total exceeds 100
    """
    allocation: dict[str, Decimal] = {}
    for item in items:
        try:
            name, pct = parse_allocation(item)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="ALLOCATIONS") from e
        allocation[name] = pct

    total = sum(allocation.values(), constants.ZERO)
    if total > constants.PERCENT:
        raise click.BadParameter(
            f"allocations add up to {total}%, which is more than 100%",
            param_hint="ALLOCATIONS",
        )

    if fill_fallback:
        fallback = account.settings.fallback_category
        fallback_key = account.categories.key_for(fallback)
        others = {
            name: pct
            for name, pct in allocation.items()
            if account.categories.key_for(name) != fallback_key
        }
        # Explicit fallback percentages are replaced by the remainder
        others[fallback] = constants.PERCENT - sum(others.values(), constants.ZERO)
        allocation = others

    return allocation


def build_schedule(
    every_days: Optional[int],
    day_of_month: Optional[int],
    amount: Decimal,
    start: date,
    category: Optional[str],
    note: str,
    auto_allocate: Optional[bool],
) -> Schedule:
    """
    Build a Schedule from ``schedule add`` options.

    Exactly one of ``every_days``/``day_of_month`` must be given. Without an
    explicit ``auto_allocate`` choice, positive amounts with no category are
    allocated across categories.

    For monthly schedules the first due date is the first matching day on or
    after ``start``.

    Raises:
        click.UsageError: If the recurrence options are inconsistent
    """
    if (every_days is None) == (day_of_month is None):
        raise click.UsageError("Specify exactly one of --every-days or --day-of-month")

    if every_days is not None:
        if every_days < constants.MIN_INTERVAL_DAYS:
            raise click.BadParameter("must be at least 1", param_hint="--every-days")
        schedule_type, param, first_due = ScheduleType.EVERY_X_DAYS, every_days, start
    else:
        if not constants.MIN_DAY_OF_MONTH <= day_of_month <= constants.MAX_DAY_OF_MONTH:
            raise click.BadParameter("must be between 1 and 31", param_hint="--day-of-month")
        schedule_type, param = ScheduleType.MONTHLY_DAY, day_of_month
        first_due = _first_monthly_due(start, day_of_month)

    if auto_allocate is None:
        auto_allocate = not category and amount > 0

    return Schedule(
        type=schedule_type,
        param=param,
        amount=amount,
        note=note,
        category=category,
        auto_allocate=auto_allocate,
        next_date=first_due,
    )


def _first_monthly_due(start: date, day: int) -> date:
    if start.day == min(day, days_in_month(start.year, start.month)):
        return start
    return next_day_of_month_on_or_after(start, day)
