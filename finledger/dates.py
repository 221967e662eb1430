"""Calendar arithmetic used by the schedule advancer and the interest engine.

All functions work on ``datetime.date`` values, so there is no time-of-day
component and no daylight-saving artefacts to normalise away.
"""

import calendar
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta


def add_days(d: date, days: int) -> date:
    """Shift ``d`` by ``days`` calendar days (may be negative)."""
    return d + timedelta(days=days)


def days_in_month(year: int, month: int) -> int:
    """Number of days in a month, following the Gregorian leap year rule."""
    return calendar.monthrange(year, month)[1]


def add_months(d: date, months: int) -> date:
    """
    Shift ``d`` by whole months, clamping the day to the target month.

    Examples:
        >>> add_months(date(2024, 1, 31), 1)
        datetime.date(2024, 2, 29)
        >>> add_months(date(2023, 1, 31), 1)
        datetime.date(2023, 2, 28)
    """
    # relativedelta clamps to the last valid day instead of overflowing
    return d + relativedelta(months=months)


def next_day_of_month_on_or_after(d: date, day: int) -> date:
    """
    Next occurrence of ``day``-of-month strictly after ``d``.

    If ``d`` is before ``day`` in its month the same month is used, otherwise
    the following month. The day is clamped to the month length, so a schedule
    on the 31st lands on the 30th in April and on the 28th/29th in February.

    Args:
        d: Current due date (the cursor)
        day: Target day of month (1-31)

    Returns:
        The next due date, always later than ``d``

    Example:
        >>> next_day_of_month_on_or_after(date(2024, 3, 31), 31)
        datetime.date(2024, 4, 30)
    """
    if d.day < day:
        candidate = d.replace(day=min(day, days_in_month(d.year, d.month)))
        # Short month: clamping can land back on d (e.g. Apr 30 for day 31)
        if candidate > d:
            return candidate

    first_of_next = d.replace(day=1) + relativedelta(months=1)
    return first_of_next.replace(
        day=min(day, days_in_month(first_of_next.year, first_of_next.month)),
    )


def months_between_inclusive(start: date, end: date) -> int:
    """
    Count whole monthly periods from ``start`` up to ``end``.

    A period counts once its closing boundary ``add_months(start, k)`` is on or
    before ``end``. Boundaries are always computed from ``start`` rather than
    from the previous (possibly clamped) boundary, so a period that starts on
    the 31st does not drift to the 28th after passing through February.

    Examples:
        >>> months_between_inclusive(date(2024, 1, 1), date(2024, 3, 1))
        2
        >>> months_between_inclusive(date(2024, 1, 31), date(2024, 2, 29))
        1
        >>> months_between_inclusive(date(2024, 1, 15), date(2024, 2, 14))
        0
    """
    if end <= start:
        return 0

    months = 0
    while add_months(start, months + 1) <= end:
        months += 1

    return months
