"""Utility functions for finledger.

Input helpers used by the CLI to turn user-typed text into the validated
primitives the account expects, plus shared formatting.
"""

import re
from decimal import Decimal, InvalidOperation

from . import constants

_SPACES = re.compile(r"\s+")


def parse_decimal(text: str) -> Decimal:
    """
    Parse a user-typed number, accepting a comma as decimal separator.

    Raises:
        ValueError: If ``text`` is not a finite number
    """
    cleaned = _SPACES.sub("", text).replace(",", ".")
    if not cleaned:
        raise ValueError("empty number")
    try:
        value = Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"not a number: '{text}'") from e
    if not value.is_finite():
        raise ValueError(f"not a finite number: '{text}'")
    return value


def parse_rate(text: str) -> Decimal:
    """
    Parse an interest rate given in percent.

    Spaces are ignored, a comma may be used as decimal separator and a
    trailing ``%`` is optional.

    Examples:
        >>> parse_rate("1,5 %")
        Decimal('1.5')
        >>> parse_rate("0.25")
        Decimal('0.25')

    Raises:
        ValueError: If ``text`` is not a number
    """
    cleaned = _SPACES.sub("", text)
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1]
    return parse_decimal(cleaned)


def parse_allocation(text: str) -> tuple[str, Decimal]:
    """
    Parse a ``Name=percent`` allocation item.

    Examples:
        >>> parse_allocation("Saving=20")
        ('Saving', Decimal('20'))

    Raises:
        ValueError: If the item is malformed or the percent is negative
    """
    name, sep, pct_text = text.partition("=")
    name = name.strip()
    if not sep or not name:
        raise ValueError(f"expected NAME=PERCENT, got '{text}'")

    pct = parse_rate(pct_text)
    if pct < 0:
        raise ValueError(f"allocation for '{name}' must not be negative")
    return name, pct


def format_amount(amount: Decimal) -> str:
    """Round to cents for display."""
    return f"{amount.quantize(constants.CENTS_PRECISION):,.2f}"
