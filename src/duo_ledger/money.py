"""Parsing and formatting of human-entered money amounts.

Amounts are stored as integer minor units (cents). Input text may use "." or
"," as either a thousands separator or a decimal point:

    "12500"     -> 1250000
    "12500.50"  -> 1250050
    "12.500"    -> 1250000   (three digits follow the dot: thousands)
    "12,500.50" -> 1250050
    "12.5"      -> 1250      (one digit: tenths)

Display uses "." for thousands and "," for decimals: 1250050 -> "12.500,50".
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import InvalidAmountError

_WHITESPACE = re.compile(r"\s+")
_SEPARATORS = re.compile(r"[.,]")
_DECIMAL_TAIL = re.compile(r"[.,]([0-9]{1,2})$")
_NORMALIZED = re.compile(r"[0-9]*(\.[0-9]{2})?")


def _normalize(text: str) -> str:
    """Rewrite amount text as a plain "1234.56" or "1234" decimal string."""
    match = _DECIMAL_TAIL.search(text)
    if match is None:
        return _SEPARATORS.sub("", text)

    integer_part = _SEPARATORS.sub("", text[: match.start()])
    fraction = match.group(1).ljust(2, "0")
    return f"{integer_part}.{fraction}"


def to_minor_units(amount: Decimal) -> int:
    """
    Convert a Decimal major-unit amount to integer minor units.
    Uses ROUND_HALF_UP for consistency.
    """
    minor = amount * 100
    return int(minor.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_amount(text: str) -> int:
    """
    Parse human-entered amount text into integer minor units.

    Args:
        text: Amount as typed by a user, e.g. "12.500" or "12,500.50"

    Returns:
        Amount in minor units (cents)

    Raises:
        InvalidAmountError: If the text is empty, negative, or not a number
    """
    cleaned = _WHITESPACE.sub("", text or "")
    if not cleaned:
        raise InvalidAmountError(text, "Amount is empty")

    if cleaned.startswith("-"):
        raise InvalidAmountError(text, f"Amount must not be negative: {text!r}")

    normalized = _normalize(cleaned)
    if not normalized.strip(".") or not _NORMALIZED.fullmatch(normalized):
        raise InvalidAmountError(text)

    try:
        amount = Decimal(normalized)
    except InvalidOperation as e:
        raise InvalidAmountError(text) from e

    return to_minor_units(amount)


def _round_minor(amount_minor: int | Decimal) -> int:
    if isinstance(amount_minor, int):
        return amount_minor
    return int(Decimal(amount_minor).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_amount(amount_minor: int | Decimal) -> str:
    """
    Format minor units as "12.500,50".

    Negative amounts render a leading minus and the same grouping as their
    magnitude: -1250050 -> "-12.500,50". Fractional minor units (an odd total
    split in half) are rounded half-up here, at display time.
    """
    minor = _round_minor(amount_minor)
    sign = "-" if minor < 0 else ""
    units, cents = divmod(abs(minor), 100)
    grouped = f"{units:,}".replace(",", ".")
    return f"{sign}{grouped},{cents:02d}"


def to_plain_decimal(amount_minor: int) -> str:
    """Render minor units as an ungrouped dot-decimal string: "12500.50"."""
    sign = "-" if amount_minor < 0 else ""
    units, cents = divmod(abs(amount_minor), 100)
    return f"{sign}{units}.{cents:02d}"
