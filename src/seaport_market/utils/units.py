"""Conversion between smallest-unit token amounts and display strings.

All arithmetic uses Python integers (arbitrary precision) so amounts beyond
2**53 survive the round trip unchanged.
"""

import re
from decimal import Decimal, InvalidOperation

_UNSIGNED_INT = re.compile(r"^\d+$")
_DECIMAL_AMOUNT = re.compile(r"^(\d*)(?:\.(\d*))?$")


def format_units(raw_amount: str | int, decimals: int) -> str:
    """Convert a smallest-unit integer amount to a human-decimal string.

    Args:
        raw_amount: Unsigned integer amount (e.g. wei) as a base-10 string or int
        decimals: Token decimals

    Returns:
        str: Display amount without trailing zeros or trailing decimal point

    Raises:
        ValueError: If the amount is not an unsigned integer or decimals is negative

    Examples:
        >>> format_units("1500000000000000000", 18)
        '1.5'
        >>> format_units("2000000", 6)
        '2'
        >>> format_units("42", 0)
        '42'
    """
    if decimals < 0:
        raise ValueError("decimals must be non-negative")

    raw = str(raw_amount).strip()
    if not _UNSIGNED_INT.match(raw):
        raise ValueError(f"Invalid integer amount: {raw_amount!r}")

    if decimals == 0:
        return raw

    value = int(raw)
    base = 10**decimals
    whole, fraction = divmod(value, base)
    if fraction == 0:
        return str(whole)

    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0")
    return f"{whole}.{fraction_str}"


def parse_units(amount: str, decimals: int) -> int:
    """Convert a human-decimal string to a smallest-unit integer.

    Parsing is exact: amounts with more fractional digits than ``decimals``
    are rejected rather than rounded.

    Examples:
        >>> parse_units("1.5", 18)
        1500000000000000000
        >>> parse_units("0.0001", 18)
        100000000000000
    """
    if decimals < 0:
        raise ValueError("decimals must be non-negative")

    text = amount.strip()
    match = _DECIMAL_AMOUNT.match(text)
    if not text or text == "." or not match:
        raise ValueError(f"Invalid decimal amount: {amount!r}")

    whole, fraction = match.group(1) or "0", match.group(2) or ""
    fraction = fraction.rstrip("0")
    if len(fraction) > decimals:
        raise ValueError(f"Amount {amount!r} has more than {decimals} decimal places")

    return int(whole) * 10**decimals + int(fraction.ljust(decimals, "0") or "0")


def fraction_digits(amount: str) -> int:
    """Count the fractional digits as typed (trailing zeros included)."""
    parts = amount.strip().split(".")
    return len(parts[1]) if len(parts) > 1 else 0


def parse_amount(text: str | None) -> Decimal | None:
    """Parse user input into a finite Decimal, or None if it is not a number."""
    if text is None:
        return None
    try:
        value = Decimal(text.strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value
