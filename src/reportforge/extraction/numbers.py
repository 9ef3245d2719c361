"""Numeric token normalization shared by every numeric report field.

"11.2M" -> 11200000, "850K" -> 850000, "95%" -> 95, "42" -> 42.
Anything else is unset (None). Percentage semantics belong to the caller;
normalize_ratio is the helper callers use for pass rates.
"""

from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation

from reportforge.extraction.patterns import clean_value

logger = logging.getLogger(__name__)

_NUMBER_PATTERN = re.compile(
    r"^\$?[ \t]*(?P<number>[+-]?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?|[+-]?\.\d+)"
    r"[ \t]*(?P<suffix>[kKmM%])?$"
)

MULTIPLIERS: dict[str, int] = {
    "k": 1_000,
    "m": 1_000_000,
}


def _to_number(value: Decimal) -> int | float:
    """Return an int for integral values, a float otherwise."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def normalize_number(raw: str | None) -> int | float | None:
    """Parse a numeric literal that may carry a magnitude suffix.

    Args:
        raw: Literal such as "11.2M", "850k", "97.5%", "1,234" or "$4.20".

    Returns:
        The plain number, or None if the literal is not numeric.
    """
    if raw is None:
        return None
    found = _NUMBER_PATTERN.match(raw.strip())
    if found is None:
        return None
    try:
        value = Decimal(found.group("number").replace(",", ""))
    except InvalidOperation:
        return None
    suffix = (found.group("suffix") or "").lower()
    if suffix in MULTIPLIERS:
        value *= MULTIPLIERS[suffix]
    return _to_number(value)


def number_from_raw(label: str, raw: str | None) -> int | float | None:
    """Clean and normalize a matched count, logging malformed input.

    Report fields are counts, token totals and costs, so negatives are
    treated as malformed.
    """
    value = clean_value(raw)
    if value is None:
        return None
    number = normalize_number(value)
    if number is None:
        logger.debug("Discarding non-numeric value for %s: %r", label, value)
    elif number < 0:
        logger.debug("Discarding negative value for %s: %r", label, value)
        return None
    return number


def normalize_ratio(raw: str | None) -> float | None:
    """Resolve a pass-rate literal to a ratio in [0.0, 1.0].

    "95%" and "95" both mean 0.95; "0.95" is taken as given. Values that
    land outside [0, 1] are unset.
    """
    value = clean_value(raw)
    if value is None:
        return None
    number = normalize_number(value)
    if number is None:
        return None
    ratio = Decimal(str(number))
    if value.endswith("%") or ratio > 1:
        ratio /= 100
    if ratio < 0 or ratio > 1:
        return None
    return float(ratio)


def ratio_of(part: int | float | None, whole: int | float | None) -> float | None:
    """Return part / whole rounded to four places, or None when undefined."""
    if part is None or whole is None or whole <= 0:
        return None
    ratio = round(part / whole, 4)
    if ratio < 0 or ratio > 1:
        return None
    return ratio
