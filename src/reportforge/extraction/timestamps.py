"""Timestamp extraction and normalization.

Finds a named milestone in report text and normalizes it to ISO-8601 UTC
with millisecond precision. Input is assumed to be UTC already; nothing
is converted, and anything that does not parse is reported as unset.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from reportforge.extraction.patterns import DEFAULT_LIBRARY, PatternLibrary, clean_value

logger = logging.getLogger(__name__)

_TIMESTAMP_PATTERN = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"[T ](?P<hour>\d{2}):(?P<minute>\d{2})"
    r"(?::(?P<second>\d{2})(?:\.(?P<fraction>\d{1,9}))?)?"
    r"(?P<offset>Z|[+-]00:?00)?$",
    re.IGNORECASE,
)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a UTC timestamp string into an aware datetime, or None.

    Accepts a trailing "Z", a zero offset ("+00:00"), or no offset.
    Non-UTC offsets and out-of-range fields yield None.
    """
    if not value:
        return None
    found = _TIMESTAMP_PATTERN.match(value.strip())
    if found is None:
        return None
    fraction = (found.group("fraction") or "0").ljust(6, "0")[:6]
    try:
        return datetime(
            int(found.group("year")),
            int(found.group("month")),
            int(found.group("day")),
            int(found.group("hour")),
            int(found.group("minute")),
            int(found.group("second") or 0),
            int(fraction),
            tzinfo=timezone.utc,
        )
    except ValueError:
        return None


def format_timestamp(moment: datetime) -> str:
    """Render a datetime as 2025-12-17T10:25:00.000Z."""
    millis = moment.microsecond // 1000
    return f"{moment:%Y-%m-%dT%H:%M:%S}.{millis:03d}Z"


def normalize_timestamp(value: str | None) -> str | None:
    """Normalize a timestamp string to millisecond ISO-8601 UTC, or None."""
    moment = parse_timestamp(value)
    if moment is None:
        return None
    return format_timestamp(moment)


def extract_timestamp(
    label: str,
    text: str | None,
    library: PatternLibrary = DEFAULT_LIBRARY,
) -> str | None:
    """Find the first value for label in text and normalize it.

    Args:
        label: Logical field label, e.g. "code_complete".
        text: Raw report text; None is treated as an empty report.
        library: Pattern library used to locate the field.

    Returns:
        Normalized timestamp string, or None if absent or malformed.
    """
    raw = library.match(label, text)
    return timestamp_from_raw(label, raw)


def timestamp_from_raw(label: str, raw: str | None) -> str | None:
    """Normalize an already-matched raw value for label."""
    value = clean_value(raw)
    if value is None:
        return None
    normalized = normalize_timestamp(value)
    if normalized is None:
        # "2025-12-17T10:25:00Z estimated" still resolves on its first token
        normalized = normalize_timestamp(value.split()[0])
    if normalized is None:
        logger.debug("Discarding malformed timestamp for %s: %r", label, value)
    return normalized
