"""Elapsed-time derivation from pairs of milestone timestamps."""

from __future__ import annotations

from reportforge.extraction.timestamps import parse_timestamp

DEFAULT_PRECISION = 2


def duration_minutes(
    start: str | None,
    end: str | None,
    precision: int = DEFAULT_PRECISION,
) -> float | None:
    """Return minutes elapsed from start to end, rounded to precision places.

    Returns None when either timestamp is unset or unparseable, or when
    end precedes start.
    """
    start_at = parse_timestamp(start)
    end_at = parse_timestamp(end)
    if start_at is None or end_at is None or end_at < start_at:
        return None
    return round((end_at - start_at).total_seconds() / 60, precision)
