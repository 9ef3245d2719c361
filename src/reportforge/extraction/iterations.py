"""Iteration series parsing.

Reconstructs the ordered list of test-run attempts from indexed report
fields such as `test_run_2_start`, `test_run_2_end` and
`test_run_2_passed`. An attempt is kept only when both its start and end
timestamps resolve; a half-recorded attempt is dropped rather than padded.
"""

from __future__ import annotations

import logging

from reportforge.extraction.durations import DEFAULT_PRECISION, duration_minutes
from reportforge.extraction.numbers import normalize_ratio, number_from_raw, ratio_of
from reportforge.extraction.patterns import DEFAULT_LIBRARY, PatternLibrary, iteration_label
from reportforge.extraction.timestamps import timestamp_from_raw
from reportforge.models.metrics import IterationRecord

logger = logging.getLogger(__name__)

DEFAULT_FAMILY = "test_run"


def parse_iteration(
    ordinal: int,
    text: str,
    *,
    family: str = DEFAULT_FAMILY,
    library: PatternLibrary = DEFAULT_LIBRARY,
    precision: int = DEFAULT_PRECISION,
) -> IterationRecord | None:
    """Build the IterationRecord for one ordinal, or None if incomplete."""

    def field(name: str) -> str | None:
        return library.match_iteration(ordinal, name, text, family=family)

    start = timestamp_from_raw(iteration_label(ordinal, "start", family), field("start"))
    end = timestamp_from_raw(iteration_label(ordinal, "end", family), field("end"))
    if start is None or end is None:
        logger.debug("Dropping %s %d: start=%s end=%s", family, ordinal, start, end)
        return None

    total = number_from_raw(iteration_label(ordinal, "total", family), field("total"))
    passed = number_from_raw(iteration_label(ordinal, "passed", family), field("passed"))
    failed = number_from_raw(iteration_label(ordinal, "failed", family), field("failed"))
    pass_ratio = normalize_ratio(field("pass_rate"))
    if pass_ratio is None:
        pass_ratio = ratio_of(passed, total)

    return IterationRecord(
        ordinal=ordinal,
        start_timestamp=start,
        end_timestamp=end,
        duration_minutes=duration_minutes(start, end, precision),
        total=total,
        passed=passed,
        failed=failed,
        pass_ratio=pass_ratio,
    )


def parse_iterations(
    text: str | None,
    family: str = DEFAULT_FAMILY,
    *,
    library: PatternLibrary = DEFAULT_LIBRARY,
    precision: int = DEFAULT_PRECISION,
) -> tuple[IterationRecord, ...]:
    """Discover every attempt of an indexed family and return them by ordinal.

    Args:
        text: Raw report text; None yields no iterations.
        family: Field family prefix, e.g. "test_run".
        library: Pattern library used to locate fields.
        precision: Decimal places for per-iteration durations.

    Returns:
        IterationRecords sorted ascending by ordinal. Duplicate ordinals
        collapse to their first occurrence.
    """
    if not text:
        return ()
    records: list[IterationRecord] = []
    for ordinal in library.ordinals(text, family):
        if ordinal < 1:
            continue
        record = parse_iteration(
            ordinal, text, family=family, library=library, precision=precision
        )
        if record is not None:
            records.append(record)
    return tuple(sorted(records, key=lambda r: r.ordinal))
