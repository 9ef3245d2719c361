"""Tests for iteration series parsing."""

import logging

from reportforge.extraction.iterations import parse_iteration, parse_iterations

OUT_OF_ORDER = """\
- `test_run_2_start`: 2025-12-17T10:50:00.000Z
- `test_run_2_end`: 2025-12-17T10:51:00.000Z
- `test_run_2_total`: 40
- `test_run_2_passed`: 40
- `test_run_1_start`: 2025-12-17T10:40:00.000Z
- `test_run_1_end`: 2025-12-17T10:42:30.000Z
- `test_run_1_total`: 40
- `test_run_1_passed`: 30
- `test_run_1_failed`: 10
- `test_run_3_start`: 2025-12-17T10:55:00.000Z
"""


class TestParseIterations:
    """Discovery, completeness policy and ordering."""

    def test_sorted_and_incomplete_dropped(self):
        """Ordinals 2 and 1 are kept in ascending order; start-only 3 is dropped."""
        records = parse_iterations(OUT_OF_ORDER)
        assert [r.ordinal for r in records] == [1, 2]

    def test_record_fields(self):
        """Counts, duration and derived pass ratio are populated."""
        first, second = parse_iterations(OUT_OF_ORDER)
        assert first.start_timestamp == "2025-12-17T10:40:00.000Z"
        assert first.end_timestamp == "2025-12-17T10:42:30.000Z"
        assert first.duration_minutes == 2.5
        assert (first.total, first.passed, first.failed) == (40, 30, 10)
        assert first.pass_ratio == 0.75
        assert second.failed is None
        assert second.pass_ratio == 1.0

    def test_explicit_pass_rate_wins(self):
        """An explicit pass rate is used instead of passed/total."""
        text = (
            "test_run_1_start: 2025-01-01T00:00:00Z\n"
            "test_run_1_end: 2025-01-01T00:01:00Z\n"
            "test_run_1_total: 10\n"
            "test_run_1_passed: 5\n"
            "test_run_1_pass_rate: 60%\n"
        )
        (record,) = parse_iterations(text)
        assert record.pass_ratio == 0.6

    def test_duplicate_ordinal_uses_first_occurrence(self):
        """A repeated ordinal collapses to the values first seen."""
        text = (
            "- `test_run_1_start`: 2025-01-01T00:00:00Z\n"
            "- `test_run_1_end`: 2025-01-01T00:01:00Z\n"
            "- `test_run_1_start`: 2025-01-01T05:00:00Z\n"
            "- `test_run_1_end`: 2025-01-01T05:09:00Z\n"
        )
        records = parse_iterations(text)
        assert len(records) == 1
        assert records[0].duration_minutes == 1.0

    def test_no_text_or_no_family(self):
        """Absent reports and reports without the family yield nothing."""
        assert parse_iterations(None) == ()
        assert parse_iterations("") == ()
        assert parse_iterations("nothing here") == ()

    def test_custom_family(self):
        """The family prefix is a parameter."""
        text = (
            "attempt_1_start: 2025-01-01T00:00:00Z\n"
            "attempt_1_end: 2025-01-01T00:03:00Z\n"
        )
        records = parse_iterations(text, family="attempt")
        assert [r.ordinal for r in records] == [1]
        assert records[0].duration_minutes == 3.0
        assert parse_iterations(text) == ()

    def test_malformed_end_drops_record(self):
        """A record whose end does not parse is dropped, not padded."""
        text = "test_run_1_start: 2025-01-01T00:00:00Z\ntest_run_1_end: later\n"
        assert parse_iterations(text) == ()


def test_parse_iteration_logs_drop(caplog):
    """Dropped ordinals are logged at DEBUG."""
    with caplog.at_level(logging.DEBUG, logger="reportforge.extraction.iterations"):
        assert parse_iteration(3, OUT_OF_ORDER) is None
    assert "test_run 3" in caplog.text
