"""Tests for timestamp extraction and normalization."""

import logging
from datetime import datetime, timezone

from reportforge.extraction.timestamps import (
    extract_timestamp,
    format_timestamp,
    normalize_timestamp,
    parse_timestamp,
)


def test_parenthetical_annotation_is_stripped():
    """code_complete with an (estimated) note resolves to the bare timestamp."""
    text = "code_complete: 2025-12-17T10:25:00.000Z (estimated)"
    assert extract_timestamp("code_complete", text) == "2025-12-17T10:25:00.000Z"


def test_backtick_value_in_bold():
    """Emphasis around the value is removed."""
    text = "- `app_started`: **`2025-12-17T10:35:00.000Z`**"
    assert extract_timestamp("app_started", text) == "2025-12-17T10:35:00.000Z"


def test_precision_is_normalized_to_milliseconds():
    """Seconds-only and microsecond inputs both render with three digits."""
    assert normalize_timestamp("2025-12-17T10:30:00Z") == "2025-12-17T10:30:00.000Z"
    assert normalize_timestamp("2025-12-17T10:30:00.123456Z") == "2025-12-17T10:30:00.123Z"
    assert normalize_timestamp("2025-12-17T10:30Z") == "2025-12-17T10:30:00.000Z"


def test_zero_offset_and_naive_are_utc():
    """+00:00 and offset-less values are taken as UTC without conversion."""
    assert normalize_timestamp("2025-12-17T10:30:00+00:00") == "2025-12-17T10:30:00.000Z"
    assert normalize_timestamp("2025-12-17 10:30:00") == "2025-12-17T10:30:00.000Z"


def test_non_utc_offset_is_unset():
    """Other offsets are not converted; they are unset."""
    assert normalize_timestamp("2025-12-17T10:30:00+02:00") is None


def test_malformed_value_is_unset():
    """Values that do not parse are unset, never partially guessed."""
    assert extract_timestamp("build_clean", "- `build_clean`: yesterday afternoon") is None
    assert normalize_timestamp("2025-13-45T10:30:00Z") is None


def test_first_token_fallback():
    """A timestamp followed by free text still resolves."""
    text = "- `seed_loaded`: 2025-12-17T10:32:00.000Z approx"
    assert extract_timestamp("seed_loaded", text) == "2025-12-17T10:32:00.000Z"


def test_missing_field_and_absent_text():
    """Missing fields and missing reports are unset."""
    assert extract_timestamp("all_tests_pass", "nothing to see") is None
    assert extract_timestamp("all_tests_pass", None) is None


def test_malformed_value_is_logged(caplog):
    """Discarded values leave a DEBUG record naming the field."""
    with caplog.at_level(logging.DEBUG, logger="reportforge.extraction.timestamps"):
        extract_timestamp("build_clean", "- `build_clean`: soon")
    assert "build_clean" in caplog.text


def test_parse_and_format_round_trip():
    """parse_timestamp returns an aware UTC datetime."""
    moment = parse_timestamp("2025-01-01T00:02:30.000Z")
    assert moment == datetime(2025, 1, 1, 0, 2, 30, tzinfo=timezone.utc)
    assert format_timestamp(moment) == "2025-01-01T00:02:30.000Z"
