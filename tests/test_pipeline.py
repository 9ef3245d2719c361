"""Tests for the end-to-end pipeline."""

import json
import logging

import pytest

from reportforge.documents.builder import UnsupportedSchemaError
from reportforge.models.config import PipelineConfig
from reportforge.pipeline import run_pipeline


def test_valid_result(sample_report, identity):
    result = run_pipeline(sample_report, identity, timestamp="20241218T1430")
    assert result.valid
    assert result.violations == []
    assert result.filename == "cursor-v0-43_modelA_REST_run1_20241218T1430.json"
    assert result.metrics.acceptance.passed == 38
    data = json.loads(result.content)
    assert data["schema_version"] == "2.0"
    assert data["result_data"]["run_identity"]["run_id"] == identity.run_id


def test_deterministic(report_with_ui, identity):
    """The same inputs give byte-identical content."""
    first = run_pipeline(report_with_ui, identity, timestamp="20241218T1430")
    second = run_pipeline(report_with_ui, identity, timestamp="20241218T1430")
    assert first.content == second.content
    assert first.metrics == second.metrics


def test_missing_report_still_valid(identity):
    """A run without a report still yields a valid document full of nulls."""
    result = run_pipeline(None, identity, timestamp="20241218T1430")
    assert result.valid
    api = json.loads(result.content)["result_data"]["implementations"]["api"]
    assert api["generation_metrics"]["duration_minutes"] is None


def test_flat_schema_from_config(sample_report, identity):
    config = PipelineConfig(schema_version="1.0")
    result = run_pipeline(sample_report, identity, timestamp="20241218T1430", config=config)
    assert result.valid
    assert json.loads(result.content)["schema_version"] == "1.0"


def test_unsupported_schema(sample_report, identity):
    config = PipelineConfig.model_construct(schema_version="3.0")
    with pytest.raises(UnsupportedSchemaError):
        run_pipeline(sample_report, identity, timestamp="20241218T1430", config=config)


def test_bad_timestamp(sample_report, identity):
    with pytest.raises(ValueError):
        run_pipeline(sample_report, identity, timestamp="yesterday")


def test_ui_report_merged(sample_report, ui_section, identity):
    result = run_pipeline(
        sample_report, identity, timestamp="20241218T1430", ui_report_text=ui_section
    )
    assert result.valid
    assert "ui" in json.loads(result.content)["result_data"]["implementations"]


def test_no_warning_when_valid(sample_report, identity, caplog):
    with caplog.at_level(logging.WARNING, logger="reportforge"):
        run_pipeline(sample_report, identity, timestamp="20241218T1430")
    assert not caplog.records
