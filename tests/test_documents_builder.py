"""Tests for result document building and serialization."""

import json

import pytest

from reportforge.documents.builder import (
    SCHEMA_BUILDERS,
    UnsupportedSchemaError,
    build_document,
    document_to_dict,
    serialize_document,
)
from reportforge.extraction.assembler import assemble_metrics
from reportforge.models.document import (
    ArtifactPaths,
    FlatResultDocument,
    NestedResultDocument,
    SubmissionInfo,
)


class TestNestedDocument:
    """Schema 2.0 documents."""

    def test_shape(self, sample_report, identity):
        document = build_document(assemble_metrics(sample_report), identity)
        assert isinstance(document, NestedResultDocument)
        data = document_to_dict(document)
        assert data["schema_version"] == "2.0"
        assert data["result_data"]["run_identity"]["tool_name"] == "Cursor v0.43"
        api = data["result_data"]["implementations"]["api"]
        assert api["generation_metrics"]["duration_minutes"] == 60.0
        assert api["generation_metrics"]["llm_usage"]["total_tokens"] == 11_200_000
        assert api["generation_metrics"]["llm_usage"]["estimated_cost_usd"] == 42.5
        assert [r["run_number"] for r in api["generation_metrics"]["test_runs"]] == [1, 2]
        assert api["acceptance"] == {
            "total_count": 40,
            "pass_count": 38,
            "fail_count": 2,
            "not_run_count": 0,
            "passrate": 0.95,
        }

    def test_ui_omitted_without_ui_milestones(self, sample_report, identity):
        """The ui key is absent, not null, when no UI milestone was extracted."""
        data = document_to_dict(build_document(assemble_metrics(sample_report), identity))
        assert "ui" not in data["result_data"]["implementations"]

    def test_ui_included_and_fully_populated(self, report_with_ui, identity):
        """With any UI milestone the whole UI section appears, nulls included."""
        data = document_to_dict(build_document(assemble_metrics(report_with_ui), identity))
        ui = data["result_data"]["implementations"]["ui"]
        assert ui["build_success"] is True
        metrics = ui["generation_metrics"]
        assert metrics["duration_minutes"] == 30.0
        assert metrics["backend_changes_required"] is False
        assert metrics["clarifications_count"] is None
        assert set(metrics["milestones"]) == {
            "ui_generation_started",
            "ui_code_complete",
            "ui_running",
        }

    def test_unset_values_are_null(self, identity):
        """An absent report produces nulls, never zeros or empty strings."""
        data = document_to_dict(build_document(assemble_metrics(None), identity))
        api = data["result_data"]["implementations"]["api"]
        assert api["generation_metrics"]["start_timestamp"] is None
        assert api["generation_metrics"]["llm_usage"] is None
        assert api["generation_metrics"]["test_runs"] == []
        assert api["acceptance"]["total_count"] is None
        assert api["acceptance"]["not_run_count"] is None


class TestFlatDocument:
    """Schema 1.0 documents."""

    def test_shape(self, sample_report, identity):
        document = build_document(
            assemble_metrics(sample_report), identity, schema_version="1.0"
        )
        assert isinstance(document, FlatResultDocument)
        data = document_to_dict(document)
        assert data["schema_version"] == "1.0"
        assert "implementations" not in data["result_data"]
        assert data["result_data"]["generation_metrics"]["llm_model"] == "claude-sonnet-4"
        assert data["result_data"]["acceptance"]["pass_count"] == 38

    def test_same_metrics_both_versions(self, sample_report, identity):
        """Both strategies publish the same API numbers."""
        metrics = assemble_metrics(sample_report)
        flat = document_to_dict(build_document(metrics, identity, schema_version="1.0"))
        nested = document_to_dict(build_document(metrics, identity, schema_version="2.0"))
        assert (
            flat["result_data"]["generation_metrics"]
            == nested["result_data"]["implementations"]["api"]["generation_metrics"]
        )


class TestBuildOptions:
    def test_unknown_schema_version(self, identity):
        with pytest.raises(UnsupportedSchemaError) as excinfo:
            build_document(assemble_metrics(None), identity, schema_version="3.0")
        assert excinfo.value.schema_version == "3.0"
        assert isinstance(excinfo.value, ValueError)

    def test_builders_table(self):
        assert sorted(SCHEMA_BUILDERS) == ["1.0", "2.0"]

    def test_artifacts_and_submission_pass_through(self, identity):
        document = build_document(
            assemble_metrics(None),
            identity,
            artifacts=ArtifactPaths(tool_transcript_path="transcript.md"),
            submission=SubmissionInfo(
                submitted_timestamp="2025-12-18T09:00:00.000Z",
                submitted_by="dana",
                submission_method="automated",
            ),
        )
        data = document_to_dict(document)["result_data"]
        assert data["artifacts"]["tool_transcript_path"] == "transcript.md"
        assert data["artifacts"]["contract_artifact_path"] is None
        assert data["submission"]["submission_method"] == "automated"


class TestSerialize:
    def test_deterministic_bytes(self, report_with_ui, identity):
        """Same inputs, byte-identical output."""
        first = serialize_document(build_document(assemble_metrics(report_with_ui), identity))
        second = serialize_document(build_document(assemble_metrics(report_with_ui), identity))
        assert first == second

    def test_format(self, sample_report, identity):
        content = serialize_document(build_document(assemble_metrics(sample_report), identity))
        assert content.endswith(b"\n")
        assert content.startswith(b'{\n  "schema_version": "2.0"')
        assert json.loads(content)["result_data"]["implementations"]["api"]

    def test_non_ascii_kept(self, identity):
        renamed = identity.model_copy(update={"tool_name": "Würfel"})
        content = serialize_document(build_document(assemble_metrics(None), renamed))
        assert "Würfel".encode("utf-8") in content
