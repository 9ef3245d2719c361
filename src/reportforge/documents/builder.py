"""Result document builder -- maps canonical metrics onto a schema shape.

One canonical metrics model, two pure mapping strategies selected by the
schema version tag. Neither strategy re-extracts anything from the
report; both only reshape CanonicalMetrics and RunIdentity.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

from reportforge.models.document import (
    Acceptance,
    ApiGenerationMetrics,
    ApiImplementation,
    ArtifactPaths,
    FlatResultData,
    FlatResultDocument,
    Implementations,
    IterationEntry,
    LlmUsage,
    NestedResultData,
    NestedResultDocument,
    ResultDocument,
    SubmissionInfo,
    TechStackInfo,
    UiGenerationMetrics,
    UiImplementation,
)
from reportforge.models.identity import RunIdentity
from reportforge.models.metrics import (
    AcceptanceSummary,
    CanonicalMetrics,
    IterationRecord,
    PhaseMetrics,
    UsageRecord,
)

logger = logging.getLogger(__name__)

SCHEMA_FLAT = "1.0"
SCHEMA_NESTED = "2.0"


class UnsupportedSchemaError(ValueError):
    """Raised when a result document is requested in an unknown schema version."""

    def __init__(self, schema_version: str) -> None:
        self.schema_version = schema_version
        supported = ", ".join(sorted(SCHEMA_BUILDERS))
        super().__init__(
            f"Unsupported schema version {schema_version!r}. Supported versions: {supported}"
        )


def _llm_usage(usage: UsageRecord) -> LlmUsage | None:
    """Publish usage counters, or None when the tool reported none."""
    if not usage.has_counters and usage.usage_source == "unknown":
        return None
    return LlmUsage(
        input_tokens=usage.input_tokens,
        output_tokens=usage.output_tokens,
        total_tokens=usage.total_tokens,
        requests_count=usage.requests_count,
        estimated_cost_usd=usage.estimated_cost,
        cost_currency=usage.cost_currency,
        usage_source=usage.usage_source,
    )


def _iteration_entry(record: IterationRecord) -> IterationEntry:
    return IterationEntry(
        run_number=record.ordinal,
        start_timestamp=record.start_timestamp,
        end_timestamp=record.end_timestamp,
        duration_minutes=record.duration_minutes,
        total_tests=record.total,
        passed=record.passed,
        failed=record.failed,
        pass_rate=record.pass_ratio,
    )


def _acceptance(summary: AcceptanceSummary) -> Acceptance:
    not_run = None
    if None not in (summary.total, summary.passed, summary.failed):
        remainder = summary.total - summary.passed - summary.failed
        not_run = remainder if remainder >= 0 else None
    return Acceptance(
        total_count=summary.total,
        pass_count=summary.passed,
        fail_count=summary.failed,
        not_run_count=not_run,
        passrate=summary.pass_ratio,
    )


def _api_generation_metrics(metrics: CanonicalMetrics) -> ApiGenerationMetrics:
    api = metrics.api
    return ApiGenerationMetrics(
        llm_model=api.usage.llm_model,
        start_timestamp=api.start_timestamp,
        end_timestamp=api.end_timestamp,
        duration_minutes=api.duration_minutes,
        milestones=api.timeline.as_dict(),
        clarifications_count=api.clarifications_count,
        interventions_count=api.interventions_count,
        reruns_count=api.reruns_count,
        test_runs=[_iteration_entry(record) for record in metrics.iterations],
        test_iterations_count=metrics.test_iterations_count,
        llm_usage=_llm_usage(api.usage),
        tech_stack=TechStackInfo(**metrics.tech_stack.model_dump()),
    )


def _ui_implementation(metrics: CanonicalMetrics) -> UiImplementation | None:
    ui: PhaseMetrics | None = metrics.ui
    if ui is None or not ui.timeline.observed:
        return None
    return UiImplementation(
        generation_metrics=UiGenerationMetrics(
            llm_model=ui.usage.llm_model,
            start_timestamp=ui.start_timestamp,
            end_timestamp=ui.end_timestamp,
            duration_minutes=ui.duration_minutes,
            milestones=ui.timeline.as_dict(),
            clarifications_count=ui.clarifications_count,
            interventions_count=ui.interventions_count,
            reruns_count=ui.reruns_count,
            backend_changes_required=metrics.ui_backend_changes_required,
            llm_usage=_llm_usage(ui.usage),
        ),
        build_success=metrics.ui_build_success,
    )


def build_flat_document(
    metrics: CanonicalMetrics,
    identity: RunIdentity,
    artifacts: ArtifactPaths,
    submission: SubmissionInfo,
) -> FlatResultDocument:
    """Schema 1.0: API metrics only, at the top of result_data."""
    return FlatResultDocument(
        result_data=FlatResultData(
            run_identity=identity,
            generation_metrics=_api_generation_metrics(metrics),
            acceptance=_acceptance(metrics.acceptance),
            artifacts=artifacts,
            submission=submission,
        )
    )


def build_nested_document(
    metrics: CanonicalMetrics,
    identity: RunIdentity,
    artifacts: ArtifactPaths,
    submission: SubmissionInfo,
) -> NestedResultDocument:
    """Schema 2.0: per-implementation metrics; UI only when it was observed."""
    return NestedResultDocument(
        result_data=NestedResultData(
            run_identity=identity,
            implementations=Implementations(
                api=ApiImplementation(
                    generation_metrics=_api_generation_metrics(metrics),
                    acceptance=_acceptance(metrics.acceptance),
                ),
                ui=_ui_implementation(metrics),
            ),
            artifacts=artifacts,
            submission=submission,
        )
    )


DocumentBuilder = Callable[
    [CanonicalMetrics, RunIdentity, ArtifactPaths, SubmissionInfo], ResultDocument
]

SCHEMA_BUILDERS: dict[str, DocumentBuilder] = {
    SCHEMA_FLAT: build_flat_document,
    SCHEMA_NESTED: build_nested_document,
}


def build_document(
    metrics: CanonicalMetrics,
    identity: RunIdentity,
    *,
    schema_version: str = SCHEMA_NESTED,
    artifacts: ArtifactPaths | None = None,
    submission: SubmissionInfo | None = None,
) -> ResultDocument:
    """Build a result document in the requested schema version.

    Raises:
        UnsupportedSchemaError: If schema_version has no mapping strategy.
    """
    builder = SCHEMA_BUILDERS.get(schema_version)
    if builder is None:
        raise UnsupportedSchemaError(schema_version)
    document = builder(
        metrics,
        identity,
        artifacts or ArtifactPaths(),
        submission or SubmissionInfo(),
    )
    logger.debug("Built schema %s document for run %s", schema_version, identity.run_id)
    return document


def document_to_dict(document: ResultDocument) -> dict:
    """Dump a document to plain data, dropping an omitted UI section."""
    data = document.model_dump(mode="json")
    if isinstance(document, NestedResultDocument):
        implementations = data["result_data"]["implementations"]
        if implementations.get("ui") is None:
            implementations.pop("ui", None)
    return data


def serialize_document(document: ResultDocument) -> bytes:
    """Serialize a document to deterministic UTF-8 JSON bytes."""
    content = json.dumps(document_to_dict(document), indent=2, ensure_ascii=False)
    return (content + "\n").encode("utf-8")
