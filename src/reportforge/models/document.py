"""Result document models for both supported schema versions.

Schema "1.0" is the flat single-implementation shape. Schema "2.0" nests
metrics per implementation (API plus an optional UI section). Both share
run identity, artifact and submission blocks. These models also serve as
the rule set the validator checks submitted documents against.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, Field

from reportforge.models.identity import RunIdentity
from reportforge.models.metrics import UsageSource


def _non_negative(value: int | float | None) -> int | float | None:
    if value is not None and value < 0:
        raise ValueError("Input should be greater than or equal to 0")
    return value


Count = Annotated[int | float | None, AfterValidator(_non_negative)]

_STRICT = {"extra": "forbid"}


class LlmUsage(BaseModel):
    """LLM usage counters as published in a result document."""

    model_config = _STRICT

    input_tokens: Count = None
    output_tokens: Count = None
    total_tokens: Count = None
    requests_count: Count = None
    estimated_cost_usd: Count = None
    cost_currency: str | None = None
    usage_source: UsageSource = "unknown"


class IterationEntry(BaseModel):
    """One test iteration as published in a result document."""

    model_config = _STRICT

    run_number: int = Field(ge=1)
    start_timestamp: str
    end_timestamp: str
    duration_minutes: float | None = Field(default=None, ge=0)
    total_tests: Count = None
    passed: Count = None
    failed: Count = None
    pass_rate: float | None = Field(default=None, ge=0.0, le=1.0)


class Acceptance(BaseModel):
    """Final accepted test state."""

    model_config = _STRICT

    total_count: Count = None
    pass_count: Count = None
    fail_count: Count = None
    not_run_count: Count = None
    passrate: float | None = Field(default=None, ge=0.0, le=1.0)


class TechStackInfo(BaseModel):
    model_config = _STRICT

    backend_runtime: str | None = None
    backend_framework: str | None = None
    database: str | None = None


class ApiGenerationMetrics(BaseModel):
    """Generation metrics for the API implementation."""

    model_config = _STRICT

    llm_model: str | None = None
    start_timestamp: str | None = None
    end_timestamp: str | None = None
    duration_minutes: float | None = Field(default=None, ge=0)
    milestones: dict[str, str | None] = Field(default_factory=dict)
    clarifications_count: Count = None
    interventions_count: Count = None
    reruns_count: Count = None
    test_runs: list[IterationEntry] = Field(default_factory=list)
    test_iterations_count: Count = None
    llm_usage: LlmUsage | None = None
    tech_stack: TechStackInfo = Field(default_factory=TechStackInfo)


class UiGenerationMetrics(BaseModel):
    """Generation metrics for the UI implementation."""

    model_config = _STRICT

    llm_model: str | None = None
    start_timestamp: str | None = None
    end_timestamp: str | None = None
    duration_minutes: float | None = Field(default=None, ge=0)
    milestones: dict[str, str | None] = Field(default_factory=dict)
    clarifications_count: Count = None
    interventions_count: Count = None
    reruns_count: Count = None
    backend_changes_required: bool | None = None
    llm_usage: LlmUsage | None = None


class ApiImplementation(BaseModel):
    model_config = _STRICT

    generation_metrics: ApiGenerationMetrics
    acceptance: Acceptance


class UiImplementation(BaseModel):
    model_config = _STRICT

    generation_metrics: UiGenerationMetrics
    build_success: bool | None = None


class Implementations(BaseModel):
    model_config = _STRICT

    api: ApiImplementation
    ui: UiImplementation | None = None


class ArtifactPaths(BaseModel):
    """Artifact locations relative to the run directory."""

    model_config = _STRICT

    tool_transcript_path: str | None = None
    run_instructions_path: str | None = None
    contract_artifact_path: str | None = None
    acceptance_checklist_path: str | None = None
    acceptance_evidence_path: str | None = None
    determinism_evidence_path: str | None = None
    overreach_evidence_path: str | None = None
    automated_tests_path: str | None = None
    ui_source_path: str | None = None
    ui_run_summary_path: str | None = None


class SubmissionInfo(BaseModel):
    """Who produced the result file, when, and how."""

    model_config = _STRICT

    submitted_timestamp: str | None = None
    submitted_by: str | None = None
    submission_method: Literal["automated", "manual"] = "manual"


class FlatResultData(BaseModel):
    model_config = _STRICT

    run_identity: RunIdentity
    generation_metrics: ApiGenerationMetrics
    acceptance: Acceptance
    artifacts: ArtifactPaths = Field(default_factory=ArtifactPaths)
    submission: SubmissionInfo = Field(default_factory=SubmissionInfo)


class FlatResultDocument(BaseModel):
    """Schema 1.0: a single implementation with top-level metric blocks."""

    model_config = _STRICT

    schema_version: Literal["1.0"] = "1.0"
    result_data: FlatResultData


class NestedResultData(BaseModel):
    model_config = _STRICT

    run_identity: RunIdentity
    implementations: Implementations
    artifacts: ArtifactPaths = Field(default_factory=ArtifactPaths)
    submission: SubmissionInfo = Field(default_factory=SubmissionInfo)


class NestedResultDocument(BaseModel):
    """Schema 2.0: per-implementation metrics under result_data.implementations."""

    model_config = _STRICT

    schema_version: Literal["2.0"] = "2.0"
    result_data: NestedResultData


ResultDocument = FlatResultDocument | NestedResultDocument

DOCUMENT_MODELS: dict[str, type[BaseModel]] = {
    "1.0": FlatResultDocument,
    "2.0": NestedResultDocument,
}
