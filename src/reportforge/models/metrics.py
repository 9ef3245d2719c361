"""Canonical metrics models.

These models are the pipeline-internal representation of everything
extracted from a run report. Unset values are None throughout; they are
never replaced by zero or an empty string.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

UsageSource = Literal["tool_reported", "operator_estimated", "unknown"]

USAGE_SOURCES: tuple[str, ...] = ("tool_reported", "operator_estimated", "unknown")

Number = int | float

_FROZEN = {"extra": "forbid", "frozen": True}


class Milestone(BaseModel):
    """A named instant in time, normalized to ISO-8601 UTC."""

    model_config = _FROZEN

    label: str
    timestamp: str | None = None


class Timeline(BaseModel):
    """Ordered milestones for one generation phase."""

    model_config = _FROZEN

    milestones: tuple[Milestone, ...] = ()

    def get(self, label: str) -> str | None:
        """Return the timestamp recorded for label, or None."""
        for milestone in self.milestones:
            if milestone.label == label:
                return milestone.timestamp
        return None

    @property
    def observed(self) -> bool:
        """True when at least one milestone resolved to a timestamp."""
        return any(m.timestamp is not None for m in self.milestones)

    def as_dict(self) -> dict[str, str | None]:
        return {m.label: m.timestamp for m in self.milestones}


class IterationRecord(BaseModel):
    """Metrics for one test-execution attempt within a run."""

    model_config = _FROZEN

    ordinal: int = Field(ge=1)
    start_timestamp: str
    end_timestamp: str
    duration_minutes: float | None = None
    total: Number | None = None
    passed: Number | None = None
    failed: Number | None = None
    pass_ratio: float | None = Field(default=None, ge=0.0, le=1.0)


class UsageRecord(BaseModel):
    """Token, request and cost counters for one generation phase."""

    model_config = _FROZEN

    llm_model: str | None = None
    requests_count: Number | None = None
    total_tokens: Number | None = None
    input_tokens: Number | None = None
    output_tokens: Number | None = None
    estimated_cost: Number | None = None
    cost_currency: str | None = None
    usage_source: UsageSource = "unknown"

    @property
    def has_counters(self) -> bool:
        """True when any token, request or cost counter is set."""
        return any(
            value is not None
            for value in (
                self.requests_count,
                self.total_tokens,
                self.input_tokens,
                self.output_tokens,
                self.estimated_cost,
            )
        )


class AcceptanceSummary(BaseModel):
    """Pass/fail counts for the final accepted state of the run."""

    model_config = _FROZEN

    total: Number | None = None
    passed: Number | None = None
    failed: Number | None = None
    pass_ratio: float | None = Field(default=None, ge=0.0, le=1.0)


class TechStack(BaseModel):
    """Technology choices reported by the tool."""

    model_config = _FROZEN

    backend_runtime: str | None = None
    backend_framework: str | None = None
    database: str | None = None


class PhaseMetrics(BaseModel):
    """Everything measured for one generation phase (API or UI)."""

    model_config = _FROZEN

    timeline: Timeline = Field(default_factory=Timeline)
    usage: UsageRecord = Field(default_factory=UsageRecord)
    start_timestamp: str | None = None
    end_timestamp: str | None = None
    duration_minutes: float | None = None
    clarifications_count: Number | None = None
    interventions_count: Number | None = None
    reruns_count: Number | None = None


class CanonicalMetrics(BaseModel):
    """Fully assembled metrics for one run. Built once, never mutated."""

    model_config = _FROZEN

    contract_version: str
    api: PhaseMetrics = Field(default_factory=PhaseMetrics)
    ui: PhaseMetrics | None = None
    iterations: tuple[IterationRecord, ...] = ()
    test_iterations_count: Number | None = None
    acceptance: AcceptanceSummary = Field(default_factory=AcceptanceSummary)
    tech_stack: TechStack = Field(default_factory=TechStack)
    ui_build_success: bool | None = None
    ui_backend_changes_required: bool | None = None
