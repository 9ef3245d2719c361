"""reportforge data models - re-exports all public model classes."""

from reportforge.models.config import PipelineConfig, RunConfigError
from reportforge.models.document import (
    ArtifactPaths,
    FlatResultDocument,
    NestedResultDocument,
    ResultDocument,
    SubmissionInfo,
)
from reportforge.models.identity import RunIdentity
from reportforge.models.metrics import (
    AcceptanceSummary,
    CanonicalMetrics,
    IterationRecord,
    Milestone,
    PhaseMetrics,
    TechStack,
    Timeline,
    UsageRecord,
)

__all__ = [
    "AcceptanceSummary",
    "ArtifactPaths",
    "CanonicalMetrics",
    "FlatResultDocument",
    "IterationRecord",
    "Milestone",
    "NestedResultDocument",
    "PhaseMetrics",
    "PipelineConfig",
    "RunConfigError",
    "ResultDocument",
    "RunIdentity",
    "SubmissionInfo",
    "TechStack",
    "Timeline",
    "UsageRecord",
]
