"""Pipeline entry point -- report text in, named and validated result file out.

Composes extraction, document building, filename composition and
validation. Pure: the same inputs always produce the same metrics and
byte-identical document content.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from reportforge.documents.builder import build_document, serialize_document
from reportforge.documents.filename import compose_filename
from reportforge.documents.validator import Violation, validate_document
from reportforge.extraction.assembler import assemble_metrics
from reportforge.models.config import PipelineConfig
from reportforge.models.document import ArtifactPaths, ResultDocument, SubmissionInfo
from reportforge.models.identity import RunIdentity
from reportforge.models.metrics import CanonicalMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    """Everything one pipeline run produced."""

    metrics: CanonicalMetrics
    document: ResultDocument
    filename: str
    content: bytes
    violations: list[Violation] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.violations


def run_pipeline(
    report_text: str | None,
    identity: RunIdentity,
    *,
    timestamp: datetime | str,
    config: PipelineConfig | None = None,
    ui_report_text: str | None = None,
    artifacts: ArtifactPaths | None = None,
    submission: SubmissionInfo | None = None,
) -> PipelineResult:
    """Extract, build, name and validate one result document.

    Args:
        report_text: The AI run report; None when the run produced none.
        identity: Caller-supplied run identity.
        timestamp: Run timestamp, a datetime or compact YYYYMMDDTHHMM string.
        config: Pipeline configuration; defaults apply when None.
        ui_report_text: Separate UI run summary, if any.
        artifacts: Artifact paths relative to the run directory.
        submission: Submission details supplied by the caller.

    Returns:
        PipelineResult. Violations are reported, never raised.

    Raises:
        UnsupportedSchemaError: If config names an unknown schema version.
        ValueError: If timestamp is a string not in compact form.
    """
    config = config or PipelineConfig()
    filename = compose_filename(identity, timestamp)
    metrics = assemble_metrics(report_text, ui_report_text, config)
    document = build_document(
        metrics,
        identity,
        schema_version=config.schema_version,
        artifacts=artifacts,
        submission=submission,
    )
    content = serialize_document(document)
    violations = validate_document(content, filename=filename)
    if violations:
        logger.warning("%s has %d violation(s)", filename, len(violations))
    return PipelineResult(
        metrics=metrics,
        document=document,
        filename=filename,
        content=content,
        violations=violations,
    )
