"""Pipeline configuration model for reportforge.

Captures reportforge.yaml fields with sensible defaults. The pipeline
receives a PipelineConfig explicitly; nothing in the core reads the
process environment.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

CONFIG_FILENAME = "reportforge.yaml"


class RunConfigError(Exception):
    """Raised when a run directory's run.config is missing or incomplete."""

    def __init__(
        self,
        path: Path,
        missing: list[str] | None = None,
        reason: str | None = None,
    ) -> None:
        self.path = path
        self.missing = missing or []
        if reason is None:
            reason = f"required value(s) missing: {', '.join(self.missing)}"
        super().__init__(f"{path}: {reason}")


class PipelineConfig(BaseModel):
    """Project-level configuration loaded from reportforge.yaml."""

    model_config = {"extra": "forbid", "frozen": True}

    schema_version: Literal["1.0", "2.0"] = "2.0"
    duration_precision: int = Field(default=2, ge=0, le=6)
    default_cost_currency: str = "USD"
    iteration_family: str = Field(default="test_run", pattern=r"^[a-z][a-z0-9_]*$")
    benchmark_dir: str = "benchmark"
    report_filename: str = "ai_run_report.md"
    ui_report_filename: str = "ui_run_summary.md"
    submitted_by: str | None = None


def find_project_root(start: Path | None = None) -> Path:
    """Walk up from start (default: cwd) looking for reportforge.yaml.

    Args:
        start: Starting path (file or directory). Defaults to cwd.

    Returns:
        Path to the directory containing reportforge.yaml, or cwd if
        none is found.
    """
    current = (start or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent
    while current != current.parent:
        if (current / CONFIG_FILENAME).exists():
            return current
        current = current.parent
    return Path.cwd()


def load_pipeline_config(project_root: Path | None = None) -> PipelineConfig:
    """Load PipelineConfig from reportforge.yaml. Returns defaults if not found.

    Args:
        project_root: Directory holding reportforge.yaml. If None, uses
            find_project_root() to locate it.

    Returns:
        Validated PipelineConfig instance.
    """
    if project_root is None:
        project_root = find_project_root()
    config_path = project_root / CONFIG_FILENAME
    if not config_path.exists():
        return PipelineConfig()
    import yaml

    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if raw is None:
        return PipelineConfig()
    return PipelineConfig.model_validate(raw)
