"""Run directory loading.

A run directory is created by the run initializer and holds `run.config`
(key=value lines), the run's `benchmark/` reports and its evidence files.
This module turns that layout into the explicit inputs of the pipeline:
a RunIdentity, a run timestamp, artifact paths and report texts.
"""

from __future__ import annotations

import logging
import os
import re
from datetime import datetime
from pathlib import Path

from reportforge.documents.filename import COMPACT_TIMESTAMP_PATTERN
from reportforge.models.config import PipelineConfig, RunConfigError
from reportforge.models.document import ArtifactPaths
from reportforge.models.identity import RunIdentity

logger = logging.getLogger(__name__)

RUN_CONFIG_FILENAME = "run.config"
REQUIRED_RUN_CONFIG_KEYS: tuple[str, ...] = (
    "spec_version",
    "tool",
    "model",
    "api_type",
    "workspace",
)

_ASSIGNMENT = re.compile(r"^(?:export[ \t]+)?(?P<key>[A-Za-z_][A-Za-z0-9_]*)=(?P<value>.*)$")
_SECOND_RUN = re.compile(r"run-?2", re.IGNORECASE)


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    # Unquoted values end at an inline comment.
    return value.split(" #", 1)[0].rstrip()


def parse_run_config(text: str) -> dict[str, str]:
    """Parse key=value lines, ignoring blank lines and # comments."""
    values: dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        found = _ASSIGNMENT.match(stripped)
        if found is None:
            logger.debug("Ignoring run.config line: %r", line)
            continue
        values[found.group("key")] = _unquote(found.group("value"))
    return values


def load_run_config(run_dir: Path) -> dict[str, str]:
    """Read and check RUN_DIR/run.config.

    Raises:
        RunConfigError: If the file is unreadable or a required value is
            missing or empty.
    """
    path = run_dir / RUN_CONFIG_FILENAME
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        reason = f"cannot read run configuration ({e.strerror or e})"
        raise RunConfigError(path, reason=reason) from e
    values = parse_run_config(text)
    missing = [key for key in REQUIRED_RUN_CONFIG_KEYS if not values.get(key)]
    if missing:
        raise RunConfigError(path, missing=missing)
    return values


def run_number_from_id(run_id: str | None) -> int:
    """Second runs are marked by "run2" or "run-2" in the run id."""
    if run_id and _SECOND_RUN.search(run_id):
        return 2
    return 1


def run_identity_from_config(
    values: dict[str, str],
    run_dir: Path,
    run_environment: str,
) -> RunIdentity:
    """Build the RunIdentity of a run from its run.config values.

    Args:
        values: Parsed run.config values.
        run_dir: The run directory; its name seeds the default run id.
        run_environment: Fallback environment description used when
            run.config carries none.

    Raises:
        pydantic.ValidationError: If a value is outside its allowed set.
    """
    tool = values["tool"]
    default_run_id = f"{tool.replace(' ', '-')}-Model{values['model']}-{run_dir.name}"
    run_id = values.get("run_id") or default_run_id
    return RunIdentity(
        tool_name=tool,
        tool_version=values.get("tool_ver", ""),
        run_id=run_id,
        run_number=run_number_from_id(values.get("run_id")),
        target_model=values["model"],
        api_style=values["api_type"],
        spec_reference=values["spec_version"],
        workspace_path=values["workspace"],
        run_environment=values.get("run_environment") or run_environment,
    )


def run_timestamp_from_dir(run_dir: Path, now: datetime) -> str:
    """Use a YYYYMMDDTHHMM run directory name as the run timestamp, else now."""
    if COMPACT_TIMESTAMP_PATTERN.match(run_dir.name):
        return run_dir.name
    return now.strftime("%Y%m%dT%H%M")


def resolve_workspace(run_dir: Path, workspace: str) -> Path:
    path = Path(workspace).expanduser()
    return path if path.is_absolute() else run_dir / path


def _relative(run_dir: Path, target: Path) -> str:
    return Path(os.path.relpath(target, run_dir)).as_posix()


def _first_existing(
    run_dir: Path,
    candidates: list[Path],
    *,
    directory: bool = False,
) -> str | None:
    for candidate in candidates:
        if candidate.is_dir() if directory else candidate.is_file():
            return _relative(run_dir, candidate)
    return None


def discover_artifacts(run_dir: Path, workspace: Path, api_style: str) -> ArtifactPaths:
    """Locate run artifacts and express them relative to the run directory.

    Artifacts that do not exist are left unset.
    """
    if api_style == "GraphQL":
        contracts = [
            workspace / "backend" / "src" / "schema.graphql",
            workspace / "schema.graphql",
        ]
    else:
        contracts = [workspace / "backend" / "openapi.yaml", workspace / "openapi.yaml"]

    determinism = _first_existing(run_dir, [run_dir / "determinism_evidence.md"])
    if determinism is None:
        determinism = _first_existing(run_dir, [run_dir / "determinism_evidence"], directory=True)

    return ArtifactPaths(
        tool_transcript_path=_first_existing(run_dir, [run_dir / "transcript.md"]),
        run_instructions_path=_first_existing(
            run_dir, [workspace / "benchmark" / "run_instructions.md"]
        ),
        contract_artifact_path=_first_existing(run_dir, contracts),
        acceptance_checklist_path=_first_existing(
            run_dir, [workspace / "benchmark" / "acceptance_checklist.md"]
        ),
        acceptance_evidence_path=_first_existing(
            run_dir, [run_dir / "acceptance_evidence"], directory=True
        ),
        determinism_evidence_path=determinism,
        overreach_evidence_path=_first_existing(run_dir, [run_dir / "overreach_notes.md"]),
        automated_tests_path=_first_existing(
            run_dir, [workspace / "backend" / "tests", workspace / "tests"], directory=True
        ),
        ui_source_path=_first_existing(run_dir, [workspace / "ui"], directory=True),
        ui_run_summary_path=_first_existing(
            run_dir, [workspace / "benchmark" / "ui_run_summary.md"]
        ),
    )


def read_reports(
    run_dir: Path,
    config: PipelineConfig,
    workspace: Path | None = None,
) -> tuple[str | None, str | None]:
    """Read the AI run report and the UI run summary, None where absent.

    Each report is looked up in the run's benchmark directory first, then
    in the workspace's.

    Returns:
        (report_text, ui_report_text).
    """
    folders = [run_dir / config.benchmark_dir]
    if workspace is not None:
        folders.append(workspace / config.benchmark_dir)

    def read(name: str) -> str | None:
        for folder in folders:
            path = folder / name
            if path.is_file():
                return path.read_text(encoding="utf-8", errors="replace")
        logger.debug("No %s under %s", name, ", ".join(str(f) for f in folders))
        return None

    return read(config.report_filename), read(config.ui_report_filename)
