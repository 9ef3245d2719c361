"""reportforge generate -- produce the result file for a run directory.

Reads run.config and the run's report files, runs the pipeline, writes
the result file atomically and prints a summary with any violations.
"""

from __future__ import annotations

import getpass
import platform
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from reportforge.cli.output import render_result
from reportforge.extraction.timestamps import format_timestamp
from reportforge.models.config import (
    PipelineConfig,
    RunConfigError,
    find_project_root,
    load_pipeline_config,
)
from reportforge.models.document import SubmissionInfo
from reportforge.pipeline import run_pipeline
from reportforge.rundir import (
    discover_artifacts,
    load_run_config,
    read_reports,
    resolve_workspace,
    run_identity_from_config,
    run_timestamp_from_dir,
)
from reportforge.storage.json_store import ResultStore


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


def generate(
    run_dir: Path = typer.Option(
        ..., "--run-dir", help="Run directory holding run.config", file_okay=False
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", help="Where to write the result file (default: RUN_DIR/benchmark)"
    ),
    schema: Optional[str] = typer.Option(
        None, "--schema", help="Result schema version (default: from reportforge.yaml)"
    ),
    submitted_by: Optional[str] = typer.Option(
        None, "--submitted-by", help="Submitter name recorded in the result file"
    ),
) -> None:
    """Generate the result file for a benchmark run directory.

    Exits 1 when run.config is missing or incomplete. Validation
    violations are reported but do not change the exit code.
    """
    console = Console()
    run_dir = run_dir.resolve()
    config = load_pipeline_config(find_project_root(run_dir))
    if schema is not None:
        try:
            config = PipelineConfig.model_validate(
                {**config.model_dump(), "schema_version": schema}
            )
        except ValidationError:
            typer.echo(f"Error: Unsupported schema version: {schema}", err=True)
            raise typer.Exit(code=1)

    try:
        values = load_run_config(run_dir)
        identity = run_identity_from_config(
            values, run_dir, f"{platform.system()} {platform.release()}".strip()
        )
    except RunConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    except ValidationError as e:
        typer.echo(f"Error: invalid run.config in {run_dir}:\n{e}", err=True)
        raise typer.Exit(code=1)

    workspace = resolve_workspace(run_dir, identity.workspace_path)
    report_text, ui_report_text = read_reports(run_dir, config, workspace)
    now = datetime.now(timezone.utc)
    submission = SubmissionInfo(
        submitted_timestamp=format_timestamp(now),
        submitted_by=submitted_by or config.submitted_by or _current_user(),
        submission_method="automated" if report_text is not None else "manual",
    )

    result = run_pipeline(
        report_text,
        identity,
        timestamp=run_timestamp_from_dir(run_dir, now),
        config=config,
        ui_report_text=ui_report_text,
        artifacts=discover_artifacts(run_dir, workspace, identity.api_style),
        submission=submission,
    )

    store = ResultStore(output_dir or run_dir / config.benchmark_dir)
    path = store.save(result.content, result.filename)
    if report_text is None:
        console.print(
            f"[yellow]No {config.report_filename} found; metrics are unset.[/yellow]"
        )
    render_result(result, path, console)
