"""reportforge extract -- print the canonical metrics of a report as JSON."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from reportforge.cli.output import render_milestones
from reportforge.extraction.assembler import assemble_metrics
from reportforge.models.config import find_project_root, load_pipeline_config


def extract(
    report: Path = typer.Argument(..., help="AI run report (markdown)", dir_okay=False),
    ui_report: Optional[Path] = typer.Option(
        None, "--ui-report", help="Separate UI run summary", dir_okay=False
    ),
    table: bool = typer.Option(False, "--table", help="Show a milestone table instead of JSON"),
) -> None:
    """Extract canonical metrics from a run report without writing anything."""
    for path in (report, ui_report):
        if path is not None and not path.is_file():
            typer.echo(f"Error: File not found: {path}", err=True)
            raise typer.Exit(code=1)

    config = load_pipeline_config(find_project_root(report))
    metrics = assemble_metrics(
        report.read_text(encoding="utf-8", errors="replace"),
        ui_report.read_text(encoding="utf-8", errors="replace") if ui_report else None,
        config,
    )
    if table:
        render_milestones(metrics, Console())
        return
    typer.echo(metrics.model_dump_json(indent=2))
