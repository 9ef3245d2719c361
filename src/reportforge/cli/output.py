"""Rich terminal output for generated result files and extracted metrics."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from reportforge.models.metrics import CanonicalMetrics
    from reportforge.pipeline import PipelineResult

_UNSET = "[dim]-[/dim]"


def _display(value: object) -> str:
    if value is None:
        return _UNSET
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _ratio(value: float | None) -> str:
    return _UNSET if value is None else f"{value * 100:.1f}%"


def render_metrics(metrics: CanonicalMetrics, console: Console) -> None:
    """Render a compact key-value table of the headline metrics."""
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")

    api = metrics.api
    table.add_row("LLM model", _display(api.usage.llm_model))
    table.add_row("API start", _display(api.start_timestamp))
    table.add_row("API end", _display(api.end_timestamp))
    table.add_row("API duration (min)", _display(api.duration_minutes))
    table.add_row("Test iterations", _display(metrics.test_iterations_count))

    acceptance = metrics.acceptance
    if acceptance.total is not None:
        table.add_row(
            "Tests passed",
            f"{_display(acceptance.passed)}/{_display(acceptance.total)} "
            f"({_ratio(acceptance.pass_ratio)})",
        )
    else:
        table.add_row("Tests passed", _UNSET)

    usage = api.usage
    if usage.has_counters:
        table.add_row("Tokens", f"{_display(usage.total_tokens)} [dim]({usage.usage_source})[/dim]")
    if usage.estimated_cost is not None:
        cost = f"{usage.estimated_cost:g} {usage.cost_currency or ''}".rstrip()
        table.add_row("Estimated cost", cost)

    if metrics.ui is not None:
        table.add_row("UI duration (min)", _display(metrics.ui.duration_minutes))
        table.add_row("UI build success", _display(metrics.ui_build_success))

    console.print(table)


def render_milestones(metrics: CanonicalMetrics, console: Console) -> None:
    """Render the milestone timeline of each observed phase."""
    table = Table(box=box.SIMPLE_HEAVY, title="Milestones")
    table.add_column("Phase", style="cyan")
    table.add_column("Milestone")
    table.add_column("Timestamp")
    phases = [("api", metrics.api)]
    if metrics.ui is not None:
        phases.append(("ui", metrics.ui))
    for name, phase in phases:
        for milestone in phase.timeline.milestones:
            table.add_row(name, milestone.label, _display(milestone.timestamp))
    console.print(table)


def render_result(result: PipelineResult, path: Path | None, console: Console) -> None:
    """Render the outcome of a generate run."""
    console.print()
    console.print(f"[bold]Result file:[/bold] {result.filename}")
    if path is not None:
        console.print(f"[bold]Written to:[/bold] {path}")
    render_metrics(result.metrics, console)
    if result.valid:
        console.print("[bold green]✓ valid[/bold green]")
    else:
        console.print(f"[bold red]✗ {len(result.violations)} violation(s)[/bold red]")
        for violation in result.violations:
            console.print(f"  • {violation}", markup=False, highlight=False)
