"""reportforge validate -- check result files against the result schema.

Reports every violation of every file at once, with rich or CI-friendly
formatting.
"""

from __future__ import annotations

import os
from pathlib import Path

import typer

from reportforge.documents.errors import ViolationFormatter
from reportforge.documents.validator import validate_result_file


def _running_in_ci() -> bool:
    return os.environ.get("CI", "").lower() in ("true", "1", "yes")


def validate(
    files: list[Path] = typer.Argument(..., help="Result files to validate"),
    ci: bool = typer.Option(False, "--ci", help="CI-friendly concise output"),
) -> None:
    """Validate result files and their canonical filenames.

    Exits with code 0 if all files are valid, 1 if any has violations.
    """
    # Without --ci, fall back to detecting a CI environment.
    ci = ci or _running_in_ci()
    formatter = ViolationFormatter(ci_mode=ci)

    for path in files:
        if not path.is_file():
            typer.echo(f"Error: File not found: {path}", err=True)
            raise typer.Exit(code=1)

    total = len(files)
    valid_count = 0
    for path in files:
        violations = validate_result_file(path)
        if violations:
            typer.echo(formatter.format_all(violations, str(path)), err=not ci)
        else:
            valid_count += 1
            typer.echo(f"{path} -- ok" if ci else f"  ok {path}")

    typer.echo(f"\n{valid_count}/{total} result files valid")
    if valid_count < total:
        raise typer.Exit(code=1)
