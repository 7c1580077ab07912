"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics
and normalization reports.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import CleanerStageError
from .telemetry.logger import CleanerLogger
from .text.normalizer import NormalizationReport


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, CleanerStageError):
        CleanerLogger().log_stage_failure(exc.stage, type(exc).__name__)
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        CleanerLogger().log_stage_failure("cli", type(exc).__name__)
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_report(report: NormalizationReport) -> None:
    """Print removal counters of one normalization pass to stderr."""

    typer.echo(f"Non-content blocks removed: {report.non_content_blocks_removed}", err=True)
    typer.echo(f"Decorative containers removed: {report.decorative_containers_removed}", err=True)
    typer.echo(f"URLs and images removed: {report.urls_removed}", err=True)
    typer.echo(f"Separator lines removed: {report.separator_lines_removed}", err=True)
    typer.echo(f"Placeholder lines removed: {report.placeholder_lines_removed}", err=True)
