"""Command-line interface for desccleaner.

Responsibilities:
- Normalize description markup from files or stdin in batch.
- Check whether text is already canonical.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import echo_report, exit_with_command_error
from .config import CleanerConfig, ConfigLoader
from .errors import CleanerStageError
from .text.normalizer import DescriptionNormalizer

app = typer.Typer(
    name="desccleaner",
    no_args_is_help=True,
    help="Normalize character-description markup into clean plain text.",
)

_STDIN_MARKER = "-"


def _load_config(config_path: Path | None) -> CleanerConfig:
    """Load YAML config when requested, else environment defaults; map failures."""

    if config_path is None:
        try:
            return ConfigLoader.from_env()
        except ValueError as exc:
            raise CleanerStageError(
                stage="config",
                detail=f"Invalid environment configuration: {exc}",
                hint="Fix or unset the offending `DESCCLEANER_*` variable.",
            ) from exc

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise CleanerStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise CleanerStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config keys/values and rerun.",
        ) from exc
    except Exception as exc:
        raise CleanerStageError(
            stage="config",
            detail=f"Failed to load config file `{config_path}`: {exc}",
            hint="Verify YAML syntax and file permissions.",
        ) from exc


def _read_input(source: str) -> str:
    """Read markup from a file path, or from stdin for `-`."""

    if source == _STDIN_MARKER:
        return typer.get_text_stream("stdin").read()
    path = Path(source)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise CleanerStageError(
            stage="input",
            detail=f"Input file not found: `{path}`.",
            hint="Pass an existing file, or `-` to read from stdin.",
        ) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise CleanerStageError(
            stage="input",
            detail=f"Failed to read input `{path}`: {exc}",
            hint="Input must be a readable UTF-8 text file.",
        ) from exc


def _write_output(out: Path, text: str) -> None:
    """Write canonical text with a trailing newline."""

    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text + "\n", encoding="utf-8")
    except OSError as exc:
        raise CleanerStageError(
            stage="output",
            detail=f"Failed to write output `{out}`: {exc}",
            hint="Check that the output directory is writable.",
        ) from exc


@app.command("clean")
def clean_command(
    source: Annotated[
        str,
        typer.Argument(help="Markup file to normalize, or `-` for stdin."),
    ],
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Write canonical text here instead of stdout."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with symbol tables."),
    ] = None,
    report: Annotated[
        bool,
        typer.Option("--report", help="Print removal counters to stderr."),
    ] = False,
) -> None:
    """Normalize markup into canonical plain text."""

    try:
        config = _load_config(config_file)
        normalizer = DescriptionNormalizer(config.normalizer)
        result = normalizer.normalize_with_report(_read_input(source))
        if out is not None:
            _write_output(out, result.text)
    except Exception as exc:
        exit_with_command_error("clean", exc)

    if out is None:
        typer.echo(result.text)
    else:
        typer.echo(f"Canonical text: {out}", err=True)
    if report:
        echo_report(result)


@app.command("check")
def check_command(
    source: Annotated[
        str,
        typer.Argument(help="Text file to check, or `-` for stdin."),
    ],
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with symbol tables."),
    ] = None,
) -> None:
    """Exit 0 when the input is already canonical, 1 otherwise."""

    try:
        config = _load_config(config_file)
        text = _read_input(source)
        canonical = DescriptionNormalizer(config.normalizer).is_canonical(text.rstrip("\n"))
    except Exception as exc:
        exit_with_command_error("check", exc)

    if canonical:
        typer.echo("canonical")
        return
    typer.echo("not canonical")
    raise typer.Exit(code=1)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
