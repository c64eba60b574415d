"""Perennial CLI - main application entry point.

Registers every command and sets up configuration and logging once per
invocation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from perennial import __version__
from perennial.cli import profiles, review, srs
from perennial.cli.console import ErrorRenderer, set_verbose_mode
from perennial.cli.context import CLIState
from perennial.core.config import LOG_LEVELS, load_config
from perennial.core.logging import configure_logging

app = typer.Typer(
    name="perennial",
    help="Spaced repetition scheduling preview and profile settings",
    add_completion=False,
    no_args_is_help=True,
)

app.command("simulate")(srs.simulate_command)
app.command("queue")(review.queue_command)
app.command("review")(review.review_command)
app.add_typer(srs.app, name="srs")
app.add_typer(profiles.app, name="profiles")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"perennial {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to a perennial.yaml file"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", help="Show tracebacks in error output"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help=f"One of {', '.join(LOG_LEVELS)}"
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also write logs to this file"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Perennial - preview and tune spaced repetition scheduling."""
    set_verbose_mode(verbose)

    try:
        config = load_config(config_path)
    except Exception as e:
        ErrorRenderer.render(e, context="While loading configuration")
        raise typer.Exit(code=1)

    if log_level:
        config.log_level = log_level.upper()
    level = "DEBUG" if verbose and not log_level else config.log_level
    configure_logging(level=level, log_file=log_file)

    ctx.obj = CLIState(config=config)


def cli_main() -> None:
    """Console script entry point."""
    app()
