"""Scheduling commands: local simulation and profile SRS settings.

- simulate: project intervals for a rating script, no network
- srs show: a profile's saved settings and their projection
- srs set: preview a change against the saved settings, then save it
"""

from __future__ import annotations

import json
import math
from typing import Any, List, Optional, Sequence, Tuple

import typer
from rich.table import Table

from perennial.cli.console import get_console, print_success, print_warning, tip
from perennial.cli.context import (
    get_state,
    open_client,
    resolve_profile,
    safe_cli_command,
)
from perennial.srs.models import SchedulingConfig
from perennial.srs.projector import (
    DEFAULT_SCRIPT,
    Rating,
    StepResult,
    format_path,
    parse_script,
    project_config,
    project_trace,
    starting_ease,
    starting_interval,
)

app = typer.Typer(
    name="srs",
    help="View and change a profile's scheduling settings",
    add_completion=False,
)

DEFAULT_SCRIPT_TEXT = ",".join(r.value for r in DEFAULT_SCRIPT)


def _sequence_label(script: Sequence[Rating]) -> str:
    if not script:
        return "(none)"
    return " → ".join(r.value.capitalize() for r in script)


def _trace_table(
    config: SchedulingConfig, trace: List[Tuple[Rating, StepResult]]
) -> Table:
    table = Table(title="Projected reviews", show_lines=False)
    table.add_column("Step", justify="right")
    table.add_column("Rating")
    table.add_column("Interval", justify="right")
    table.add_column("Ease", justify="right")

    start = starting_interval(config.base_interval_days)
    ease = starting_ease(config.ease_multiplier)
    table.add_row("0", "start", f"{start}d", f"{ease:.2f}")
    for idx, (rating, step) in enumerate(trace, 1):
        table.add_row(
            str(idx), rating.value, f"{step.interval_days}d", f"{step.ease:.2f}"
        )
    return table


def _json_number(value: Any) -> Any:
    """JSON has no NaN or Infinity; report those as null."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _config_lines(config: SchedulingConfig) -> List[str]:
    return [
        f"Base interval: {config.base_interval_days}d",
        f"Ease: {config.ease_multiplier:.2f}",
        f"Interval modifier: {config.interval_modifier:.2f}x",
    ]


def simulate_command(
    ctx: typer.Context,
    base: Optional[float] = typer.Option(
        None, "--base", "-b", help="Base interval in days (default: config srs section)"
    ),
    ease: Optional[float] = typer.Option(
        None, "--ease", "-e", help="Starting ease multiplier"
    ),
    modifier: Optional[float] = typer.Option(
        None, "--modifier", "-m", help="Interval modifier"
    ),
    script: str = typer.Option(
        DEFAULT_SCRIPT_TEXT,
        "--script",
        "-s",
        help="Ratings to apply, comma separated (again, hard, good, easy)",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Preview the review intervals a rating script would produce.

    Examples:
        perennial simulate
        perennial simulate --ease 2.8 --modifier 1.2
        perennial simulate --script again,good,good
    """
    _simulate(ctx, base, ease, modifier, script, as_json)


@safe_cli_command("simulating intervals")
def _simulate(
    ctx: typer.Context,
    base: Optional[float],
    ease: Optional[float],
    modifier: Optional[float],
    script_text: str,
    as_json: bool,
) -> None:
    defaults = get_state(ctx).config.srs
    config = SchedulingConfig(
        base_interval_days=defaults.base_interval_days if base is None else base,
        ease_multiplier=defaults.ease_multiplier if ease is None else ease,
        interval_modifier=defaults.interval_modifier if modifier is None else modifier,
    )
    script = parse_script(script_text)
    trace = project_trace(
        config.base_interval_days,
        config.ease_multiplier,
        config.interval_modifier,
        script,
    )
    path = [starting_interval(config.base_interval_days)] + [
        step.interval_days for _, step in trace
    ]

    if as_json:
        payload = {
            "config": {
                key: _json_number(value) for key, value in config.to_payload().items()
            },
            "start_ease": _json_number(starting_ease(config.ease_multiplier)),
            "script": [r.value for r in script],
            "path": path,
            "label": format_path(path),
            "steps": [
                {
                    "rating": r.value,
                    "interval_days": s.interval_days,
                    "ease": _json_number(s.ease),
                }
                for r, s in trace
            ],
        }
        typer.echo(json.dumps(payload, indent=2, allow_nan=False))
        return

    console = get_console()
    console.print(f"[bold]Path:[/bold] {format_path(path)}")
    console.print(f"[dim]Sequence: {_sequence_label(script)} (days between reviews)[/dim]")
    console.print(_trace_table(config, trace))


@app.command("show")
def show_command(
    ctx: typer.Context,
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Profile id"),
) -> None:
    """Show a profile's saved scheduling settings and their projection."""
    _show(ctx, profile)


@safe_cli_command("loading scheduling settings")
def _show(ctx: typer.Context, profile_id: Optional[str]) -> None:
    state = get_state(ctx)
    with open_client(state) as client:
        profile = resolve_profile(client, state, profile_id)

    config = profile.scheduling
    console = get_console()
    console.print(f"[bold]{profile.name or profile.id}[/bold] [dim]({profile.id})[/dim]")
    for line in _config_lines(config):
        console.print(f"  {line}")
    console.print(f"[bold]Path:[/bold] {format_path(project_config(config))}")


@app.command("set")
def set_command(
    ctx: typer.Context,
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Profile id"),
    base: Optional[int] = typer.Option(None, "--base", "-b", help="Base interval in days"),
    ease: Optional[float] = typer.Option(None, "--ease", "-e", help="Ease multiplier (1.3-4.0)"),
    modifier: Optional[float] = typer.Option(
        None, "--modifier", "-m", help="Interval modifier (0.5-2.0)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview only, do not save"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Save without asking"),
) -> None:
    """Preview and save new scheduling settings for a profile.

    Values outside the practical ranges are clamped before saving.

    Examples:
        perennial srs set --ease 2.8 --dry-run
        perennial srs set --modifier 1.2 --yes
    """
    _set(ctx, profile, base, ease, modifier, dry_run, yes)


@safe_cli_command("saving scheduling settings")
def _set(
    ctx: typer.Context,
    profile_id: Optional[str],
    base: Optional[int],
    ease: Optional[float],
    modifier: Optional[float],
    dry_run: bool,
    yes: bool,
) -> None:
    state = get_state(ctx)
    console = get_console()

    with open_client(state) as client:
        profile = resolve_profile(client, state, profile_id)
        current = profile.scheduling
        requested = current.with_changes(
            base_interval_days=base, ease_multiplier=ease, interval_modifier=modifier
        )
        updated = requested.clamped()
        if updated != requested:
            print_warning("Values were clamped to the practical ranges")
        updated.validate()

        console.print(f"[bold]Before:[/bold] {format_path(project_config(current))}")
        console.print(f"[bold]After:[/bold]  {format_path(project_config(updated))}")

        if updated == current:
            console.print("[dim]No changes to save.[/dim]")
            return
        if dry_run:
            tip("Re-run without --dry-run to save these settings")
            return
        if not yes and not typer.confirm("Save these settings?", default=True):
            raise typer.Abort()

        saved = client.update_profile_srs(profile.id, updated)

    print_success(f"Saved settings for {saved.name or saved.id}")
