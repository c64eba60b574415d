"""Profile commands."""

from __future__ import annotations

import typer
from rich.table import Table

from perennial.cli.console import get_console, print_success
from perennial.cli.context import get_state, open_client, safe_cli_command
from perennial.core.exceptions import ValidationError
from perennial.srs.projector import format_path, project_config

app = typer.Typer(
    name="profiles",
    help="List and create learner profiles",
    add_completion=False,
)


@app.command("list")
def list_command(ctx: typer.Context) -> None:
    """List profiles with their scheduling settings."""
    _list(ctx)


@safe_cli_command("listing profiles")
def _list(ctx: typer.Context) -> None:
    state = get_state(ctx)
    with open_client(state) as client:
        profiles = client.list_profiles()

    console = get_console()
    if not profiles:
        console.print("No profiles yet. Create one with: perennial profiles create <name>")
        return

    table = Table(title="Profiles")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Base", justify="right")
    table.add_column("Ease", justify="right")
    table.add_column("Modifier", justify="right")
    table.add_column("Path")

    for profile in profiles:
        config = profile.scheduling
        marker = " *" if profile.id == state.config.profile_id else ""
        table.add_row(
            f"{profile.id}{marker}",
            profile.name,
            f"{config.base_interval_days}d",
            f"{config.ease_multiplier:.2f}",
            f"{config.interval_modifier:.2f}x",
            format_path(project_config(config)),
        )
    console.print(table)


@app.command("create")
def create_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Display name for the profile"),
) -> None:
    """Create a profile with default scheduling settings."""
    _create(ctx, name)


@safe_cli_command("creating a profile")
def _create(ctx: typer.Context, name: str) -> None:
    if not name.strip():
        raise ValidationError("Profile name cannot be empty")

    with open_client(get_state(ctx)) as client:
        profile = client.create_profile(name)

    print_success(f"Created profile {profile.name} ({profile.id})")
