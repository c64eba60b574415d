"""Review commands: list due items and record ratings.

``review`` can also check the server's scheduling result against the local
projection. Pass the fact's interval before the review with
``--current-interval``; without it there is nothing to project from.
"""

from __future__ import annotations

import math
from typing import Optional

import typer
from rich.table import Table

from perennial.cli.console import ErrorRenderer, get_console, print_success
from perennial.cli.context import (
    get_state,
    open_client,
    resolve_profile,
    safe_cli_command,
)
from perennial.srs.agreement import check_agreement
from perennial.srs.projector import parse_rating, project_step, round_half_up


def queue_command(
    ctx: typer.Context,
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Profile id"),
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Maximum rows to show"),
) -> None:
    """List the facts due for review."""
    _queue(ctx, profile, limit)


@safe_cli_command("loading the review queue")
def _queue(ctx: typer.Context, profile_id: Optional[str], limit: int) -> None:
    state = get_state(ctx)
    with open_client(state) as client:
        profile = resolve_profile(client, state, profile_id)
        items = client.review_queue(profile.id)

    console = get_console()
    if not items:
        console.print("Nothing due. Come back later.")
        return

    table = Table(title=f"Due for {profile.name or profile.id} ({len(items)})")
    table.add_column("Fact ID")
    table.add_column("Concept")
    table.add_column("Collection")
    table.add_column("Key")
    table.add_column("Due")
    for item in items[:limit]:
        table.add_row(
            item.id,
            item.concept_name,
            item.collection_name,
            item.key,
            item.next_review_at or "",
        )
    console.print(table)


def _observed_days(value: Optional[float]) -> Optional[int]:
    """Server interval as whole days; non-finite values count as not reported."""
    if value is None or not math.isfinite(value):
        return None
    return round_half_up(value)


def review_command(
    ctx: typer.Context,
    fact_id: str = typer.Argument(..., help="Fact to review"),
    rating: str = typer.Argument(..., help="again, hard, good or easy"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Profile id"),
    current_interval: Optional[float] = typer.Option(
        None,
        "--current-interval",
        help="Fact interval in days before this review; enables the agreement check",
    ),
    current_ease: Optional[float] = typer.Option(
        None,
        "--current-ease",
        help="Fact ease before this review (default: profile ease)",
    ),
) -> None:
    """Record a rating for a fact.

    Examples:
        perennial review fact_42 good
        perennial review fact_42 easy --current-interval 10 --current-ease 2.65
    """
    _review(ctx, fact_id, rating, profile, current_interval, current_ease)


@safe_cli_command("recording a review")
def _review(
    ctx: typer.Context,
    fact_id: str,
    rating_text: str,
    profile_id: Optional[str],
    current_interval: Optional[float],
    current_ease: Optional[float],
) -> None:
    rating = parse_rating(rating_text)
    state = get_state(ctx)

    with open_client(state) as client:
        profile = resolve_profile(client, state, profile_id)
        outcome = client.review_fact(fact_id, rating, profile.id)

    print_success(f"Recorded '{rating.value}' for {fact_id}")
    if outcome.next_review_at:
        get_console().print(f"  Next review: {outcome.next_review_at}")

    if current_interval is None:
        return

    config = profile.scheduling
    projected = project_step(
        current_interval,
        config.ease_multiplier if current_ease is None else current_ease,
        rating,
        max(1, config.base_interval_days),
        config.interval_modifier,
    )
    observed_interval = _observed_days(outcome.interval_days)
    report = check_agreement(projected, observed_interval, outcome.ease)
    if report.agrees:
        get_console().print(f"  [dim]Projection check: {report.describe()}[/dim]")
    else:
        ErrorRenderer.render_warning(
            f"Local projection differs from the server: {report.describe()}",
            "Settings previews may not match what the server schedules",
        )
