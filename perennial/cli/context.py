"""Shared plumbing for CLI commands.

Holds the per-invocation state created by the main callback and the
helpers every API-backed command needs: opening a client, picking the
active profile, and turning exceptions into error panels.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Callable, Optional

import typer

from perennial.api.client import PerennialClient, select_profile
from perennial.api.models import Profile
from perennial.cli.console import ErrorRenderer
from perennial.core.config import Config
from perennial.core.exceptions import ConfigurationError
from perennial.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CLIState:
    """Objects shared by every command of one invocation."""

    config: Config = field(default_factory=Config)


def get_state(ctx: typer.Context) -> CLIState:
    """Return the state set up by the main callback (defaults if missing)."""
    if not isinstance(ctx.obj, CLIState):
        ctx.obj = CLIState()
    return ctx.obj


def open_client(state: CLIState) -> PerennialClient:
    """Create an API client from the loaded configuration."""
    return PerennialClient(
        base_url=state.config.api.base_url,
        timeout_seconds=state.config.api.timeout_seconds,
    )


def resolve_profile(
    client: PerennialClient, state: CLIState, profile_id: Optional[str] = None
) -> Profile:
    """Pick the profile a command acts on.

    An explicit --profile must exist. Otherwise the configured profile id is
    preferred and the first profile is the fallback; a default profile is
    created when the server has none.

    Raises:
        ConfigurationError: If --profile names an unknown profile
    """
    profiles = client.ensure_profiles()
    if profile_id:
        chosen = select_profile(profiles, profile_id)
        if chosen is None or chosen.id != profile_id:
            raise ConfigurationError(f"Profile '{profile_id}' not found")
        return chosen

    chosen = select_profile(profiles, state.config.profile_id)
    if chosen is None:
        raise ConfigurationError("No profile available")
    return chosen


def safe_cli_command(
    operation_name: str,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator that renders exceptions as error panels and exits with code 1.

    typer.Exit and typer.Abort pass through untouched.

    Args:
        operation_name: Human-readable operation name for the panel context
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except (typer.Exit, typer.Abort):
                raise
            except Exception as e:
                logger.debug(
                    "Command failed", operation=operation_name, error=type(e).__name__
                )
                ErrorRenderer.render(e, context=f"While {operation_name}")
                raise typer.Exit(code=1)

        return wrapper

    return decorator
