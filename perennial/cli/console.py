"""Console output helpers.

Provides the shared Rich console, short status messages, and ErrorRenderer
for helpful error panels.
"""

from __future__ import annotations

import traceback
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

_console: Console | None = None

# Set by the --verbose flag
_verbose_mode: bool = False


def get_console() -> Console:
    """Get shared console instance (lazy-loaded).

    Returns:
        Rich Console instance
    """
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_verbose_mode(enabled: bool) -> None:
    """Enable or disable tracebacks in error panels."""
    global _verbose_mode
    _verbose_mode = enabled


def is_verbose_mode() -> bool:
    """Check if verbose mode is enabled."""
    return _verbose_mode


def print_success(message: str) -> None:
    get_console().print(f"[green]✓[/green] {message}")


def print_warning(message: str) -> None:
    get_console().print(f"[yellow]![/yellow] {message}")


def tip(message: str) -> None:
    """Display a dim tip line.

    Example:
        tip("Use --dry-run to preview without saving")
        # Output: "  Tip: Use --dry-run to preview without saving"
    """
    get_console().print(f"  [dim]Tip: {message}[/dim]")


class ErrorRenderer:
    """Renders errors as panels with "Why it happened" and "How to fix".

    Example
    -------
        try:
            client.update_profile_srs(profile_id, config)
        except Exception as e:
            ErrorRenderer.render(e)
            raise typer.Exit(1)
    """

    @staticmethod
    def render(
        exc: BaseException,
        context: str = "",
        show_traceback: Optional[bool] = None,
    ) -> None:
        """Render an exception as a helpful error panel.

        Args:
            exc: Exception to render
            context: Optional context line (e.g., "While saving settings")
            show_traceback: Override for verbose mode (None = use global setting)
        """
        from perennial.core.exceptions import get_error_info, get_root_cause

        error_info = get_error_info(exc)
        error_code = error_info.get("error_code", "PN-ERR-999")
        why = error_info.get("why_it_happened", "An unexpected error occurred")
        how_to_fix = error_info.get("how_to_fix", ["Check the error message"])

        root_cause = get_root_cause(exc)
        root_message = str(root_cause) if root_cause is not exc else None

        content = ErrorRenderer._build_error_content(
            message=str(exc),
            context=context,
            why=why,
            how_to_fix=how_to_fix,
            root_message=root_message,
        )

        get_console().print(
            Panel(
                content,
                title=f"[bold red]Error: {error_code}[/bold red]",
                border_style="red",
                padding=(1, 2),
            )
        )

        should_show_traceback = (
            show_traceback if show_traceback is not None else is_verbose_mode()
        )
        if should_show_traceback:
            ErrorRenderer._render_traceback(exc)

    @staticmethod
    def _build_error_content(
        message: str,
        context: str,
        why: str,
        how_to_fix: List[str],
        root_message: Optional[str],
    ) -> Text:
        """Build the error panel content."""
        text = Text()

        if context:
            text.append(f"{context}\n\n", style="dim")

        text.append(message, style="bold red")
        text.append("\n\n")

        if root_message and root_message != message:
            text.append("Root cause: ", style="bold yellow")
            text.append(root_message, style="yellow")
            text.append("\n\n")

        text.append("Why it happened:\n", style="bold cyan")
        text.append(f"  {why}\n\n", style="cyan")

        text.append("How to fix:\n", style="bold green")
        for fix in how_to_fix:
            text.append(f"  - {fix}\n", style="green")

        return text

    @staticmethod
    def _render_traceback(exc: BaseException) -> None:
        console = get_console()
        console.print()
        console.print("[dim]--- Traceback (--verbose mode) ---[/dim]")
        tb_text = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        console.print(Text(tb_text, style="dim"))

    @staticmethod
    def render_warning(message: str, suggestion: str = "") -> None:
        """Render a non-fatal warning panel."""
        content = Text()
        content.append(message, style="bold yellow")
        if suggestion:
            content.append("\n\n")
            content.append("Suggestion: ", style="bold")
            content.append(suggestion, style="dim")

        get_console().print(
            Panel(
                content,
                title="[bold yellow]Warning[/bold yellow]",
                border_style="yellow",
                padding=(0, 2),
            )
        )
