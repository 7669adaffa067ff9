"""Centralized terminal output for keepwarm.

Key principle: stderr for status/progress, stdout for data.
"""

from __future__ import annotations

from rich.console import Console

# stderr console for status messages
err_console = Console(stderr=True)

# stdout console for data output
out_console = Console()


def success(message: str, *, console: Console | None = None) -> None:
    """Print a success message (green checkmark) to stderr."""
    c = console or err_console
    c.print(f"[green]  \u2713 {message}[/green]")


def error(message: str, *, console: Console | None = None) -> None:
    """Print an error message (red X) to stderr."""
    c = console or err_console
    c.print(f"[red]  \u2717 {message}[/red]")


def warn(message: str, *, console: Console | None = None) -> None:
    """Print a warning message (yellow) to stderr."""
    c = console or err_console
    c.print(f"[yellow]  \u26a0 {message}[/yellow]")


def info(message: str, *, console: Console | None = None) -> None:
    """Print an info message (dim) to stderr."""
    c = console or err_console
    c.print(f"[dim]  {message}[/dim]")


def keepalive_decision(
    endpoint: str,
    *,
    managed: bool,
    force: bool = False,
    console: Console | None = None,
) -> None:
    """Print whether keepalive would engage for an endpoint.

    Args:
        endpoint: Session endpoint URL.
        managed: Classification result for the endpoint.
        force: Whether keepalive is forced regardless of classification.
        console: Optional console override.
    """
    if managed:
        success(f"Keepalive enabled for {endpoint} (managed environment)", console=console)
    elif force:
        warn(f"Keepalive forced for {endpoint} (not a managed environment)", console=console)
    else:
        info(f"Keepalive disabled for {endpoint} (not a managed environment)", console=console)
