"""keepwarm CLI - inspect keepalive decisions from the terminal."""

import os
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

import keepwarm
from keepwarm import console as kw_console
from keepwarm.config import get_settings
from keepwarm.liveness.classifier import Credentials, is_managed_environment
from keepwarm.liveness.state import LivenessConfig
from keepwarm.logging import configure_logging, get_logger

# Configure logging early using env vars directly; -v/-vv and --log-format
# in main_callback() may reconfigure later.
configure_logging(
    level=os.environ.get("KEEPWARM_LOG_LEVEL", "WARNING"),
    json_output=os.environ.get("KEEPWARM_LOG_FORMAT", "console") == "json",
)

LOG = get_logger(__name__)

app = typer.Typer(
    name="keepwarm",
    help="""
    keepwarm - keep long-lived service sessions warm

    \b
    Quick start:
      keepwarm classify <endpoint>   Would keepalive engage for this endpoint?
      keepwarm config                Show effective keepalive defaults
    """,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


@app.callback(invoke_without_command=True)
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v for info, -vv for debug)",
        ),
    ] = 0,
    log_format: Annotated[
        str | None,
        typer.Option(
            "--log-format",
            help="Log output format: console (human-readable) or json (structured)",
        ),
    ] = None,
) -> None:
    """keepwarm - keep long-lived service sessions warm."""
    try:
        settings = get_settings()
    except ValueError as exc:
        kw_console.error(f"Invalid keepalive settings: {exc}")
        raise typer.Exit(1) from None
    json_output = (log_format or settings.log_format) == "json"

    if verbose >= 2:
        configure_logging(level="DEBUG", json_output=json_output)
    elif verbose >= 1:
        configure_logging(level="INFO", json_output=json_output)
    elif log_format is not None:
        configure_logging(level=settings.log_level, json_output=json_output)


@app.command("classify")
def classify(
    endpoint: Annotated[str, typer.Argument(help="Session endpoint URL")],
    api_key: Annotated[
        str | None,
        typer.Option("--api-key", help="Access token for the managed platform"),
    ] = None,
    profile: Annotated[
        str | None,
        typer.Option("--profile", help="Profile identifier on the managed platform"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Enable keepalive regardless of classification"),
    ] = False,
) -> None:
    """Show whether keepalive would engage for ENDPOINT."""
    credentials: Credentials = {"api_key": api_key, "profile": profile}
    managed = is_managed_environment(endpoint, credentials)
    LOG.info("endpoint_classified", endpoint=endpoint, managed=managed, force=force)

    kw_console.keepalive_decision(endpoint, managed=managed, force=force)


@app.command("config")
def show_config() -> None:
    """Show effective keepalive defaults."""
    config = LivenessConfig.from_settings()

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="dim")
    table.add_column("Value")
    table.add_row("Interval", f"{config.interval} ms")
    table.add_row("Max failures", str(config.max_failures))
    table.add_row("Strategy", config.strategy.value)
    table.add_row("Connect delay", f"{config.connect_delay} ms")
    table.add_row("First probe delay", f"{config.first_probe_delay} ms")
    table.add_row("Debug", "yes" if config.debug else "no")

    console.print(Panel(table, title="Keepalive Defaults", border_style="cyan"))


@app.command("version")
def version() -> None:
    """Show keepwarm version."""
    settings = get_settings()
    console.print(
        Panel(
            f"[bold cyan]keepwarm[/bold cyan] v{keepwarm.__version__}\n\n"
            f"[dim]Log level:[/dim]  {settings.log_level}\n"
            f"[dim]Log format:[/dim] {settings.log_format}",
            title="Keep long-lived sessions warm",
            border_style="cyan",
        )
    )


if __name__ == "__main__":
    app()
