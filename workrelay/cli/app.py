"""Main Typer application.

Entry point: ``workrelay`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from workrelay.config import RelayConfig
from workrelay.core.access_gate import AccessGate

app = typer.Typer(
    name="workrelay",
    help="Workrelay: work-order ingress relay with deferred fan-out delivery.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()


@app.command(name="serve", help="Run the HTTP relay.")
def serve_cmd(
    host: str = typer.Option(None, help="Bind address (default from config)."),
    port: int = typer.Option(None, help="Listen port (default from config)."),
    log_level: str = typer.Option(None, "--log-level", help="Logging level."),
) -> None:
    """Start the relay under uvicorn."""
    import uvicorn

    from workrelay.api.server import create_app
    from workrelay.logging_setup import configure_logging

    overrides = {
        key: value
        for key, value in {"host": host, "port": port, "log_level": log_level}.items()
        if value is not None
    }
    config = RelayConfig(**overrides)
    configure_logging(config.log_level)
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


@app.command(name="check-origin", help="Evaluate an origin against the allow-list.")
def check_origin_cmd(
    origin: str = typer.Argument(..., help="Origin header value to test."),
) -> None:
    """Print the gate decision; exit 1 when the origin is denied."""
    gate = AccessGate(RelayConfig().allowlist)
    decision = gate.decide(origin)
    if decision.allowed:
        console.print(f"[green]allow[/green] {origin}")
        return
    console.print(f"[red]deny[/red] {origin}")
    raise typer.Exit(code=1)


@app.command(name="config", help="Show the effective configuration.")
def config_cmd() -> None:
    config = RelayConfig()

    table = Table(title="Workrelay Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in config.model_dump(exclude={"allowlist", "targets"}).items():
        table.add_row(name, str(value))
    console.print(table)

    targets = Table(title="Targets")
    targets.add_column("Name", style="cyan")
    targets.add_column("Kind")
    targets.add_column("Address")
    targets.add_column("Shaping")
    targets.add_column("Enabled", justify="center")
    for spec in config.targets:
        enabled = "[green]Yes[/green]" if spec.enabled else "[red]No[/red]"
        targets.add_row(spec.name, spec.kind.value, spec.address, spec.shaping, enabled)
    console.print(targets)

    console.print("[bold]Allow-list[/bold]")
    for entry in config.allowlist:
        console.print(f"  {entry}")


@app.command(name="events", help="List recently recorded events.")
def events_cmd(
    limit: int = typer.Option(20, help="Maximum number of events to show."),
    db_path: Path = typer.Option(None, "--db", help="Event log database path."),
) -> None:
    """Show the newest entries of the event log."""
    from workrelay.core.recorder import SqliteEventRecorder

    path = db_path or RelayConfig().recorder_db_path
    if not path.exists():
        console.print(f"[dim]No event log at {path}.[/dim]")
        return

    events = SqliteEventRecorder(path).list_events(limit=limit)
    if not events:
        console.print("[dim]No events recorded.[/dim]")
        return

    table = Table(title=f"Recorded Events ({len(events)})")
    table.add_column("Received", style="green")
    table.add_column("Path ID", style="cyan")
    table.add_column("Event ID")
    table.add_column("Hash")
    for event in events:
        table.add_row(
            event["received_at"],
            event["path_id"],
            event["event_id"],
            event["payload_hash"][:19],
        )
    console.print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
