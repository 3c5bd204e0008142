from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_statistics
from models.records import as_utc


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the transaction stats service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
location_app = typer.Typer(help="Manage the location that gates statistics reads.")
app.add_typer(location_app, name="location")


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _parse_timestamp(value: Optional[str]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    candidate = value.strip()
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid ISO-8601 timestamp: {value!r}") from exc
    return as_utc(parsed)


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8080).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("send")
def send_command(
    ctx: typer.Context,
    amount: float = typer.Argument(..., help="Transaction amount."),
    timestamp: Optional[str] = typer.Option(
        None,
        "--timestamp",
        "-t",
        help="ISO-8601 transaction time (defaults to now, UTC).",
    ),
) -> None:
    """Record a transaction."""
    state = _get_state(ctx)
    when = _parse_timestamp(timestamp)
    if state.client.send_transaction(amount, when):
        typer.secho("Transaction recorded.", fg=typer.colors.GREEN)
    else:
        typer.secho("Transaction discarded as stale.", fg=typer.colors.YELLOW)


@app.command("stats")
def stats_command(ctx: typer.Context) -> None:
    """Show statistics for recent transactions."""
    state = _get_state(ctx)
    render_statistics(state.client.get_statistics())


@app.command("reset")
def reset_command(ctx: typer.Context) -> None:
    """Clear all statistics."""
    state = _get_state(ctx)
    state.client.reset_statistics()
    typer.echo("Statistics reset.")


@location_app.command("set")
def location_set_command(
    ctx: typer.Context,
    city: str = typer.Argument(..., help="City name."),
) -> None:
    """Set the current location."""
    state = _get_state(ctx)
    state.client.set_location(city)
    typer.echo(f"Location set to {city}.")


@location_app.command("reset")
def location_reset_command(ctx: typer.Context) -> None:
    """Clear the current location."""
    state = _get_state(ctx)
    state.client.reset_location()
    typer.echo("Location reset.")
