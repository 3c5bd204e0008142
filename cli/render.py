from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_statistics(payload: Dict[str, Any]) -> None:
    echo_heading("Statistics")
    if not payload:
        typer.echo("No recent statistics.")
        return
    echo_key_values(
        [
            ("count", payload.get("count")),
            ("sum", payload.get("sum")),
            ("avg", payload.get("avg")),
            ("min", payload.get("min")),
            ("max", payload.get("max")),
        ]
    )
