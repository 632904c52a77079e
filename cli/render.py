from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def format_confidence(value: Any) -> str:
    try:
        return f"{float(value):.1%}"
    except (TypeError, ValueError):
        return str(value)


def render_prediction(payload: Dict[str, Any]) -> None:
    echo_heading("Prediction Result")
    echo_key_values(
        [
            ("prediction", payload.get("prediction")),
            ("confidence", format_confidence(payload.get("confidence"))),
        ]
    )


def render_health(payload: Dict[str, Any]) -> None:
    echo_heading("Service Health")
    echo_key_values(
        [
            ("status", payload.get("status")),
            ("configured", payload.get("configured")),
        ]
    )
