from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_health, render_prediction


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for sending machine readings to the prediction proxy.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Proxy base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for the proxy to answer.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("predict")
def predict_command(
    ctx: typer.Context,
    product_type: str = typer.Argument(..., help="Product quality variant: L, M or H."),
    air_temperature: float = typer.Argument(..., help="Air temperature [K]."),
    process_temperature: float = typer.Argument(..., help="Process temperature [K]."),
    rotational_speed: int = typer.Argument(..., help="Rotational speed [rpm]."),
    torque: float = typer.Argument(..., help="Torque [Nm]."),
    tool_wear: int = typer.Argument(..., help="Tool wear [min]."),
) -> None:
    """Send a single reading in compact form and print the prediction."""
    state = _get_state(ctx)
    values = [
        product_type.upper(),
        air_temperature,
        process_temperature,
        rotational_speed,
        torque,
        tool_wear,
    ]
    typer.echo(f"Sending reading to {state.config.base_url} ...")
    result = state.client.predict({"input_data": [{"values": [values]}]})
    render_prediction(result)


@app.command("send")
def send_command(
    ctx: typer.Context,
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Path to a JSON request body."
    ),
) -> None:
    """Send a JSON body (compact or full model payload) as-is."""
    state = _get_state(ctx)
    try:
        body = json.loads(file.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise typer.BadParameter(f"File {file} is not valid JSON.") from exc
    typer.echo(f"Sending {file} to {state.config.base_url} ...")
    result = state.client.predict(body)
    render_prediction(result)


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Check whether the proxy is up and has credentials configured."""
    state = _get_state(ctx)
    render_health(state.client.health())
