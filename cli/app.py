from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import echo_key_values, render_alerts, render_snapshot


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for inspecting the mesh sensor alerts service.",
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
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Request timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("snapshot")
def snapshot_command(ctx: typer.Context) -> None:
    """Run the pipeline and show per-node readings with their alert verdicts."""
    state = _get_state(ctx)
    payload = state.client.get_snapshot()
    render_snapshot(payload)


@app.command("alerts")
def alerts_command(ctx: typer.Context) -> None:
    """Show the newest stored alert per node."""
    state = _get_state(ctx)
    payload = state.client.get_alerts()
    echo_key_values([("timestamp", payload.get("timestamp"))])
    render_alerts(payload)
