from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_stats


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the mining pool service.",
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
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:5000).",
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


@app.command("report")
def report_command(
    ctx: typer.Context,
    worker_id: str = typer.Argument(..., help="Identifier of the reporting worker."),
    pool: str = typer.Argument(..., help="Pool the worker mines for."),
    hashrate: float = typer.Option(..., "--hashrate", help="Measured hashrate."),
    temperature: int = typer.Option(..., "--temperature", help="Device temperature."),
    timestamp: Optional[int] = typer.Option(
        None,
        "--timestamp",
        help="Unix seconds of the sample (defaults to now).",
    ),
) -> None:
    """Submit a single worker report."""
    state = _get_state(ctx)
    payload = {
        "worker_id": worker_id,
        "pool": pool,
        "hashrate": hashrate,
        "temperature": temperature,
        "timestamp": int(time.time()) if timestamp is None else timestamp,
    }
    state.client.submit_report(payload)
    typer.secho(f"Report accepted for {worker_id} in {pool}.", fg=typer.colors.GREEN)


@app.command("stats")
def stats_command(ctx: typer.Context) -> None:
    """Show per-pool statistics for the current window."""
    state = _get_state(ctx)
    render_stats(state.client.get_stats())


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Check that the service is up."""
    state = _get_state(ctx)
    typer.echo(f"Health Status: {state.client.health()}")
