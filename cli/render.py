from __future__ import annotations

from typing import Any, Dict

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def render_stats(pools: Dict[str, Dict[str, Any]]) -> None:
    echo_heading("Pool Statistics")
    if not pools:
        typer.echo("No reports in the current window.")
        return

    for name in sorted(pools):
        entry = pools[name]
        typer.echo(
            f"{name}: workers={entry.get('workers')} "
            f"avg_hashrate={entry.get('avg_hashrate')} "
            f"avg_temp={entry.get('avg_temp')}"
        )
