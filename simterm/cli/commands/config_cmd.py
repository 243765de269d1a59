"""Configuration management commands."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

import typer
from rich.console import Console

from simterm.cli.utils import print_output
from simterm.kernel.config import SimTermConfig, load_config

app = typer.Typer(help="Configuration management commands")
console = Console()


def config_to_dict(config: SimTermConfig) -> dict[str, Any]:
    """Plain JSON/YAML-safe view of a configuration (tuples become lists)."""
    return json.loads(json.dumps(asdict(config)))


@app.command("show")
def show_config(
    ctx: typer.Context,
    key: str | None = typer.Argument(None, help="Section to show (e.g. 'history')"),
) -> None:
    """Show the effective configuration or one section of it."""
    settings = ctx.obj or {}
    config = config_to_dict(load_config(settings.get("config_path")))
    if key is None:
        print_output(config, ctx)
        return
    if key not in config:
        console.print(f"[red]Unknown configuration section: {key}[/red]")
        raise typer.Exit(1)
    print_output(config[key], ctx)
