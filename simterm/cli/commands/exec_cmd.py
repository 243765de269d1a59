"""Run command lines non-interactively."""

from __future__ import annotations

import asyncio

import typer

from simterm.api import Terminal
from simterm.cli.utils import load_terminal, output_format, print_output, render_entries
from simterm.kernel.domain.output import OutputEntry


async def _run_all(terminal: Terminal, lines: list[str]) -> list[tuple[str, list[OutputEntry]]]:
    return [(line, await terminal.run(line)) for line in lines]


def exec_lines(
    ctx: typer.Context,
    lines: list[str] = typer.Argument(..., help="Command lines, run in order in one terminal"),
) -> None:
    """Run each LINE in a fresh terminal; exit status 1 if any of them failed."""
    terminal = load_terminal(ctx)
    results = asyncio.run(_run_all(terminal, lines))
    failed = any(entry.is_error for _, outputs in results for entry in outputs)

    if output_format(ctx) == "pretty":
        for _, outputs in results:
            render_entries(outputs)
    else:
        print_output(
            [
                {"command": line, "output": [entry.to_wire() for entry in outputs]}
                for line, outputs in results
            ],
            ctx,
        )
    if failed:
        raise typer.Exit(1)
