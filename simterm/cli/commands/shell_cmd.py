"""Interactive REPL over a :class:`~simterm.api.Terminal`."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from simterm.api import Terminal
from simterm.cli.utils import load_terminal, render_entries

console = Console()

EXIT_WORDS = frozenset({"exit", "quit", "logout"})


def prompt(terminal: Terminal) -> str:
    """``user@host:~/path$ `` with the home directory shortened to ``~``."""
    state = terminal.state
    cwd = state.cwd
    if cwd == state.home or cwd.startswith(state.home.rstrip("/") + "/"):
        cwd = "~" + cwd[len(state.home.rstrip("/")) :]
    return f"[bold green]{state.user}@{state.hostname}[/bold green]:[bold blue]{cwd}[/bold blue]$ "


def shell(ctx: typer.Context) -> None:
    """Start an interactive terminal session. Type 'exit' to leave."""
    terminal = load_terminal(ctx)
    console.print("[bold]simterm[/bold] - type 'help' for available commands, 'exit' to quit")
    while True:
        try:
            line = console.input(prompt(terminal))
        except (EOFError, KeyboardInterrupt):
            console.print()
            break
        if line.strip() in EXIT_WORDS:
            break
        outputs = asyncio.run(terminal.run(line))
        if any((entry.metadata or {}).get("clear") for entry in outputs):
            console.clear()
            continue
        render_entries(outputs, console)
