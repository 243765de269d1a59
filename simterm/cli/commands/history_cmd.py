"""Inspect the persisted command history.

Only meaningful with ``history.storage = "file"``; with in-memory storage
every invocation starts from an empty history.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from simterm.cli.utils import load_terminal, output_format, print_output
from simterm.kernel.utils.time import ms_to_iso
from simterm.stdlib.lib.history_store import HistoryFormat

app = typer.Typer(help="Inspect persisted command history")
console = Console()


@app.command("list")
def list_history(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-n", help="Most recent entries to show"),
) -> None:
    """List the most recent history entries."""
    history = load_terminal(ctx).history
    entries = history.entries()[-limit:] if limit > 0 else []
    if output_format(ctx) != "pretty":
        print_output([entry.to_wire() for entry in entries], ctx)
        return

    if not entries:
        console.print("[yellow]No command history[/yellow]")
        return
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Time")
    table.add_column("Command")
    table.add_column("Exit", justify="right")
    table.add_column("ms", justify="right")
    for entry in entries:
        table.add_row(
            ms_to_iso(entry.timestamp_ms),
            entry.command,
            "" if entry.exit_code is None else str(entry.exit_code),
            "" if entry.execution_time_ms is None else f"{entry.execution_time_ms:.1f}",
        )
    console.print(table)


@app.command("search")
def search_history(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Substring or regular expression"),
    regex: bool = typer.Option(False, "--regex", "-r", help="Treat QUERY as a regex"),
    case_sensitive: bool = typer.Option(False, "--case-sensitive", "-s"),
    limit: int = typer.Option(50, "--limit", "-n"),
) -> None:
    """Search history, most recent first."""
    history = load_terminal(ctx).history
    matches = history.search(query, case_sensitive=case_sensitive, regex=regex, limit=limit)
    if output_format(ctx) != "pretty":
        print_output([entry.to_wire() for entry in matches], ctx)
        return
    if not matches:
        console.print(f"[yellow]No history entries match '{query}'[/yellow]")
        return
    for entry in matches:
        console.print(f"[dim]{ms_to_iso(entry.timestamp_ms)}[/dim]  {entry.command}")


@app.command("stats")
def history_stats(ctx: typer.Context) -> None:
    """Show usage statistics."""
    stats = load_terminal(ctx).history.statistics()
    if output_format(ctx) != "pretty":
        print_output(stats.to_wire(), ctx)
        return
    console.print(f"[bold]Total commands:[/bold] {stats.total}")
    console.print(f"[bold]Unique commands:[/bold] {stats.unique}")
    console.print(f"[bold]Average execution time:[/bold] {stats.average_execution_time_ms:.1f}ms")
    console.print(f"[bold]Success rate:[/bold] {stats.success_rate:.1f}%")
    for usage in stats.most_used:
        console.print(f"  {usage.count:>4}  {usage.command}")


@app.command("export")
def export_history(
    ctx: typer.Context,
    fmt: HistoryFormat = typer.Option(HistoryFormat.JSON, "--format", "-f"),
) -> None:
    """Write the history to stdout as json, csv or txt."""
    typer.echo(load_terminal(ctx).history.export(fmt))
