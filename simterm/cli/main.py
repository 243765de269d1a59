"""simterm CLI - Main entrypoint."""

import sys

try:
    import typer
    from rich.console import Console
except ImportError:
    print("Error: CLI dependencies not installed.")
    print("Please install with:")
    print("  pip install simterm[cli]")
    sys.exit(1)

from simterm import __version__
from simterm.cli.commands import (
    config_cmd,
    exec_cmd,
    highlight_cmd,
    history_cmd,
    shell_cmd,
)
from simterm.kernel.logging import configure_logging

# Create the main Typer app
app = typer.Typer(
    name="simterm",
    help="simterm - A simulated developer terminal with a virtual filesystem.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)

console = Console()

# Single commands
app.command("shell", help="Start an interactive terminal session")(shell_cmd.shell)
app.command("exec", help="Run command lines in a fresh terminal and print the output")(
    exec_cmd.exec_lines
)
app.command("highlight", help="Syntax highlight a source file")(highlight_cmd.highlight)

# Command groups
app.add_typer(history_cmd.app, name="history", help="Inspect persisted command history")
app.add_typer(config_cmd.app, name="config", help="Configuration management")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@app.callback()
def callback(
    ctx: typer.Context,
    *,
    json_out: bool = typer.Option(False, "--json", help="Output machine-readable JSON"),
    yaml_out: bool = typer.Option(False, "--yaml", help="Output machine-readable YAML"),
    log_level: str = typer.Option(
        "warning", "--log-level", help="Log level: debug|info|warning|error"
    ),
    config_path: str | None = typer.Option(
        None, "--config", "-c", help="Path to simterm.toml (default: discovered)"
    ),
    version: bool = typer.Option(False, "--version", "-v", help="Show version and exit"),
) -> None:
    """simterm CLI - simulated developer terminal.

    Global flags are parsed here and stored on `ctx.obj` for subcommands.
    """
    if version:
        console.print(f"[bold blue]simterm[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()

    if ctx.obj is None:
        ctx.obj = {}

    output_format = "pretty"
    if json_out:
        output_format = "json"
    elif yaml_out:
        output_format = "yaml"

    level = log_level.upper()
    if level == "WARN":
        level = "WARNING"
    if level not in _LOG_LEVELS:
        raise typer.BadParameter(f"unknown log level {log_level!r}", param_hint="--log-level")

    ctx.obj.update({
        "output_format": output_format,
        "log_level": level,
        "config_path": config_path,
    })
    configure_logging(level=level, format="rich", force_reconfigure=True)  # type: ignore[arg-type]


def main() -> None:
    """Main CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
