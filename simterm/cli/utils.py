"""CLI helper utilities for simterm commands."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Protocol

import typer
import yaml
from rich.console import Console
from rich.text import Text

from simterm.api import Terminal
from simterm.kernel.domain.output import OutputEntry, OutputLevel

if TYPE_CHECKING:
    from collections.abc import Iterable


class ContextProtocol(Protocol):
    """Protocol for common interface between Click and Typer contexts."""

    @property
    def obj(self) -> dict[str, Any] | None: ...


console = Console()

LEVEL_STYLES: dict[OutputLevel, str] = {
    OutputLevel.SUCCESS: "green",
    OutputLevel.ERROR: "bold red",
    OutputLevel.WARNING: "yellow",
    OutputLevel.INFO: "",
    OutputLevel.SYSTEM: "cyan",
    OutputLevel.DEBUG: "dim",
}


def output_format(ctx: ContextProtocol | None) -> str:
    """``"json"``, ``"yaml"`` or ``"pretty"`` from the global CLI flags."""
    settings = getattr(ctx, "obj", None)
    if isinstance(settings, dict):
        return str(settings.get("output_format", "pretty"))
    return "pretty"


def print_output(obj: Any, ctx: ContextProtocol | None = None) -> None:
    """Print `obj` according to `ctx.obj['output_format']`.

    If ctx is None or no format specified, pretty-print using rich.console.
    """
    fmt = output_format(ctx)
    if fmt == "json":
        typer.echo(json.dumps(obj, default=str, indent=2))
    elif fmt == "yaml":
        typer.echo(yaml.safe_dump(obj, sort_keys=False))
    elif isinstance(obj, (str, int, float)):
        typer.echo(str(obj))
    else:
        console.print(obj)


def load_terminal(ctx: ContextProtocol | None = None) -> Terminal:
    """Build a terminal from the ``--config`` path (or discovered config)."""
    settings = getattr(ctx, "obj", None)
    path = settings.get("config_path") if isinstance(settings, dict) else None
    return Terminal.from_config_file(path)


def highlighted_text(code: str, tokens: Iterable[dict[str, Any]]) -> Text:
    """Rich text for ``code`` with each token span colored."""
    text = Text(code)
    for token in tokens:
        text.stylize(token["color"], token["start_offset"], token["end_offset"])
    return text


def render_entries(entries: Iterable[OutputEntry], target: Console | None = None) -> None:
    """Pretty-print output entries, coloring by level."""
    out = target or console
    for entry in entries:
        metadata = entry.metadata or {}
        if "tokens" in metadata:
            out.print(highlighted_text(entry.message, metadata["tokens"]))
            continue
        if not entry.message:
            continue
        out.print(Text(entry.message, style=LEVEL_STYLES[entry.level]))
