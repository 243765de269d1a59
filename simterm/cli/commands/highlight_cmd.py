"""Syntax-highlight a file from the real filesystem."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from simterm.cli.utils import highlighted_text, output_format, print_output
from simterm.stdlib.lib.syntax_highlighter import (
    SyntaxHighlighter,
    language_for_filename,
    resolve_language,
    supported_languages,
)

console = Console()


def highlight(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Source file"),
    language: str | None = typer.Option(
        None, "--language", "-l", help="Language (default: from extension or content)"
    ),
) -> None:
    """Tokenize FILE and print it colored, or its tokens with --json/--yaml."""
    code = file.read_text(encoding="utf-8")
    highlighter = SyntaxHighlighter()
    if language is not None:
        resolved = resolve_language(language)
        if resolved is None:
            console.print(f"[red]Unsupported language: {language}[/red]")
            console.print(f"Supported: {', '.join(supported_languages())}")
            raise typer.Exit(1)
    else:
        resolved = language_for_filename(file.name) or highlighter.detect_language(code)

    tokens = [token.to_dict() for token in highlighter.highlight(code, resolved)]
    if output_format(ctx) == "pretty":
        console.print(highlighted_text(code, tokens))
    else:
        print_output({"file": str(file), "language": resolved, "tokens": tokens}, ctx)
