"""Command-line interface for simterm."""

from simterm.cli.main import app, main

__all__ = ["app", "main"]
