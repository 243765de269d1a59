"""CLI command modules."""

from . import config_cmd, exec_cmd, highlight_cmd, history_cmd, shell_cmd

__all__ = ["config_cmd", "exec_cmd", "highlight_cmd", "history_cmd", "shell_cmd"]
