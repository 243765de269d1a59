"""Mutable per-session terminal state shared by command handlers."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from simterm.kernel.ports.vfs import VFS

HOME_DIR = "/home/developer"

DEFAULT_ALIASES: dict[str, str] = {
    "ll": "ls -la",
    "la": "ls -A",
    "l": "ls -CF",
    "..": "cd ..",
    "...": "cd ../..",
    "gs": "git status",
    "ga": "git add",
    "gc": "git commit",
    "gp": "git push",
}


def default_environment(user: str = "developer", hostname: str = "terminal") -> dict[str, str]:
    """Environment variables a fresh session starts with."""
    home = f"/home/{user}"
    return {
        "USER": user,
        "HOME": home,
        "PWD": home,
        "OLDPWD": home,
        "PATH": "/usr/local/bin:/usr/bin:/bin",
        "SHELL": "/bin/bash",
        "TERM": "xterm-256color",
        "NODE_ENV": "development",
        "EDITOR": "vim",
        "LANG": "en_US.UTF-8",
        "TZ": "UTC",
        "HOSTNAME": hostname,
    }


class ProcessStatus(StrEnum):
    """Lifecycle of a simulated process."""

    RUNNING = "running"
    STOPPED = "stopped"
    BACKGROUND = "background"


@dataclass(slots=True)
class ProcessInfo:
    """A simulated process started by a server or watch command."""

    pid: int
    command: str
    status: ProcessStatus = ProcessStatus.RUNNING
    port: int | None = None
    started_at: float = field(default_factory=time.time)
    cpu_percent: float = 0.0
    memory_mb: float = 0.0


@dataclass(slots=True)
class GitCommit:
    """A simulated commit."""

    sha: str
    message: str
    branch: str
    timestamp_ms: int
    files: list[str] = field(default_factory=list)


@dataclass(slots=True)
class GitState:
    """Just enough repository state for status/branch/commit to feel real."""

    initialized: bool = True
    current_branch: str = "main"
    branches: list[str] = field(default_factory=lambda: ["main"])
    staged: list[str] = field(default_factory=list)
    commits: list[GitCommit] = field(default_factory=list)
    unpushed: int = 0
    remote: str = "origin"


@dataclass(slots=True)
class TerminalState:
    """Everything a command handler may read or mutate.

    One instance per session. Handlers receive it through
    :class:`~simterm.stdlib.commands.base.CommandContext`.
    """

    vfs: VFS
    environment: dict[str, str] = field(default_factory=default_environment)
    aliases: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ALIASES))
    processes: dict[int, ProcessInfo] = field(default_factory=dict)
    next_pid: int = 1000
    git: GitState = field(default_factory=GitState)
    packages: dict[str, str] = field(default_factory=dict)
    python_packages: dict[str, str] = field(default_factory=dict)
    started_at: float = field(default_factory=time.time)

    @property
    def cwd(self) -> str:
        return self.environment.get("PWD", HOME_DIR)

    @cwd.setter
    def cwd(self, path: str) -> None:
        self.environment["OLDPWD"] = self.cwd
        self.environment["PWD"] = path

    @property
    def home(self) -> str:
        return self.environment.get("HOME", HOME_DIR)

    @property
    def user(self) -> str:
        return self.environment.get("USER", "developer")

    @property
    def hostname(self) -> str:
        return self.environment.get("HOSTNAME", "terminal")


__all__ = [
    "DEFAULT_ALIASES",
    "GitCommit",
    "GitState",
    "ProcessInfo",
    "ProcessStatus",
    "TerminalState",
    "default_environment",
]
