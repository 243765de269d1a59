"""Command framework: specs, per-category groups, the registry and the handler context.

Handlers are ``async`` functions taking a single :class:`CommandContext`.
They report results by emitting output entries on the context and signal
bad arguments by raising :class:`~simterm.kernel.exceptions.UsageError`
before touching any state.

Example
-------
.. code-block:: python

    group = CommandGroup(CommandCategory.UTILITY)

    @group.command("whoami", description="Print the current user", usage="whoami")
    async def whoami(ctx: CommandContext) -> None:
        ctx.info(ctx.state.user)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from simterm.drivers.vfs.memory import normalize_path
from simterm.kernel.domain.output import OutputEntry, OutputLevel
from simterm.kernel.exceptions import ConfigurationError, UsageError, VFSError
from simterm.kernel.utils.time import now_ms

if TYPE_CHECKING:
    from simterm.kernel.domain.terminal import TerminalState
    from simterm.kernel.domain.vfs import VirtualEntry
    from simterm.kernel.ports.ai import AIEnhancer
    from simterm.kernel.ports.vfs import VFS
    from simterm.kernel.utils.time import Clock
    from simterm.stdlib.lib.history_store import HistoryStore
    from simterm.stdlib.lib.process_table import ProcessTable
    from simterm.stdlib.lib.syntax_highlighter import SyntaxHighlighter


class CommandCategory(StrEnum):
    """Help-listing groups. Categories carry no runtime behavior."""

    FILE = "file"
    VCS = "vcs"
    PACKAGE = "package"
    BUILD = "build"
    SERVER = "server"
    TEST = "test"
    LINT = "lint"
    PROCESS = "process"
    NETWORK = "network"
    UTILITY = "utility"
    AI = "ai"

    @property
    def title(self) -> str:
        return _CATEGORY_TITLES[self]


_CATEGORY_TITLES: dict[CommandCategory, str] = {
    CommandCategory.FILE: "FILE OPERATIONS",
    CommandCategory.VCS: "VERSION CONTROL",
    CommandCategory.PACKAGE: "PACKAGE MANAGERS",
    CommandCategory.BUILD: "BUILD TOOLS",
    CommandCategory.SERVER: "SERVERS",
    CommandCategory.TEST: "TESTING",
    CommandCategory.LINT: "LINTING",
    CommandCategory.PROCESS: "PROCESS MANAGEMENT",
    CommandCategory.NETWORK: "NETWORK",
    CommandCategory.UTILITY: "UTILITY",
    CommandCategory.AI: "AI ENHANCEMENT",
}

CommandHandler = Callable[["CommandContext"], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """Static description of one command."""

    name: str
    handler: CommandHandler
    category: CommandCategory
    description: str
    usage: str
    aliases: tuple[str, ...] = ()
    examples: tuple[str, ...] = ()


class CommandGroup:
    """Collects the commands of one category via the :meth:`command` decorator."""

    def __init__(self, category: CommandCategory) -> None:
        self.category = category
        self.specs: list[CommandSpec] = []

    def command(
        self,
        name: str,
        *,
        description: str,
        usage: str,
        aliases: Iterable[str] = (),
        examples: Iterable[str] = (),
    ) -> Callable[[CommandHandler], CommandHandler]:
        def decorator(handler: CommandHandler) -> CommandHandler:
            self.specs.append(
                CommandSpec(
                    name=name,
                    handler=handler,
                    category=self.category,
                    description=description,
                    usage=usage,
                    aliases=tuple(aliases),
                    examples=tuple(examples),
                )
            )
            return handler

        return decorator


class CommandRegistry:
    """Name and alias lookup table for command specs.

    Lookups are case-insensitive. Registering a name or alias twice is a
    configuration error.
    """

    def __init__(self, specs: Iterable[CommandSpec] = ()) -> None:
        self._specs: dict[str, CommandSpec] = {}
        self._lookup: dict[str, CommandSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: CommandSpec) -> None:
        for key in (spec.name, *spec.aliases):
            key = key.lower()
            if key in self._lookup:
                raise ConfigurationError(
                    "commands",
                    f"'{key}' is already registered by '{self._lookup[key].name}'",
                )
        self._specs[spec.name] = spec
        for key in (spec.name, *spec.aliases):
            self._lookup[key.lower()] = spec

    def extend(self, specs: Iterable[CommandSpec]) -> None:
        for spec in specs:
            self.register(spec)

    def get(self, name: str) -> CommandSpec | None:
        return self._lookup.get(name.lower())

    def specs(self) -> list[CommandSpec]:
        """Specs in registration order."""
        return list(self._specs.values())

    def names(self, *, include_aliases: bool = False) -> list[str]:
        if include_aliases:
            return list(self._lookup)
        return list(self._specs)

    def by_category(self, category: CommandCategory) -> list[CommandSpec]:
        return [spec for spec in self._specs.values() if spec.category is category]

    def categories(self) -> list[CommandCategory]:
        """Categories that have at least one command, in enum order."""
        present = {spec.category for spec in self._specs.values()}
        return [category for category in CommandCategory if category in present]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._lookup

    def __len__(self) -> int:
        return len(self._specs)


@dataclass
class CommandContext:
    """Everything a handler needs for one invocation.

    Attributes
    ----------
    name : str
        Canonical command name (aliases already resolved)
    args : list[str]
        Tokens after the command name
    raw : str
        The line as typed
    state : TerminalState
        Session state handlers read and mutate
    outputs : list[OutputEntry]
        Entries emitted so far, in order
    clear_requested : bool
        Set by ``clear``; the dispatcher empties the tab log
    """

    name: str
    args: list[str]
    raw: str
    state: TerminalState
    history: HistoryStore
    highlighter: SyntaxHighlighter
    processes: ProcessTable
    registry: CommandRegistry
    ai: AIEnhancer | None = None
    clock: Clock = now_ms
    outputs: list[OutputEntry] = field(default_factory=list)
    clear_requested: bool = False

    @property
    def vfs(self) -> VFS:
        return self.state.vfs

    @property
    def cwd(self) -> str:
        return self.state.cwd

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def emit(self, level: OutputLevel, message: str, **metadata: Any) -> OutputEntry:
        entry = OutputEntry(
            level=level,
            message=message,
            timestamp_ms=self.clock(),
            metadata=metadata or None,
        )
        self.outputs.append(entry)
        return entry

    def success(self, message: str, **metadata: Any) -> OutputEntry:
        return self.emit(OutputLevel.SUCCESS, message, **metadata)

    def info(self, message: str, **metadata: Any) -> OutputEntry:
        return self.emit(OutputLevel.INFO, message, **metadata)

    def warning(self, message: str, **metadata: Any) -> OutputEntry:
        return self.emit(OutputLevel.WARNING, message, **metadata)

    def error(self, message: str, **metadata: Any) -> OutputEntry:
        return self.emit(OutputLevel.ERROR, message, **metadata)

    def system(self, message: str, **metadata: Any) -> OutputEntry:
        return self.emit(OutputLevel.SYSTEM, message, **metadata)

    @property
    def failed(self) -> bool:
        return any(entry.is_error for entry in self.outputs)

    # ------------------------------------------------------------------
    # Arguments
    # ------------------------------------------------------------------

    @property
    def usage(self) -> str:
        spec = self.registry.get(self.name)
        return spec.usage if spec is not None else self.name

    def arg(self, index: int, usage: str | None = None) -> str:
        """Positional argument ``index``; a missing one is a usage error."""
        if index >= len(self.args) or self.args[index] == "":
            raise UsageError(usage or self.usage)
        return self.args[index]

    def split_flags(self, args: list[str] | None = None) -> tuple[set[str], list[str]]:
        return split_flags(self.args if args is None else args)

    def option(self, *names: str, default: str | None = None) -> str | None:
        """Value following the first of ``names`` (``-m msg``, ``--port 80``)."""
        for position, token in enumerate(self.args):
            if token in names and position + 1 < len(self.args):
                return self.args[position + 1]
        return default

    # ------------------------------------------------------------------
    # Filesystem helpers
    # ------------------------------------------------------------------

    def resolve(self, path: str) -> str:
        """Absolute VFS path for ``path`` relative to the working directory."""
        return normalize_path(path, self.state.cwd, self.state.home)

    def display_path(self, path: str) -> str:
        """``path`` relative to the working directory when it lies beneath it."""
        cwd = self.state.cwd.rstrip("/") + "/"
        if path.startswith(cwd):
            return path[len(cwd) :]
        return path

    def require_entry(self, path: str) -> VirtualEntry:
        entry = self.vfs.get(self.resolve(path))
        if entry is None:
            raise VFSError(path, "No such file or directory")
        return entry

    def require_file(self, path: str) -> VirtualEntry:
        entry = self.require_entry(path)
        if entry.is_directory:
            raise VFSError(path, "Is a directory")
        return entry


def split_flags(tokens: Iterable[str]) -> tuple[set[str], list[str]]:
    """Separate ``-x``/``--long`` flags from positional arguments.

    Short flags are exploded (``-la`` gives ``{"l", "a"}``); long flags
    keep their name without dashes. A lone ``-`` and negative numbers are
    positional.

    >>> flags, rest = split_flags(["-la", "--force", "src"])
    >>> sorted(flags), rest
    (['a', 'force', 'l'], ['src'])
    """
    flags: set[str] = set()
    positional: list[str] = []
    for token in tokens:
        if token.startswith("--") and len(token) > 2:
            flags.add(token[2:])
        elif token.startswith("-") and len(token) > 1 and not token[1:].isdigit():
            flags.update(token[1:])
        else:
            positional.append(token)
    return flags, positional


__all__ = [
    "CommandCategory",
    "CommandContext",
    "CommandGroup",
    "CommandHandler",
    "CommandRegistry",
    "CommandSpec",
    "split_flags",
]
