"""Built-in command groups.

Each module defines one :class:`CommandGroup`; :func:`default_registry`
collects them into the table the dispatcher looks names up in.
"""

from simterm.stdlib.commands import (
    ai,
    build,
    file,
    lint,
    network,
    package,
    process,
    server,
    testing,
    utility,
    vcs,
)
from simterm.stdlib.commands.base import (
    CommandCategory,
    CommandContext,
    CommandGroup,
    CommandHandler,
    CommandRegistry,
    CommandSpec,
)

BUILTIN_GROUPS: tuple[CommandGroup, ...] = (
    file.group,
    vcs.group,
    package.group,
    build.group,
    server.group,
    testing.group,
    lint.group,
    process.group,
    network.group,
    utility.group,
    ai.group,
)


def default_registry() -> CommandRegistry:
    """A fresh registry holding every built-in command."""
    registry = CommandRegistry()
    for group in BUILTIN_GROUPS:
        registry.extend(group.specs)
    return registry


__all__ = [
    "BUILTIN_GROUPS",
    "CommandCategory",
    "CommandContext",
    "CommandGroup",
    "CommandHandler",
    "CommandRegistry",
    "CommandSpec",
    "default_registry",
]
