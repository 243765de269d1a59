"""Shell utilities: help, history, aliases, environment and inspection commands."""

from __future__ import annotations

import re
from collections import Counter

from simterm.kernel.exceptions import UsageError
from simterm.kernel.utils.time import ms_to_datetime, ms_to_iso
from simterm.stdlib.commands.base import (
    CommandCategory,
    CommandContext,
    CommandGroup,
    CommandSpec,
)
from simterm.stdlib.lib.syntax_highlighter import language_for_filename, resolve_language

group = CommandGroup(CommandCategory.UTILITY)

HISTORY_LIMIT = 20
HELP_FOOTER = "Use 'help <category>' for detailed help on specific categories."

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_VARIABLE = re.compile(r"\$(?:\{([A-Za-z_][A-Za-z0-9_]*)\}|([A-Za-z_][A-Za-z0-9_]*))")

_CATEGORY_ALIASES: dict[str, CommandCategory] = {
    "files": CommandCategory.FILE,
    "git": CommandCategory.VCS,
    "packages": CommandCategory.PACKAGE,
    "npm": CommandCategory.PACKAGE,
    "servers": CommandCategory.SERVER,
    "testing": CommandCategory.TEST,
    "tests": CommandCategory.TEST,
    "linting": CommandCategory.LINT,
    "processes": CommandCategory.PROCESS,
    "net": CommandCategory.NETWORK,
    "utilities": CommandCategory.UTILITY,
}


def expand_variables(text: str, environment: dict[str, str]) -> str:
    """Substitute ``$VAR`` and ``${VAR}``; unknown variables expand to ``""``.

    >>> expand_variables("home=$HOME, ${USER}!", {"HOME": "/home/dev", "USER": "dev"})
    'home=/home/dev, dev!'
    """
    return _VARIABLE.sub(lambda m: environment.get(m.group(1) or m.group(2), ""), text)


def _category(topic: str) -> CommandCategory | None:
    key = topic.lower()
    if key in _CATEGORY_ALIASES:
        return _CATEGORY_ALIASES[key]
    try:
        return CommandCategory(key)
    except ValueError:
        return None


def _summary_line(spec: CommandSpec) -> str:
    names = ", ".join((spec.name, *spec.aliases))
    return f"  {names:<24} {spec.description}"


# ---------------------------------------------------------------------------
# Help
# ---------------------------------------------------------------------------


@group.command(
    "help",
    description="Show available commands",
    usage="help [category|command]",
    examples=("help", "help git", "help ls"),
)
async def help_(ctx: CommandContext) -> None:
    registry = ctx.registry
    if not ctx.args:
        sections = ["Available Commands:"]
        for category in registry.categories():
            lines = [f"{category.title}:"]
            lines.extend(_summary_line(spec) for spec in registry.by_category(category))
            sections.append("\n".join(lines))
        sections.append(HELP_FOOTER)
        ctx.info("\n\n".join(sections))
        return

    topic = ctx.args[0]
    category = _category(topic)
    if category is not None:
        lines = [f"{category.title}:"]
        for spec in registry.by_category(category):
            lines.append(f"  {spec.usage:<32} - {spec.description}")
            lines.extend(f"      e.g. {example}" for example in spec.examples)
        ctx.info("\n".join(lines))
        return

    spec = registry.get(topic)
    if spec is None:
        ctx.error(f"No help available for '{topic}'")
        return
    lines = [f"{spec.name} - {spec.description}", f"Usage: {spec.usage}"]
    if spec.aliases:
        lines.append(f"Aliases: {', '.join(spec.aliases)}")
    if spec.examples:
        lines.append("Examples:")
        lines.extend(f"  {example}" for example in spec.examples)
    ctx.info("\n".join(lines))


@group.command("clear", description="Clear terminal", usage="clear", aliases=("cls",))
async def clear(ctx: CommandContext) -> None:
    ctx.clear_requested = True
    ctx.system("Terminal cleared", clear=True)


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


@group.command(
    "history",
    description="Show command history",
    usage="history [n|search <query>|stats|top|clear|dedupe]",
    examples=("history", "history 5", "history search git", "history stats"),
)
async def history(ctx: CommandContext) -> None:
    store = ctx.history
    sub = ctx.args[0] if ctx.args else None

    if sub == "clear":
        store.clear()
        ctx.success("Command history cleared")
        return
    if sub == "dedupe":
        removed = store.remove_duplicates()
        ctx.success(f"Removed {removed} duplicate entr{'y' if removed == 1 else 'ies'}")
        return
    if sub == "search":
        query = " ".join(ctx.args[1:])
        if not query:
            raise UsageError("history search <query>")
        matches = store.search(query)
        if not matches:
            ctx.info(f"No history entries match '{query}'")
            return
        ctx.info("\n".join(f"{ms_to_iso(e.timestamp_ms)}  {e.command}" for e in matches))
        return
    if sub == "stats":
        stats = store.statistics()
        lines = [
            "History Statistics:",
            f"  Total commands: {stats.total}",
            f"  Unique commands: {stats.unique}",
            f"  Average execution time: {stats.average_execution_time_ms:.1f}ms",
            f"  Success rate: {stats.success_rate:.1f}%",
        ]
        if stats.most_used:
            lines.append("  Most used:")
            lines.extend(f"    {u.count:>4}  {u.command}" for u in stats.most_used)
        ctx.info("\n".join(lines))
        return
    if sub == "top":
        usage = store.most_used()
        if not usage:
            ctx.info("No command history")
            return
        ctx.info("\n".join(f"{u.count:>4}  {u.command}" for u in usage))
        return

    limit = HISTORY_LIMIT
    if sub is not None:
        try:
            limit = int(sub)
        except ValueError as e:
            raise UsageError(ctx.usage) from e
        if limit < 1:
            raise UsageError(ctx.usage)

    entries = store.entries()
    if not entries:
        ctx.info("No command history")
        return
    start = max(0, len(entries) - limit)
    ctx.info(
        "\n".join(
            f"{number:>5}  {entry.command}"
            for number, entry in enumerate(entries[start:], start=start + 1)
        )
    )


# ---------------------------------------------------------------------------
# Aliases and environment
# ---------------------------------------------------------------------------


@group.command(
    "alias",
    description="Create or list command aliases",
    usage="alias [name=value]",
    examples=("alias", "alias gl='git log --oneline'"),
)
async def alias(ctx: CommandContext) -> None:
    aliases = ctx.state.aliases
    if not ctx.args:
        if not aliases:
            ctx.info("No aliases defined")
            return
        ctx.info("\n".join(f"alias {name}='{aliases[name]}'" for name in sorted(aliases)))
        return

    definition = " ".join(ctx.args)
    if "=" not in definition:
        name = ctx.args[0]
        if name not in aliases:
            ctx.error(f"alias: {name}: not found")
            return
        ctx.info(f"alias {name}='{aliases[name]}'")
        return

    name, value = definition.split("=", 1)
    name = name.strip()
    if not name or " " in name or not value.strip():
        raise UsageError(ctx.usage)
    aliases[name] = value.strip()
    ctx.success(f"Alias created: {name}='{aliases[name]}'")


@group.command("unalias", description="Remove an alias", usage="unalias <name>")
async def unalias(ctx: CommandContext) -> None:
    name = ctx.arg(0)
    if ctx.state.aliases.pop(name, None) is None:
        ctx.error(f"unalias: {name}: not found")
        return
    ctx.success(f"Alias '{name}' removed")


@group.command("env", description="Show environment variables", usage="env")
async def env(ctx: CommandContext) -> None:
    environment = ctx.state.environment
    ctx.info("\n".join(f"{key}={environment[key]}" for key in sorted(environment)))


@group.command(
    "export",
    description="Set environment variable",
    usage="export KEY=value",
    examples=("export NODE_ENV=production",),
)
async def export(ctx: CommandContext) -> None:
    assignment = " ".join(ctx.args)
    if "=" not in assignment:
        raise UsageError(ctx.usage)
    key, value = assignment.split("=", 1)
    key = key.strip()
    if not _IDENTIFIER.match(key):
        ctx.error(f"export: '{key}': not a valid identifier")
        return
    if key == "PWD":
        ctx.error("export: PWD is read-only; use 'cd' to change directory")
        return
    ctx.state.environment[key] = value
    ctx.success(f"Exported {key}={value}")


@group.command("unset", description="Remove environment variable", usage="unset <KEY>")
async def unset(ctx: CommandContext) -> None:
    key = ctx.arg(0)
    if key in ("PWD", "HOME", "USER"):
        ctx.error(f"unset: {key}: cannot unset")
        return
    if ctx.state.environment.pop(key, None) is None:
        ctx.warning(f"unset: {key}: not set")
        return
    ctx.success(f"Unset {key}")


@group.command(
    "echo",
    description="Display text",
    usage="echo [text]",
    examples=("echo Hello World", "echo $HOME"),
)
async def echo(ctx: CommandContext) -> None:
    ctx.info(expand_variables(" ".join(ctx.args), ctx.state.environment))


@group.command("date", description="Show current date and time", usage="date")
async def date(ctx: CommandContext) -> None:
    ctx.info(ms_to_datetime(ctx.clock()).strftime("%a %b %d %H:%M:%S UTC %Y"))


@group.command("whoami", description="Show current user", usage="whoami")
async def whoami(ctx: CommandContext) -> None:
    ctx.info(ctx.state.user)


# ---------------------------------------------------------------------------
# Inspection
# ---------------------------------------------------------------------------


@group.command(
    "highlight",
    description="Syntax highlight a file",
    usage="highlight <file> [language]",
    examples=("highlight src/index.js", "highlight script.txt python"),
)
async def highlight(ctx: CommandContext) -> None:
    path = ctx.arg(0)
    entry = ctx.require_file(path)
    code = entry.content or ""
    if len(ctx.args) > 1:
        language = resolve_language(ctx.args[1])
        if language is None:
            ctx.error(f"Unsupported language: {ctx.args[1]}")
            return
    else:
        language = language_for_filename(entry.name) or ctx.highlighter.detect_language(code)

    tokens = ctx.highlighter.highlight(code, language)
    ctx.info(
        code,
        language=language,
        tokens=[token.to_dict() for token in tokens],
    )


@group.command(
    "analyze",
    description="Summarize the project in the working directory",
    usage="analyze [path]",
)
async def analyze(ctx: CommandContext) -> None:
    root = ctx.resolve(ctx.args[0]) if ctx.args else ctx.state.cwd
    if ctx.require_entry(root).is_file:
        raise UsageError(ctx.usage)

    files = directories = size = 0
    languages: Counter[str] = Counter()
    for entry in ctx.vfs.walk(root):
        if "/node_modules/" in ctx.vfs.path_of(entry) + "/":
            continue
        if entry.is_directory:
            directories += 1
            continue
        files += 1
        size += entry.size
        language = language_for_filename(entry.name)
        if language is not None:
            languages[language] += 1

    lines = [
        f"Project Analysis: {root}",
        f"  Files: {files}",
        f"  Directories: {directories}",
        f"  Total size: {size} bytes",
    ]
    if languages:
        breakdown = ", ".join(f"{name} ({count})" for name, count in languages.most_common())
        lines.append(f"  Languages: {breakdown}")
    ctx.info("\n".join(lines), files=files, directories=directories, size=size)


__all__ = ["expand_variables", "group"]
