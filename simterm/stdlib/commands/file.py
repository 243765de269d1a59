"""File commands operating on the virtual filesystem."""

from __future__ import annotations

import fnmatch
import posixpath
import re

from simterm.kernel.domain.vfs import EntryKind, VirtualEntry
from simterm.kernel.exceptions import UsageError, VFSError
from simterm.kernel.utils.time import ms_to_datetime, ms_to_iso
from simterm.stdlib.commands.base import CommandCategory, CommandContext, CommandGroup

group = CommandGroup(CommandCategory.FILE)

DEFAULT_LINES = 10


def _format_long(entry: VirtualEntry) -> str:
    modified = ms_to_datetime(entry.modified_at).strftime("%b %d %H:%M")
    name = f"{entry.name}/" if entry.is_directory else entry.name
    return (
        f"{entry.permissions} {entry.owner:<10} {entry.group:<10} "
        f"{entry.size:>8} {modified} {name}"
    )


def _line_count(ctx: CommandContext, value: str | None) -> int:
    if value is None:
        return DEFAULT_LINES
    try:
        count = int(value)
    except ValueError as e:
        raise UsageError(ctx.usage) from e
    if count < 0:
        raise UsageError(ctx.usage)
    return count


def _lines_option(ctx: CommandContext) -> tuple[str, int]:
    """Parse ``<file> [lines]`` and ``-n <lines> <file>`` forms."""
    value = ctx.option("-n")
    positional = [a for a in ctx.args if a != "-n" and a != value] if value else list(ctx.args)
    if not positional:
        raise UsageError(ctx.usage)
    if value is None and len(positional) > 1:
        value = positional[1]
    return positional[0], _line_count(ctx, value)


def _read_text(ctx: CommandContext, path: str) -> str:
    entry = ctx.require_file(path)
    if not entry.content:
        raise VFSError(path, "File is empty")
    return entry.content


def _destination(ctx: CommandContext, src: str, dst: str) -> str:
    """``dst`` or ``dst/<basename of src>`` when ``dst`` is an existing directory."""
    target = ctx.resolve(dst)
    existing = ctx.vfs.get(target)
    if existing is not None and existing.is_directory:
        return posixpath.join(target, posixpath.basename(ctx.resolve(src)))
    return target


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


@group.command(
    "ls",
    description="List files and directories",
    usage="ls [-la] [path]",
    aliases=("list", "dir"),
    examples=("ls", "ls -la src"),
)
async def ls(ctx: CommandContext) -> None:
    flags, positional = ctx.split_flags()
    target = positional[0] if positional else "."
    path = ctx.resolve(target)
    entry = ctx.vfs.get(path)
    if entry is None:
        ctx.error(f"ls: cannot access '{target}': No such file or directory")
        return

    entries = ctx.vfs.list(path) if entry.is_directory else [entry]
    if "a" not in flags and "A" not in flags:
        entries = [e for e in entries if not e.name.startswith(".")]

    if "l" in flags:
        lines = [f"total {len(entries)}", *(_format_long(e) for e in entries)]
        ctx.info("\n".join(lines))
    elif entries:
        ctx.info("  ".join(f"{e.name}/" if e.is_directory else e.name for e in entries))
    else:
        ctx.info("")


@group.command(
    "cd",
    description="Change directory",
    usage="cd <directory>",
    aliases=("changedir",),
    examples=("cd src", "cd ..", "cd -", "cd ~"),
)
async def cd(ctx: CommandContext) -> None:
    target = ctx.args[0] if ctx.args else "~"
    if target == "-":
        target = ctx.state.environment.get("OLDPWD", ctx.state.home)
    path = ctx.resolve(target)
    entry = ctx.vfs.get(path)
    if entry is None:
        ctx.error(f"cd: {target}: No such file or directory")
        return
    if not entry.is_directory:
        ctx.error(f"cd: {target}: Not a directory")
        return
    ctx.state.cwd = path
    ctx.system(f"Changed directory to {path}")


@group.command(
    "pwd", description="Print working directory", usage="pwd", aliases=("printdir",)
)
async def pwd(ctx: CommandContext) -> None:
    ctx.info(ctx.state.cwd)


# ---------------------------------------------------------------------------
# Mutation
# ---------------------------------------------------------------------------


@group.command(
    "mkdir",
    description="Make directory",
    usage="mkdir [-p] <directory-name>",
    aliases=("makedir",),
)
async def mkdir(ctx: CommandContext) -> None:
    flags, names = ctx.split_flags()
    if not names:
        raise UsageError(ctx.usage)
    for name in names:
        path = ctx.resolve(name)
        if "p" in flags:
            ctx.vfs.makedirs(path)
        elif ctx.vfs.exists(path):
            ctx.error(f"mkdir: cannot create directory '{name}': File exists")
            continue
        else:
            try:
                ctx.vfs.create(path, EntryKind.DIRECTORY)
            except VFSError:
                ctx.error(f"mkdir: cannot create directory '{name}': No such file or directory")
                continue
        ctx.success(f"Directory '{name}' created successfully")


@group.command(
    "touch", description="Create an empty file or update its timestamp", usage="touch <filename>"
)
async def touch(ctx: CommandContext) -> None:
    if not ctx.args:
        raise UsageError(ctx.usage)
    for name in ctx.args:
        path = ctx.resolve(name)
        entry = ctx.vfs.get(path)
        if entry is None:
            ctx.vfs.create(path, EntryKind.FILE, "")
        elif entry.is_file:
            ctx.vfs.update(path, entry.content or "")


@group.command(
    "write",
    description="Write text to a file, replacing its content",
    usage="write <filename> <content>",
    examples=('write notes.txt "hello world"',),
)
async def write(ctx: CommandContext) -> None:
    name = ctx.arg(0)
    content = " ".join(ctx.args[1:])
    path = ctx.resolve(name)
    entry = ctx.vfs.get(path)
    if entry is not None and entry.is_directory:
        ctx.error(f"write: {name}: Is a directory")
        return
    if entry is None:
        ctx.vfs.create(path, EntryKind.FILE, content)
    else:
        ctx.vfs.update(path, content)
    ctx.success(f"Wrote {len(content)} bytes to '{name}'")


@group.command(
    "rm",
    description="Remove files or directories",
    usage="rm [-r] <file-or-directory-name>",
    aliases=("remove",),
)
async def rm(ctx: CommandContext) -> None:
    flags, names = ctx.split_flags()
    if not names:
        raise UsageError(ctx.usage)
    recursive = bool(flags & {"r", "R", "recursive"})
    for name in names:
        path = ctx.resolve(name)
        entry = ctx.vfs.get(path)
        if entry is None:
            if "f" not in flags:
                ctx.error(f"File or directory '{name}' not found")
            continue
        if entry.is_directory:
            if not recursive:
                ctx.error(f"rm: cannot remove '{name}': Is a directory")
                continue
            if path == "/":
                ctx.error("rm: refusing to remove '/'")
                continue
            ctx.vfs.remove_tree(path)
        else:
            ctx.vfs.delete(path)
        ctx.success(f"Removed '{name}' successfully")


@group.command(
    "cp",
    description="Copy files or directories",
    usage="cp [-r] <source> <destination>",
    aliases=("copy",),
)
async def cp(ctx: CommandContext) -> None:
    flags, positional = ctx.split_flags()
    if len(positional) < 2:
        raise UsageError(ctx.usage)
    src, dst = positional[0], positional[1]
    source = ctx.vfs.get(ctx.resolve(src))
    if source is None:
        ctx.error(f"Source '{src}' not found")
        return
    if source.is_directory and not flags & {"r", "R", "recursive"}:
        ctx.error(f"cp: -r not specified; omitting directory '{src}'")
        return
    target = _destination(ctx, src, dst)
    existing = ctx.vfs.get(target)
    if existing is not None and source.is_file and existing.is_file:
        ctx.vfs.update(target, source.content or "")
    else:
        ctx.vfs.copy(ctx.resolve(src), target)
    ctx.success(f"Copied '{src}' to '{dst}'")


@group.command(
    "mv",
    description="Move or rename files",
    usage="mv <source> <destination>",
    aliases=("move",),
)
async def mv(ctx: CommandContext) -> None:
    src = ctx.arg(0)
    dst = ctx.arg(1)
    if not ctx.vfs.exists(ctx.resolve(src)):
        ctx.error(f"Source '{src}' not found")
        return
    target = _destination(ctx, src, dst)
    if ctx.vfs.exists(target):
        ctx.error(f"mv: cannot move '{src}' to '{dst}': Destination exists")
        return
    ctx.vfs.move(ctx.resolve(src), target)
    ctx.success(f"Moved '{src}' to '{dst}'")


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


@group.command(
    "find",
    description="Find files by name",
    usage="find [path] [-name <glob>] | find <pattern>",
    examples=("find utils", 'find src -name "*.js"'),
)
async def find(ctx: CommandContext) -> None:
    glob = ctx.option("-name")
    positional = [a for a in ctx.args if a not in ("-name", glob)]
    root = ctx.state.cwd
    pattern = ""
    if glob is not None and positional:
        root = ctx.resolve(positional[0])
    elif len(positional) >= 2:
        root, pattern = ctx.resolve(positional[0]), positional[1]
    elif positional:
        pattern = positional[0]
    if not ctx.vfs.exists(root):
        ctx.error(f"find: '{ctx.display_path(root)}': No such file or directory")
        return

    matches: list[str] = []
    for entry in ctx.vfs.walk(root):
        path = ctx.vfs.path_of(entry)
        if path == root:
            continue
        if glob is not None and not fnmatch.fnmatch(entry.name, glob):
            continue
        if pattern and pattern not in entry.name:
            continue
        shown = ctx.display_path(path)
        matches.append(shown if shown.startswith("/") else f"./{shown}")
    ctx.info("\n".join(matches) if matches else "No files found")


@group.command(
    "grep",
    description="Search for patterns in files",
    usage="grep [-in] <pattern> [path...]",
    examples=("grep TODO", "grep -n greet src"),
)
async def grep(ctx: CommandContext) -> None:
    flags, positional = ctx.split_flags()
    if not positional:
        raise UsageError(ctx.usage)
    try:
        regex = re.compile(positional[0], re.IGNORECASE if "i" in flags else 0)
    except re.error as e:
        ctx.error(f"grep: invalid pattern: {e}")
        return

    roots = [ctx.resolve(p) for p in positional[1:]] or [ctx.state.cwd]
    results: list[str] = []
    for root in roots:
        if not ctx.vfs.exists(root):
            ctx.error(f"grep: {ctx.display_path(root)}: No such file or directory")
            continue
        for entry in ctx.vfs.walk(root):
            if not entry.is_file or not entry.content:
                continue
            shown = ctx.display_path(ctx.vfs.path_of(entry))
            for number, line in enumerate(entry.content.splitlines(), start=1):
                if regex.search(line):
                    prefix = f"{shown}:{number}" if "n" in flags else shown
                    results.append(f"{prefix}:{line}")
    if not ctx.failed or results:
        ctx.info("\n".join(results) if results else "No matches found")


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


@group.command("cat", description="Display file contents", usage="cat <filename>")
async def cat(ctx: CommandContext) -> None:
    if not ctx.args:
        raise UsageError(ctx.usage)
    for name in ctx.args:
        entry = ctx.vfs.get(ctx.resolve(name))
        if entry is None:
            ctx.error(f"File '{name}' not found")
        elif entry.is_directory:
            ctx.error(f"cat: {name}: Is a directory")
        else:
            ctx.info(entry.content or "", path=ctx.resolve(name))


@group.command(
    "head", description="Display first lines of file", usage="head <filename> [lines]"
)
async def head(ctx: CommandContext) -> None:
    name, count = _lines_option(ctx)
    lines = _read_text(ctx, name).split("\n")
    ctx.info("\n".join(lines[:count]))


@group.command(
    "tail", description="Display last lines of file", usage="tail <filename> [lines]"
)
async def tail(ctx: CommandContext) -> None:
    name, count = _lines_option(ctx)
    lines = _read_text(ctx, name).split("\n")
    ctx.info("\n".join(lines[-count:] if count else []))


@group.command("wc", description="Word count", usage="wc <filename>")
async def wc(ctx: CommandContext) -> None:
    name = ctx.arg(0)
    content = _read_text(ctx, name)
    lines = len(content.split("\n"))
    words = len(content.split())
    ctx.info(f"{lines} {words} {len(content)} {name}")


@group.command("stat", description="Show entry metadata", usage="stat <path>")
async def stat(ctx: CommandContext) -> None:
    name = ctx.arg(0)
    entry = ctx.require_entry(name)
    lines = [
        f"  File: {ctx.resolve(name)}",
        f"  Size: {entry.size}\tType: {entry.kind}",
        f"Access: ({entry.permissions})  Uid: {entry.owner}  Gid: {entry.group}",
        f"Access: {ms_to_iso(entry.accessed_at)}",
        f"Modify: {ms_to_iso(entry.modified_at)}",
        f" Birth: {ms_to_iso(entry.created_at)}",
    ]
    if entry.mime_type:
        lines.insert(2, f"  MIME: {entry.mime_type}")
    ctx.info("\n".join(lines))


@group.command("tree", description="Show a directory tree", usage="tree [path]")
async def tree(ctx: CommandContext) -> None:
    target = ctx.args[0] if ctx.args else "."
    root = ctx.resolve(target)
    entry = ctx.require_entry(target)
    if not entry.is_directory:
        ctx.info(entry.name)
        return

    lines = [target]
    counts = {"dirs": 0, "files": 0}

    def render(path: str, prefix: str) -> None:
        children = ctx.vfs.list(path)
        for position, child in enumerate(children):
            last = position == len(children) - 1
            lines.append(f"{prefix}{'└── ' if last else '├── '}{child.name}")
            if child.is_directory:
                counts["dirs"] += 1
                render(ctx.vfs.path_of(child), prefix + ("    " if last else "│   "))
            else:
                counts["files"] += 1

    render(root, "")
    lines.append("")
    lines.append(f"{counts['dirs']} directories, {counts['files']} files")
    ctx.info("\n".join(lines))


__all__ = ["group"]
