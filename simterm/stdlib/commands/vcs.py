"""Version-control commands backed by the simulated :class:`GitState`.

``git <subcommand>`` is the primary entry point; the bare ``status``,
``commit``, ``push``, ``pull``, ``branch``, ``merge`` and ``checkout``
commands are shortcuts for the matching subcommand.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from simterm.kernel.domain.terminal import GitCommit, GitState
from simterm.kernel.exceptions import UsageError
from simterm.kernel.utils.time import ms_to_datetime, new_id
from simterm.stdlib.commands.base import CommandCategory, CommandContext, CommandGroup

group = CommandGroup(CommandCategory.VCS)

AUTHOR = "Developer <dev@example.com>"
NOT_A_REPOSITORY = "fatal: not a git repository (or any of the parent directories): .git"

_INITIAL_LOG = (
    "commit abc1234 (HEAD -> {branch})\n"
    f"Author: {AUTHOR}\n"
    "Date: Mon Nov 19 18:25:00 2025 +0530\n"
    "\n"
    "    Initial commit"
)

Subcommand = Callable[[CommandContext, list[str]], Awaitable[None]]


def _repo(ctx: CommandContext) -> GitState | None:
    git = ctx.state.git
    if not git.initialized:
        ctx.error(NOT_A_REPOSITORY)
        return None
    return git


def _short_sha() -> str:
    return new_id()[:7]


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


async def _init(ctx: CommandContext, args: list[str]) -> None:
    git = ctx.state.git
    location = f"{ctx.state.cwd.rstrip('/')}/.git/"
    if git.initialized:
        ctx.info(f"Reinitialized existing Git repository in {location}")
        return
    git.initialized = True
    ctx.success(f"Initialized empty Git repository in {location}")


async def _status(ctx: CommandContext, args: list[str]) -> None:
    git = _repo(ctx)
    if git is None:
        return
    lines = [f"On branch {git.current_branch}"]
    upstream = f"'{git.remote}/{git.current_branch}'"
    if git.unpushed:
        plural = "s" if git.unpushed != 1 else ""
        lines.append(f"Your branch is ahead of {upstream} by {git.unpushed} commit{plural}.")
    else:
        lines.append(f"Your branch is up to date with {upstream}.")
    lines.append("")
    if git.staged:
        lines.append("Changes to be committed:")
        lines.extend(f"        new file:   {path}" for path in git.staged)
    else:
        lines.append("nothing to commit, working tree clean")
    ctx.info("\n".join(lines))


async def _add(ctx: CommandContext, args: list[str]) -> None:
    git = _repo(ctx)
    if git is None:
        return
    if not args:
        raise UsageError("git add <file>...")

    staged: list[str] = []
    for spec in args:
        path = ctx.resolve(spec)
        entry = ctx.vfs.get(path)
        if entry is None:
            ctx.error(f"fatal: pathspec '{spec}' did not match any files")
            return
        if entry.is_directory:
            staged.extend(
                ctx.display_path(ctx.vfs.path_of(child))
                for child in ctx.vfs.walk(path)
                if child.is_file and "/node_modules/" not in ctx.vfs.path_of(child)
            )
        else:
            staged.append(ctx.display_path(path))

    new = [path for path in staged if path not in git.staged]
    git.staged.extend(new)
    ctx.success(f"Files staged for commit: {len(new)} added, {len(git.staged)} total")


async def _commit(ctx: CommandContext, args: list[str]) -> None:
    git = _repo(ctx)
    if git is None:
        return
    if "-m" in args:
        position = args.index("-m")
        message = " ".join(args[position + 1 :])
    else:
        message = " ".join(args)
    if not message:
        raise UsageError('commit "message"')

    sha = _short_sha()
    files = list(git.staged)
    git.commits.append(
        GitCommit(
            sha=sha,
            message=message,
            branch=git.current_branch,
            timestamp_ms=ctx.clock(),
            files=files,
        )
    )
    git.staged.clear()
    git.unpushed += 1

    changed = len(files) or 1
    noun = "file" if changed == 1 else "files"
    insertions = "insertion" if changed == 1 else "insertions"
    ctx.success(
        f"[{git.current_branch} {sha}] {message}\n"
        f" {changed} {noun} changed, {changed} {insertions}(+)"
    )


async def _push(ctx: CommandContext, args: list[str]) -> None:
    git = _repo(ctx)
    if git is None:
        return
    if not git.unpushed:
        ctx.success("Everything up-to-date")
        return
    head = git.commits[-1].sha if git.commits else _short_sha()
    branch = git.current_branch
    git.unpushed = 0
    ctx.success(f"To {git.remote}\n   {_short_sha()}..{head}  {branch} -> {branch}")


async def _pull(ctx: CommandContext, args: list[str]) -> None:
    if _repo(ctx) is not None:
        ctx.success("Already up to date.")


async def _branch(ctx: CommandContext, args: list[str]) -> None:
    git = _repo(ctx)
    if git is None:
        return
    if not args or args[0] in ("list", "-a", "--list"):
        ctx.info(
            "\n".join(
                f"* {name}" if name == git.current_branch else f"  {name}"
                for name in git.branches
            )
        )
        return

    action = args[0]
    if action in ("create", "-b"):
        name = args[1] if len(args) > 1 else ""
        if not name:
            raise UsageError("branch [create|list] [name]")
        if name in git.branches:
            ctx.error(f"fatal: a branch named '{name}' already exists")
            return
        git.branches.append(name)
        git.current_branch = name
        ctx.success(f"Switched to a new branch '{name}'")
        return

    if action in ("-d", "-D", "delete"):
        name = args[1] if len(args) > 1 else ""
        if not name:
            raise UsageError("branch -d <name>")
        if name == git.current_branch:
            ctx.error(f"error: Cannot delete branch '{name}' checked out")
            return
        if name not in git.branches:
            ctx.error(f"error: branch '{name}' not found.")
            return
        git.branches.remove(name)
        ctx.success(f"Deleted branch {name}")
        return

    if action.startswith("-"):
        ctx.error("Branch operations not fully implemented")
        return
    if action in git.branches:
        ctx.error(f"fatal: a branch named '{action}' already exists")
        return
    git.branches.append(action)
    ctx.success(f"Created branch '{action}'")


async def _checkout(ctx: CommandContext, args: list[str]) -> None:
    git = _repo(ctx)
    if git is None:
        return
    if not args:
        raise UsageError("checkout [-b] <branch>")
    if args[0] == "-b":
        await _branch(ctx, args)
        return
    name = args[0]
    if name not in git.branches:
        ctx.error(f"error: pathspec '{name}' did not match any file(s) known to git")
        return
    if name == git.current_branch:
        ctx.info(f"Already on '{name}'")
        return
    git.current_branch = name
    ctx.success(f"Switched to branch '{name}'")


async def _log(ctx: CommandContext, args: list[str]) -> None:
    git = _repo(ctx)
    if git is None:
        return
    commits = [c for c in git.commits if c.branch == git.current_branch]
    if not commits:
        ctx.info(_INITIAL_LOG.format(branch=git.current_branch))
        return
    oneline = "--oneline" in args
    blocks: list[str] = []
    for position, commit in enumerate(reversed(commits)):
        head = f" (HEAD -> {commit.branch})" if position == 0 else ""
        if oneline:
            blocks.append(f"{commit.sha}{head} {commit.message}")
            continue
        date = ms_to_datetime(commit.timestamp_ms).strftime("%a %b %d %H:%M:%S %Y +0000")
        blocks.append(
            f"commit {commit.sha}{head}\nAuthor: {AUTHOR}\nDate: {date}\n\n    {commit.message}"
        )
    ctx.info("\n".join(blocks) if oneline else "\n\n".join(blocks))


async def _merge(ctx: CommandContext, args: list[str]) -> None:
    git = _repo(ctx)
    if git is None:
        return
    if not args:
        raise UsageError("merge <branch>")
    name = args[0]
    if name not in git.branches:
        ctx.error(f"merge: {name} - not something we can merge")
        return
    if name == git.current_branch:
        ctx.info("Already up to date.")
        return
    merged = [c for c in git.commits if c.branch == name]
    for commit in merged:
        commit.branch = git.current_branch
    git.unpushed += len(merged)
    ctx.success(
        f"Merge simulation - branch '{name}' merged into '{git.current_branch}' "
        f"({len(merged)} commit{'s' if len(merged) != 1 else ''})"
    )


async def _diff(ctx: CommandContext, args: list[str]) -> None:
    git = _repo(ctx)
    if git is None:
        return
    if not git.staged:
        ctx.info("No changes")
        return
    blocks: list[str] = []
    for path in git.staged:
        entry = ctx.vfs.get(ctx.resolve(path))
        lines = (entry.content or "").splitlines() if entry is not None else []
        body = "\n".join(f"+{line}" for line in lines)
        blocks.append(
            f"diff --git a/{path} b/{path}\nnew file mode 100644\n"
            f"--- /dev/null\n+++ b/{path}\n@@ -0,0 +1,{len(lines)} @@\n{body}"
        )
    ctx.info("\n".join(blocks))


SUBCOMMANDS: dict[str, Subcommand] = {
    "init": _init,
    "status": _status,
    "add": _add,
    "commit": _commit,
    "push": _push,
    "pull": _pull,
    "branch": _branch,
    "checkout": _checkout,
    "switch": _checkout,
    "log": _log,
    "merge": _merge,
    "diff": _diff,
}


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@group.command(
    "git",
    description="Git version control",
    usage="git <subcommand> [args]",
    examples=("git status", "git add .", 'git commit -m "message"', "git checkout -b feature"),
)
async def git(ctx: CommandContext) -> None:
    subcommand = ctx.arg(0, "git <subcommand>")
    handler = SUBCOMMANDS.get(subcommand)
    if handler is None:
        ctx.error(f"Git subcommand '{subcommand}' not supported in simulation")
        return
    await handler(ctx, ctx.args[1:])


def _shortcut(name: str) -> Callable[[CommandContext], Awaitable[None]]:
    async def run(ctx: CommandContext) -> None:
        await SUBCOMMANDS[name](ctx, ctx.args)

    run.__name__ = name
    return run


group.command("status", description="Show git status", usage="status")(_shortcut("status"))
group.command("commit", description="Commit changes", usage='commit "message"')(
    _shortcut("commit")
)
group.command("push", description="Push changes to remote", usage="push")(_shortcut("push"))
group.command("pull", description="Pull changes from remote", usage="pull")(_shortcut("pull"))
group.command(
    "branch", description="Manage branches", usage="branch [create|list|-d] [name]"
)(_shortcut("branch"))
group.command("merge", description="Merge branches", usage="merge <branch>")(_shortcut("merge"))
group.command("checkout", description="Switch branches", usage="checkout [-b] <branch>")(
    _shortcut("checkout")
)


__all__ = ["SUBCOMMANDS", "group"]
