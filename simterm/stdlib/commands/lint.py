"""Linting and formatting commands.

``prettier --write`` is the only one with an effect: it strips trailing
whitespace from formattable files under the working directory.
"""

from __future__ import annotations

from simterm.stdlib.commands.base import CommandCategory, CommandContext, CommandGroup

group = CommandGroup(CommandCategory.LINT)

FORMATTABLE = (".js", ".jsx", ".ts", ".tsx", ".css", ".scss", ".json", ".md", ".html")


@group.command(
    "eslint",
    description="JavaScript linter",
    usage="eslint [path]",
    examples=("eslint src",),
)
async def eslint(ctx: CommandContext) -> None:
    ctx.success("ESLint check completed - no errors found")


@group.command(
    "prettier",
    description="Code formatter",
    usage="prettier [--write] [path]",
    examples=("prettier --check .", "prettier --write src"),
)
async def prettier(ctx: CommandContext) -> None:
    flags, positional = ctx.split_flags()
    if "write" not in flags:
        ctx.success("Code formatted successfully")
        return

    root = ctx.resolve(positional[0]) if positional else ctx.state.cwd
    entry = ctx.vfs.get(root)
    candidates = [entry] if entry is not None and entry.is_file else ctx.vfs.walk(root)
    changed: list[str] = []
    for candidate in candidates:
        path = ctx.vfs.path_of(candidate)
        if not candidate.is_file or not candidate.name.endswith(FORMATTABLE):
            continue
        if "/node_modules/" in path:
            continue
        content = candidate.content or ""
        formatted = "\n".join(line.rstrip() for line in content.split("\n"))
        if formatted != content:
            ctx.vfs.update(path, formatted)
            changed.append(ctx.display_path(path))

    lines = [f"{path} formatted" for path in changed]
    lines.append("Code formatted successfully")
    ctx.success("\n".join(lines), changed=len(changed))


@group.command("stylelint", description="CSS linter", usage="stylelint [path]")
async def stylelint(ctx: CommandContext) -> None:
    ctx.success("Stylelint check completed - no errors found")


__all__ = ["group"]
