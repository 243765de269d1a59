"""Build-tool commands.

``build`` writes a ``dist/`` bundle into the VFS; the other tools only
report success.
"""

from __future__ import annotations

import posixpath

from simterm.kernel.domain.vfs import EntryKind
from simterm.stdlib.commands.base import CommandCategory, CommandContext, CommandGroup
from simterm.stdlib.commands.server import start_server

group = CommandGroup(CommandCategory.BUILD)

SCRIPT_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx")
SOURCE_EXTENSIONS = (*SCRIPT_EXTENSIONS, ".css", ".html")


def _sources(ctx: CommandContext, extensions: tuple[str, ...]) -> list[str]:
    return [
        ctx.vfs.path_of(entry)
        for entry in ctx.vfs.walk(ctx.state.cwd)
        if entry.is_file
        and entry.name.endswith(extensions)
        and "/node_modules/" not in ctx.vfs.path_of(entry)
        and "/dist/" not in ctx.vfs.path_of(entry)
    ]


def _module_source(ctx: CommandContext, path: str) -> str:
    entry = ctx.vfs.get(path)
    body = entry.content if entry is not None and entry.content else ""
    return f"/* {ctx.display_path(path)} */\n{body}"


@group.command(
    "build",
    description="Generic build command",
    usage="build [--prod]",
    examples=("build", "build --prod"),
)
async def build(ctx: CommandContext) -> None:
    flags, _ = ctx.split_flags()
    mode = "production" if flags & {"prod", "production"} else "development"
    sources = _sources(ctx, SOURCE_EXTENSIONS)
    dist = posixpath.join(ctx.state.cwd, "dist")
    if ctx.vfs.exists(dist):
        ctx.vfs.remove_tree(dist)
    ctx.vfs.create(dist, EntryKind.DIRECTORY)

    scripts = [path for path in sources if path.endswith(SCRIPT_EXTENSIONS)]
    bundle = "\n".join(_module_source(ctx, path) for path in scripts)
    ctx.vfs.create(posixpath.join(dist, "bundle.js"), EntryKind.FILE, bundle)
    ctx.success(
        f"Building project ({mode})...\n"
        f"✓ {len(sources)} modules transformed\n"
        f"dist/bundle.js  {len(bundle) / 1024:.2f} kB\n"
        "✓ Build completed",
        modules=len(sources),
    )


@group.command("webpack", description="Webpack bundler", usage="webpack [--mode <mode>]")
async def webpack(ctx: CommandContext) -> None:
    mode = ctx.option("--mode", default="production")
    ctx.success(f"Webpack build completed successfully (mode: {mode})")


@group.command(
    "vite",
    description="Vite build tool",
    usage="vite [dev|build|preview]",
    examples=("vite", "vite build", "vite preview"),
)
async def vite(ctx: CommandContext) -> None:
    sub = ctx.args[0] if ctx.args else "dev"
    if sub == "dev":
        start_server(ctx, "Vite dev server", "vite", 5173)
    elif sub == "build":
        ctx.success("Vite build completed successfully")
    elif sub == "preview":
        start_server(ctx, "Vite preview server", "vite preview", 4173)
    else:
        ctx.info("Vite command processed")


@group.command("parcel", description="Parcel bundler", usage="parcel [entry]")
async def parcel(ctx: CommandContext) -> None:
    ctx.success("Parcel build completed successfully")


@group.command("gulp", description="Gulp task runner", usage="gulp <task>")
async def gulp(ctx: CommandContext) -> None:
    task = ctx.args[0] if ctx.args else "default"
    ctx.success(f"Gulp task '{task}' completed successfully")


@group.command("grunt", description="Grunt task runner", usage="grunt <task>")
async def grunt(ctx: CommandContext) -> None:
    task = ctx.args[0] if ctx.args else "default"
    ctx.success(f"Grunt task '{task}' completed successfully")


@group.command("tsc", description="TypeScript compiler", usage="tsc [--noEmit]")
async def tsc(ctx: CommandContext) -> None:
    count = len(_sources(ctx, (".ts", ".tsx")))
    if count == 0:
        ctx.warning("error TS18003: No inputs were found in config file.")
        return
    ctx.success(f"Compiled {count} TypeScript file{'s' if count != 1 else ''} with no errors")


__all__ = ["group"]
