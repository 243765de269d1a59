"""Package-manager commands: npm, yarn, pnpm, pip, composer.

Installs only record ``name -> version`` in the terminal state; the
project's ``package.json`` in the VFS is read for dependency lists and
scripts but never rewritten, except by ``npm init``.
"""

from __future__ import annotations

import json
import posixpath
from typing import Any

from simterm.kernel.domain.vfs import EntryKind
from simterm.kernel.exceptions import UsageError
from simterm.kernel.logging import get_logger
from simterm.stdlib.commands.base import CommandCategory, CommandContext, CommandGroup

logger = get_logger(__name__)

group = CommandGroup(CommandCategory.PACKAGE)

DEFAULT_VERSION = "1.0.0"
DEFAULT_PYTHON_VERSION = "0.1.0"


def split_spec(spec: str, separator: str = "@") -> tuple[str, str | None]:
    """Split ``name@version`` (scoped names allowed) into its parts.

    >>> split_spec("@types/node@20.1.0")
    ('@types/node', '20.1.0')
    >>> split_spec("requests==2.31", "==")
    ('requests', '2.31')
    >>> split_spec("lodash")
    ('lodash', None)
    """
    position = spec.rfind(separator)
    if position <= 0:
        return spec, None
    return spec[:position], spec[position + len(separator) :] or None


def read_manifest(ctx: CommandContext) -> dict[str, Any] | None:
    """Parsed ``package.json`` from the working directory, if present and valid."""
    entry = ctx.vfs.get(posixpath.join(ctx.state.cwd, "package.json"))
    if entry is None or not entry.is_file:
        return None
    try:
        manifest = json.loads(entry.content or "")
    except json.JSONDecodeError:
        logger.debug("Ignoring malformed package.json in {cwd}", cwd=ctx.state.cwd)
        return None
    return manifest if isinstance(manifest, dict) else None


def _install(ctx: CommandContext, tool: str, specs: list[str]) -> None:
    packages = ctx.state.packages
    if not specs:
        manifest = read_manifest(ctx) or {}
        declared: dict[str, str] = {
            **manifest.get("dependencies", {}),
            **manifest.get("devDependencies", {}),
        }
        for name, version in declared.items():
            packages[name] = str(version).lstrip("^~")
        ctx.success(
            f"Installing dependencies...\nadded {len(declared)} packages in 1.2s",
            tool=tool,
        )
        return

    lines = [f"Installing {' '.join(specs)}..."]
    for spec in specs:
        name, version = split_spec(spec)
        packages[name] = version or DEFAULT_VERSION
        lines.append(f"+ {name}@{packages[name]}")
    lines.append(f"added {len(specs)} package{'s' if len(specs) != 1 else ''} in 0.8s")
    ctx.success("\n".join(lines), tool=tool)


def _uninstall(ctx: CommandContext, tool: str, names: list[str]) -> None:
    if not names:
        raise UsageError(f"{tool} uninstall <package>")
    removed = 0
    for name in names:
        if ctx.state.packages.pop(name, None) is None:
            ctx.warning(f"{tool} WARN {name} is not installed")
        else:
            removed += 1
    if removed:
        ctx.success(f"removed {removed} package{'s' if removed != 1 else ''}")


def _list(ctx: CommandContext) -> None:
    packages = ctx.state.packages
    if not packages:
        ctx.info("No packages installed")
        return
    manifest = read_manifest(ctx) or {}
    title = f"{manifest.get('name', 'project')}@{manifest.get('version', DEFAULT_VERSION)}"
    names = sorted(packages)
    lines = [f"{title} {ctx.state.cwd}"]
    for position, name in enumerate(names):
        branch = "└──" if position == len(names) - 1 else "├──"
        lines.append(f"{branch} {name}@{packages[name]}")
    ctx.info("\n".join(lines))


def _run_script(ctx: CommandContext, tool: str, script: str) -> None:
    manifest = read_manifest(ctx)
    if manifest is None:
        ctx.success(f"Running {script} script...")
        return
    scripts = manifest.get("scripts", {})
    if script not in scripts:
        ctx.error(f'{tool} ERR! Missing script: "{script}"')
        return
    ctx.success(f"Running {script} script...\n> {scripts[script]}")
    if script in ("dev", "start", "serve"):
        process = ctx.processes.spawn(f"{tool} run {script}", port=3000)
        ctx.info(f"Started process {process.pid} on http://localhost:3000")


def _node_package_manager(tool: str, label: str) -> None:
    """Register a node package manager command sharing the npm handler."""

    @group.command(
        tool,
        description=f"{label} package manager",
        usage=f"{tool} <command> [args]",
        examples=(f"{tool} install", f"{tool} add lodash"),
    )
    async def handler(ctx: CommandContext) -> None:
        sub = ctx.args[0] if ctx.args else "install"
        rest = [a for a in ctx.args[1:] if not a.startswith("-")]
        if sub in ("install", "i", "add"):
            _install(ctx, tool, rest)
        elif sub in ("uninstall", "remove", "rm"):
            _uninstall(ctx, tool, rest)
        elif sub in ("list", "ls"):
            _list(ctx)
        elif sub == "run":
            _run_script(ctx, tool, ctx.arg(1, f"{tool} run <script>"))
        else:
            ctx.info(f"{label} command processed (simulation)")


@group.command(
    "npm",
    description="Node Package Manager",
    usage="npm <command> [args]",
    examples=("npm install", "npm install lodash", "npm run build", "npm start"),
)
async def npm(ctx: CommandContext) -> None:
    sub = ctx.arg(0, "npm <command> [args]")
    rest = [a for a in ctx.args[1:] if not a.startswith("-")]
    if sub in ("install", "i", "add"):
        _install(ctx, "npm", rest)
    elif sub in ("uninstall", "remove", "rm", "un"):
        _uninstall(ctx, "npm", rest)
    elif sub in ("list", "ls"):
        _list(ctx)
    elif sub == "start":
        process = ctx.processes.spawn("npm start", port=3000)
        ctx.success("Starting development server...", pid=process.pid)
    elif sub == "run":
        _run_script(ctx, "npm", ctx.arg(1, "npm run <script>"))
    elif sub in ("test", "t"):
        ctx.success("> jest\nAll tests passed ✓")
    elif sub == "init":
        path = posixpath.join(ctx.state.cwd, "package.json")
        if ctx.vfs.exists(path):
            ctx.warning(f"package.json already exists at {path}")
            return
        name = posixpath.basename(ctx.state.cwd.rstrip("/")) or "project"
        manifest = {
            "name": name,
            "version": DEFAULT_VERSION,
            "main": "index.js",
            "scripts": {"test": 'echo "Error: no test specified" && exit 1'},
        }
        ctx.vfs.create(path, EntryKind.FILE, json.dumps(manifest, indent=2))
        ctx.success(f"Wrote to {path}")
    else:
        ctx.error("npm command not recognized")


_node_package_manager("yarn", "Yarn")
_node_package_manager("pnpm", "PNPM")


@group.command(
    "pip",
    description="Python package installer",
    usage="pip <command> [package]",
    aliases=("pip3",),
    examples=("pip install requests", "pip freeze"),
)
async def pip(ctx: CommandContext) -> None:
    sub = ctx.arg(0)
    rest = [a for a in ctx.args[1:] if not a.startswith("-")]
    installed = ctx.state.python_packages
    if sub == "install":
        if not rest:
            raise UsageError("pip install <package>")
        installed_now: list[str] = []
        for spec in rest:
            name, version = split_spec(spec, "==")
            installed[name] = version or DEFAULT_PYTHON_VERSION
            installed_now.append(f"{name}-{installed[name]}")
        ctx.success(
            f"Installing {' '.join(rest)}...\n"
            f"Successfully installed {' '.join(installed_now)}"
        )
    elif sub == "uninstall":
        if not rest:
            raise UsageError("pip uninstall <package>")
        for name in rest:
            if installed.pop(name, None) is None:
                ctx.warning(f"WARNING: Skipping {name} as it is not installed.")
            else:
                ctx.success(f"Successfully uninstalled {name}")
    elif sub == "list":
        if not installed:
            ctx.info("No packages installed (simulation)")
            return
        width = max(len("Package"), *(len(name) for name in installed))
        lines = [f"{'Package':<{width}} Version", f"{'-' * width} -------"]
        lines.extend(f"{name:<{width}} {installed[name]}" for name in sorted(installed))
        ctx.info("\n".join(lines))
    elif sub == "freeze":
        ctx.info("\n".join(f"{name}=={installed[name]}" for name in sorted(installed)))
    else:
        ctx.error("pip command not recognized")


@group.command(
    "composer", description="PHP dependency manager", usage="composer <command> [args]"
)
async def composer(ctx: CommandContext) -> None:
    if ctx.args[:1] == ["require"] and len(ctx.args) > 1:
        name, version = split_spec(ctx.args[1], ":")
        ctx.success(f"Using version {version or '^1.0'} for {name}")
        return
    ctx.info("Composer command processed (simulation)")


__all__ = ["group", "read_manifest", "split_spec"]
