"""Development-server commands. Each one registers a simulated process."""

from __future__ import annotations

from simterm.kernel.exceptions import UsageError
from simterm.stdlib.commands.base import CommandCategory, CommandContext, CommandGroup

group = CommandGroup(CommandCategory.SERVER)

MIN_PORT = 1
MAX_PORT = 65_535


def parse_port(ctx: CommandContext, default: int) -> int:
    """Port from ``-p``/``--port`` or the first positional argument."""
    value = ctx.option("-p", "--port")
    if value is None:
        _, positional = ctx.split_flags()
        value = positional[0] if positional else None
    if value is None:
        return default
    try:
        port = int(value)
    except ValueError as e:
        raise UsageError(ctx.usage) from e
    if not MIN_PORT <= port <= MAX_PORT:
        raise UsageError(ctx.usage)
    return port


def start_server(ctx: CommandContext, label: str, command: str, port: int) -> None:
    existing = ctx.processes.find_by_port(port)
    if existing is not None:
        ctx.warning(
            f"Port {port} is already in use by process {existing.pid} ({existing.command})"
        )
        return
    process = ctx.processes.spawn(f"{command} --port {port}", port=port)
    ctx.success(
        f"{label} starting on port {port}...\n✓ Server running on http://localhost:{port}",
        pid=process.pid,
        port=port,
    )


@group.command(
    "dev",
    description="Start development server",
    usage="dev [port]",
    aliases=("serve",),
    examples=("dev", "dev 4000"),
)
async def dev(ctx: CommandContext) -> None:
    start_server(ctx, "Development server", "dev", parse_port(ctx, 3000))


@group.command("live-server", description="Live reload server", usage="live-server [port]")
async def live_server(ctx: CommandContext) -> None:
    start_server(ctx, "Live server", "live-server", parse_port(ctx, 8080))


@group.command(
    "http-server",
    description="Simple HTTP server",
    usage="http-server [-p port]",
    examples=("http-server", "http-server -p 9000"),
)
async def http_server(ctx: CommandContext) -> None:
    start_server(ctx, "HTTP server", "http-server", parse_port(ctx, 8000))


__all__ = ["group", "parse_port", "start_server"]
