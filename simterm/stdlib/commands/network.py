"""Network commands. Nothing leaves the process; URLs are validated and echoed."""

from __future__ import annotations

import posixpath
from urllib.parse import urlsplit

from simterm.kernel.domain.vfs import EntryKind
from simterm.stdlib.commands.base import CommandCategory, CommandContext, CommandGroup
from simterm.stdlib.lib.security import DANGEROUS_SCHEMES, sanitize_filename, validate_url

group = CommandGroup(CommandCategory.NETWORK)

DEFAULT_BROWSER_URL = "http://localhost:3000"
INVALID_URL = "Invalid or unsafe URL: {url}"


def _url(ctx: CommandContext, value: str) -> str | None:
    """``value`` as a URL (``https://`` assumed when no scheme is given), or None."""
    scheme = value.split(":", 1)[0].lower()
    url = value if "://" in value or scheme in DANGEROUS_SCHEMES else f"https://{value}"
    if not validate_url(url):
        ctx.error(INVALID_URL.format(url=value))
        return None
    return url


@group.command(
    "curl",
    description="Transfer data from URLs",
    usage="curl <url>",
    examples=("curl https://api.example.com",),
)
async def curl(ctx: CommandContext) -> None:
    _, positional = ctx.split_flags()
    url = _url(ctx, positional[0] if positional else ctx.arg(0))
    if url is not None:
        ctx.success(f"Request to {url} successful (simulation)")


@group.command(
    "wget",
    description="Download files from web",
    usage="wget <url>",
    examples=("wget https://example.com/file.txt",),
)
async def wget(ctx: CommandContext) -> None:
    _, positional = ctx.split_flags()
    url = _url(ctx, positional[0] if positional else ctx.arg(0))
    if url is None:
        return
    name = sanitize_filename(posixpath.basename(urlsplit(url).path)) or "index.html"
    path = ctx.resolve(name)
    ctx.vfs.create(path, EntryKind.FILE, f"<!-- downloaded from {url} -->\n", overwrite=True)
    ctx.success(f"Downloaded from {url} (simulation)\nSaved to '{name}'")


@group.command("ping", description="Test network connectivity", usage="ping <host>")
async def ping(ctx: CommandContext) -> None:
    host = ctx.arg(0)
    ctx.success(f"PING {host}: 64 bytes from {host}: icmp_seq=1 ttl=64 time=1.23 ms")


@group.command("ssh", description="Secure shell connection", usage="ssh <user@host>")
async def ssh(ctx: CommandContext) -> None:
    host = ctx.arg(0)
    ctx.success(f"SSH connection to {host} established (simulation)")


@group.command(
    "open",
    description="Open file or URL",
    usage="open <file|url>",
    examples=("open index.html", "open https://example.com"),
)
async def open_(ctx: CommandContext) -> None:
    target = ctx.arg(0)
    if "://" in target:
        if not validate_url(target):
            ctx.error(INVALID_URL.format(url=target))
            return
        ctx.success(f"Opening {target} in browser...")
        return
    ctx.require_entry(target)
    ctx.success(f"Opening {target}...")


@group.command("browser", description="Open browser", usage="browser [url]")
async def browser(ctx: CommandContext) -> None:
    url = _url(ctx, ctx.args[0]) if ctx.args else DEFAULT_BROWSER_URL
    if url is not None:
        ctx.success(f"Opening browser to {url}...")


__all__ = ["group"]
