"""Tests for the network commands."""

from __future__ import annotations

import pytest

from simterm.api import Terminal


def _messages(outputs) -> list[str]:
    return [entry.message for entry in outputs]


class TestNetwork:
    @pytest.mark.asyncio()
    async def test_curl(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("curl -s api.example.com/users")) == [
            "Request to https://api.example.com/users successful (simulation)"
        ]

    @pytest.mark.asyncio()
    async def test_curl_rejects_unsafe_scheme(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("curl file:///etc/passwd")) == [
            "Invalid or unsafe URL: file:///etc/passwd"
        ]

    @pytest.mark.asyncio()
    async def test_wget_saves_file(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("wget https://example.com/files/data.csv")) == [
            "Downloaded from https://example.com/files/data.csv (simulation)\n"
            "Saved to 'data.csv'"
        ]
        assert "/home/developer/data.csv" in terminal.state.vfs

        await terminal.run("wget https://example.com/")
        assert "/home/developer/index.html" in terminal.state.vfs

    @pytest.mark.asyncio()
    async def test_ping_and_ssh(self, terminal: Terminal) -> None:
        (ping,) = await terminal.run("ping example.com")
        assert ping.message.startswith("PING example.com: 64 bytes from example.com")
        assert _messages(await terminal.run("ssh dev@box")) == [
            "SSH connection to dev@box established (simulation)"
        ]
        assert _messages(await terminal.run("ping")) == ["Usage: ping <host>"]

    @pytest.mark.asyncio()
    async def test_open(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("open https://example.com")) == [
            "Opening https://example.com in browser..."
        ]
        assert _messages(await terminal.run("open README.md")) == ["Opening README.md..."]
        (missing,) = await terminal.run("open nope.html")
        assert missing.is_error

    @pytest.mark.asyncio()
    async def test_browser(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("browser")) == [
            "Opening browser to http://localhost:3000..."
        ]
        assert _messages(await terminal.run("browser localhost:5173")) == [
            "Opening browser to https://localhost:5173..."
        ]
