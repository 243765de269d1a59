"""Tests for build, server, test-runner, lint and process commands."""

from __future__ import annotations

import pytest

from simterm.api import Terminal
from simterm.kernel.domain.output import OutputLevel
from simterm.kernel.domain.terminal import ProcessStatus

HOME = "/home/developer"


def _messages(outputs) -> list[str]:
    return [entry.message for entry in outputs]


class TestBuild:
    @pytest.mark.asyncio()
    async def test_build_writes_bundle(self, terminal: Terminal) -> None:
        (output,) = await terminal.run("build --prod")

        lines = output.message.splitlines()
        assert lines[0] == "Building project (production)..."
        assert lines[1] == "✓ 2 modules transformed"
        assert lines[-1] == "✓ Build completed"
        bundle = terminal.state.vfs.get(f"{HOME}/dist/bundle.js").content
        assert "/* src/index.js */" in bundle
        assert "export function greet" in bundle

    @pytest.mark.asyncio()
    async def test_rebuild_replaces_dist(self, terminal: Terminal) -> None:
        await terminal.run("build")
        await terminal.run("touch dist/stale.js")
        await terminal.run("build")
        assert f"{HOME}/dist/stale.js" not in terminal.state.vfs

    @pytest.mark.asyncio()
    async def test_tools(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("webpack --mode development")) == [
            "Webpack build completed successfully (mode: development)"
        ]
        assert _messages(await terminal.run("vite build")) == [
            "Vite build completed successfully"
        ]
        assert _messages(await terminal.run("gulp")) == [
            "Gulp task 'default' completed successfully"
        ]

    @pytest.mark.asyncio()
    async def test_tsc(self, terminal: Terminal) -> None:
        (warning,) = await terminal.run("tsc")
        assert warning.level is OutputLevel.WARNING

        await terminal.run("touch src/app.ts")
        assert _messages(await terminal.run("tsc")) == [
            "Compiled 1 TypeScript file with no errors"
        ]


class TestServers:
    @pytest.mark.asyncio()
    async def test_dev_server(self, terminal: Terminal) -> None:
        (output,) = await terminal.run("dev")

        assert output.message == (
            "Development server starting on port 3000...\n"
            "✓ Server running on http://localhost:3000"
        )
        assert output.metadata == {"pid": 1000, "port": 3000}

    @pytest.mark.asyncio()
    async def test_busy_port(self, terminal: Terminal) -> None:
        await terminal.run("http-server -p 9000")
        (output,) = await terminal.run("serve 9000")

        assert output.level is OutputLevel.WARNING
        assert output.message == (
            "Port 9000 is already in use by process 1000 (http-server --port 9000)"
        )
        assert len(terminal.state.processes) == 1

    @pytest.mark.asyncio()
    async def test_vite_dev_port(self, terminal: Terminal) -> None:
        await terminal.run("vite")
        assert terminal.state.processes[1000].port == 5173

    @pytest.mark.parametrize("line", ["dev abc", "live-server 70000"])
    @pytest.mark.asyncio()
    async def test_invalid_port(self, terminal: Terminal, line: str) -> None:
        (output,) = await terminal.run(line)
        assert output.message.startswith("Usage: ")
        assert terminal.state.processes == {}


class TestRunners:
    @pytest.mark.asyncio()
    async def test_runners(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("test")) == ["Running tests...\nAll tests passed ✓"]
        assert _messages(await terminal.run("jest")) == ["Jest tests completed successfully"]
        assert _messages(await terminal.run("cypress")) == [
            "Cypress tests completed successfully"
        ]

    @pytest.mark.asyncio()
    async def test_pytest_counts_modules(self, terminal: Terminal) -> None:
        (none,) = await terminal.run("pytest")
        assert none.level is OutputLevel.WARNING

        await terminal.run("touch test_app.py")
        await terminal.run("touch src/utils_test.py")
        (output,) = await terminal.run("pytest")
        assert output.message.startswith("collected 2 items")


class TestLint:
    @pytest.mark.asyncio()
    async def test_eslint(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("eslint src")) == [
            "ESLint check completed - no errors found"
        ]

    @pytest.mark.asyncio()
    async def test_prettier_write_strips_trailing_whitespace(self, terminal: Terminal) -> None:
        await terminal.run('write app.js "let x = 1;   "')
        (output,) = await terminal.run("prettier --write")

        assert output.message == "app.js formatted\nCode formatted successfully"
        assert output.metadata == {"changed": 1}
        assert terminal.state.vfs.get(f"{HOME}/app.js").content == "let x = 1;"

    @pytest.mark.asyncio()
    async def test_prettier_check_changes_nothing(self, terminal: Terminal) -> None:
        await terminal.run('write app.js "let x = 1;   "')
        await terminal.run("prettier --check .")
        assert terminal.state.vfs.get(f"{HOME}/app.js").content == "let x = 1;   "


class TestProcesses:
    @pytest.mark.asyncio()
    async def test_ps(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("ps")) == ["No processes running"]
        await terminal.run("dev")
        (output,) = await terminal.run("ps")
        header, row = output.message.splitlines()
        assert header.split() == ["PID", "STATUS", "%CPU", "MEM(MB)", "PORT", "COMMAND"]
        assert row.split()[:2] == ["1000", "running"]
        assert row.endswith("dev --port 3000")

    @pytest.mark.asyncio()
    async def test_kill(self, terminal: Terminal) -> None:
        await terminal.run("dev")
        assert _messages(await terminal.run("kill -9 1000")) == ["Process 1000 terminated"]
        assert _messages(await terminal.run("kill 1000")) == ["Process 1000 not found"]
        assert _messages(await terminal.run("kill abc")) == ["Usage: kill <process-id>"]
        assert _messages(await terminal.run("kill")) == ["Usage: kill <process-id>"]

    @pytest.mark.asyncio()
    async def test_jobs_bg_fg(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("jobs")) == ["No jobs running"]
        assert _messages(await terminal.run("bg")) == ["bg: current: no such job"]

        await terminal.run("dev")
        terminal.state.processes[1000].status = ProcessStatus.STOPPED
        assert _messages(await terminal.run("bg")) == ["[1000]+ dev --port 3000 &"]
        assert _messages(await terminal.run("jobs")) == ["[1000]  Background  dev --port 3000"]
        assert _messages(await terminal.run("fg %1000")) == ["dev --port 3000"]
        assert terminal.state.processes[1000].status is ProcessStatus.RUNNING
