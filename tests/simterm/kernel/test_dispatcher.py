"""Tests for the command dispatcher."""

from __future__ import annotations

import asyncio

import pytest

from simterm.api import Terminal
from simterm.drivers.vfs.memory import InMemoryVFS
from simterm.kernel.config import DispatcherConfig, SecurityConfig
from simterm.kernel.dispatcher import CommandDispatcher
from simterm.kernel.domain.output import OutputLevel
from simterm.kernel.domain.session import Tab
from simterm.kernel.domain.terminal import TerminalState, default_environment
from simterm.kernel.exceptions import UsageError
from simterm.stdlib.commands.base import (
    CommandCategory,
    CommandContext,
    CommandGroup,
    CommandRegistry,
)
from simterm.stdlib.lib.history_store import HistoryStore
from simterm.stdlib.lib.security import SecurityPolicy
from simterm.stdlib.lib.syntax_highlighter import SyntaxHighlighter

group = CommandGroup(CommandCategory.UTILITY)


@group.command("slow", description="Sleeps past any sane timeout", usage="slow")
async def slow(ctx: CommandContext) -> None:
    ctx.info("started")
    await asyncio.sleep(5)


@group.command("boom", description="Raises an unexpected error", usage="boom")
async def boom(ctx: CommandContext) -> None:
    raise RuntimeError("kaboom")


@group.command("greet", description="Needs a name", usage="greet <name>")
async def greet(ctx: CommandContext) -> None:
    if not ctx.args:
        raise UsageError(ctx.usage)
    ctx.success(f"hello {ctx.args[0]}")


@pytest.fixture
def state() -> TerminalState:
    return TerminalState(vfs=InMemoryVFS.with_defaults(), environment=default_environment())


@pytest.fixture
def dispatcher(clock) -> CommandDispatcher:
    return CommandDispatcher(
        CommandRegistry(group.specs),
        HistoryStore(clock=clock),
        SyntaxHighlighter(),
        security=SecurityPolicy(),
        config=DispatcherConfig(command_timeout_seconds=0.05),
        clock=clock,
    )


class TestDispatch:
    @pytest.mark.asyncio()
    async def test_blank_line_produces_nothing(self, terminal: Terminal) -> None:
        assert await terminal.run("   ") == []
        assert len(terminal.history) == 0

    @pytest.mark.asyncio()
    async def test_unknown_command_is_one_error(self, terminal: Terminal) -> None:
        outputs = await terminal.run("zzzqux --flag")

        assert len(outputs) == 1
        assert outputs[0].level is OutputLevel.ERROR
        assert outputs[0].message == (
            "Command not found: zzzqux. Type 'help' for available commands."
        )
        (entry,) = terminal.history.entries()
        assert entry.command == "zzzqux --flag"
        assert entry.exit_code == 1

    @pytest.mark.asyncio()
    async def test_lookup_is_case_insensitive(self, terminal: Terminal) -> None:
        outputs = await terminal.run("PWD")
        assert outputs[0].message == "/home/developer"

    @pytest.mark.asyncio()
    async def test_successful_command_records_exit_code_zero(self, terminal: Terminal) -> None:
        await terminal.run("pwd")
        (entry,) = terminal.history.entries()
        assert entry.exit_code == 0
        assert entry.output == "/home/developer"
        assert entry.execution_time_ms is not None

    @pytest.mark.asyncio()
    async def test_alias_expansion(self, terminal: Terminal) -> None:
        await terminal.run("alias where=pwd")
        outputs = await terminal.run("where")
        assert [o.message for o in outputs] == ["/home/developer"]

    @pytest.mark.asyncio()
    async def test_builtin_alias_keeps_extra_arguments(self, terminal: Terminal) -> None:
        outputs = await terminal.run("ll src")
        assert outputs[0].message.startswith("total 2")

    @pytest.mark.asyncio()
    async def test_usage_error(self, dispatcher: CommandDispatcher, state: TerminalState) -> None:
        outputs = await dispatcher.execute("greet", state)
        assert [(o.level, o.message) for o in outputs] == [
            (OutputLevel.ERROR, "Usage: greet <name>")
        ]

    @pytest.mark.asyncio()
    async def test_timeout_keeps_earlier_output(
        self, dispatcher: CommandDispatcher, state: TerminalState
    ) -> None:
        outputs = await dispatcher.execute("slow", state)

        assert [o.message for o in outputs] == ["started", "Command 'slow' timed out after 0.05s"]
        assert outputs[-1].is_error
        assert dispatcher.history.entries()[-1].exit_code == 1

    @pytest.mark.asyncio()
    async def test_unexpected_exception_is_reported(
        self, dispatcher: CommandDispatcher, state: TerminalState
    ) -> None:
        outputs = await dispatcher.execute("boom", state)
        assert len(outputs) == 1
        assert outputs[0].message == "Error executing boom: kaboom"

    @pytest.mark.asyncio()
    async def test_blocked_input_never_reaches_handler(
        self, dispatcher: CommandDispatcher, state: TerminalState
    ) -> None:
        outputs = await dispatcher.execute("greet <script>alert(1)</script>", state)
        assert len(outputs) == 1
        assert outputs[0].message.startswith("Command blocked:")

    @pytest.mark.asyncio()
    async def test_allow_list_judges_the_aliased_command(
        self, dispatcher: CommandDispatcher, state: TerminalState
    ) -> None:
        dispatcher.security = SecurityPolicy(SecurityConfig(allowed_commands=("greet",)))
        state.aliases.update(hi="greet", kaboom="boom")

        outputs = await dispatcher.execute("hi bob", state)
        assert [o.message for o in outputs] == ["hello bob"]

        outputs = await dispatcher.execute("kaboom", state)
        assert [o.message for o in outputs] == [
            "Command blocked: 'boom' is not in the allowed command list"
        ]

    @pytest.mark.asyncio()
    async def test_vfs_error_is_prefixed_with_command(self, terminal: Terminal) -> None:
        outputs = await terminal.run("head missing.txt")
        assert outputs[-1].is_error
        assert outputs[-1].message.startswith("head: missing.txt")


class TestTabLog:
    @pytest.mark.asyncio()
    async def test_outputs_are_appended_to_tab(
        self, dispatcher: CommandDispatcher, state: TerminalState
    ) -> None:
        tab = Tab(name="Terminal 1")
        await dispatcher.execute("greet ada", state, tab)
        await dispatcher.execute("greet bob", state, tab)

        assert [entry.message for entry in tab.logs] == ["hello ada", "hello bob"]
        assert [entry.command for entry in tab.history] == ["greet ada", "greet bob"]

    @pytest.mark.asyncio()
    async def test_clear_empties_the_log(self, terminal: Terminal) -> None:
        await terminal.run("pwd")
        await terminal.run("clear")

        assert terminal.active_tab.logs == []
        assert terminal.history.commands() == ["pwd", "clear"]
