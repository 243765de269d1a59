"""Tests for the Terminal facade."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from simterm.api import DEFAULT_SESSION_NAME, Terminal
from simterm.kernel.config import HistoryConfig, SimTermConfig
from simterm.kernel.exceptions import (
    ImportValidationError,
    ResourceNotFoundError,
    ValidationError,
)
from simterm.stdlib.adapters import JsonFileStorage


class TestTabs:
    def test_starts_with_one_active_tab(self, terminal: Terminal) -> None:
        assert [tab.name for tab in terminal.tabs] == ["Terminal 1"]
        assert terminal.active_tab.id == terminal.tabs[0].id
        assert terminal.session.name == DEFAULT_SESSION_NAME

    def test_new_tab_becomes_active(self, terminal: Terminal) -> None:
        tab = terminal.new_tab()
        assert tab.name == "Terminal 2"
        assert terminal.active_tab is tab

        first = terminal.switch_tab(terminal.tabs[0].id)
        assert terminal.active_tab is first

    def test_close_tab(self, terminal: Terminal) -> None:
        first = terminal.tabs[0]
        second = terminal.new_tab("logs")

        terminal.close_tab(second.id)
        assert terminal.tabs == [first]
        assert terminal.active_tab is first

    def test_cannot_close_last_tab(self, terminal: Terminal) -> None:
        with pytest.raises(ValidationError, match="last open tab"):
            terminal.close_tab(terminal.active_tab.id)

    def test_unknown_tab(self, terminal: Terminal) -> None:
        with pytest.raises(ResourceNotFoundError):
            terminal.switch_tab("tab_missing")

    @pytest.mark.asyncio()
    async def test_outputs_land_in_the_target_tab(self, terminal: Terminal) -> None:
        first = terminal.active_tab
        second = terminal.new_tab()

        await terminal.run("pwd", tab_id=first.id)
        await terminal.run("whoami")

        assert [entry.message for entry in first.logs] == ["/home/developer"]
        assert [entry.message for entry in second.logs] == ["developer"]
        assert [entry.command for entry in second.history] == ["whoami"]


class TestHistoryRecall:
    @pytest.mark.asyncio()
    async def test_up_and_down(self, terminal: Terminal) -> None:
        for line in ("pwd", "ls", "whoami"):
            await terminal.run(line)

        assert terminal.next() is None
        assert terminal.previous() == "whoami"
        assert terminal.previous() == "ls"
        assert terminal.previous() == "pwd"
        assert terminal.previous() == "pwd"
        assert terminal.next() == "ls"
        assert terminal.next() == "whoami"
        assert terminal.next() == ""

    @pytest.mark.asyncio()
    async def test_cursor_is_per_tab_and_reset_by_run(self, terminal: Terminal) -> None:
        first = terminal.active_tab
        await terminal.run("pwd")
        await terminal.run("ls")
        second = terminal.new_tab()

        assert terminal.previous(first.id) == "ls"
        assert terminal.previous(first.id) == "pwd"
        assert terminal.previous(second.id) == "ls"

        await terminal.run("whoami", tab_id=first.id)
        assert terminal.previous(first.id) == "whoami"

    def test_empty_history(self, terminal: Terminal) -> None:
        assert terminal.previous() is None

    @pytest.mark.asyncio()
    async def test_eviction_resets_other_tabs(self, clock) -> None:
        config = SimTermConfig(history=HistoryConfig(max_size=10))
        terminal = Terminal.create(config, clock=clock)
        first = terminal.active_tab
        for n in range(10):
            await terminal.run(f"echo {n}", tab_id=first.id)
        second = terminal.new_tab()
        assert terminal.previous(second.id) == "echo 9"

        await terminal.run("pwd", tab_id=first.id)
        assert terminal.history.commands()[0] == "echo 1"

        assert terminal.previous(second.id) == "pwd"
        assert terminal.previous(second.id) == "echo 9"
        assert terminal.previous(second.id) == "echo 8"


class TestSuggest:
    @pytest.mark.asyncio()
    async def test_ranks_commands(self, terminal: Terminal) -> None:
        values = [item.value for item in terminal.suggest("gi")]
        assert values[0] == "git"

    @pytest.mark.asyncio()
    async def test_uses_word_before_cursor(self, terminal: Terminal) -> None:
        values = [item.value for item in terminal.suggest("echo $HO", cursor=8)]
        assert "$HOME" in values


class TestSessionExchange:
    @pytest.mark.asyncio()
    async def test_export_json(self, terminal: Terminal) -> None:
        await terminal.run("export PROJECT=demo")
        data = json.loads(terminal.export_session())

        assert data["name"] == DEFAULT_SESSION_NAME
        assert data["environment"]["PROJECT"] == "demo"
        assert data["history"][0]["command"] == "export PROJECT=demo"
        assert len(data["tabs"]) == 1

    @pytest.mark.asyncio()
    async def test_import_into_another_terminal(self, terminal: Terminal, clock) -> None:
        await terminal.run("cd src")
        await terminal.run("alias serve='dev 8080'")
        exported = terminal.export_session()

        other = Terminal.create(SimTermConfig(), clock=clock)
        session = other.import_session(exported)

        assert session.id != terminal.session.id
        assert other.session is session
        assert other.active_tab.id == session.tabs[0].id
        assert other.state.cwd == "/home/developer/src"
        assert other.state.aliases["serve"] == "dev 8080"
        assert other.history.commands() == ["cd src", "alias serve='dev 8080'"]

    @pytest.mark.asyncio()
    async def test_missing_directory_falls_back_to_home(
        self, terminal: Terminal, clock
    ) -> None:
        await terminal.run("mkdir scratch")
        await terminal.run("cd scratch")
        exported = terminal.export_session()

        other = Terminal.create(SimTermConfig(), clock=clock)
        other.import_session(exported)
        assert other.state.cwd == "/home/developer"

    def test_rejected_payload_leaves_state_alone(self, terminal: Terminal) -> None:
        before = terminal.session

        with pytest.raises(ImportValidationError):
            terminal.import_session('{"name": "broken"}')
        assert terminal.session is before

    def test_csv_import_is_rejected(self, terminal: Terminal) -> None:
        with pytest.raises(ImportValidationError):
            terminal.import_session(terminal.export_session("csv"), "csv")


class TestConstruction:
    def test_from_config_file(self, tmp_path: Path) -> None:
        path = tmp_path / "simterm.toml"
        path.write_text('user = "ada"\nhostname = "lab"\n')

        terminal = Terminal.from_config_file(path)
        assert terminal.state.home == "/home/ada"
        assert terminal.state.environment["HOSTNAME"] == "lab"

    @pytest.mark.asyncio()
    async def test_file_history_survives_restart(self, tmp_path: Path, clock) -> None:
        history_file = tmp_path / "history.json"
        config = SimTermConfig(history=HistoryConfig(storage="file", path=str(history_file)))

        first = Terminal.create(config, clock=clock)
        await first.run("pwd")
        await first.run("ls")

        second = Terminal.create(config, clock=clock)
        assert second.history.commands() == ["pwd", "ls"]
        assert [row["command"] for row in JsonFileStorage(history_file).load()] == ["pwd", "ls"]

    @pytest.mark.asyncio()
    async def test_corrupted_history_file_does_not_block_startup(
        self, tmp_path: Path, clock
    ) -> None:
        history_file = tmp_path / "history.json"
        history_file.write_bytes(b"\xff\xfe\x00not json")
        config = SimTermConfig(history=HistoryConfig(storage="file", path=str(history_file)))

        terminal = Terminal.create(config, clock=clock)
        assert terminal.history.entries() == []

        (output,) = await terminal.run("pwd")
        assert output.message == "/home/developer"
        assert terminal.history.commands() == ["pwd"]
