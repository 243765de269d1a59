"""Tests for HistoryStore."""

from __future__ import annotations

from pathlib import Path

import pytest

from simterm.kernel.domain.history import RESET_CURSOR, DayActivity
from simterm.kernel.exceptions import ImportValidationError, ValidationError
from simterm.stdlib.adapters import InMemoryStorage, JsonFileStorage
from simterm.stdlib.lib.history_store import HistoryStore


@pytest.fixture
def store(clock) -> HistoryStore:
    return HistoryStore(clock=clock)


def _fill(store: HistoryStore, clock, *commands: str) -> None:
    for command in commands:
        clock.advance(1000)
        store.add(command)


class TestBound:
    def test_oldest_entry_is_evicted(self, store: HistoryStore) -> None:
        for n in range(1001):
            store.add(f"echo {n}")

        assert len(store) == 1000
        assert store.commands()[0] == "echo 1"
        assert store.commands()[-1] == "echo 1000"

    def test_set_max_size_trims_and_clamps(self, store: HistoryStore, clock) -> None:
        _fill(store, clock, *(f"cmd {n}" for n in range(30)))

        assert store.set_max_size(3) == 10
        assert len(store) == 10
        assert store.commands()[0] == "cmd 20"


class TestMutation:
    def test_remove_duplicates_keeps_latest(self, store: HistoryStore, clock) -> None:
        _fill(store, clock, "ls", "pwd", "ls", "git status", "pwd")

        assert store.remove_duplicates() == 2
        assert store.commands() == ["ls", "git status", "pwd"]

    def test_remove_by_id(self, store: HistoryStore) -> None:
        entry = store.add("ls")
        assert store.remove(entry.id) is True
        assert store.remove(entry.id) is False

    def test_clear_empties_stores(self, clock) -> None:
        durable = InMemoryStorage("durable")
        store = HistoryStore(durable, clock=clock)
        store.add("ls")
        store.clear()

        assert len(store) == 0
        assert durable.value is None


class TestRecall:
    def test_walk_back_and_forward(self, store: HistoryStore, clock) -> None:
        _fill(store, clock, "a", "b", "c")

        command, cursor = store.previous(RESET_CURSOR)
        assert command == "c"
        command, cursor = store.previous(cursor)
        command, cursor = store.previous(cursor)
        assert command == "a"
        command, cursor = store.previous(cursor)
        assert command == "a"

        command, cursor = store.next(cursor)
        assert command == "b"
        command, cursor = store.next(cursor)
        assert command == "c"
        command, cursor = store.next(cursor)
        assert command == ""
        assert cursor.is_reset
        assert store.next(cursor) == (None, RESET_CURSOR)

    def test_empty_history(self, store: HistoryStore) -> None:
        assert store.previous() == (None, RESET_CURSOR)


class TestQueries:
    def test_search_is_most_recent_first(self, store: HistoryStore, clock) -> None:
        _fill(store, clock, "git status", "npm test", "GIT log")

        assert [e.command for e in store.search("git")] == ["GIT log", "git status"]
        assert [e.command for e in store.search("git", case_sensitive=True)] == ["git status"]
        assert [e.command for e in store.search(r"^npm\s", regex=True)] == ["npm test"]

    def test_invalid_regex_matches_nothing(self, store: HistoryStore, clock) -> None:
        _fill(store, clock, "ls")
        assert store.search("(", regex=True) == []

    def test_most_used_and_recent(self, store: HistoryStore, clock) -> None:
        _fill(store, clock, "ls", "pwd", "ls", "cd src", "ls")

        top = store.most_used(2)
        assert [(u.command, u.count) for u in top] == [("ls", 3), ("pwd", 1)]
        assert store.recent(2) == ["ls", "cd src"]

    def test_page(self, store: HistoryStore, clock) -> None:
        _fill(store, clock, *(f"cmd {n}" for n in range(25)))

        page = store.page(2, 10)
        assert page.total == 25
        assert page.total_pages == 3
        assert page.entries[0].command == "cmd 14"
        with pytest.raises(ValidationError):
            store.page(0)

    def test_statistics(self, store: HistoryStore) -> None:
        store.add("ls", execution_time_ms=10, exit_code=0)
        store.add("oops", execution_time_ms=30, exit_code=1)
        store.add("pwd")

        stats = store.statistics()
        assert stats.total == 3
        assert stats.unique == 3
        assert stats.average_execution_time_ms == 20
        assert stats.success_rate == 50
        assert len(stats.recent_activity) == 7
        assert stats.recent_activity[-1] == DayActivity(date="2025-01-15", count=3)

    def test_statistics_of_empty_history(self, store: HistoryStore) -> None:
        stats = store.statistics()
        assert stats.average_execution_time_ms == 0
        assert stats.success_rate == 0


class TestPersistence:
    def test_entries_survive_a_reload(self, clock) -> None:
        durable = InMemoryStorage("durable")
        HistoryStore(durable, clock=clock).add("npm install")

        assert durable.value[0]["command"] == "npm install"
        assert "timestampMs" in durable.value[0]
        assert HistoryStore(durable, clock=clock).commands() == ["npm install"]

    def test_stores_are_merged_by_id(self, clock) -> None:
        shared = {"id": "hist_1", "command": "ls", "timestampMs": 2}
        durable = InMemoryStorage("durable", [shared, {"command": "pwd", "timestampMs": 1}])
        session = InMemoryStorage("session", [shared])

        store = HistoryStore(durable, session, clock=clock)
        assert store.commands() == ["pwd", "ls"]

    def test_failures_are_not_fatal(self, clock) -> None:
        broken = InMemoryStorage("broken", fail_on_load=True, fail_on_save=True)
        store = HistoryStore(broken, clock=clock)
        store.add("ls")
        assert store.commands() == ["ls"]

    def test_undecodable_file_is_not_fatal(self, tmp_path: Path, clock) -> None:
        path = tmp_path / "history.json"
        path.write_bytes(b"\xff\xfe\x00garbage")

        store = HistoryStore(JsonFileStorage(path), clock=clock)
        assert store.entries() == []
        store.add("ls")
        assert store.commands() == ["ls"]

    def test_malformed_entries_are_skipped(self, clock) -> None:
        durable = InMemoryStorage("durable", [{"command": "ok", "timestampMs": 1}, {"bad": 1}])
        assert HistoryStore(durable, clock=clock).commands() == ["ok"]


class TestExportImport:
    def test_json_round_trip(self, store: HistoryStore, clock) -> None:
        _fill(store, clock, "ls", "pwd")
        other = HistoryStore(clock=clock)

        assert other.import_history(store.export("json")) == 2
        assert other.commands() == ["ls", "pwd"]

    def test_csv_import(self, store: HistoryStore) -> None:
        data = (
            "Timestamp,Command,Execution Time (ms),Exit Code\n"
            "2025-01-15T12:00:00.000Z,git status,12.5,0\n"
        )
        assert store.import_history(data, "csv") == 1
        (entry,) = store.entries()
        assert entry.command == "git status"
        assert entry.execution_time_ms == 12.5
        assert entry.exit_code == 0

    def test_text_export(self, store: HistoryStore) -> None:
        store.add("ls")
        assert store.export("txt") == "[2025-01-15T12:00:00.000Z] ls"

    @pytest.mark.parametrize(
        ("data", "fmt"),
        [
            ("not json", "json"),
            ('{"command": "ls"}', "json"),
            ('[{"command": "ls"}]', "json"),
            ("[ls]", "txt"),
            ("Foo,Bar\n", "csv"),
        ],
    )
    def test_invalid_payloads_change_nothing(
        self, store: HistoryStore, data: str, fmt: str
    ) -> None:
        store.add("keep me")
        with pytest.raises(ImportValidationError):
            store.import_history(data, fmt)
        assert store.commands() == ["keep me"]

    def test_unknown_format(self, store: HistoryStore) -> None:
        with pytest.raises(ValidationError):
            store.export("xml")
