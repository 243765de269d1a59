"""Tests for ProcessTable."""

from __future__ import annotations

import random

import pytest

from simterm.drivers.vfs.memory import InMemoryVFS
from simterm.kernel.domain.terminal import ProcessStatus, TerminalState
from simterm.kernel.exceptions import ResourceNotFoundError
from simterm.stdlib.lib.process_table import ProcessTable


@pytest.fixture
def state() -> TerminalState:
    return TerminalState(vfs=InMemoryVFS())


@pytest.fixture
def table(state: TerminalState) -> ProcessTable:
    return ProcessTable(state, random.Random(7))


class TestProcessTable:
    def test_pids_are_sequential(self, table: ProcessTable, state: TerminalState) -> None:
        first = table.spawn("vite")
        second = table.spawn("jest --watch")

        assert (first.pid, second.pid) == (1000, 1001)
        assert state.next_pid == 1002
        assert table.latest() is second

    def test_fake_figures_are_in_range(self, table: ProcessTable) -> None:
        process = table.spawn("vite")
        assert 0.1 <= process.cpu_percent <= 4.0
        assert 20.0 <= process.memory_mb <= 180.0

    def test_port_is_reused(self, table: ProcessTable) -> None:
        first = table.spawn("npm run dev", port=3000)
        again = table.spawn("serve", port=3000)

        assert again is first
        assert len(table) == 1
        assert table.find_by_port(3000) is first

    def test_kill(self, table: ProcessTable) -> None:
        pid = table.spawn("vite").pid
        assert table.kill(pid).command == "vite"
        assert pid not in table
        with pytest.raises(ResourceNotFoundError):
            table.kill(pid)

    def test_jobs_are_not_in_foreground(self, table: ProcessTable) -> None:
        table.spawn("vite")
        stopped = table.spawn("jest", status=ProcessStatus.STOPPED)
        table.set_status(stopped.pid, ProcessStatus.BACKGROUND)

        assert [p.command for p in table.jobs()] == ["jest"]
        assert [p.command for p in table.list(ProcessStatus.RUNNING)] == ["vite"]

    def test_set_status_unknown_pid(self, table: ProcessTable) -> None:
        with pytest.raises(ResourceNotFoundError):
            table.set_status(42, ProcessStatus.STOPPED)

    def test_view_over_state(self, state: TerminalState) -> None:
        ProcessTable(state).spawn("vite")
        assert len(ProcessTable(state)) == 1
        assert ProcessTable(state).clear() == 1
        assert state.processes == {}
