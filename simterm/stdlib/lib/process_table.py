"""ProcessTable lib — the simulated ``ps`` view of a terminal session.

Server commands (``dev``, ``live-server``, ``http-server``, ``vite dev``)
register a process here; ``ps``, ``kill``, ``bg``, ``fg`` and ``jobs`` read
and update it. Nothing is ever actually spawned.

The table does not own its data: it is a view over
:attr:`TerminalState.processes`, so the process list travels with the
session state it belongs to.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from simterm.kernel.domain.terminal import ProcessInfo, ProcessStatus
from simterm.kernel.exceptions import ResourceNotFoundError
from simterm.kernel.logging import get_logger

if TYPE_CHECKING:
    from simterm.kernel.domain.terminal import TerminalState

logger = get_logger(__name__)


class ProcessTable:
    """Register, query and terminate simulated processes.

    Args
    ----
        state: Terminal state whose ``processes`` map and ``next_pid``
            counter are read and updated.
        rng: Source of the fake CPU/memory figures; seed it for stable output.
    """

    def __init__(self, state: TerminalState, rng: random.Random | None = None) -> None:
        self._state = state
        self._rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def spawn(
        self,
        command: str,
        *,
        port: int | None = None,
        status: ProcessStatus = ProcessStatus.RUNNING,
    ) -> ProcessInfo:
        """Register a new process and return it.

        A process already bound to ``port`` is returned unchanged instead of
        starting a second listener on it.
        """
        if port is not None:
            existing = self.find_by_port(port)
            if existing is not None:
                return existing

        pid = self._state.next_pid
        self._state.next_pid += 1
        process = ProcessInfo(
            pid=pid,
            command=command,
            status=status,
            port=port,
            cpu_percent=round(self._rng.uniform(0.1, 4.0), 1),
            memory_mb=round(self._rng.uniform(20.0, 180.0), 1),
        )
        self._state.processes[pid] = process
        logger.debug("Spawned simulated process {pid}: {command}", pid=pid, command=command)
        return process

    def kill(self, pid: int) -> ProcessInfo:
        """Remove a process from the table.

        Raises
        ------
        ResourceNotFoundError
            If no process has this pid.
        """
        process = self._state.processes.pop(pid, None)
        if process is None:
            raise ResourceNotFoundError("process", str(pid), [str(p) for p in self.pids()])
        logger.debug("Killed simulated process {pid}", pid=pid)
        return process

    def set_status(self, pid: int, status: ProcessStatus) -> ProcessInfo:
        """Change a process's status (``bg``/``fg``/stop)."""
        process = self.get(pid)
        if process is None:
            raise ResourceNotFoundError("process", str(pid), [str(p) for p in self.pids()])
        process.status = status
        return process

    def clear(self) -> int:
        count = len(self._state.processes)
        self._state.processes.clear()
        return count

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, pid: int) -> ProcessInfo | None:
        return self._state.processes.get(pid)

    def pids(self) -> list[int]:
        return sorted(self._state.processes)

    def list(self, status: ProcessStatus | None = None) -> list[ProcessInfo]:
        """Processes ordered by pid, optionally filtered by status."""
        processes = [self._state.processes[pid] for pid in self.pids()]
        if status is not None:
            processes = [p for p in processes if p.status is status]
        return processes

    def jobs(self) -> list[ProcessInfo]:
        """Processes that are not in the foreground."""
        return [p for p in self.list() if p.status is not ProcessStatus.RUNNING]

    def find_by_port(self, port: int) -> ProcessInfo | None:
        return next((p for p in self._state.processes.values() if p.port == port), None)

    def latest(self) -> ProcessInfo | None:
        """Most recently spawned process, if any."""
        pids = self.pids()
        return self._state.processes[pids[-1]] if pids else None

    def __len__(self) -> int:
        return len(self._state.processes)

    def __contains__(self, pid: object) -> bool:
        return pid in self._state.processes


__all__ = ["ProcessTable"]
