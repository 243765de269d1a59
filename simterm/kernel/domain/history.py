"""Domain models for command history."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import Field

from simterm.kernel.domain.base import CamelModel
from simterm.kernel.utils.time import new_id, now_ms


class HistoryEntry(CamelModel):
    """A single recorded command invocation."""

    id: str = Field(default_factory=lambda: new_id("hist"))
    command: str
    timestamp_ms: int = Field(default_factory=now_ms)
    execution_time_ms: float | None = None
    exit_code: int | None = None
    output: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool | None:
        """True/False once an exit code is known, None before."""
        if self.exit_code is None:
            return None
        return self.exit_code == 0


@dataclass(frozen=True, slots=True)
class HistoryCursor:
    """Position of a tab's up/down-arrow recall within the history.

    ``index == -1`` means the user is not navigating. The store never keeps
    a cursor itself: callers pass the current one in and keep the one
    returned.
    """

    index: int = -1

    @property
    def is_reset(self) -> bool:
        return self.index == -1


RESET_CURSOR = HistoryCursor()


class CommandUsage(CamelModel):
    """How often a command string appears in history."""

    command: str
    count: int


class DayActivity(CamelModel):
    """Number of commands recorded on one UTC calendar day."""

    date: str
    count: int


class HistoryStatistics(CamelModel):
    """Aggregate view over the retained history.

    Attributes
    ----------
    average_execution_time_ms : float
        Mean over entries that recorded an execution time; 0 when none did.
    success_rate : float
        Percentage (0-100) of entries with ``exit_code == 0`` among entries
        that recorded an exit code; 0 when none did.
    recent_activity : list[DayActivity]
        Counts for the last 7 UTC days, oldest first.
    """

    total: int
    unique: int
    average_execution_time_ms: float
    success_rate: float
    most_used: list[CommandUsage]
    recent_activity: list[DayActivity]


class HistoryPage(CamelModel):
    """One page of history, most recent first."""

    entries: list[HistoryEntry]
    total: int
    page: int
    page_size: int
    total_pages: int


__all__ = [
    "CommandUsage",
    "DayActivity",
    "HistoryCursor",
    "HistoryEntry",
    "HistoryPage",
    "HistoryStatistics",
    "RESET_CURSOR",
]
