"""Terminal output lines produced by command handlers."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import ConfigDict, Field

from simterm.kernel.domain.base import CamelModel
from simterm.kernel.utils.time import new_id, now_ms


class OutputLevel(StrEnum):
    """Severity of an output line; the renderer picks colors from it."""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    SYSTEM = "system"
    DEBUG = "debug"


class OutputEntry(CamelModel):
    """One immutable line (or block) of terminal output."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: new_id("out"))
    level: OutputLevel
    message: str
    timestamp_ms: int = Field(default_factory=now_ms)
    metadata: dict[str, Any] | None = None

    @property
    def is_error(self) -> bool:
        return self.level is OutputLevel.ERROR


class LogFilter(CamelModel):
    """Criteria for searching a tab's output log.

    Empty ``levels`` admits every level. ``regex``, when set, takes the
    place of ``query`` for matching.
    """

    levels: list[OutputLevel] = Field(default_factory=list)
    start_ms: int | None = None
    end_ms: int | None = None
    query: str = ""
    regex: str | None = None
    case_sensitive: bool = False

    @property
    def has_search(self) -> bool:
        return bool(self.query or self.regex)


class MatchSpan(CamelModel):
    """``message[start:end]`` matched a search."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int
    text: str


class LogSearchResult(CamelModel):
    """One log entry admitted by a :class:`LogFilter`."""

    entry: OutputEntry
    matches: list[MatchSpan] = Field(default_factory=list)
    score: float = 0.0


class LogFilterStats(CamelModel):
    """How many log entries a filter admits, broken down by level."""

    total: int
    filtered: int
    by_level: dict[str, int] = Field(default_factory=dict)


__all__ = [
    "LogFilter",
    "LogFilterStats",
    "LogSearchResult",
    "MatchSpan",
    "OutputEntry",
    "OutputLevel",
]
