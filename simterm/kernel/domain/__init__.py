"""Domain models shared across the engine."""

from simterm.kernel.domain.completion import AutoCompleteItem, CompletionContext, CompletionType
from simterm.kernel.domain.history import (
    RESET_CURSOR,
    CommandUsage,
    DayActivity,
    HistoryCursor,
    HistoryEntry,
    HistoryPage,
    HistoryStatistics,
)
from simterm.kernel.domain.output import (
    LogFilter,
    LogFilterStats,
    LogSearchResult,
    MatchSpan,
    OutputEntry,
    OutputLevel,
)
from simterm.kernel.domain.session import Session, Tab
from simterm.kernel.domain.syntax import TOKEN_COLORS, SyntaxToken, TokenType
from simterm.kernel.domain.terminal import ProcessInfo, ProcessStatus, TerminalState
from simterm.kernel.domain.vfs import EntryKind, VirtualEntry

__all__ = [
    "AutoCompleteItem",
    "CommandUsage",
    "CompletionContext",
    "CompletionType",
    "DayActivity",
    "EntryKind",
    "HistoryCursor",
    "HistoryEntry",
    "HistoryPage",
    "HistoryStatistics",
    "LogFilter",
    "LogFilterStats",
    "LogSearchResult",
    "MatchSpan",
    "OutputEntry",
    "OutputLevel",
    "ProcessInfo",
    "ProcessStatus",
    "RESET_CURSOR",
    "Session",
    "SyntaxToken",
    "TOKEN_COLORS",
    "Tab",
    "TerminalState",
    "TokenType",
    "VirtualEntry",
]
