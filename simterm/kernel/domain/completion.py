"""Domain models for autocomplete."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from simterm.kernel.domain.base import CamelModel


class CompletionType(StrEnum):
    """Kind of candidate a suggestion completes to."""

    COMMAND = "command"
    VARIABLE = "variable"
    FUNCTION = "function"
    KEYWORD = "keyword"
    SNIPPET = "snippet"


class AutoCompleteItem(CamelModel):
    """A ranked completion candidate."""

    value: str
    label: str
    description: str | None = None
    type: CompletionType = CompletionType.COMMAND
    score: float = 0.0
    metadata: dict[str, Any] | None = None


@dataclass(slots=True)
class CompletionContext:
    """What the ranker sees when asked for suggestions.

    Attributes
    ----------
    current_input : str
        Full input line.
    cursor_position : int | None
        Caret offset into ``current_input``; None means end of line.
    history : list[str]
        Previously executed commands in chronological order.
    environment : dict[str, str]
        Shell variables, offered as ``$NAME`` completions.
    """

    current_input: str
    cursor_position: int | None = None
    history: list[str] = field(default_factory=list)
    environment: dict[str, str] = field(default_factory=dict)

    @property
    def text_before_cursor(self) -> str:
        if self.cursor_position is None:
            return self.current_input
        position = max(0, min(self.cursor_position, len(self.current_input)))
        return self.current_input[:position]

    @property
    def current_word(self) -> str:
        """The whitespace-delimited word ending at the cursor."""
        before = self.text_before_cursor
        if not before or before[-1].isspace():
            return ""
        return before.split()[-1]


__all__ = ["AutoCompleteItem", "CompletionContext", "CompletionType"]
