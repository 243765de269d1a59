"""Domain models for terminal sessions and tabs.

A session is the unit of export/import handed to the cloud-sync layer.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from simterm.kernel.domain.base import CamelModel
from simterm.kernel.domain.history import HistoryEntry
from simterm.kernel.domain.output import OutputEntry
from simterm.kernel.utils.time import new_id, now_ms


class Tab(CamelModel):
    """One terminal tab: its scrollback and the commands typed into it."""

    id: str = Field(default_factory=lambda: new_id("tab"))
    name: str
    logs: list[OutputEntry] = Field(default_factory=list)
    history: list[HistoryEntry] = Field(default_factory=list)
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)

    def touch(self, timestamp_ms: int | None = None) -> None:
        self.updated_at = timestamp_ms if timestamp_ms is not None else now_ms()


class Session(CamelModel):
    """A complete terminal session."""

    id: str = Field(default_factory=lambda: new_id("session"))
    name: str
    tabs: list[Tab] = Field(default_factory=list)
    history: list[HistoryEntry] = Field(default_factory=list)
    environment: dict[str, str] = Field(default_factory=dict)
    aliases: dict[str, str] = Field(default_factory=dict)
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)
    metadata: dict[str, Any] = Field(default_factory=dict)

    def get_tab(self, tab_id: str) -> Tab | None:
        return next((tab for tab in self.tabs if tab.id == tab_id), None)

    def touch(self, timestamp_ms: int | None = None) -> None:
        self.updated_at = timestamp_ms if timestamp_ms is not None else now_ms()


__all__ = ["Session", "Tab"]
