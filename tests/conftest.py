"""Shared fixtures for the simterm test suite.

- clock: a controllable millisecond clock
- terminal: a fresh :class:`Terminal` on the seeded sample workspace
- run: execute one line on ``terminal`` and get its output entries back
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import pytest

from simterm.api import Terminal
from simterm.kernel.config import SimTermConfig, clear_config_cache
from simterm.kernel.domain.output import OutputEntry
from simterm.stdlib.adapters import MockAIEnhancer

# 2025-01-15T12:00:00Z
START_MS = 1_736_942_400_000


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start_ms: int = START_MS) -> None:
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ai() -> MockAIEnhancer:
    return MockAIEnhancer()


@pytest.fixture
def terminal(clock: FakeClock, ai: MockAIEnhancer) -> Terminal:
    return Terminal.create(SimTermConfig(), ai=ai, clock=clock)


@pytest.fixture
def run(terminal: Terminal) -> Callable[[str], Awaitable[list[OutputEntry]]]:
    async def _run(line: str) -> list[OutputEntry]:
        return await terminal.run(line)

    return _run


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "SIMTERM_CONFIG_PATH",
        "SIMTERM_LOG_LEVEL",
        "SIMTERM_LOG_FORMAT",
        "SIMTERM_HISTORY_SIZE",
        "SIMTERM_HISTORY_FILE",
        "SIMTERM_LOG_FILE",
        "SIMTERM_LOG_COLOR",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_config_cache()
