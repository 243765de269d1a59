"""Tests for the AI commands."""

from __future__ import annotations

import pytest

from simterm.api import Terminal
from simterm.kernel.config import SimTermConfig
from simterm.kernel.domain.output import OutputLevel
from simterm.kernel.exceptions import AIServiceError
from simterm.stdlib.adapters import MockAIEnhancer
from simterm.stdlib.commands.ai import DEFAULT_SUGGESTIONS


class BrokenAI:
    """Enhancer whose every call fails."""

    async def aenhance(self, code: str, language: str) -> str:
        raise AIServiceError("enhance", "backend down")

    async def asuggest(self, prompt: str) -> list[str]:
        raise AIServiceError("suggest", "backend down")


class BuggyAI(MockAIEnhancer):
    """Enhancer with a programming error in it."""

    async def asuggest(self, prompt: str) -> list[str]:
        raise KeyError(prompt)


@pytest.fixture
def offline(clock) -> Terminal:
    return Terminal.create(SimTermConfig(), clock=clock)


@pytest.fixture
def broken(clock) -> Terminal:
    return Terminal.create(SimTermConfig(), ai=BrokenAI(), clock=clock)


def _default_suggestions() -> str:
    return "\n".join(["AI Suggestions:", *(f"• {item}" for item in DEFAULT_SUGGESTIONS)])


class TestAiQuery:
    @pytest.mark.asyncio()
    async def test_answers_from_backend(self, terminal: Terminal, ai: MockAIEnhancer) -> None:
        (output,) = await terminal.run("ai how do I run the test suite")

        assert output.level is OutputLevel.SUCCESS
        assert output.message == "AI Response: npm test, pytest, jest --watch"
        assert ai.calls == [("how do I run the test suite", "suggest")]

    @pytest.mark.asyncio()
    async def test_requires_a_query(self, terminal: Terminal) -> None:
        (output,) = await terminal.run("ai")
        assert output.is_error
        assert output.message == "Usage: ai <query>"

    @pytest.mark.asyncio()
    async def test_without_backend(self, offline: Terminal) -> None:
        (output,) = await offline.run("ai hello")
        assert output.message == "AI service unavailable"

    @pytest.mark.asyncio()
    async def test_backend_failure_is_reported(self, broken: Terminal) -> None:
        (output,) = await broken.run("ai hello")
        assert output.is_error
        assert output.message == "AI service unavailable"

    @pytest.mark.asyncio()
    async def test_unexpected_error_is_not_masked(self, clock) -> None:
        terminal = Terminal.create(SimTermConfig(), ai=BuggyAI(), clock=clock)
        (output,) = await terminal.run("ai hello")

        assert output.is_error
        assert output.message == "Error executing ai hello: 'hello'"
        assert terminal.history.entries()[-1].exit_code == 1


class TestEnhance:
    @pytest.mark.asyncio()
    async def test_inline_code(self, terminal: Terminal) -> None:
        (output,) = await terminal.run("enhance 'var x = 1' javascript")

        assert output.message == "Enhanced Code:\n// Enhanced javascript code\nlet x = 1"
        assert output.metadata == {"language": "javascript"}

    @pytest.mark.asyncio()
    async def test_file_language_from_extension(
        self, terminal: Terminal, ai: MockAIEnhancer
    ) -> None:
        await terminal.run("write script.py 'print(1)   '")
        (output,) = await terminal.run("enhance script.py")

        assert output.message == "Enhanced Code:\n# Enhanced python code\nprint(1)"
        assert ai.calls == [("print(1)   ", "python")]

    @pytest.mark.asyncio()
    async def test_failure(self, broken: Terminal) -> None:
        (output,) = await broken.run("enhance src/index.js")
        assert output.is_error
        assert output.message == "AI enhancement failed"

    @pytest.mark.asyncio()
    async def test_without_backend(self, offline: Terminal) -> None:
        (output,) = await offline.run("enhance src/index.js")
        assert output.message == "AI service unavailable"


class TestSuggest:
    @pytest.mark.asyncio()
    async def test_defaults_without_prompt(self, terminal: Terminal) -> None:
        (output,) = await terminal.run("suggest")
        assert output.message == _default_suggestions()

    @pytest.mark.asyncio()
    async def test_prompted(self, terminal: Terminal) -> None:
        (output,) = await terminal.run("suggest build it")
        assert output.message.splitlines() == [
            "AI Suggestions:",
            "• npm run build",
            "• vite build",
            "• webpack --mode production",
        ]

    @pytest.mark.asyncio()
    @pytest.mark.parametrize("fixture", ["offline", "broken"])
    async def test_falls_back_to_defaults(
        self, fixture: str, request: pytest.FixtureRequest
    ) -> None:
        terminal: Terminal = request.getfixturevalue(fixture)
        (output,) = await terminal.run("suggest build it")
        assert output.level is OutputLevel.INFO
        assert output.message == _default_suggestions()
