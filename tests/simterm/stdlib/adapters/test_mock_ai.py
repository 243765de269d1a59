"""Tests for MockAIEnhancer."""

from __future__ import annotations

import pytest

from simterm.stdlib.adapters import MockAIEnhancer


class TestMockAIEnhancer:
    @pytest.mark.asyncio()
    async def test_enhance_javascript(self) -> None:
        ai = MockAIEnhancer()
        result = await ai.aenhance("var x = 1;   \nvariable = 2", "javascript")

        assert result == "// Enhanced javascript code\nlet x = 1;\nvariable = 2"
        assert ai.calls == [("var x = 1;   \nvariable = 2", "javascript")]

    @pytest.mark.asyncio()
    async def test_comment_style_follows_language(self) -> None:
        ai = MockAIEnhancer()
        assert (await ai.aenhance("x = 1", "python")).startswith("# Enhanced python code\n")
        assert (await ai.aenhance("<p/>", "html")).startswith("<!-- Enhanced html code -->")

    @pytest.mark.asyncio()
    async def test_canned_responses(self) -> None:
        ai = MockAIEnhancer(responses={"x": "y"})
        assert await ai.aenhance("x", "python") == "y"

    @pytest.mark.asyncio()
    async def test_suggest(self) -> None:
        ai = MockAIEnhancer()
        assert await ai.asuggest("how do I run tests") == ["npm test", "pytest", "jest --watch"]
        assert await ai.asuggest("something else") == ["help"]
