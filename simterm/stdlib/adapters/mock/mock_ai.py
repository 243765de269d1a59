"""Deterministic AI enhancer for tests and offline use."""

from __future__ import annotations

import asyncio
import re

__all__ = ["MockAIEnhancer"]

_COMMENT_PREFIX: dict[str, str] = {
    "python": "#",
    "ruby": "#",
    "bash": "#",
    "powershell": "#",
    "sql": "--",
    "html": "<!--",
    "xml": "<!--",
    "css": "/*",
}

_SUGGESTIONS: dict[str, list[str]] = {
    "install": ["npm install", "pip install -r requirements.txt", "yarn install"],
    "test": ["npm test", "pytest", "jest --watch"],
    "build": ["npm run build", "vite build", "webpack --mode production"],
    "server": ["npm run dev", "live-server", "http-server -p 8000"],
    "git": ["git status", "git add .", "git commit -m \"update\""],
    "file": ["ls -la", "find . -name \"*.js\"", "cat README.md"],
}


class MockAIEnhancer:
    """AI enhancer that applies simple, predictable rewrites.

    - ``var`` declarations become ``let`` (javascript/typescript)
    - trailing whitespace is stripped
    - a header comment naming the language is prepended

    Parameters
    ----------
    delay_seconds : float
        Simulated latency for each call
    responses : dict[str, str] | None
        Canned results keyed by exact input code, checked first
    """

    def __init__(
        self, delay_seconds: float = 0.0, responses: dict[str, str] | None = None
    ) -> None:
        self.delay_seconds = delay_seconds
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, str]] = []

    async def aenhance(self, code: str, language: str) -> str:
        self.calls.append((code, language))
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if code in self.responses:
            return self.responses[code]

        body = code
        if language in ("javascript", "typescript"):
            body = re.sub(r"\bvar\b", "let", body)
        body = "\n".join(line.rstrip() for line in body.splitlines())

        prefix = _COMMENT_PREFIX.get(language, "//")
        suffix = {"<!--": " -->", "/*": " */"}.get(prefix, "")
        return f"{prefix} Enhanced {language} code{suffix}\n{body}"

    async def asuggest(self, prompt: str) -> list[str]:
        self.calls.append((prompt, "suggest"))
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        words = prompt.lower().split()
        suggestions: list[str] = []
        for keyword, commands in _SUGGESTIONS.items():
            if any(keyword in word for word in words):
                suggestions.extend(cmd for cmd in commands if cmd not in suggestions)
        return suggestions or ["help"]
