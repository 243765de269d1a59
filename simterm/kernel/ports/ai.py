"""AI enhancer port — rewrites a code snippet.

Used by the ``enhance`` command. The engine ships only a deterministic mock
adapter; a real service plugs in by implementing this protocol.

Adapters report backend failures (unreachable service, bad response) by
raising :class:`~simterm.kernel.exceptions.AIServiceError`; the AI commands
turn that into a user-facing message. Any other exception is a bug and
reaches the dispatcher.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol, runtime_checkable


@runtime_checkable
class AIEnhancer(Protocol):
    """Code enhancement service."""

    @abstractmethod
    async def aenhance(self, code: str, language: str) -> str:
        """Return an improved version of ``code``.

        Args
        ----
            code: Source snippet to enhance.
            language: Language identifier (e.g. ``"python"``).
        """
        ...

    @abstractmethod
    async def asuggest(self, prompt: str) -> list[str]:
        """Return shell command suggestions for a natural-language prompt."""
        ...
