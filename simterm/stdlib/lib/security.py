"""SecurityPolicy lib — input screening that runs before dispatch.

Lines are rejected, never rewritten: a blocked line raises
:class:`~simterm.kernel.exceptions.SecurityRejectionError` and the
dispatcher reports it as a single error entry.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from simterm.kernel.config.models import SecurityConfig
from simterm.kernel.exceptions import SecurityRejectionError
from simterm.kernel.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

logger = get_logger(__name__)

BLOCKED_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"rm\s+-rf\s+/", re.IGNORECASE),
    re.compile(r"format\s+[a-z]:", re.IGNORECASE),
    re.compile(r"del\s+/[fs]\s+/[sq]", re.IGNORECASE),
    re.compile(r"sudo\s+rm\s+-rf", re.IGNORECASE),
    re.compile(r"<script[^>]*>", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"<[^>]*\son\w+\s*=", re.IGNORECASE),
    re.compile(r"\beval\s*\(", re.IGNORECASE),
    re.compile(r"\bexec\s*\(", re.IGNORECASE),
    re.compile(r"\bsystem\s*\(", re.IGNORECASE),
)

DANGEROUS_SCHEMES = frozenset({"javascript", "data", "vbscript", "file"})

MAX_FILENAME_LENGTH = 255

_FILENAME_SPECIALS = re.compile(r'[<>:"|?*/\\]')
_EDGE_DOTS = re.compile(r"^\.+|\.+$")


class SecurityPolicy:
    """Validates raw input lines against a :class:`SecurityConfig`.

    Checks run in this order, first failure wins:

    1. length against ``max_input_length``
    2. configured blocked commands (case-insensitive, whole words)
    3. built-in dangerous patterns (destructive shell idioms, script injection)
    4. the allow-list, when one is configured

    When the caller passes its alias table, a leading alias is expanded
    first (one level, as the dispatcher does) and checks 2-4 also see the
    expanded line.

    Parameters
    ----------
    config : SecurityConfig | None
        Policy settings; defaults apply when omitted.
    """

    def __init__(self, config: SecurityConfig | None = None) -> None:
        self._config = config or SecurityConfig()
        self._blocked = [_phrase(cmd) for cmd in self._config.blocked_commands]
        self._allowed = set(self._config.allowed_commands)

    @property
    def config(self) -> SecurityConfig:
        return self._config

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    def validate(self, line: str, aliases: Mapping[str, str] | None = None) -> str:
        """Return ``line`` unchanged if it may run.

        ``aliases`` maps alias names to their definitions; the allow-list
        then judges the command the alias resolves to.

        Raises
        ------
        SecurityRejectionError
            If any check fails; ``reason`` says which one.
        """
        if not self._config.enabled:
            return line

        if len(line) > self._config.max_input_length:
            raise self._reject(
                f"input exceeds {self._config.max_input_length} characters", line[:80]
            )

        resolved = _resolve_alias(line, aliases or {})
        candidates = (line,) if resolved == line else (line, resolved)

        for blocked in self._blocked:
            if any(blocked.search(text) for text in candidates):
                raise self._reject("command is blocked for security reasons", line)

        for pattern in BLOCKED_PATTERNS:
            if any(pattern.search(text) for text in candidates):
                raise self._reject("command contains blocked pattern", line)

        if self._allowed:
            name = resolved.split(maxsplit=1)[0] if resolved.strip() else ""
            if name and name not in self._allowed:
                raise self._reject(f"'{name}' is not in the allowed command list", line)

        return line

    def is_allowed(self, line: str, aliases: Mapping[str, str] | None = None) -> bool:
        """Boolean form of :meth:`validate`."""
        try:
            self.validate(line, aliases)
        except SecurityRejectionError:
            return False
        return True

    def with_blocked(self, commands: Iterable[str]) -> SecurityPolicy:
        """A new policy that also blocks ``commands``."""
        merged = tuple(dict.fromkeys((*self._config.blocked_commands, *commands)))
        return SecurityPolicy(
            SecurityConfig(
                enabled=self._config.enabled,
                max_input_length=self._config.max_input_length,
                blocked_commands=merged,
                allowed_commands=self._config.allowed_commands,
            )
        )

    @staticmethod
    def _reject(reason: str, value: str) -> SecurityRejectionError:
        logger.warning("Rejected input: {reason}", reason=reason)
        return SecurityRejectionError(reason, value)


def _resolve_alias(line: str, aliases: Mapping[str, str]) -> str:
    """Replace a leading alias in ``line`` with its definition.

    >>> _resolve_alias("ll src", {"ll": "ls -la"})
    'ls -la src'
    """
    words = line.split(maxsplit=1)
    if not words or words[0] not in aliases or not aliases[words[0]].strip():
        return line
    return " ".join([aliases[words[0]].strip(), *words[1:]])


def _phrase(command: str) -> re.Pattern[str]:
    r"""Compile a blocked command into a word-bounded, whitespace-tolerant pattern.

    >>> bool(_phrase("format").search("echo information"))
    False
    >>> bool(_phrase("del /f /s /q").search("DEL  /F /S /Q x"))
    True
    """
    parts = [re.escape(part) for part in command.split()]
    body = r"\s+".join(parts)
    head = r"\b" if command[:1].isalnum() else ""
    tail = r"\b" if command[-1:].isalnum() else ""
    return re.compile(head + body + tail, re.IGNORECASE)


def validate_url(url: str) -> bool:
    """True if ``url`` is absolute and uses a safe scheme.

    >>> validate_url("https://example.com")
    True
    >>> validate_url("javascript:alert(1)")
    False
    >>> validate_url("example.com")
    False
    """
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return False
    scheme = parts.scheme.lower()
    if not scheme or scheme in DANGEROUS_SCHEMES:
        return False
    return bool(parts.netloc)


def sanitize_filename(filename: str) -> str:
    """Strip traversal sequences, path separators and reserved characters.

    >>> sanitize_filename("../report<1>?.txt")
    'report1.txt'
    >>> sanitize_filename("  .hidden.  ")
    'hidden'
    """
    sanitized = filename.replace("..", "")
    sanitized = _FILENAME_SPECIALS.sub("", sanitized)
    sanitized = _EDGE_DOTS.sub("", sanitized.strip())
    return sanitized[:MAX_FILENAME_LENGTH]


__all__ = [
    "BLOCKED_PATTERNS",
    "DANGEROUS_SCHEMES",
    "SecurityPolicy",
    "sanitize_filename",
    "validate_url",
]
