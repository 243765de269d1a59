"""Configuration data models for simterm."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from simterm.kernel.exceptions import ValidationError

HISTORY_MIN_SIZE = 10
HISTORY_MAX_SIZE = 10_000

DEFAULT_BLOCKED_COMMANDS: tuple[str, ...] = (
    "rm -rf /",
    "format",
    "del /f /s /q",
    "sudo rm -rf",
)


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Logging configuration.

    Attributes
    ----------
    level : str, default="WARNING"
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    format : str, default="structured"
        Output format (console, json, structured, rich)
    output_file : str | None, default=None
        Optional file path to write JSON logs to
    use_color : bool, default=True
        Use ANSI color codes (auto-disabled for non-TTY)
    include_timestamp : bool, default=True
        Include timestamp in log output

    Examples
    --------
    TOML configuration:

    ```toml
    [tool.simterm.logging]
    level = "DEBUG"
    format = "rich"
    ```

    Environment variable overrides:

    ```bash
    export SIMTERM_LOG_LEVEL=DEBUG
    export SIMTERM_LOG_FORMAT=json
    ```
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["console", "json", "structured", "rich"] = "structured"
    output_file: str | None = None
    use_color: bool = True
    include_timestamp: bool = True


@dataclass(frozen=True, slots=True)
class HistoryConfig:
    """Command history bound and storage backend.

    Attributes
    ----------
    max_size : int, default=1000
        Maximum retained entries, clamped to 10..10000
    storage : str, default="memory"
        ``memory`` keeps history for the process lifetime, ``file`` persists
        it as JSON under ``path``
    path : str | None
        JSON file used by the file backend
    """

    max_size: int = 1000
    storage: Literal["memory", "file"] = "memory"
    path: str | None = None

    def __post_init__(self) -> None:
        if self.storage not in ("memory", "file"):
            raise ValidationError("history.storage", "must be 'memory' or 'file'", self.storage)
        if self.storage == "file" and not self.path:
            raise ValidationError("history.path", "is required when storage is 'file'")

    @property
    def effective_max_size(self) -> int:
        """The bound actually applied after clamping."""
        return clamp_history_size(self.max_size)


@dataclass(frozen=True, slots=True)
class SyntaxConfig:
    """Syntax tokenizer settings."""

    cache_size: int = 100
    default_language: str = "javascript"

    def __post_init__(self) -> None:
        if self.cache_size < 0:
            raise ValidationError("syntax.cache_size", "must be >= 0", self.cache_size)


@dataclass(frozen=True, slots=True)
class SecurityConfig:
    """Input validation policy.

    Attributes
    ----------
    enabled : bool
        When False every line is dispatched unchecked
    max_input_length : int
        Lines longer than this are rejected
    blocked_commands : tuple[str, ...]
        Substrings that reject a line outright (case-insensitive)
    allowed_commands : tuple[str, ...]
        When non-empty, only these command names may run
    """

    enabled: bool = True
    max_input_length: int = 10_000
    blocked_commands: tuple[str, ...] = DEFAULT_BLOCKED_COMMANDS
    allowed_commands: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class DispatcherConfig:
    """Command execution settings.

    Attributes
    ----------
    command_timeout_seconds : float | None
        Per-command budget enforced with ``asyncio.wait_for``; None disables it
    simulated_delay_ms : int
        Fixed delay applied before every handler runs
    """

    command_timeout_seconds: float | None = 30.0
    simulated_delay_ms: int = 0

    def __post_init__(self) -> None:
        if self.command_timeout_seconds is not None and self.command_timeout_seconds <= 0:
            raise ValidationError(
                "dispatcher.command_timeout_seconds",
                "must be positive",
                self.command_timeout_seconds,
            )
        if self.simulated_delay_ms < 0:
            raise ValidationError(
                "dispatcher.simulated_delay_ms", "must be >= 0", self.simulated_delay_ms
            )


@dataclass(slots=True)
class SimTermConfig:
    """Complete simterm configuration.

    Examples
    --------
    TOML configuration in pyproject.toml:

    ```toml
    [tool.simterm]
    user = "developer"
    hostname = "terminal"

    [tool.simterm.history]
    max_size = 500
    storage = "file"
    path = "${HOME}/.simterm/history.json"

    [tool.simterm.dispatcher]
    command_timeout_seconds = 10
    ```
    """

    user: str = "developer"
    hostname: str = "terminal"
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    syntax: SyntaxConfig = field(default_factory=SyntaxConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    dispatcher: DispatcherConfig = field(default_factory=DispatcherConfig)


def clamp_history_size(size: int) -> int:
    """Clamp a history bound into the supported range.

    >>> clamp_history_size(5)
    10
    >>> clamp_history_size(50_000)
    10000
    """
    return max(HISTORY_MIN_SIZE, min(HISTORY_MAX_SIZE, size))
