"""Configuration loader for simterm.

Discovery order:

1. Explicit path argument
2. ``SIMTERM_CONFIG_PATH`` env var
3. ``simterm.toml`` or ``.simterm.toml`` in CWD
4. ``pyproject.toml`` with a ``[tool.simterm]`` table in CWD or a parent
"""

from __future__ import annotations

import os
import re
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, cast

from simterm.kernel.config.models import (
    DEFAULT_BLOCKED_COMMANDS,
    DispatcherConfig,
    HistoryConfig,
    LoggingConfig,
    SecurityConfig,
    SimTermConfig,
    SyntaxConfig,
)
from simterm.kernel.exceptions import ConfigurationError, ValidationError
from simterm.kernel.logging import get_logger

_TRUTHY_VALUES = frozenset({"true", "1", "yes", "on", "enabled"})
_FALSY_VALUES = frozenset({"false", "0", "no", "off", "disabled"})

_LOCAL_CONFIG_NAMES = ("simterm.toml", ".simterm.toml")

logger = get_logger(__name__)


def _parse_bool_env(value: str) -> bool:
    """Parse boolean from environment variable value.

    Raises
    ------
    ValueError
        If value is not a recognized boolean string
    """
    normalized = value.lower().strip()
    if normalized in _TRUTHY_VALUES:
        return True
    if normalized in _FALSY_VALUES:
        return False
    expected = sorted(_TRUTHY_VALUES | _FALSY_VALUES)
    raise ValueError(f"Invalid boolean value: {value!r}. Expected one of: {expected}")


@lru_cache(maxsize=32)
def _load_and_parse_cached(path_str: str) -> SimTermConfig:
    """Cached configuration loader."""
    return ConfigLoader()._load_and_parse(Path(path_str))


class ConfigLoader:
    """Loads and processes simterm TOML configuration."""

    ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

    def load_config_file(self, path: str | Path | None = None) -> SimTermConfig:
        """Load configuration from a TOML file.

        Parameters
        ----------
        path : str | Path | None
            Path to config file. If None, searches using discovery order.

        Returns
        -------
        SimTermConfig
            Parsed configuration with environment variables substituted

        Raises
        ------
        FileNotFoundError
            If no configuration file is found
        ConfigurationError
            If the file is not valid TOML or a section is malformed
        """
        config_path = self._find_config_file(path)
        return _load_and_parse_cached(str(config_path.absolute()))

    def _load_and_parse(self, config_path: Path) -> SimTermConfig:
        logger.info("Loading configuration from {path}", path=config_path)
        try:
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(str(config_path), f"invalid TOML: {e}") from e

        if "tool" in data and "simterm" in data.get("tool", {}):
            simterm_data = data["tool"]["simterm"]
        elif config_path.name == "pyproject.toml":
            logger.warning("No [tool.simterm] section found in pyproject.toml, using defaults")
            simterm_data = {}
        else:
            simterm_data = data

        simterm_data = self._substitute_env_vars(simterm_data)
        try:
            return self._parse_config(simterm_data)
        except (TypeError, ValidationError) as e:
            raise ConfigurationError(str(config_path), str(e)) from e

    def _find_config_file(self, path: str | Path | None) -> Path:
        if path:
            config_path = Path(path)
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return config_path

        if env_path := os.getenv("SIMTERM_CONFIG_PATH"):
            config_path = Path(env_path)
            if config_path.exists():
                logger.debug("Using config from SIMTERM_CONFIG_PATH: {}", config_path)
                return config_path
            logger.warning("SIMTERM_CONFIG_PATH set but file not found: {}", config_path)

        for name in _LOCAL_CONFIG_NAMES:
            if Path(name).exists():
                return Path(name)

        current = Path.cwd()
        while True:
            pyproject = current / "pyproject.toml"
            if pyproject.exists():
                with pyproject.open("rb") as f:
                    try:
                        data = tomllib.load(f)
                    except tomllib.TOMLDecodeError:
                        data = {}
                if "simterm" in data.get("tool", {}):
                    return pyproject
            if current == current.parent:
                break
            current = current.parent

        raise FileNotFoundError(
            "No configuration file found. Provide a path, set SIMTERM_CONFIG_PATH, "
            "create simterm.toml, or add [tool.simterm] to pyproject.toml"
        )

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively replace ``${VAR}`` placeholders with environment values.

        Unknown variables keep their placeholder.
        """
        if isinstance(data, str):

            def replacer(match: re.Match[str]) -> str:
                var_name = match.group(1)
                value = os.environ.get(var_name)
                if value is None:
                    logger.debug(
                        "Environment variable ${{{var_name}}} not found, keeping placeholder",
                        var_name=var_name,
                    )
                    return match.group(0)
                return value

            return self.ENV_VAR_PATTERN.sub(replacer, data)

        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}

        if isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]

        return data

    def _parse_config(self, data: dict[str, Any]) -> SimTermConfig:
        config = SimTermConfig()

        if "user" in data:
            config.user = str(data["user"])
        if "hostname" in data:
            config.hostname = str(data["hostname"])

        config.logging = self._parse_logging_config(data.get("logging", {}))
        config.history = self._parse_history_config(data.get("history", {}))

        if syntax_data := data.get("syntax"):
            config.syntax = SyntaxConfig(
                cache_size=int(syntax_data.get("cache_size", 100)),
                default_language=syntax_data.get("default_language", "javascript"),
            )

        if security_data := data.get("security"):
            config.security = SecurityConfig(
                enabled=bool(security_data.get("enabled", True)),
                max_input_length=int(security_data.get("max_input_length", 10_000)),
                blocked_commands=tuple(
                    security_data.get("blocked_commands", DEFAULT_BLOCKED_COMMANDS)
                ),
                allowed_commands=tuple(security_data.get("allowed_commands", ())),
            )

        if dispatcher_data := data.get("dispatcher"):
            config.dispatcher = DispatcherConfig(
                command_timeout_seconds=dispatcher_data.get("command_timeout_seconds", 30.0),
                simulated_delay_ms=int(dispatcher_data.get("simulated_delay_ms", 0)),
            )

        return config

    def _parse_logging_config(self, logging_data: dict[str, Any]) -> LoggingConfig:
        """Parse logging configuration with environment variable overrides.

        Environment variables take precedence over config file values:
        - SIMTERM_LOG_LEVEL: Log level
        - SIMTERM_LOG_FORMAT: Output format (console, json, structured, rich)
        - SIMTERM_LOG_FILE: Optional file path for log output
        - SIMTERM_LOG_COLOR: Use color output (true/false)
        """
        level = logging_data.get("level", "WARNING")
        format_type = logging_data.get("format", "structured")
        output_file = logging_data.get("output_file")
        use_color = logging_data.get("use_color", True)
        include_timestamp = logging_data.get("include_timestamp", True)

        if env_level := os.getenv("SIMTERM_LOG_LEVEL"):
            level = env_level.upper()
            logger.debug("Overriding log level from env: {}", level)

        if env_format := os.getenv("SIMTERM_LOG_FORMAT"):
            format_type = env_format.lower()
            logger.debug("Overriding log format from env: {}", format_type)

        if env_file := os.getenv("SIMTERM_LOG_FILE"):
            output_file = env_file

        if env_color := os.getenv("SIMTERM_LOG_COLOR"):
            try:
                use_color = _parse_bool_env(env_color)
            except ValueError as e:
                logger.warning("Invalid SIMTERM_LOG_COLOR value: {}", e)

        return LoggingConfig(
            level=cast("Literal['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']", level),
            format=cast("Literal['console', 'json', 'structured', 'rich']", format_type),
            output_file=output_file,
            use_color=use_color,
            include_timestamp=include_timestamp,
        )

    def _parse_history_config(self, history_data: dict[str, Any]) -> HistoryConfig:
        """Parse history configuration.

        ``SIMTERM_HISTORY_SIZE`` and ``SIMTERM_HISTORY_FILE`` override the file;
        setting the latter also switches the backend to ``file``.
        """
        max_size = history_data.get("max_size", 1000)
        storage = history_data.get("storage", "memory")
        path = history_data.get("path")

        if env_size := os.getenv("SIMTERM_HISTORY_SIZE"):
            try:
                max_size = int(env_size)
            except ValueError:
                logger.warning("Invalid SIMTERM_HISTORY_SIZE value: {}", env_size)

        if env_path := os.getenv("SIMTERM_HISTORY_FILE"):
            storage = "file"
            path = env_path

        return HistoryConfig(max_size=int(max_size), storage=storage, path=path)


def load_config(path: str | Path | None = None) -> SimTermConfig:
    """Load configuration from file or return defaults.

    Parameters
    ----------
    path : str | Path | None
        Path to configuration file or None to search

    Returns
    -------
    SimTermConfig
        Loaded configuration or defaults if no file found
    """
    try:
        return ConfigLoader().load_config_file(path)
    except FileNotFoundError:
        if path:
            raise
        logger.info("No configuration file found, using defaults")
        return SimTermConfig()


def clear_config_cache() -> None:
    """Clear the parsed-configuration cache (useful in tests)."""
    _load_and_parse_cached.cache_clear()
