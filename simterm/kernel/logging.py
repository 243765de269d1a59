"""Centralized logging configuration for simterm using Loguru.

Examples
--------
Basic usage:

>>> from simterm.kernel.logging import get_logger
>>> logger = get_logger(__name__)
>>> logger.info("Command dispatched", command="ls")

Configure logging globally::

    from simterm.kernel.logging import configure_logging
    configure_logging(level="DEBUG", format="rich")
"""

from __future__ import annotations

import contextvars
import os
import sys
from contextlib import suppress
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from loguru import logger
from rich.logging import RichHandler

if TYPE_CHECKING:
    from loguru import Logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["console", "json", "structured", "rich"]

_CURRENT_CONFIG: dict | None = None
_HANDLER_IDS: list[int] = []

# Session ID of the terminal currently dispatching, "-" outside a session
session_id: contextvars.ContextVar[str] = contextvars.ContextVar("session_id", default="-")


def configure_logging(
    level: LogLevel = "INFO",
    format: LogFormat = "structured",
    output_file: str | Path | None = None,
    use_color: bool = True,
    include_timestamp: bool = True,
    force_reconfigure: bool = False,
    use_rich: bool = False,
    backtrace: bool = True,
    diagnose: bool = False,
) -> None:
    """Configure global logging for simterm.

    Idempotent: calling it again with the same settings does not add handlers.

    Parameters
    ----------
    level : LogLevel, default="INFO"
        Minimum log level to output
    format : LogFormat, default="structured"
        Output format:
        - "console": plain single-line output
        - "json": serialized records for log aggregation
        - "structured": colored Loguru format
        - "rich": Rich console handler
    output_file : str | Path | None, default=None
        Optional file to write JSON logs to (in addition to stderr)
    use_color : bool, default=True
        Use ANSI colors in structured format (auto-disabled for non-TTY)
    include_timestamp : bool, default=True
        Include timestamp in log output
    force_reconfigure : bool, default=False
        Reconfigure even if the settings are unchanged
    use_rich : bool, default=False
        Use the Rich handler regardless of ``format``
    backtrace : bool, default=True
        Extend tracebacks beyond the catching frame
    diagnose : bool, default=False
        Show variable values in tracebacks

    Examples
    --------
    Interactive shell::

        configure_logging(level="WARNING", format="rich")

    Testing setup::

        configure_logging(level="DEBUG", format="console", force_reconfigure=True)
    """
    global _CURRENT_CONFIG

    current_config = {
        "level": level,
        "format": format,
        "output_file": str(output_file) if output_file else None,
        "use_color": use_color,
        "include_timestamp": include_timestamp,
        "use_rich": use_rich,
        "backtrace": backtrace,
        "diagnose": diagnose,
    }

    if not force_reconfigure and current_config == _CURRENT_CONFIG:
        return

    # Remove only our own handlers so pytest's caplog sinks survive
    for handler_id in _HANDLER_IDS:
        with suppress(ValueError):
            logger.remove(handler_id)
    _HANDLER_IDS.clear()

    if use_rich or format == "rich":
        rich_handler = RichHandler(
            rich_tracebacks=True,
            markup=False,
            show_time=include_timestamp,
            show_level=True,
            show_path=False,
        )
        handler_id = logger.add(
            sink=rich_handler,
            level=level,
            format="{message}",
            backtrace=backtrace,
            diagnose=diagnose,
        )
        _HANDLER_IDS.append(handler_id)

    elif format == "json":
        handler_id = logger.add(
            sink=sys.stderr,
            level=level,
            serialize=True,
            backtrace=backtrace,
            diagnose=diagnose,
        )
        _HANDLER_IDS.append(handler_id)

    elif format == "structured":
        timestamp_fmt = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> " if include_timestamp else ""
        colorize = use_color and sys.stderr.isatty()
        color_level = "<level>{level: <8}</level>" if colorize else "{level: <8}"
        structured_format = (
            f"{timestamp_fmt}[{color_level}]"
            "<cyan>{extra[module]}</cyan> | <level>{message}</level>"
        )
        handler_id = logger.add(
            sink=sys.stderr,
            level=level,
            format=structured_format,
            colorize=colorize,
            backtrace=backtrace,
            diagnose=diagnose,
        )
        _HANDLER_IDS.append(handler_id)

    else:  # console
        timestamp_fmt = "{time:YYYY-MM-DD HH:mm:ss} " if include_timestamp else ""
        console_format = f"{timestamp_fmt}{{level: <8}} | {{name}} | {{message}}"
        handler_id = logger.add(
            sink=sys.stderr,
            level=level,
            format=console_format,
            colorize=False,
            backtrace=backtrace,
            diagnose=diagnose,
        )
        _HANDLER_IDS.append(handler_id)

    if output_file:
        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        handler_id = logger.add(
            sink=output_path,
            level=level,
            serialize=True,
            rotation="10 MB",
            retention="1 week",
            backtrace=backtrace,
            diagnose=diagnose,
        )
        _HANDLER_IDS.append(handler_id)

    _CURRENT_CONFIG = current_config


@lru_cache(maxsize=256)
def get_logger(name: str) -> Logger:
    """Get a logger bound with the calling module's name.

    Parameters
    ----------
    name : str
        Logger name, typically ``__name__``

    Returns
    -------
    loguru.Logger
        Logger instance bound with ``module=name``

    Notes
    -----
    If :func:`configure_logging` has not been called yet, defaults are taken
    from ``SIMTERM_LOG_LEVEL`` and ``SIMTERM_LOG_FORMAT``.
    """
    _ensure_configured()
    return logger.bind(module=name)


def set_session_id(sid: str) -> contextvars.Token[str]:
    """Set the session ID for log records emitted in the current context."""
    return session_id.set(sid)


def get_session_id() -> str:
    """Return the current session ID, or ``"-"`` if none is set.

    Examples
    --------
    >>> get_session_id()
    '-'
    """
    return session_id.get()


def reset_session_id(token: contextvars.Token[str]) -> None:
    """Restore the session ID that was active before :func:`set_session_id`."""
    session_id.reset(token)


def _patch_record(record: dict) -> None:
    record["extra"].setdefault("module", record["name"])
    record["extra"]["session_id"] = session_id.get()


logger.configure(patcher=_patch_record)  # type: ignore[arg-type]


def _ensure_configured() -> None:
    """Apply default configuration on first use (lazy initialization)."""
    if _CURRENT_CONFIG is None:
        level = os.getenv("SIMTERM_LOG_LEVEL", "WARNING").upper()
        format_type = os.getenv("SIMTERM_LOG_FORMAT", "structured").lower()
        configure_logging(level=level, format=format_type)  # type: ignore[arg-type]
