"""Configuration loading and management for simterm."""

from simterm.kernel.config.loader import ConfigLoader, clear_config_cache, load_config
from simterm.kernel.config.models import (
    DispatcherConfig,
    HistoryConfig,
    LoggingConfig,
    SecurityConfig,
    SimTermConfig,
    SyntaxConfig,
    clamp_history_size,
)

__all__ = [
    "ConfigLoader",
    "DispatcherConfig",
    "HistoryConfig",
    "LoggingConfig",
    "SecurityConfig",
    "SimTermConfig",
    "SyntaxConfig",
    "clamp_history_size",
    "clear_config_cache",
    "load_config",
]
