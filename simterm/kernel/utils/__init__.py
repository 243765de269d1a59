"""Shared kernel utilities."""

from simterm.kernel.utils.caching import FIFOCache
from simterm.kernel.utils.time import format_duration, new_id, now_ms

__all__ = ["FIFOCache", "format_duration", "new_id", "now_ms"]
