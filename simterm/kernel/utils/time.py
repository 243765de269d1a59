"""Clock and identifier helpers.

All engine timestamps are integer milliseconds since the Unix epoch.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], int]


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds, for measuring elapsed time."""
    return time.perf_counter() * 1000.0


def ms_to_datetime(timestamp_ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)


def ms_to_iso(timestamp_ms: int) -> str:
    """Render epoch milliseconds as ISO-8601 with millisecond precision.

    >>> ms_to_iso(0)
    '1970-01-01T00:00:00.000Z'
    """
    return ms_to_datetime(timestamp_ms).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def iso_to_ms(value: str) -> int:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed) into epoch milliseconds.

    Raises
    ------
    ValueError
        If ``value`` is not a valid ISO-8601 timestamp
    """
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return int(parsed.timestamp() * 1000)


def new_id(prefix: str = "") -> str:
    """Generate a unique identifier, optionally prefixed (``"tab-3f2a..."``)."""
    token = uuid.uuid4().hex[:12]
    return f"{prefix}-{token}" if prefix else token


def format_duration(duration_ms: int) -> str:
    """Human-readable duration.

    >>> format_duration(3_725_000)
    '1h 2m 5s'
    >>> format_duration(1500)
    '1s'
    """
    seconds = duration_ms // 1000
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    if days:
        return f"{days}d {hours}h {minutes}m"
    if hours:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"
