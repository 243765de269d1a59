"""Session export/import for the cloud-sync layer.

JSON is the full-fidelity interchange format and the only one accepted on
import. CSV and text exports are summaries meant for people and
spreadsheets.
"""

from __future__ import annotations

import csv
import io
import json
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from simterm.kernel.domain.session import Session
from simterm.kernel.exceptions import ImportValidationError, ValidationError
from simterm.kernel.logging import get_logger
from simterm.kernel.utils.time import format_duration, ms_to_iso, new_id, now_ms

if TYPE_CHECKING:
    from collections.abc import Iterable

    from simterm.kernel.utils.time import Clock

logger = get_logger(__name__)

RULE_WIDTH = 80

_REQUIRED_FIELDS: tuple[tuple[str, type | tuple[type, ...], str], ...] = (
    ("id", str, "a string"),
    ("name", str, "a string"),
    ("tabs", list, "an array"),
    ("history", list, "an array"),
    ("environment", dict, "an object"),
    ("createdAt", (int, float), "a number"),
    ("updatedAt", (int, float), "a number"),
)


class SessionFormat(StrEnum):
    """Session export formats."""

    JSON = "json"
    CSV = "csv"
    TXT = "txt"


class SessionStatistics(BaseModel):
    """Summary counters for one session."""

    tab_count: int
    total_logs: int
    command_count: int
    session_age: str
    last_activity: str


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def export_session(session: Session, fmt: SessionFormat | str = SessionFormat.JSON) -> str:
    """Serialize ``session``.

    Args
    ----
        session: Session to export.
        fmt: ``json`` (full fidelity), ``csv`` (metadata, tab and command
            tables) or ``txt`` (human-readable transcript).

    Raises
    ------
    ValidationError
        If ``fmt`` is not a known format.
    """
    try:
        fmt = SessionFormat(str(fmt).lower())
    except ValueError as e:
        raise ValidationError("format", "must be one of json, csv, txt", fmt) from e

    if fmt is SessionFormat.JSON:
        return json.dumps(session.to_wire(), indent=2)
    if fmt is SessionFormat.CSV:
        return _export_csv(session)
    return _export_text(session)


def _export_csv(session: Session) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(["Session Information"])
    writer.writerow(["Name", session.name])
    writer.writerow(["ID", session.id])
    writer.writerow(["Created", ms_to_iso(session.created_at)])
    writer.writerow(["Updated", ms_to_iso(session.updated_at)])
    writer.writerow([])

    writer.writerow(["Tabs"])
    writer.writerow(["ID", "Name", "Created", "Updated", "Log Count"])
    for tab in session.tabs:
        writer.writerow([
            tab.id,
            tab.name,
            ms_to_iso(tab.created_at),
            ms_to_iso(tab.updated_at),
            len(tab.logs),
        ])
    writer.writerow([])

    writer.writerow(["Command History"])
    writer.writerow(["Timestamp", "Command", "Execution Time", "Exit Code"])
    for entry in session.history:
        writer.writerow([
            ms_to_iso(entry.timestamp_ms),
            entry.command,
            "" if entry.execution_time_ms is None else entry.execution_time_ms,
            "" if entry.exit_code is None else entry.exit_code,
        ])
    return buffer.getvalue()


def _export_text(session: Session) -> str:
    heavy = "=" * RULE_WIDTH
    light = "-" * RULE_WIDTH
    lines = [
        heavy,
        f"Session: {session.name}",
        f"ID: {session.id}",
        f"Created: {ms_to_iso(session.created_at)}",
        f"Updated: {ms_to_iso(session.updated_at)}",
        heavy,
        "",
        "TABS:",
        light,
    ]
    for tab in session.tabs:
        lines.extend([
            f"[{tab.name}] ({len(tab.logs)} logs)",
            f"  Created: {ms_to_iso(tab.created_at)}",
            f"  Updated: {ms_to_iso(tab.updated_at)}",
            "",
        ])

    lines.extend(["COMMAND HISTORY:", light])
    for entry in session.history:
        lines.append(f"[{ms_to_iso(entry.timestamp_ms)}] {entry.command}")
        if entry.execution_time_ms:
            lines.append(f"  Execution time: {entry.execution_time_ms}ms")
        if entry.exit_code is not None:
            lines.append(f"  Exit code: {entry.exit_code}")
        lines.append("")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


def import_session(data: str, fmt: str = "json", *, clock: Clock | None = None) -> Session:
    """Parse and validate an exported session.

    The payload is accepted or rejected as a whole. On success the session
    receives a fresh id (so it never collides with the one it was exported
    from) and ``updatedAt`` is set to now; tabs, history and environment
    are kept as-is.

    Raises
    ------
    ImportValidationError
        If ``fmt`` is not ``json``, the payload is not valid JSON, a required
        field is missing or mistyped, or a nested tab/entry is malformed.

    Examples
    --------
    >>> original = Session(name="demo", environment={"A": "1"})
    >>> restored = import_session(export_session(original))
    >>> restored.environment == original.environment and restored.id != original.id
    True
    """
    if str(fmt).lower() != SessionFormat.JSON:
        raise ImportValidationError("session", f"unsupported import format: {fmt}")

    try:
        raw = json.loads(data)
    except json.JSONDecodeError as e:
        raise _rejected(f"invalid JSON: {e.msg}") from e
    if not isinstance(raw, dict):
        raise _rejected("expected a JSON object")

    _check_required_fields(raw)

    try:
        session = Session.model_validate(raw)
    except PydanticValidationError as e:
        raise _rejected(f"invalid session payload: {e.error_count()} error(s)") from e

    session.id = new_id("session")
    session.touch((clock or now_ms)())
    logger.info(
        "Imported session {name!r} ({tabs} tabs, {commands} commands)",
        name=session.name,
        tabs=len(session.tabs),
        commands=len(session.history),
    )
    return session


def _check_required_fields(raw: dict[str, Any]) -> None:
    for key, expected, description in _REQUIRED_FIELDS:
        if key not in raw:
            raise _rejected(f"missing required field '{key}'")
        value = raw[key]
        if isinstance(value, bool) or not isinstance(value, expected):
            raise _rejected(f"field '{key}' must be {description}")
    for key, value in raw["environment"].items():
        if not isinstance(value, str):
            raise _rejected(f"environment value for '{key}' must be a string")


def _rejected(reason: str) -> ImportValidationError:
    logger.warning("Rejected session import: {reason}", reason=reason)
    return ImportValidationError("session", reason)


# ---------------------------------------------------------------------------
# Derived sessions
# ---------------------------------------------------------------------------


def clone_session(session: Session, *, clock: Clock | None = None) -> Session:
    """Deep copy with a new id, ``" (Copy)"`` name suffix and fresh timestamps."""
    timestamp = (clock or now_ms)()
    return session.model_copy(
        deep=True,
        update={
            "id": new_id("session"),
            "name": f"{session.name} (Copy)",
            "created_at": timestamp,
            "updated_at": timestamp,
        },
    )


def merge_sessions(
    sessions: Iterable[Session], name: str = "Merged Session", *, clock: Clock | None = None
) -> Session:
    """Combine sessions into a new one.

    Tabs are concatenated in input order, history is merged and sorted by
    timestamp, and environment/aliases are overlaid with later sessions
    winning on conflicting keys.
    """
    timestamp = (clock or now_ms)()
    merged = Session(name=name, created_at=timestamp, updated_at=timestamp)
    for session in sessions:
        copy = session.model_copy(deep=True)
        merged.tabs.extend(copy.tabs)
        merged.history.extend(copy.history)
        merged.environment.update(copy.environment)
        merged.aliases.update(copy.aliases)
    merged.history.sort(key=lambda entry: entry.timestamp_ms)
    return merged


def session_statistics(session: Session, *, clock: Clock | None = None) -> SessionStatistics:
    """Counters plus human-readable age and idle time."""
    now = (clock or now_ms)()
    return SessionStatistics(
        tab_count=len(session.tabs),
        total_logs=sum(len(tab.logs) for tab in session.tabs),
        command_count=len(session.history),
        session_age=format_duration(max(0, now - session.created_at)),
        last_activity=format_duration(max(0, now - session.updated_at)),
    )


__all__ = [
    "SessionFormat",
    "SessionStatistics",
    "clone_session",
    "export_session",
    "import_session",
    "merge_sessions",
    "session_statistics",
]
