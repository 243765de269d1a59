"""HistoryStore lib — bounded, persisted command history.

The store holds entries oldest-first and never more than ``max_size`` of
them; adding past the bound evicts the oldest. Every mutation writes the
full list through two persistence ports (a durable one that outlives the
process and a per-session one). On construction both are read, merged by
entry id, sorted by timestamp and trimmed.

Up/down-arrow recall is stateless on the store side: callers own a
:class:`~simterm.kernel.domain.history.HistoryCursor` per tab and pass it to
:meth:`HistoryStore.previous` / :meth:`HistoryStore.next`.
"""

from __future__ import annotations

import csv
import io
import json
import math
import re
from collections import Counter
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from simterm.kernel.config.models import clamp_history_size
from simterm.kernel.domain.history import (
    RESET_CURSOR,
    CommandUsage,
    DayActivity,
    HistoryCursor,
    HistoryEntry,
    HistoryPage,
    HistoryStatistics,
)
from simterm.kernel.exceptions import ImportValidationError, PersistenceError, ValidationError
from simterm.kernel.logging import get_logger
from simterm.kernel.utils.time import iso_to_ms, ms_to_iso, now_ms

if TYPE_CHECKING:
    from simterm.kernel.ports.storage import PersistencePort
    from simterm.kernel.utils.time import Clock

logger = get_logger(__name__)

CSV_HEADER = ["Timestamp", "Command", "Execution Time (ms)", "Exit Code"]
ACTIVITY_DAYS = 7


class HistoryFormat(StrEnum):
    """Export/import formats. Text is export-only."""

    JSON = "json"
    CSV = "csv"
    TXT = "txt"


def _coerce_format(fmt: HistoryFormat | str) -> HistoryFormat:
    try:
        return HistoryFormat(str(fmt).lower())
    except ValueError as e:
        raise ValidationError("format", "must be one of json, csv, txt", fmt) from e


class HistoryStore:
    """Bounded command history with persistence, search and statistics.

    Parameters
    ----------
    durable : PersistencePort | None
        Long-lived store (e.g. a JSON file). None keeps history in memory only.
    session : PersistencePort | None
        Per-session store, merged with the durable one on load.
    max_size : int
        Retention bound, clamped to 10..10000.
    clock : Clock | None
        Millisecond clock used to timestamp new entries.
    """

    def __init__(
        self,
        durable: PersistencePort[list[dict[str, Any]]] | None = None,
        session: PersistencePort[list[dict[str, Any]]] | None = None,
        *,
        max_size: int = 1000,
        clock: Clock | None = None,
    ) -> None:
        self._durable = durable
        self._session = session
        self._max_size = clamp_history_size(max_size)
        self._clock = clock or now_ms
        self._entries: list[HistoryEntry] = []
        self.load()

    @property
    def max_size(self) -> int:
        return self._max_size

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> int:
        """Merge both stores into the in-memory history.

        Unreadable stores and malformed entries are logged and skipped.

        Returns
        -------
        int
            Number of entries retained after merging and trimming.
        """
        merged: dict[str, HistoryEntry] = {entry.id: entry for entry in self._entries}
        for store in (self._durable, self._session):
            for entry in self._read_store(store):
                merged[entry.id] = entry

        self._entries = sorted(merged.values(), key=lambda entry: entry.timestamp_ms)
        self._trim()
        logger.debug("Loaded {count} history entries", count=len(self._entries))
        return len(self._entries)

    def _read_store(
        self, store: PersistencePort[list[dict[str, Any]]] | None
    ) -> list[HistoryEntry]:
        if store is None:
            return []
        try:
            raw = store.load()
        except PersistenceError as e:
            logger.warning(
                "Could not load history from {store}: {error}", store=store.name, error=e
            )
            return []
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring history in {store}: expected a list", store=store.name)
            return []

        entries: list[HistoryEntry] = []
        for item in raw:
            try:
                entries.append(HistoryEntry.model_validate(item))
            except PydanticValidationError:
                logger.debug("Skipping malformed history entry in {store}", store=store.name)
        return entries

    def _persist(self) -> None:
        payload = [entry.to_wire() for entry in self._entries]
        for store in (self._durable, self._session):
            if store is None:
                continue
            try:
                store.save(payload)
            except PersistenceError as e:
                logger.warning(
                    "Could not save history to {store}: {error}", store=store.name, error=e
                )

    def _trim(self) -> None:
        overflow = len(self._entries) - self._max_size
        if overflow > 0:
            del self._entries[:overflow]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(
        self,
        command: str,
        *,
        execution_time_ms: float | None = None,
        exit_code: int | None = None,
        output: str | None = None,
        error: str | None = None,
    ) -> HistoryEntry:
        """Record a command invocation, evicting the oldest entry when full."""
        entry = HistoryEntry(
            command=command,
            timestamp_ms=self._clock(),
            execution_time_ms=execution_time_ms,
            exit_code=exit_code,
            output=output,
            error=error,
        )
        self._entries.append(entry)
        self._trim()
        self._persist()
        return entry

    def remove(self, entry_id: str) -> bool:
        """Delete one entry by id."""
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                del self._entries[index]
                self._persist()
                return True
        return False

    def clear(self) -> None:
        """Drop every entry from memory and both stores."""
        self._entries.clear()
        for store in (self._durable, self._session):
            if store is None:
                continue
            try:
                store.clear()
            except PersistenceError as e:
                logger.warning("Could not clear {store}: {error}", store=store.name, error=e)

    def set_max_size(self, size: int) -> int:
        """Change the retention bound (clamped to 10..10000) and trim.

        Returns
        -------
        int
            The bound actually applied.
        """
        self._max_size = clamp_history_size(size)
        before = len(self._entries)
        self._trim()
        if len(self._entries) != before:
            self._persist()
        return self._max_size

    def remove_duplicates(self) -> int:
        """Keep only the most recent entry for each distinct command string.

        Returns
        -------
        int
            Number of entries removed.
        """
        latest: dict[str, HistoryEntry] = {}
        for entry in self._entries:
            kept = latest.get(entry.command)
            if kept is None or entry.timestamp_ms >= kept.timestamp_ms:
                latest[entry.command] = entry

        removed = len(self._entries) - len(latest)
        if removed:
            self._entries = sorted(latest.values(), key=lambda entry: entry.timestamp_ms)
            self._persist()
        return removed

    # ------------------------------------------------------------------
    # Recall
    # ------------------------------------------------------------------

    def previous(self, cursor: HistoryCursor = RESET_CURSOR) -> tuple[str | None, HistoryCursor]:
        """Step back (up-arrow).

        From a reset cursor this yields the most recent command; further
        calls walk toward the oldest and then stay there.
        """
        if not self._entries:
            return None, RESET_CURSOR
        last = len(self._entries) - 1
        if cursor.is_reset or cursor.index > last:
            index = last
        else:
            index = max(0, cursor.index - 1)
        return self._entries[index].command, HistoryCursor(index)

    def next(self, cursor: HistoryCursor = RESET_CURSOR) -> tuple[str | None, HistoryCursor]:
        """Step forward (down-arrow).

        Returns ``(None, reset)`` when not navigating, and ``("", reset)``
        once the walk moves past the most recent entry.
        """
        if cursor.is_reset:
            return None, RESET_CURSOR
        if cursor.index < len(self._entries) - 1:
            index = cursor.index + 1
            return self._entries[index].command, HistoryCursor(index)
        return "", RESET_CURSOR

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def entries(self) -> list[HistoryEntry]:
        """All retained entries, oldest first."""
        return list(self._entries)

    def commands(self) -> list[str]:
        """Command strings, oldest first."""
        return [entry.command for entry in self._entries]

    def search(
        self,
        query: str,
        *,
        case_sensitive: bool = False,
        regex: bool = False,
        limit: int = 50,
    ) -> list[HistoryEntry]:
        """Find entries whose command matches ``query``, most recent first.

        An invalid regular expression returns ``[]`` and logs a warning.
        """
        if regex:
            flags = 0 if case_sensitive else re.IGNORECASE
            try:
                pattern = re.compile(query, flags)
            except re.error as e:
                logger.warning(
                    "Invalid history search pattern {query!r}: {error}", query=query, error=e
                )
                return []
            matches = [entry for entry in self._entries if pattern.search(entry.command)]
        elif case_sensitive:
            matches = [entry for entry in self._entries if query in entry.command]
        else:
            needle = query.lower()
            matches = [entry for entry in self._entries if needle in entry.command.lower()]

        if limit <= 0:
            return []
        return list(reversed(matches[-limit:]))

    def most_used(self, limit: int = 10) -> list[CommandUsage]:
        """Commands ordered by how often they appear, highest first."""
        counts = Counter(entry.command for entry in self._entries)
        return [
            CommandUsage(command=command, count=count)
            for command, count in counts.most_common(limit)
        ]

    def recent(self, limit: int = 20) -> list[str]:
        """Distinct commands, most recently used first."""
        seen: set[str] = set()
        result: list[str] = []
        for entry in reversed(self._entries):
            if entry.command not in seen:
                seen.add(entry.command)
                result.append(entry.command)
                if len(result) >= limit:
                    break
        return result

    def by_date_range(self, start_ms: int, end_ms: int) -> list[HistoryEntry]:
        """Entries whose timestamp lies in ``[start_ms, end_ms]``, oldest first."""
        return [entry for entry in self._entries if start_ms <= entry.timestamp_ms <= end_ms]

    def page(self, page: int = 1, page_size: int = 20) -> HistoryPage:
        """One page of history, most recent first. Pages are 1-based."""
        if page < 1:
            raise ValidationError("page", "must be >= 1", page)
        if page_size < 1:
            raise ValidationError("page_size", "must be >= 1", page_size)
        newest_first = list(reversed(self._entries))
        start = (page - 1) * page_size
        return HistoryPage(
            entries=newest_first[start : start + page_size],
            total=len(newest_first),
            page=page,
            page_size=page_size,
            total_pages=math.ceil(len(newest_first) / page_size),
        )

    def statistics(self) -> HistoryStatistics:
        """Summarize the retained history."""
        timed = [e.execution_time_ms for e in self._entries if e.execution_time_ms is not None]
        with_exit = [e.exit_code for e in self._entries if e.exit_code is not None]

        average = sum(timed) / len(timed) if timed else 0.0
        success_rate = (
            sum(1 for code in with_exit if code == 0) / len(with_exit) * 100 if with_exit else 0.0
        )

        today = datetime.fromtimestamp(self._clock() / 1000, tz=UTC).date()
        days = [today - timedelta(days=offset) for offset in range(ACTIVITY_DAYS - 1, -1, -1)]
        per_day = Counter(
            datetime.fromtimestamp(entry.timestamp_ms / 1000, tz=UTC).date()
            for entry in self._entries
        )

        return HistoryStatistics(
            total=len(self._entries),
            unique=len({entry.command for entry in self._entries}),
            average_execution_time_ms=average,
            success_rate=success_rate,
            most_used=self.most_used(5),
            recent_activity=[DayActivity(date=day.isoformat(), count=per_day[day]) for day in days],
        )

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------

    def export(self, fmt: HistoryFormat | str = HistoryFormat.JSON) -> str:
        """Serialize the retained history.

        - ``json``: list of entry objects with camelCase keys
        - ``csv``: ``Timestamp,Command,Execution Time (ms),Exit Code`` rows
        - ``txt``: one ``[ISO timestamp] command`` line per entry
        """
        fmt = _coerce_format(fmt)
        if fmt is HistoryFormat.JSON:
            return json.dumps([entry.to_wire() for entry in self._entries], indent=2)

        if fmt is HistoryFormat.CSV:
            buffer = io.StringIO()
            writer = csv.writer(buffer, lineterminator="\n")
            writer.writerow(CSV_HEADER)
            for entry in self._entries:
                writer.writerow([
                    ms_to_iso(entry.timestamp_ms),
                    entry.command,
                    "" if entry.execution_time_ms is None else entry.execution_time_ms,
                    "" if entry.exit_code is None else entry.exit_code,
                ])
            return buffer.getvalue()

        return "\n".join(
            f"[{ms_to_iso(entry.timestamp_ms)}] {entry.command}" for entry in self._entries
        )

    def import_history(self, data: str, fmt: HistoryFormat | str = HistoryFormat.JSON) -> int:
        """Merge exported history back in.

        The whole payload is validated before anything is merged; entries
        already present (same id) are replaced. The result is re-sorted and
        trimmed to the bound.

        Returns
        -------
        int
            Number of entries read from ``data``.

        Raises
        ------
        ImportValidationError
            If the payload or any entry in it is invalid.
        """
        fmt = _coerce_format(fmt)
        if fmt is HistoryFormat.JSON:
            incoming = self._parse_json_import(data)
        elif fmt is HistoryFormat.CSV:
            incoming = self._parse_csv_import(data)
        else:
            raise ImportValidationError("history", "text exports cannot be imported")

        merged = {entry.id: entry for entry in self._entries}
        merged.update({entry.id: entry for entry in incoming})
        self._entries = sorted(merged.values(), key=lambda entry: entry.timestamp_ms)
        self._trim()
        self._persist()
        logger.info("Imported {count} history entries", count=len(incoming))
        return len(incoming)

    def _parse_json_import(self, data: str) -> list[HistoryEntry]:
        try:
            raw = json.loads(data)
        except json.JSONDecodeError as e:
            raise ImportValidationError("history", f"invalid JSON: {e.msg}") from e
        if not isinstance(raw, list):
            raise ImportValidationError("history", "expected a JSON array of entries")

        entries: list[HistoryEntry] = []
        for position, item in enumerate(raw):
            if not isinstance(item, dict):
                raise ImportValidationError("history", f"entry {position} is not an object")
            command = item.get("command")
            timestamp = item.get("timestampMs", item.get("timestamp_ms", item.get("timestamp")))
            if not isinstance(command, str) or not command:
                raise ImportValidationError("history", f"entry {position} has no command")
            if isinstance(timestamp, bool) or not isinstance(timestamp, int | float):
                raise ImportValidationError("history", f"entry {position} has no numeric timestamp")
            payload = {**item, "command": command, "timestampMs": int(timestamp)}
            payload.pop("timestamp", None)
            payload.pop("timestamp_ms", None)
            try:
                entries.append(HistoryEntry.model_validate(payload))
            except PydanticValidationError as e:
                raise ImportValidationError("history", f"entry {position}: {e}") from e
        return entries

    def _parse_csv_import(self, data: str) -> list[HistoryEntry]:
        reader = csv.reader(io.StringIO(data))
        header = next(reader, None)
        if header is None or [column.strip() for column in header[:2]] != CSV_HEADER[:2]:
            raise ImportValidationError("history", "missing 'Timestamp,Command' CSV header")

        entries: list[HistoryEntry] = []
        for line_no, row in enumerate(reader, start=2):
            if not row or not any(cell.strip() for cell in row):
                continue
            if len(row) < 2 or not row[1]:
                raise ImportValidationError("history", f"line {line_no} has no command")
            try:
                timestamp_ms = iso_to_ms(row[0])
                execution_time = float(row[2]) if len(row) > 2 and row[2].strip() else None
                exit_code = int(row[3]) if len(row) > 3 and row[3].strip() else None
            except ValueError as e:
                raise ImportValidationError("history", f"line {line_no}: {e}") from e
            entries.append(
                HistoryEntry(
                    command=row[1],
                    timestamp_ms=timestamp_ms,
                    execution_time_ms=execution_time,
                    exit_code=exit_code,
                )
            )
        return entries


__all__ = ["HistoryFormat", "HistoryStore"]
