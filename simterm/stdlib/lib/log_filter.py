"""LogFilter lib — search and filter a tab's output log.

Entries are first narrowed by level and time window. When the filter
carries a query or a regex, each remaining message is then matched and
only entries with at least one match are kept, highest score first.
Without a search every admitted entry scores ``100`` and log order is kept.

Scoring
-------
- 10 per match
- +20 for ``error`` entries, +10 for ``warning`` entries
- +30 if the entry is less than an hour old, +15 if less than a day old
- +10 if the first match starts within the first 10 characters
"""

from __future__ import annotations

import csv
import html
import io
import json
import re
from collections import Counter
from enum import StrEnum
from typing import TYPE_CHECKING

from simterm.kernel.domain.output import (
    LogFilter,
    LogFilterStats,
    LogSearchResult,
    MatchSpan,
    OutputEntry,
    OutputLevel,
)
from simterm.kernel.exceptions import ValidationError
from simterm.kernel.logging import get_logger
from simterm.kernel.utils.time import ms_to_iso, now_ms

if TYPE_CHECKING:
    from collections.abc import Iterable

    from simterm.kernel.utils.time import Clock

logger = get_logger(__name__)

UNSEARCHED_SCORE = 100.0
MATCH_WEIGHT = 10
LEVEL_BOOST: dict[OutputLevel, int] = {OutputLevel.ERROR: 20, OutputLevel.WARNING: 10}
HOUR_MS = 3_600_000
LEADING_MATCH_OFFSET = 10

HIGHLIGHT_OPEN = '<mark class="search-highlight">'
HIGHLIGHT_CLOSE = "</mark>"

CSV_HEADER = ["Timestamp", "Level", "Message", "Score"]


class ResultFormat(StrEnum):
    """Export formats for search results."""

    JSON = "json"
    CSV = "csv"
    TXT = "txt"


def search_logs(
    logs: Iterable[OutputEntry],
    log_filter: LogFilter | None = None,
    *,
    clock: Clock | None = None,
) -> list[LogSearchResult]:
    """Entries of ``logs`` admitted by ``log_filter``.

    An invalid ``regex`` returns ``[]`` and logs a warning.
    """
    log_filter = log_filter or LogFilter()
    admitted = [entry for entry in logs if _admits(log_filter, entry)]
    if not log_filter.has_search:
        return [LogSearchResult(entry=entry, score=UNSEARCHED_SCORE) for entry in admitted]

    pattern = _compile(log_filter)
    if pattern is None:
        return []

    now = (clock or now_ms)()
    results: list[LogSearchResult] = []
    for entry in admitted:
        matches = find_matches(entry.message, pattern)
        if matches:
            results.append(
                LogSearchResult(entry=entry, matches=matches, score=score(entry, matches, now))
            )
    results.sort(key=lambda result: result.score, reverse=True)
    return results


def find_matches(text: str, pattern: re.Pattern[str]) -> list[MatchSpan]:
    """Non-overlapping, non-empty matches of ``pattern`` in ``text``, left to right.

    >>> [m.text for m in find_matches("npm ERR! npm", re.compile("npm"))]
    ['npm', 'npm']
    """
    return [
        MatchSpan(start=match.start(), end=match.end(), text=match.group())
        for match in pattern.finditer(text)
        if match.end() > match.start()
    ]


def score(entry: OutputEntry, matches: list[MatchSpan], now: int) -> float:
    """Relevance of a matched entry; see the module docstring for the weights."""
    total = len(matches) * MATCH_WEIGHT + LEVEL_BOOST.get(entry.level, 0)
    age = now - entry.timestamp_ms
    if age < HOUR_MS:
        total += 30
    elif age < 24 * HOUR_MS:
        total += 15
    if matches and matches[0].start < LEADING_MATCH_OFFSET:
        total += 10
    return float(total)


def highlight_matches(text: str, matches: Iterable[MatchSpan]) -> str:
    """HTML for ``text`` with every match wrapped in a ``<mark>``.

    Text is escaped. A match overlapping an earlier one is skipped.

    >>> highlight_matches("a <b> a", [MatchSpan(start=0, end=1, text="a")])
    '<mark class="search-highlight">a</mark> &lt;b&gt; a'
    """
    parts: list[str] = []
    position = 0
    for match in sorted(matches, key=lambda span: span.start):
        if match.start < position:
            continue
        parts.append(html.escape(text[position : match.start]))
        marked = html.escape(text[match.start : match.end])
        parts.append(f"{HIGHLIGHT_OPEN}{marked}{HIGHLIGHT_CLOSE}")
        position = match.end
    parts.append(html.escape(text[position:]))
    return "".join(parts)


def filter_stats(
    logs: Iterable[OutputEntry],
    log_filter: LogFilter | None = None,
    *,
    clock: Clock | None = None,
) -> LogFilterStats:
    """Totals for ``logs`` before and after filtering, per level."""
    entries = list(logs)
    results = search_logs(entries, log_filter, clock=clock)
    by_level = Counter(str(result.entry.level) for result in results)
    return LogFilterStats(total=len(entries), filtered=len(results), by_level=dict(by_level))


def parse_filter_query(query: str) -> LogFilter:
    """Build a filter from a one-line query.

    Recognized words: ``level:a,b``, ``regex:<pattern>``, ``case-sensitive``.
    Everything else becomes the text query.

    >>> f = parse_filter_query("level:error,warning npm ERR")
    >>> [str(level) for level in f.levels], f.query
    (['error', 'warning'], 'npm ERR')

    Raises
    ------
    ValidationError
        If a ``level:`` word names an unknown level.
    """
    levels: list[OutputLevel] = []
    regex: str | None = None
    case_sensitive = False
    words: list[str] = []
    for word in query.split():
        if word.startswith("level:"):
            for name in filter(None, word[len("level:") :].split(",")):
                try:
                    levels.append(OutputLevel(name.lower()))
                except ValueError as e:
                    raise ValidationError("level", "unknown output level", name) from e
        elif word.startswith("regex:"):
            regex = word[len("regex:") :] or None
        elif word == "case-sensitive":
            case_sensitive = True
        else:
            words.append(word)
    return LogFilter(
        levels=levels, regex=regex, case_sensitive=case_sensitive, query=" ".join(words)
    )


def export_results(results: list[LogSearchResult], fmt: ResultFormat | str = "json") -> str:
    """Serialize search results as ``json``, ``csv`` or ``txt``."""
    try:
        fmt = ResultFormat(str(fmt).lower())
    except ValueError as e:
        raise ValidationError("format", "must be one of json, csv, txt", fmt) from e

    if fmt is ResultFormat.JSON:
        return json.dumps([result.to_wire() for result in results], indent=2)

    if fmt is ResultFormat.CSV:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for result in results:
            entry = result.entry
            writer.writerow(
                [ms_to_iso(entry.timestamp_ms), str(entry.level), entry.message, result.score]
            )
        return buffer.getvalue()

    return "\n".join(
        f"[{ms_to_iso(r.entry.timestamp_ms)}] [{str(r.entry.level).upper()}] {r.entry.message}"
        for r in results
    )


def _admits(log_filter: LogFilter, entry: OutputEntry) -> bool:
    if log_filter.levels and entry.level not in log_filter.levels:
        return False
    if log_filter.start_ms is not None and entry.timestamp_ms < log_filter.start_ms:
        return False
    return log_filter.end_ms is None or entry.timestamp_ms <= log_filter.end_ms


def _compile(log_filter: LogFilter) -> re.Pattern[str] | None:
    flags = 0 if log_filter.case_sensitive else re.IGNORECASE
    source = log_filter.regex if log_filter.regex else re.escape(log_filter.query)
    try:
        return re.compile(source, flags)
    except re.error as e:
        logger.warning("Invalid log search pattern {pattern!r}: {error}", pattern=source, error=e)
        return None


__all__ = [
    "ResultFormat",
    "export_results",
    "filter_stats",
    "find_matches",
    "highlight_matches",
    "parse_filter_query",
    "score",
    "search_logs",
]
