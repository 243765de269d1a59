"""Tests for the output-log search functions."""

from __future__ import annotations

import json

import pytest

from simterm.api import Terminal
from simterm.kernel.domain.output import LogFilter, MatchSpan, OutputEntry, OutputLevel
from simterm.kernel.exceptions import ValidationError
from simterm.stdlib.lib.log_filter import (
    export_results,
    filter_stats,
    highlight_matches,
    parse_filter_query,
    search_logs,
)

HOUR = 3_600_000


@pytest.fixture
def logs(clock) -> list[OutputEntry]:
    now = clock()
    return [
        OutputEntry(level=OutputLevel.INFO, message="installing npm", timestamp_ms=now),
        OutputEntry(
            level=OutputLevel.ERROR, message="npm ERR! npm missing", timestamp_ms=now - 2 * HOUR
        ),
        OutputEntry(
            level=OutputLevel.WARNING, message="npm WARN deprecated", timestamp_ms=now - 48 * HOUR
        ),
        OutputEntry(level=OutputLevel.SUCCESS, message="Build completed", timestamp_ms=now),
    ]


class TestFiltering:
    def test_no_filter_keeps_everything_in_order(self, logs, clock) -> None:
        results = search_logs(logs, clock=clock)

        assert [result.entry for result in results] == logs
        assert {result.score for result in results} == {100.0}
        assert all(result.matches == [] for result in results)

    def test_levels(self, logs, clock) -> None:
        log_filter = LogFilter(levels=[OutputLevel.ERROR, OutputLevel.WARNING])
        results = search_logs(logs, log_filter, clock=clock)
        assert [result.entry.level for result in results] == [
            OutputLevel.ERROR,
            OutputLevel.WARNING,
        ]

    def test_time_window_is_inclusive(self, logs, clock) -> None:
        now = clock()
        log_filter = LogFilter(start_ms=now - 2 * HOUR, end_ms=now - 2 * HOUR)
        (result,) = search_logs(logs, log_filter, clock=clock)
        assert result.entry.message == "npm ERR! npm missing"


class TestSearch:
    def test_matches_are_scored_and_ranked(self, logs, clock) -> None:
        results = search_logs(logs, LogFilter(query="NPM"), clock=clock)

        assert [(r.entry.message, r.score) for r in results] == [
            # 2 matches, error, under a day old, match at the start
            ("npm ERR! npm missing", 65.0),
            # 1 match, under an hour old, match not near the start
            ("installing npm", 40.0),
            # 1 match, warning, older than a day, match at the start
            ("npm WARN deprecated", 30.0),
        ]
        assert results[0].matches == [
            MatchSpan(start=0, end=3, text="npm"),
            MatchSpan(start=9, end=12, text="npm"),
        ]

    def test_case_sensitive(self, logs, clock) -> None:
        assert search_logs(logs, LogFilter(query="NPM", case_sensitive=True), clock=clock) == []

    def test_query_is_literal(self, clock) -> None:
        entry = OutputEntry(level=OutputLevel.INFO, message="a.b axb", timestamp_ms=clock())
        (result,) = search_logs([entry], LogFilter(query="a.b"), clock=clock)
        assert [match.text for match in result.matches] == ["a.b"]

    def test_regex(self, logs, clock) -> None:
        results = search_logs(logs, LogFilter(regex=r"npm (ERR|WARN)"), clock=clock)
        assert [match.text for r in results for match in r.matches] == ["npm ERR", "npm WARN"]

    def test_invalid_regex_matches_nothing(self, logs, clock) -> None:
        assert search_logs(logs, LogFilter(regex="(npm"), clock=clock) == []

    def test_empty_matches_are_ignored(self, logs, clock) -> None:
        results = search_logs(logs, LogFilter(regex="z*"), clock=clock)
        assert results == []


class TestHighlight:
    def test_marks_and_escapes(self) -> None:
        text = "<npm> npm"
        matches = [MatchSpan(start=6, end=9, text="npm"), MatchSpan(start=1, end=4, text="npm")]

        assert highlight_matches(text, matches) == (
            '&lt;<mark class="search-highlight">npm</mark>&gt; '
            '<mark class="search-highlight">npm</mark>'
        )

    def test_overlapping_match_is_skipped(self) -> None:
        matches = [MatchSpan(start=0, end=3, text="abc"), MatchSpan(start=2, end=4, text="cd")]
        assert highlight_matches("abcd", matches) == '<mark class="search-highlight">abc</mark>d'

    def test_no_matches(self) -> None:
        assert highlight_matches("a & b", []) == "a &amp; b"


class TestStatsAndQueries:
    def test_filter_stats(self, logs, clock) -> None:
        stats = filter_stats(logs, LogFilter(query="npm"), clock=clock)

        assert stats.total == 4
        assert stats.filtered == 3
        assert stats.by_level == {"info": 1, "error": 1, "warning": 1}

    def test_parse_filter_query(self) -> None:
        log_filter = parse_filter_query("level:error,WARNING regex:^npm case-sensitive build")

        assert log_filter.levels == [OutputLevel.ERROR, OutputLevel.WARNING]
        assert log_filter.regex == "^npm"
        assert log_filter.case_sensitive is True
        assert log_filter.query == "build"

    def test_parse_unknown_level(self) -> None:
        with pytest.raises(ValidationError, match="unknown output level"):
            parse_filter_query("level:loud")


class TestExport:
    def test_formats(self, logs, clock) -> None:
        results = search_logs(logs, LogFilter(levels=[OutputLevel.ERROR]), clock=clock)

        (item,) = json.loads(export_results(results, "json"))
        assert item["entry"]["message"] == "npm ERR! npm missing"
        assert item["entry"]["timestampMs"] == clock() - 2 * HOUR
        assert item["score"] == 100.0

        csv_lines = export_results(results, "csv").splitlines()
        assert csv_lines[0] == "Timestamp,Level,Message,Score"
        assert csv_lines[1] == "2025-01-15T10:00:00.000Z,error,npm ERR! npm missing,100.0"

        assert export_results(results, "txt") == (
            "[2025-01-15T10:00:00.000Z] [ERROR] npm ERR! npm missing"
        )

    def test_unknown_format(self) -> None:
        with pytest.raises(ValidationError):
            export_results([], "xml")


class TestTerminalLogs:
    @pytest.mark.asyncio()
    async def test_search_active_tab(self, terminal: Terminal) -> None:
        await terminal.run("pwd")
        await terminal.run("cat nope.txt")

        (result,) = terminal.search_logs("level:error nope")
        assert "nope.txt" in result.entry.message
        assert result.matches[0].text == "nope"

        stats = terminal.log_stats()
        assert (stats.total, stats.filtered) == (2, 2)
        assert stats.by_level == {"info": 1, "error": 1}

    @pytest.mark.asyncio()
    async def test_tabs_are_searched_separately(self, terminal: Terminal) -> None:
        first = terminal.active_tab
        await terminal.run("pwd")
        second = terminal.new_tab()

        assert terminal.search_logs("developer", tab_id=second.id) == []
        assert len(terminal.search_logs("developer", tab_id=first.id)) == 1
