"""Tests for session export, import and derived sessions."""

from __future__ import annotations

import json

import pytest

from simterm.kernel.domain.history import HistoryEntry
from simterm.kernel.domain.output import OutputEntry, OutputLevel
from simterm.kernel.domain.session import Session, Tab
from simterm.kernel.exceptions import ImportValidationError, ValidationError
from simterm.stdlib.lib.session_codec import (
    clone_session,
    export_session,
    import_session,
    merge_sessions,
    session_statistics,
)

T0 = 1_736_942_400_000


@pytest.fixture
def session() -> Session:
    tab = Tab(
        name="Terminal 1",
        logs=[OutputEntry(level=OutputLevel.INFO, message="hi", timestamp_ms=T0)],
        created_at=T0,
        updated_at=T0,
    )
    return Session(
        name="Work",
        tabs=[tab],
        history=[
            HistoryEntry(command="ls", timestamp_ms=T0, execution_time_ms=3.5, exit_code=0)
        ],
        environment={"HOME": "/home/developer", "PWD": "/home/developer"},
        aliases={"ll": "ls -la"},
        created_at=T0,
        updated_at=T0,
    )


class TestExport:
    def test_json_uses_camel_case(self, session: Session) -> None:
        data = json.loads(export_session(session, "json"))

        assert data["createdAt"] == T0
        assert data["history"][0]["executionTimeMs"] == 3.5
        assert data["tabs"][0]["logs"][0]["timestampMs"] == T0

    def test_csv_sections(self, session: Session) -> None:
        text = export_session(session, "csv")

        assert text.startswith("Session Information\nName,Work\n")
        assert "Tabs\nID,Name,Created,Updated,Log Count\n" in text
        assert "2025-01-15T12:00:00.000Z,ls,3.5,0" in text

    def test_text_transcript(self, session: Session) -> None:
        text = export_session(session, "txt")

        assert "Session: Work" in text
        assert "[Terminal 1] (1 logs)" in text
        assert "[2025-01-15T12:00:00.000Z] ls\n  Execution time: 3.5ms\n  Exit code: 0" in text

    def test_unknown_format(self, session: Session) -> None:
        with pytest.raises(ValidationError):
            export_session(session, "pdf")


class TestImport:
    def test_round_trip_gets_new_id(self, session: Session, clock) -> None:
        clock.advance(60_000)
        restored = import_session(export_session(session), clock=clock)

        assert restored.id != session.id
        assert restored.updated_at == clock.now
        assert restored.name == session.name
        assert restored.tabs[0].logs == session.tabs[0].logs
        assert restored.history == session.history
        assert restored.environment == session.environment
        assert restored.aliases == session.aliases

    @pytest.mark.parametrize(
        ("mutate", "reason"),
        [
            (lambda raw: raw.pop("tabs"), "missing required field 'tabs'"),
            (lambda raw: raw.update(createdAt="yesterday"), "'createdAt' must be a number"),
            (lambda raw: raw.update(environment={"A": 1}), "environment value for 'A'"),
            (lambda raw: raw["tabs"].append({"logs": []}), "invalid session payload"),
        ],
    )
    def test_invalid_payload_is_rejected(self, session: Session, mutate, reason: str) -> None:
        raw = json.loads(export_session(session))
        mutate(raw)
        with pytest.raises(ImportValidationError, match=reason):
            import_session(json.dumps(raw))

    def test_only_json_is_importable(self, session: Session) -> None:
        with pytest.raises(ImportValidationError, match="unsupported import format"):
            import_session(export_session(session, "csv"), "csv")

    def test_not_an_object(self) -> None:
        with pytest.raises(ImportValidationError, match="expected a JSON object"):
            import_session("[]")


class TestDerived:
    def test_clone(self, session: Session, clock) -> None:
        copy = clone_session(session, clock=clock)

        assert copy.name == "Work (Copy)"
        assert copy.id != session.id
        assert copy.created_at == clock.now
        copy.tabs[0].logs.clear()
        assert session.tabs[0].logs

    def test_merge(self, session: Session, clock) -> None:
        other = Session(
            name="Other",
            tabs=[Tab(name="Terminal 2")],
            history=[HistoryEntry(command="pwd", timestamp_ms=T0 - 1)],
            environment={"PWD": "/tmp"},
        )
        merged = merge_sessions([session, other], clock=clock)

        assert [tab.name for tab in merged.tabs] == ["Terminal 1", "Terminal 2"]
        assert [entry.command for entry in merged.history] == ["pwd", "ls"]
        assert merged.environment["PWD"] == "/tmp"
        assert merged.aliases == {"ll": "ls -la"}

    def test_statistics(self, session: Session, clock) -> None:
        clock.now = T0 + 3_725_000
        stats = session_statistics(session, clock=clock)

        assert stats.tab_count == 1
        assert stats.total_logs == 1
        assert stats.command_count == 1
        assert stats.session_age == "1h 2m 5s"
