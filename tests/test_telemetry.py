from __future__ import annotations

from pathlib import Path

from cincuentazo.engine.game import new_game
from cincuentazo.services.telemetry import TelemetryService


def test_log_appends_jsonl_records(tmp_path: Path) -> None:
    t = TelemetryService(tmp_path / "nested" / "telemetry.jsonl", session_id="abc")
    t.log("session_started", {"opponents": 2})
    t.log("notice", {"title": "Game Over"})

    recs = t.read_all()
    assert [r["type"] for r in recs] == ["session_started", "notice"]
    assert all(r["session"] == "abc" for r in recs)
    assert recs[0]["payload"] == {"opponents": 2}
    assert "ts" in recs[0]


def test_disabled_service_writes_nothing(tmp_path: Path) -> None:
    path = tmp_path / "telemetry.jsonl"
    t = TelemetryService(path, enabled=False)
    t.log("session_started", {})
    assert not path.exists()
    assert t.read_all() == []


def test_engine_events_are_forwarded(tmp_path: Path) -> None:
    state = new_game(1, seed=8)
    t = TelemetryService(tmp_path / "telemetry.jsonl")
    t.log_engine_events(state.event_log)

    recs = t.read_all()
    assert len(recs) == len(state.event_log)
    assert {r["type"] for r in recs} == {"engine_event"}
    assert recs[0]["payload"]["type"] == "GAME_STARTED"
    assert recs[1]["payload"] == {"type": "TURN_STARTED", "player": "You"}


def test_sessions_get_distinct_ids(tmp_path: Path) -> None:
    a = TelemetryService(tmp_path / "t.jsonl")
    b = TelemetryService(tmp_path / "t.jsonl")
    assert a.session_id != b.session_id
