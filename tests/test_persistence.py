from datetime import datetime, timezone

import pytest

from sideline.config_loader import RosterFile
from sideline.models import PlayerProfile
from sideline.persistence import DEFAULT_SESSION_TITLE, SessionStore, StaleRosterError


NOW = datetime(2024, 10, 5, tzinfo=timezone.utc)


@pytest.fixture
def store(tmp_path, monkeypatch):
    monkeypatch.delenv("SIDELINE_DB_PATH", raising=False)
    return SessionStore(tmp_path / "sideline.sqlite")


def _profile(identifier: str, *notes: str) -> PlayerProfile:
    return PlayerProfile(identifier=identifier, grade="B", notes=list(notes), last_updated=NOW)


def test_session_created_with_default_title(store):
    session = store.get_or_create_session("s1", owner="coach@example.com")

    assert session.title == DEFAULT_SESSION_TITLE
    assert session.roster == []
    assert session.version == 0
    assert store.get_or_create_session("s1").created_at == session.created_at


def test_title_taken_from_first_message_only(store):
    store.get_or_create_session("s1")
    store.set_title_from_message("s1", "Why does our boundary corner keep getting beat?")
    store.set_title_from_message("s1", "Second question")

    assert store.get_session("s1").title == "Why does our boundary cor"


def test_roster_round_trips_and_bumps_version(store):
    session = store.get_or_create_session("s1")

    saved = store.save_roster("s1", [_profile("CB3", "late jump")], expected_version=session.version)

    assert saved.version == 1
    assert saved.roster[0].notes == ["late jump"]
    assert saved.roster[0].last_updated == NOW


def test_stale_roster_write_is_rejected(store):
    session = store.get_or_create_session("s1")
    store.save_roster("s1", [_profile("CB3", "a")], expected_version=session.version)

    with pytest.raises(StaleRosterError) as info:
        store.save_roster("s1", [_profile("CB3", "b")], expected_version=session.version)

    assert info.value.actual_version == 1
    assert store.get_session("s1").roster[0].notes == ["a"]


def test_clips_listed_per_session_in_order(store):
    store.get_or_create_session("s1")
    store.get_or_create_session("s2")
    store.save_clip(session_id="s1", candidate_id="v-a", interpreted=True, report={"title": "one"}, raw_text="{}")
    store.save_clip(session_id="s2", candidate_id="v-a", interpreted=True, report={"title": "other"}, raw_text="{}")
    store.save_clip(session_id="s1", candidate_id="v-b", interpreted=False, report={"title": "two"}, raw_text="??")

    clips = store.list_clips("s1")

    assert [clip.report["title"] for clip in clips] == ["one", "two"]
    assert clips[1].interpreted is False


def test_roster_file_round_trip(tmp_path):
    path = tmp_path / "roster.json"
    assert RosterFile.load(path).roster == []

    RosterFile(roster=[_profile("CB3", "late jump")]).save(path)

    assert RosterFile.load(path).roster == [_profile("CB3", "late jump")]
