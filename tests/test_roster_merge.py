from datetime import datetime, timedelta, timezone

from sideline.models import DetectedSubject, PlayerProfile
from sideline.roster import merge_roster, merge_roster_with_summary


T0 = datetime(2024, 9, 1, 12, 0, tzinfo=timezone.utc)


def _detection(**kwargs):
    return DetectedSubject(**kwargs)


def test_merge_into_empty_roster_creates_profile():
    roster = merge_roster(
        [],
        [{"identifier": "CB3", "grade": "C-", "observation": "late jump", "weakness": "phase"}],
        now=T0,
    )

    assert len(roster) == 1
    profile = roster[0]
    assert profile.identifier == "CB3"
    assert profile.grade == "C-"
    assert profile.notes == ["late jump"]
    assert profile.weaknesses == ["phase"]
    assert profile.last_updated == T0


def test_merge_existing_appends_notes_and_overwrites_grade():
    roster = merge_roster([], [_detection(identifier="CB3", grade="C-", observation="late jump", weakness="phase")], now=T0)

    updated = merge_roster(roster, [_detection(identifier="CB3", grade="B", observation="better leverage")], now=T0 + timedelta(days=1))

    assert len(updated) == 1
    assert updated[0].notes == ["late jump", "better leverage"]
    assert updated[0].weaknesses == ["phase"]
    assert updated[0].grade == "B"
    assert updated[0].last_updated == T0 + timedelta(days=1)


def test_merge_does_not_mutate_input_roster():
    original = [PlayerProfile(identifier="QB1", role="QB", grade="A", notes=["quick read"], last_updated=T0)]

    merge_roster(original, [_detection(identifier="QB1", grade="B", observation="held ball", weakness="pocket")], now=T0)

    assert original[0].notes == ["quick read"]
    assert original[0].weaknesses == []
    assert original[0].grade == "A"


def test_new_profiles_append_in_detection_order_after_existing():
    roster = [
        PlayerProfile(identifier="S1", grade="B", notes=["deep half"], last_updated=T0),
        PlayerProfile(identifier="LB5", grade="C", notes=["slow fill"], last_updated=T0),
    ]

    merged = merge_roster(
        roster,
        [
            _detection(identifier="WR2", grade="A", observation="won release"),
            _detection(identifier="LB5", grade="B-", observation="better fit"),
            _detection(identifier="CB4", grade="C", observation="grabby"),
        ],
        now=T0,
    )

    assert [p.identifier for p in merged] == ["S1", "LB5", "WR2", "CB4"]
    assert len(merged) == len(roster) + 2


def test_malformed_detections_are_skipped_individually():
    merged, summary = merge_roster_with_summary(
        [],
        [
            {"identifier": "CB3", "grade": "C-", "observation": "late jump"},
            {"grade": "B", "observation": "no identifier"},
            {"identifier": "WR1", "grade": "A"},
            {"identifier": "TE8", "grade": "B", "observation": "chip and release"},
        ],
        now=T0,
    )

    assert [p.identifier for p in merged] == ["CB3", "TE8"]
    assert summary.skipped == 2
    assert summary.created == ["CB3", "TE8"]


def test_repeated_identifier_in_one_batch_folds_into_one_profile():
    merged = merge_roster(
        [],
        [
            _detection(identifier="CB3", grade="C", observation="first rep", weakness=""),
            _detection(identifier="CB3", grade="B", observation="second rep", weakness="eyes"),
        ],
        now=T0,
    )

    assert len(merged) == 1
    assert merged[0].notes == ["first rep", "second rep"]
    assert merged[0].weaknesses == ["eyes"]
    assert merged[0].grade == "B"


def test_last_updated_never_moves_backwards():
    roster = [PlayerProfile(identifier="CB3", grade="C", notes=["x"], last_updated=T0)]

    merged = merge_roster(roster, [_detection(identifier="CB3", grade="B", observation="y")], now=T0 - timedelta(hours=1))

    assert merged[0].last_updated == T0


def test_identifier_lookup_is_exact():
    roster = [PlayerProfile(identifier="CB3", grade="C", notes=["x"], last_updated=T0)]

    merged = merge_roster(roster, [_detection(identifier="cb3", grade="B", observation="y")], now=T0)

    assert [p.identifier for p in merged] == ["CB3", "cb3"]
