"""Fold per-clip detections into a session roster."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Sequence

from pydantic import ValidationError

from sideline.models import DetectedSubject, PlayerProfile


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeSummary:
    updated: List[str]
    created: List[str]
    skipped: int


def _coerce_detection(entry: DetectedSubject | Mapping[str, Any]) -> DetectedSubject | None:
    if isinstance(entry, DetectedSubject):
        return entry
    try:
        return DetectedSubject.model_validate(entry)
    except ValidationError as exc:
        logger.debug("Skipping malformed detection %r: %s", entry, exc)
        return None


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def merge_roster_with_summary(
    roster: Sequence[PlayerProfile],
    detections: Iterable[DetectedSubject | Mapping[str, Any]],
    *,
    now: datetime | None = None,
) -> tuple[List[PlayerProfile], MergeSummary]:
    now = _utc(now or datetime.now(timezone.utc))
    merged: List[PlayerProfile] = list(roster)
    index = {profile.identifier: position for position, profile in enumerate(merged)}
    updated: List[str] = []
    created: List[str] = []
    skipped = 0

    for entry in detections:
        detection = _coerce_detection(entry)
        if detection is None:
            skipped += 1
            continue

        weakness = (detection.weakness or "").strip()
        position = index.get(detection.identifier)
        if position is None:
            index[detection.identifier] = len(merged)
            merged.append(
                PlayerProfile(
                    identifier=detection.identifier,
                    role=detection.role,
                    grade=detection.grade,
                    notes=[detection.observation],
                    weaknesses=[weakness] if weakness else [],
                    last_updated=now,
                )
            )
            created.append(detection.identifier)
            continue

        existing = merged[position]
        update: dict[str, Any] = {
            "grade": detection.grade,
            "notes": [*existing.notes, detection.observation],
            "last_updated": max(_utc(existing.last_updated), now),
        }
        if weakness:
            update["weaknesses"] = [*existing.weaknesses, weakness]
        if detection.role and not existing.role:
            update["role"] = detection.role
        merged[position] = existing.model_copy(update=update)
        if detection.identifier not in updated and detection.identifier not in created:
            updated.append(detection.identifier)

    return merged, MergeSummary(updated=updated, created=created, skipped=skipped)


def merge_roster(
    roster: Sequence[PlayerProfile],
    detections: Iterable[DetectedSubject | Mapping[str, Any]],
    *,
    now: datetime | None = None,
) -> List[PlayerProfile]:
    """Return a new roster with ``detections`` applied.

    Known identifiers get their grade overwritten and the observation (and any
    weakness) appended; unknown identifiers are appended as new profiles in
    detection order. Malformed detections are skipped. ``roster`` is not
    modified.
    """

    merged, _ = merge_roster_with_summary(roster, detections, now=now)
    return merged
