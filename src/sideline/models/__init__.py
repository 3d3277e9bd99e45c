"""Canonical report and roster models shared across the pipeline."""

from .profile import PlayerProfile, Roster
from .report import AnalysisReport, DetectedSubject, Formation, Grades, ScoutingReport, TimelineEntry

__all__ = [
    "AnalysisReport",
    "DetectedSubject",
    "Formation",
    "Grades",
    "PlayerProfile",
    "Roster",
    "ScoutingReport",
    "TimelineEntry",
]
