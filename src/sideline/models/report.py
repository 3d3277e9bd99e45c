"""Structured report models produced from model output."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)
from pydantic.config import ConfigDict


logger = logging.getLogger(__name__)


class Formation(BaseModel):
    """Opposing-side context for the clip."""

    offense: str = ""
    defense: str = Field(default="", validation_alias=AliasChoices("defense", "coverage"))

    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)


class TimelineEntry(BaseModel):
    time: str = Field(default="", validation_alias=AliasChoices("time", "timestamp"))
    note: str = Field(default="", validation_alias=AliasChoices("note", "observation", "event"))

    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)


class Grades(BaseModel):
    overall: Optional[str] = None
    execution: Optional[str] = None
    technique: Optional[str] = None
    decision_making: Optional[str] = None

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_unusable_grades(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return {}
        return {
            key: grade
            for key, grade in value.items()
            if grade is None or (isinstance(grade, (str, int, float)) and not isinstance(grade, bool))
        }


class ScoutingReport(BaseModel):
    summary: str = ""
    timeline: List[TimelineEntry] = Field(default_factory=list)
    fix: str = ""
    drill: str = ""
    coaching_tip: str = Field(default="", validation_alias=AliasChoices("coaching_tip", "tip"))
    grades: Grades = Field(default_factory=Grades)

    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    @field_validator("timeline", mode="before")
    @classmethod
    def _coerce_timeline(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        entries: list[TimelineEntry] = []
        for entry in value:
            if isinstance(entry, str):
                if entry.strip():
                    entries.append(TimelineEntry(note=entry.strip()))
                continue
            try:
                entries.append(TimelineEntry.model_validate(entry))
            except ValidationError as exc:
                logger.debug("Dropping timeline entry %r: %s", entry, exc)
        return entries

    @field_validator("grades", mode="wrap")
    @classmethod
    def _default_grades(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Grades:
        try:
            return handler(value)
        except ValidationError as exc:
            logger.debug("Ignoring unusable grades %r: %s", value, exc)
            return Grades()


class DetectedSubject(BaseModel):
    """Single player observation scoped to one clip."""

    identifier: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("identifier", "id", "name", "jersey"),
    )
    role: str = Field(default="", validation_alias=AliasChoices("role", "position"))
    grade: str = Field(..., min_length=1)
    observation: str = Field(..., min_length=1)
    weakness: Optional[str] = None

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True, coerce_numbers_to_str=True)


class AnalysisReport(BaseModel):
    """Coaching report for a single analyzed clip.

    Only ``title`` and ``formation`` are required; the other sections fall
    back to their defaults when the model returns something unusable.
    """

    title: str = Field(..., min_length=1)
    formation: Formation
    scouting_report: ScoutingReport = Field(default_factory=ScoutingReport)
    players_detected: List[DetectedSubject] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _flat_formation(cls, value: Any) -> Any:
        # Older prompts returned formation and coverage as two top-level strings.
        if isinstance(value, dict) and isinstance(value.get("formation"), str):
            value = dict(value)
            value["formation"] = {"offense": value["formation"], "defense": value.get("coverage") or ""}
        return value

    @field_validator("scouting_report", mode="wrap")
    @classmethod
    def _default_scouting_report(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> ScoutingReport:
        if value is None:
            return ScoutingReport()
        try:
            return handler(value)
        except ValidationError as exc:
            logger.debug("Ignoring unusable scouting report %r: %s", value, exc)
            return ScoutingReport()

    @field_validator("players_detected", mode="before")
    @classmethod
    def _drop_malformed_detections(cls, value: Any) -> Any:
        if isinstance(value, dict):
            value = [value]
        if not isinstance(value, list):
            return []
        kept: list[DetectedSubject] = []
        for entry in value:
            try:
                kept.append(DetectedSubject.model_validate(entry))
            except ValidationError as exc:
                logger.debug("Dropping malformed detection %r: %s", entry, exc)
        return kept
