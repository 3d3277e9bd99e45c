from __future__ import annotations

from typing import List

from pydantic import BaseModel

from sideline.models import AnalysisReport, PlayerProfile


class FailedAttemptResponse(BaseModel):
    candidate_id: str
    kind: str
    reason: str


class ClipAnalysisResponse(BaseModel):
    session_id: str
    clip_id: str
    candidate_id: str
    interpreted: bool
    extraction_error: str | None = None
    report: AnalysisReport
    roster: List[PlayerProfile]
    failed_attempts: List[FailedAttemptResponse] = []


class ClipSummaryResponse(BaseModel):
    clip_id: str
    created_at: str
    filename: str | None
    candidate_id: str
    interpreted: bool
    report: dict
