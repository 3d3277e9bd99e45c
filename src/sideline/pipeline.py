"""End-to-end clip analysis: generate, extract, merge."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Sequence

from sideline.config import ModelCandidate
from sideline.extract import ExtractionError, extract_report
from sideline.generation import Orchestrator, PromptPart
from sideline.models import AnalysisReport, Formation, PlayerProfile, ScoutingReport
from sideline.roster import merge_roster


logger = logging.getLogger(__name__)

UNINTERPRETED_TITLE = "Could not interpret result"
_RAW_SUMMARY_LIMIT = 2000


@dataclass(frozen=True)
class ClipAnalysis:
    report: AnalysisReport
    roster: List[PlayerProfile]
    candidate_id: str
    raw_text: str
    extraction_error: ExtractionError | None = None

    @property
    def interpreted(self) -> bool:
        return self.extraction_error is None


def uninterpreted_report(error: ExtractionError) -> AnalysisReport:
    """Placeholder report kept when the model output could not be parsed."""

    return AnalysisReport(
        title=UNINTERPRETED_TITLE,
        formation=Formation(offense="unknown", defense="unknown"),
        scouting_report=ScoutingReport(summary=error.raw_text[:_RAW_SUMMARY_LIMIT]),
    )


def interpret(
    raw_text: str,
    roster: Sequence[PlayerProfile],
    *,
    candidate_id: str,
    now: datetime | None = None,
) -> ClipAnalysis:
    extracted = extract_report(raw_text)
    if isinstance(extracted, ExtractionError):
        logger.warning("Output from %s could not be interpreted: %s", candidate_id, extracted.reason)
        return ClipAnalysis(
            report=uninterpreted_report(extracted),
            roster=list(roster),
            candidate_id=candidate_id,
            raw_text=raw_text,
            extraction_error=extracted,
        )
    updated = merge_roster(roster, extracted.players_detected, now=now)
    return ClipAnalysis(report=extracted, roster=updated, candidate_id=candidate_id, raw_text=raw_text)


async def analyze_clip(
    prompt_parts: Sequence[PromptPart],
    roster: Sequence[PlayerProfile],
    *,
    orchestrator: Orchestrator,
    candidates: Sequence[ModelCandidate],
    now: datetime | None = None,
) -> ClipAnalysis:
    """Run one clip through the model and fold its detections into ``roster``.

    :class:`~sideline.generation.AllCandidatesExhausted` propagates; extraction
    failures degrade to a placeholder report with the roster unchanged.
    """

    result = await orchestrator.generate(prompt_parts, candidates)
    return interpret(result.text, roster, candidate_id=result.candidate_id, now=now)
