"""REST API for clip analysis sessions."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

from fastapi import FastAPI, File, Form, HTTPException, UploadFile

from sideline.api.schemas import (
    ClipAnalysisResponse,
    ClipSummaryResponse,
    FailedAttemptResponse,
    SessionSummaryResponse,
)
from sideline.config import ModelCandidate, generation_timeout, get_candidates
from sideline.generation import AllCandidatesExhausted, MediaPart, Orchestrator, configured_policy
from sideline.models import PlayerProfile
from sideline.persistence import ClipRecord, SessionRecord, SessionStore, StaleRosterError
from sideline.pipeline import interpret
from sideline.prompts import build_prompt_parts
from sideline.roster import merge_roster


logger = logging.getLogger("uvicorn.error")

DEFAULT_MIME_TYPE = "video/mp4"
_ROSTER_WRITE_ATTEMPTS = 3


def session_to_summary(session: SessionRecord) -> SessionSummaryResponse:
    return SessionSummaryResponse(
        session_id=session.session_id,
        title=session.title,
        players=len(session.roster),
        version=session.version,
        updated_at=session.updated_at.isoformat(),
    )


def clip_to_summary(clip: ClipRecord) -> ClipSummaryResponse:
    return ClipSummaryResponse(
        clip_id=clip.clip_id,
        created_at=clip.created_at.isoformat(),
        filename=clip.filename,
        candidate_id=clip.candidate_id,
        interpreted=clip.interpreted,
        report=clip.report,
    )


def _default_orchestrator() -> Orchestrator:
    from sideline.generation.gemini import GeminiBackend

    return Orchestrator(GeminiBackend(), policy=configured_policy(), timeout=generation_timeout())


def create_app(
    *,
    orchestrator: Orchestrator | None = None,
    candidates: Sequence[ModelCandidate] | None = None,
    store: SessionStore | None = None,
) -> FastAPI:
    app = FastAPI(title="sideline")
    store = store or SessionStore(Path(__file__).resolve().parent.parent / "sideline.sqlite")
    app.state.session_store = store
    app.state.orchestrator = orchestrator
    candidate_list = tuple(candidates) if candidates is not None else get_candidates()

    def _orchestrator() -> Orchestrator:
        if app.state.orchestrator is None:
            try:
                app.state.orchestrator = _default_orchestrator()
            except RuntimeError as exc:
                raise HTTPException(status_code=503, detail=str(exc)) from exc
        return app.state.orchestrator

    def _fetch_session_or_404(session_id: str) -> SessionRecord:
        session = store.get_session(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Session not found")
        return session

    def _write_roster(
        session: SessionRecord, detections: Sequence[Any], merged: list[PlayerProfile]
    ) -> list[PlayerProfile]:
        roster = merged
        for _ in range(_ROSTER_WRITE_ATTEMPTS):
            try:
                return store.save_roster(session.session_id, roster, expected_version=session.version).roster
            except StaleRosterError as exc:
                logger.info("Retrying roster merge: %s", exc)
                session = _fetch_session_or_404(session.session_id)
                roster = merge_roster(session.roster, detections)
        raise HTTPException(status_code=409, detail="Roster is being updated concurrently; retry the request")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/sessions", response_model=list[SessionSummaryResponse])
    async def list_sessions(owner: str | None = None, limit: int = 50):
        return [session_to_summary(session) for session in store.list_sessions(owner=owner, limit=limit)]

    @app.get("/sessions/{session_id}/roster", response_model=list[PlayerProfile])
    async def get_roster(session_id: str):
        return _fetch_session_or_404(session_id).roster

    @app.get("/sessions/{session_id}/clips", response_model=list[ClipSummaryResponse])
    async def list_clips(session_id: str):
        _fetch_session_or_404(session_id)
        return [clip_to_summary(clip) for clip in store.list_clips(session_id)]

    @app.post("/sessions/{session_id}/clips", response_model=ClipAnalysisResponse)
    async def analyze(
        session_id: str,
        clip: UploadFile = File(...),
        message: str | None = Form(None),
        owner: str | None = Form(None),
    ):
        contents = await clip.read()
        if not contents:
            raise HTTPException(status_code=400, detail="clip file is empty")
        mime_type = clip.content_type or DEFAULT_MIME_TYPE
        if mime_type == "application/octet-stream":
            mime_type = DEFAULT_MIME_TYPE

        session = store.get_or_create_session(session_id, owner=owner)
        store.set_title_from_message(session_id, message)
        prompt_parts = build_prompt_parts(
            MediaPart(mime_type=mime_type, data=contents),
            session.roster,
            message=message,
        )

        try:
            result = await _orchestrator().generate(prompt_parts, candidate_list)
        except AllCandidatesExhausted as exc:
            logger.error("Analysis failed for session %s: %s", session_id, exc.message)
            raise HTTPException(status_code=502, detail=exc.message) from exc

        analysis = interpret(result.text, session.roster, candidate_id=result.candidate_id)
        clip_record = store.save_clip(
            session_id=session_id,
            candidate_id=result.candidate_id,
            interpreted=analysis.interpreted,
            report=analysis.report.model_dump(mode="json"),
            raw_text=result.text,
            filename=clip.filename,
        )
        roster = session.roster
        if analysis.interpreted and analysis.report.players_detected:
            roster = _write_roster(session, analysis.report.players_detected, analysis.roster)

        return ClipAnalysisResponse(
            session_id=session_id,
            clip_id=clip_record.clip_id,
            candidate_id=result.candidate_id,
            interpreted=analysis.interpreted,
            extraction_error=analysis.extraction_error.reason if analysis.extraction_error else None,
            report=analysis.report,
            roster=roster,
            failed_attempts=[
                FailedAttemptResponse(candidate_id=a.candidate_id, kind=a.kind.value, reason=a.reason)
                for a in result.failed_attempts
            ],
        )

    return app
