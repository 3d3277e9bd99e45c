from __future__ import annotations

from pydantic import BaseModel


class SessionSummaryResponse(BaseModel):
    session_id: str
    title: str
    players: int
    version: int
    updated_at: str
