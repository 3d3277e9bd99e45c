"""Session-scoped player profiles accumulated across clips."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class PlayerProfile(BaseModel):
    """Tracked player; notes and weaknesses only ever grow."""

    identifier: str = Field(..., min_length=1)
    role: str = ""
    grade: Optional[str] = None
    notes: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    last_updated: datetime

    model_config = ConfigDict(frozen=True)


Roster = List[PlayerProfile]
