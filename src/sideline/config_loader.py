"""Persist and load rosters for CLI sessions."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from sideline.models import PlayerProfile


@dataclass
class RosterFile:
    roster: List[PlayerProfile] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path) -> "RosterFile":
        if not path.exists():
            return cls()
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls(roster=[PlayerProfile.model_validate(item) for item in data.get("roster", [])])

    def save(self, path: Path) -> None:
        payload = {"roster": [profile.model_dump(mode="json") for profile in self.roster]}
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
