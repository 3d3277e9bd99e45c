"""Persistence layer for analysis sessions, rosters and clip reports."""

from __future__ import annotations

import json
import os
import sqlite3
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional
from uuid import uuid4

from sideline.models import PlayerProfile


DEFAULT_SESSION_TITLE = "New Analysis"
_TITLE_LENGTH = 25


class StaleRosterError(Exception):
    """Raised when a roster write is based on an outdated session version."""

    def __init__(self, session_id: str, expected_version: int, actual_version: int | None):
        super().__init__(
            f"Roster for session {session_id} changed (expected version {expected_version}, found {actual_version})"
        )
        self.session_id = session_id
        self.expected_version = expected_version
        self.actual_version = actual_version


@dataclass
class SessionRecord:
    session_id: str
    title: str
    owner: Optional[str]
    roster: List[PlayerProfile]
    version: int
    created_at: datetime
    updated_at: datetime


@dataclass
class ClipRecord:
    clip_id: str
    session_id: str
    created_at: datetime
    filename: Optional[str]
    candidate_id: str
    interpreted: bool
    report: dict
    raw_text: str


class SessionStore:
    """Simple SQLite-backed store for sessions and their clips."""

    def __init__(self, db_path: Path | str):
        self._use_uri = False
        env_db = os.getenv("SIDELINE_DB_PATH")
        if env_db:
            if env_db.startswith("file:"):
                self.db_path = env_db
                self._use_uri = True
            else:
                self.db_path = Path(env_db)
        elif isinstance(db_path, str) and db_path.startswith("file:"):
            self.db_path = db_path
            self._use_uri = True
        else:
            self.db_path = Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = sqlite3.connect(self.db_path)
            except sqlite3.OperationalError:
                fallback_dir = Path(tempfile.gettempdir()) / "sideline-runtime"
                fallback_dir.mkdir(parents=True, exist_ok=True)
                fallback = fallback_dir / "sideline.sqlite"
                conn = sqlite3.connect(fallback)
                self.db_path = fallback
                self._create_schema(conn)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS sessions (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                owner TEXT,
                roster_json TEXT NOT NULL,
                version INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS clips (
                id TEXT PRIMARY KEY,
                session_id TEXT NOT NULL,
                created_at TEXT NOT NULL,
                filename TEXT,
                candidate_id TEXT NOT NULL,
                interpreted INTEGER NOT NULL,
                report_json TEXT NOT NULL,
                raw_text TEXT NOT NULL
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS clips_session_idx ON clips (session_id)")
        conn.commit()

    def get_or_create_session(self, session_id: str, *, owner: Optional[str] = None) -> SessionRecord:
        existing = self.get_session(session_id)
        if existing is not None:
            return existing
        now_iso = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR IGNORE INTO sessions (id, title, owner, roster_json, version, created_at, updated_at)
                VALUES (?, ?, ?, ?, 0, ?, ?)
                """,
                (session_id, DEFAULT_SESSION_TITLE, owner, "[]", now_iso, now_iso),
            )
            conn.commit()
        session = self.get_session(session_id)
        if session is None:  # pragma: no cover
            raise KeyError(f"Session {session_id} not found after insert")
        return session

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM sessions WHERE id = ?", (session_id,)).fetchone()
            if row is None:
                return None
            return self._row_to_session(row)

    def list_sessions(self, *, owner: Optional[str] = None, limit: int = 50) -> List[SessionRecord]:
        query = "SELECT * FROM sessions"
        params: list[str | int] = []
        if owner:
            query += " WHERE owner = ?"
            params.append(owner)
        query += " ORDER BY datetime(updated_at) DESC LIMIT ?"
        params.append(limit)
        with self._connect() as conn:
            rows = conn.execute(query, tuple(params)).fetchall()
        return [self._row_to_session(row) for row in rows]

    def set_title_from_message(self, session_id: str, message: Optional[str]) -> None:
        """Name a session after its first message while it still has the default title."""

        if not message or not message.strip():
            return
        with self._connect() as conn:
            conn.execute(
                "UPDATE sessions SET title = ? WHERE id = ? AND title = ?",
                (message.strip()[:_TITLE_LENGTH], session_id, DEFAULT_SESSION_TITLE),
            )
            conn.commit()

    def save_roster(
        self,
        session_id: str,
        roster: Iterable[PlayerProfile],
        *,
        expected_version: int,
    ) -> SessionRecord:
        """Write ``roster`` if the session is still at ``expected_version``."""

        payload = json.dumps([profile.model_dump(mode="json") for profile in roster])
        now_iso = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE sessions
                SET roster_json = ?, version = version + 1, updated_at = ?
                WHERE id = ? AND version = ?
                """,
                (payload, now_iso, session_id, expected_version),
            )
            conn.commit()
            if cursor.rowcount == 0:
                row = conn.execute("SELECT version FROM sessions WHERE id = ?", (session_id,)).fetchone()
                raise StaleRosterError(session_id, expected_version, row["version"] if row else None)
        session = self.get_session(session_id)
        if session is None:  # pragma: no cover
            raise KeyError(f"Session {session_id} not found after update")
        return session

    def save_clip(
        self,
        *,
        session_id: str,
        candidate_id: str,
        interpreted: bool,
        report: dict,
        raw_text: str,
        filename: Optional[str] = None,
        clip_id: Optional[str] = None,
    ) -> ClipRecord:
        clip_id = clip_id or uuid4().hex
        created_at = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO clips (
                    id, session_id, created_at, filename, candidate_id,
                    interpreted, report_json, raw_text
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    clip_id,
                    session_id,
                    created_at.isoformat(),
                    filename,
                    candidate_id,
                    int(interpreted),
                    json.dumps(report),
                    raw_text,
                ),
            )
            conn.execute(
                "UPDATE sessions SET updated_at = ? WHERE id = ?",
                (created_at.isoformat(), session_id),
            )
            conn.commit()
        return ClipRecord(
            clip_id=clip_id,
            session_id=session_id,
            created_at=created_at,
            filename=filename,
            candidate_id=candidate_id,
            interpreted=interpreted,
            report=report,
            raw_text=raw_text,
        )

    def list_clips(self, session_id: str) -> List[ClipRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM clips WHERE session_id = ? ORDER BY datetime(created_at) ASC, rowid ASC",
                (session_id,),
            ).fetchall()
        return [self._row_to_clip(row) for row in rows]

    def _row_to_session(self, row: sqlite3.Row) -> SessionRecord:
        return SessionRecord(
            session_id=row["id"],
            title=row["title"],
            owner=row["owner"],
            roster=[PlayerProfile.model_validate(item) for item in json.loads(row["roster_json"])],
            version=row["version"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_clip(self, row: sqlite3.Row) -> ClipRecord:
        return ClipRecord(
            clip_id=row["id"],
            session_id=row["session_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            filename=row["filename"],
            candidate_id=row["candidate_id"],
            interpreted=bool(row["interpreted"]),
            report=json.loads(row["report_json"]),
            raw_text=row["raw_text"],
        )
