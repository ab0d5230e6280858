"""Persistence helpers for the interview session aggregate."""
from __future__ import annotations

import datetime as dt
import uuid
from typing import Any, Dict, Optional

from .sqlite import get_conn


def create_session(org_id: str, *, session_id: Optional[str] = None, status: str = "in_progress") -> str:
    """Insert a session row; sessions are normally owned by the admin side."""

    session_id = session_id or str(uuid.uuid4())
    with get_conn() as conn:
        conn.execute(
            "INSERT INTO interview_sessions (id, org_id, status, updated_at) VALUES (?, ?, ?, ?)",
            (session_id, org_id, status, dt.datetime.now(dt.timezone.utc).isoformat()),
        )
    return session_id


def get_session(session_id: str) -> Optional[Dict[str, Any]]:
    with get_conn() as conn:
        row = conn.execute("SELECT * FROM interview_sessions WHERE id = ?", (session_id,)).fetchone()
    return dict(row) if row is not None else None


def get_active_session(session_id: str) -> Optional[Dict[str, Any]]:
    session = get_session(session_id)
    if session is None or session["status"] != "in_progress":
        return None
    return session


def write_aggregate(
    conn: Any,
    session_id: str,
    *,
    total_score: Optional[float],
    ai_recommendation: Optional[str],
    ai_summary: Optional[str] = None,
) -> None:
    """Update the session summary columns inside the caller's transaction."""

    conn.execute(
        """UPDATE interview_sessions SET
             total_score = ?, ai_recommendation = ?,
             ai_summary = COALESCE(?, ai_summary), updated_at = ?
           WHERE id = ?""",
        (
            total_score,
            ai_recommendation,
            ai_summary,
            dt.datetime.now(dt.timezone.utc).isoformat(),
            session_id,
        ),
    )
