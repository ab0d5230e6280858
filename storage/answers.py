"""Persistence helpers for submitted answers."""
from __future__ import annotations

import datetime as dt
import json
import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .sqlite import get_conn

STATUS_SUBMITTED = "submitted"
STATUS_EVALUATED = "evaluated"
STATUS_PENDING_REVIEW = "pending_review"

_JSON_COLUMNS = ("ai_evaluation", "raw_scores", "scores", "strengths", "risks")


def _now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


class AnswerUpsertPayload(BaseModel):
    session_id: str
    question_id: str
    question_index: int = Field(ge=0)
    audio_url: Optional[str] = None
    audio_duration_seconds: float = 0.0
    tab_switches_during: int = 0


class AnswerEvaluationPayload(BaseModel):
    transcript: str
    ai_evaluation: Dict[str, Any]
    raw_scores: Dict[str, float]
    scores: Dict[str, int]
    average_score: Optional[int] = None
    strengths: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)
    ai_recommendation: Optional[str] = None
    status: str = STATUS_EVALUATED
    audio_duration_seconds: Optional[float] = None


def upsert_answer(**data: Any) -> str:
    """Insert or replace the answer keyed by (session_id, question_index).

    A re-submission overwrites the audio metadata and clears any previous
    evaluation, returning the id of the existing row.
    """

    payload = AnswerUpsertPayload(**data)
    with get_conn() as conn:
        conn.execute(
            """INSERT INTO answers
               (id, session_id, question_id, question_index, audio_url, audio_duration_seconds,
                tab_switches_during, status, submitted_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(session_id, question_index) DO UPDATE SET
                 question_id = excluded.question_id,
                 audio_url = excluded.audio_url,
                 audio_duration_seconds = excluded.audio_duration_seconds,
                 tab_switches_during = excluded.tab_switches_during,
                 submitted_at = excluded.submitted_at,
                 status = excluded.status,
                 transcript = NULL,
                 ai_evaluation = NULL,
                 raw_scores = NULL,
                 scores = NULL,
                 average_score = NULL,
                 strengths = NULL,
                 risks = NULL,
                 ai_recommendation = NULL,
                 evaluated_at = NULL""",
            (
                str(uuid.uuid4()),
                payload.session_id,
                payload.question_id,
                payload.question_index,
                payload.audio_url,
                payload.audio_duration_seconds,
                payload.tab_switches_during,
                STATUS_SUBMITTED,
                _now(),
            ),
        )
        row = conn.execute(
            "SELECT id FROM answers WHERE session_id = ? AND question_index = ?",
            (payload.session_id, payload.question_index),
        ).fetchone()
        return str(row["id"])


def record_evaluation(answer_id: str, **data: Any) -> None:
    """Store the pipeline outcome on an existing answer row."""

    payload = AnswerEvaluationPayload(**data)
    with get_conn() as conn:
        conn.execute(
            """UPDATE answers SET
                 transcript = ?, ai_evaluation = ?, raw_scores = ?, scores = ?,
                 average_score = ?, strengths = ?, risks = ?, ai_recommendation = ?,
                 status = ?, evaluated_at = ?,
                 audio_duration_seconds = COALESCE(?, audio_duration_seconds)
               WHERE id = ?""",
            (
                payload.transcript,
                json.dumps(payload.ai_evaluation, ensure_ascii=False),
                json.dumps(payload.raw_scores),
                json.dumps(payload.scores),
                payload.average_score,
                json.dumps(payload.strengths, ensure_ascii=False),
                json.dumps(payload.risks, ensure_ascii=False),
                payload.ai_recommendation,
                payload.status,
                _now(),
                payload.audio_duration_seconds,
                answer_id,
            ),
        )


def _row_to_dict(row: Any) -> Dict[str, Any]:
    record = dict(row)
    for column in _JSON_COLUMNS:
        if record.get(column) is not None:
            record[column] = json.loads(record[column])
    return record


def get_answer(session_id: str, question_index: int) -> Optional[Dict[str, Any]]:
    with get_conn() as conn:
        row = conn.execute(
            "SELECT * FROM answers WHERE session_id = ? AND question_index = ?",
            (session_id, question_index),
        ).fetchone()
    return _row_to_dict(row) if row is not None else None


def list_answers(session_id: str) -> List[Dict[str, Any]]:
    with get_conn() as conn:
        rows = conn.execute(
            "SELECT * FROM answers WHERE session_id = ? ORDER BY question_index",
            (session_id,),
        ).fetchall()
    return [_row_to_dict(row) for row in rows]


def mean_average_score(conn: Any, session_id: str) -> Optional[float]:
    """Mean of average_score over the session's evaluated answers, or None."""

    row = conn.execute(
        "SELECT AVG(average_score) AS avg FROM answers WHERE session_id = ? AND average_score IS NOT NULL",
        (session_id,),
    ).fetchone()
    return None if row is None or row["avg"] is None else float(row["avg"])
