"""Read access to question templates."""
from __future__ import annotations

import json
from typing import Dict, Optional

from evaluation.types import Question

from .sqlite import get_conn


def insert_question(question: Question) -> str:
    with get_conn() as conn:
        conn.execute(
            """INSERT OR REPLACE INTO question_templates
               (id, question_text, category, difficulty, time_limit_seconds, rubric_json)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                question.id,
                question.question_text,
                question.category,
                question.difficulty,
                question.time_limit_seconds,
                json.dumps(question.rubric, ensure_ascii=False),
            ),
        )
    return question.id


def get_question(question_id: str) -> Optional[Question]:
    with get_conn() as conn:
        row = conn.execute("SELECT * FROM question_templates WHERE id = ?", (question_id,)).fetchone()
    if row is None:
        return None
    rubric: Dict[str, str] = json.loads(row["rubric_json"] or "{}")
    return Question(
        id=row["id"],
        question_text=row["question_text"],
        category=row["category"],
        difficulty=row["difficulty"],
        time_limit_seconds=row["time_limit_seconds"],
        rubric=rubric,
    )
