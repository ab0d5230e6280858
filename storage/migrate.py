"""SQLite schema migrations."""
from __future__ import annotations

import os
import sqlite3
from typing import Iterable

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS interview_sessions (
  id TEXT PRIMARY KEY,
  org_id TEXT NOT NULL,
  status TEXT NOT NULL DEFAULT 'in_progress',
  total_score REAL,
  ai_recommendation TEXT,
  ai_summary TEXT,
  updated_at TEXT
);
""",
    """
CREATE TABLE IF NOT EXISTS question_templates (
  id TEXT PRIMARY KEY,
  question_text TEXT NOT NULL,
  category TEXT NOT NULL DEFAULT 'behavioral',
  difficulty TEXT NOT NULL DEFAULT 'medium',
  time_limit_seconds INTEGER NOT NULL DEFAULT 120,
  rubric_json TEXT NOT NULL DEFAULT '{}'
);
""",
    """
CREATE TABLE IF NOT EXISTS answers (
  id TEXT PRIMARY KEY,
  session_id TEXT NOT NULL REFERENCES interview_sessions(id) ON DELETE CASCADE,
  question_id TEXT NOT NULL,
  question_index INTEGER NOT NULL,
  audio_url TEXT,
  audio_duration_seconds REAL,
  tab_switches_during INTEGER NOT NULL DEFAULT 0,
  transcript TEXT,
  ai_evaluation TEXT,
  raw_scores TEXT,
  scores TEXT,
  average_score INTEGER,
  strengths TEXT,
  risks TEXT,
  ai_recommendation TEXT,
  status TEXT NOT NULL DEFAULT 'submitted',
  submitted_at TEXT NOT NULL,
  evaluated_at TEXT,
  UNIQUE (session_id, question_index)
);
""",
    """
CREATE INDEX IF NOT EXISTS idx_answers_session ON answers(session_id);
""",
]


def migrate(db_path: str = "data/interview.db") -> None:
    """Apply schema migrations to the SQLite database."""

    directory = os.path.dirname(db_path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        for stmt in SCHEMA:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


if __name__ == "__main__":
    migrate()
