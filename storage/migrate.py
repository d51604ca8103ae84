"""SQLite schema migrations."""
from __future__ import annotations

from typing import Iterable, Optional

from .sqlite import get_conn

SCHEMA_VERSION = 1

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS interview_sessions (
  session_id TEXT PRIMARY KEY,
  role TEXT NOT NULL,
  difficulty TEXT NOT NULL,
  interview_type TEXT NOT NULL,
  duration REAL NOT NULL,
  total_questions INTEGER NOT NULL,
  overall_score REAL NOT NULL DEFAULT 0,
  percentage_score INTEGER NOT NULL DEFAULT 0,
  strengths TEXT NOT NULL DEFAULT '[]',
  improvements TEXT NOT NULL DEFAULT '[]',
  sample_answers TEXT NOT NULL DEFAULT '[]',
  suggested_topics TEXT NOT NULL DEFAULT '[]',
  status TEXT NOT NULL,
  started_at TEXT NOT NULL,
  completed_at TEXT
);
""",
    """
CREATE TABLE IF NOT EXISTS session_questions (
  session_id TEXT NOT NULL,
  position INTEGER NOT NULL,
  question TEXT NOT NULL,
  answer TEXT NOT NULL DEFAULT '',
  score REAL NOT NULL DEFAULT 0,
  feedback TEXT NOT NULL DEFAULT '',
  is_follow_up INTEGER NOT NULL DEFAULT 0,
  parent_question_index INTEGER,
  answered INTEGER NOT NULL DEFAULT 0,
  PRIMARY KEY (session_id, position),
  FOREIGN KEY(session_id) REFERENCES interview_sessions(session_id) ON DELETE CASCADE
);
""",
    """
CREATE INDEX IF NOT EXISTS idx_sessions_status_completed
  ON interview_sessions (status, completed_at);
""",
]


def migrate(db_path: Optional[str] = None) -> None:
    """Create the session tables if missing and stamp the schema version."""

    with get_conn(db_path) as conn:
        for stmt in SCHEMA:
            conn.execute(stmt)
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")


if __name__ == "__main__":
    migrate()
