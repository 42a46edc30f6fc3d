"""SQLite schema migrations."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .sqlite import get_conn

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS interviews (
  id TEXT PRIMARY KEY,
  created_at TEXT NOT NULL,
  status TEXT NOT NULL,
  job_title TEXT NOT NULL,
  payload TEXT NOT NULL
);
""",
    """
CREATE INDEX IF NOT EXISTS idx_interviews_created_at ON interviews (created_at);
""",
    """
CREATE TABLE IF NOT EXISTS app_state (
  key TEXT PRIMARY KEY,
  value TEXT NOT NULL
);
""",
]


def migrate(db_path: str | Path = "data/interviews.db") -> None:
    """Apply schema migrations to the SQLite database."""

    with get_conn(db_path) as conn:
        for stmt in SCHEMA:
            conn.execute(stmt)


if __name__ == "__main__":
    migrate()
