"""SQLite helpers for the persistence layer."""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from config.settings import settings
from interviews.errors import StorageError


@contextmanager
def get_conn(db_path: str | Path | None = None) -> Iterator[sqlite3.Connection]:
    """Yield a SQLite connection that commits on success.

    Defaults to ``settings.DB_PATH``. Driver errors surface as ``StorageError``.
    """

    path = Path(db_path or settings.DB_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        conn = sqlite3.connect(path)
    except sqlite3.Error as exc:
        raise StorageError(f"Unable to open database {path}: {exc}") from exc
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except sqlite3.Error as exc:
        raise StorageError(f"SQLite operation failed: {exc}") from exc
    finally:
        conn.close()
