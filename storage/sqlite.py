"""SQLite connection handling for the session store."""
from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from config.settings import settings

BUSY_TIMEOUT_S = 5.0


def ensure_parent_dir(db_path: str) -> None:
    directory = os.path.dirname(db_path)
    if directory:
        os.makedirs(directory, exist_ok=True)


@contextmanager
def get_conn(db_path: Optional[str] = None) -> Iterator[sqlite3.Connection]:
    """One connection per unit of work: commit on success, roll back on error.

    ``db_path`` defaults to ``settings.DB_PATH``, read at call time.
    """

    path = db_path or settings.DB_PATH
    ensure_parent_dir(path)
    conn = sqlite3.connect(path, timeout=BUSY_TIMEOUT_S)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    else:
        conn.commit()
    finally:
        conn.close()


__all__ = ["BUSY_TIMEOUT_S", "ensure_parent_dir", "get_conn"]
