"""Schema migrations for the expense store.

``metadata.schema_version`` records the last applied step. ``MIGRATIONS`` is
an ordered list of ``(version, step)`` pairs; every step runs on the shared
connection and must be safe to re-run against a partially upgraded file.
"""

from __future__ import annotations
import logging
from pathlib import Path
import sqlite3
from typing import Callable, List, Tuple

from .schema import BASIC_UTC_NOW, _ensure_indexes, init_db
from .seed import insert_reference_rows

logger = logging.getLogger("app.db.migrate")

VERSION_KEY = "schema_version"

# Columns introduced after the first release of the expenses table
REVIEW_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("receipt_file", "TEXT"),
    ("submitted_at", "TEXT"),
    ("reviewed_by", "INTEGER REFERENCES users(id)"),
    ("reviewed_at", "TEXT"),
)


def _reference_rows(cur: sqlite3.Cursor) -> None:
    insert_reference_rows(cur)


def _review_tracking(cur: sqlite3.Cursor) -> None:
    cur.execute("PRAGMA table_info(expenses)")
    present = {row[1] for row in cur.fetchall()}
    for column, ddl_type in REVIEW_COLUMNS:
        if column not in present:
            cur.execute(f"ALTER TABLE expenses ADD COLUMN {column} {ddl_type}")
    _ensure_indexes(cur)


MIGRATIONS: List[Tuple[int, Callable[[sqlite3.Cursor], None]]] = [
    (1, _reference_rows),
    (2, _review_tracking),
]

CURRENT_SCHEMA_VERSION = MIGRATIONS[-1][0]


def current_version(conn: sqlite3.Connection) -> int:
    row = conn.execute(
        "SELECT value FROM metadata WHERE key = ?", (VERSION_KEY,)
    ).fetchone()
    return int(row[0]) if row else 0


def _record_version(cur: sqlite3.Cursor, version: int) -> None:
    cur.execute(
        f"""
        INSERT INTO metadata (key, value) VALUES (?, ?)
        ON CONFLICT(key) DO UPDATE SET
            value = excluded.value,
            updated_at = ({BASIC_UTC_NOW})
        """,
        (VERSION_KEY, str(version)),
    )


def apply_migrations(db_path: Path) -> int:
    """Bring ``db_path`` up to ``CURRENT_SCHEMA_VERSION`` and return it.

    Each step commits together with its version bump, so an interrupted run
    resumes from the last completed step.
    """
    init_db(db_path)
    conn = sqlite3.connect(db_path)
    try:
        version = current_version(conn)
        for target, step in MIGRATIONS:
            if target <= version:
                continue
            cur = conn.cursor()
            try:
                step(cur)
                _record_version(cur, target)
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                raise
            logger.info("migrated %s to schema version %s", db_path, target)
            version = target
        return version
    finally:
        conn.close()
