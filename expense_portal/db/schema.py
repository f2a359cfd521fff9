"""Database schema DDL definitions and initialization utilities.

Tables:
  - roles: employee / manager roles
  - users: people who submit or review expenses
  - expense_categories: selectable categories (Travel, Meals, ...)
  - expense_statuses: the fixed status vocabulary (Draft .. Rejected)
  - expenses: individual expense records, amounts in minor units (pence)
  - metadata: key/value store (schema version)
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

ROLES_DDL = """
CREATE TABLE IF NOT EXISTS roles (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    description TEXT
);
"""

USERS_DDL = f"""
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    role_id INTEGER NOT NULL,
    manager_id INTEGER,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (role_id) REFERENCES roles(id),
    FOREIGN KEY (manager_id) REFERENCES users(id)
);
"""

CATEGORIES_DDL = """
CREATE TABLE IF NOT EXISTS expense_categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    is_active INTEGER NOT NULL DEFAULT 1
);
"""

STATUSES_DDL = """
CREATE TABLE IF NOT EXISTS expense_statuses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE -- 'Draft' | 'Submitted' | 'Approved' | 'Rejected'
);
"""

EXPENSES_DDL = f"""
CREATE TABLE IF NOT EXISTS expenses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    category_id INTEGER NOT NULL,
    status_id INTEGER NOT NULL,
    amount_minor INTEGER NOT NULL CHECK (amount_minor >= 0),
    currency TEXT NOT NULL DEFAULT 'GBP',
    expense_date TEXT NOT NULL, -- ISO date (YYYY-MM-DD)
    description TEXT,
    receipt_file TEXT,
    submitted_at TEXT,
    reviewed_by INTEGER,
    reviewed_at TEXT,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (user_id) REFERENCES users(id),
    FOREIGN KEY (category_id) REFERENCES expense_categories(id),
    FOREIGN KEY (status_id) REFERENCES expense_statuses(id),
    FOREIGN KEY (reviewed_by) REFERENCES users(id)
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

EXPENSES_STATUS_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_expenses_status ON expenses(status_id);"
)
EXPENSES_USER_DATE_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_expenses_user_date ON expenses(user_id, expense_date);"
)

DDL_ORDER: Sequence[str] = (
    ROLES_DDL,
    USERS_DDL,
    CATEGORIES_DDL,
    STATUSES_DDL,
    EXPENSES_DDL,
    METADATA_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        _ensure_indexes(cur)
        conn.commit()
    finally:
        conn.close()


def _ensure_indexes(cur: sqlite3.Cursor) -> None:
    """Create indexes, tolerating legacy schemas missing indexed columns."""
    for ddl in (EXPENSES_STATUS_INDEX_DDL, EXPENSES_USER_DATE_INDEX_DDL):
        try:
            cur.execute(ddl)
        except sqlite3.OperationalError:
            # Pre-v2 tables lack the indexed columns until the migration adds them
            continue
