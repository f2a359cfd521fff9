"""Seeding helpers for reference data and sample expenses.

``insert_reference_rows`` makes sure the fixed vocabularies (roles, statuses,
categories) and the two built-in users exist. Rows are keyed by id and
inserted with ``INSERT OR IGNORE`` so this can be safely re-run.
``seed_sample_expenses`` only fills an empty expenses table.
"""

from __future__ import annotations
from pathlib import Path
import sqlite3
from typing import Sequence, Tuple

ROLES: Sequence[Tuple[int, str, str]] = (
    (1, "Employee", "Submits expenses"),
    (2, "Manager", "Reviews and approves expenses"),
)

# id, name, email, role_id, manager_id
USERS: Sequence[Tuple[int, str, str, int, int | None]] = (
    (1, "Alice Example", "alice@example.co.uk", 1, 2),
    (2, "Bob Manager", "bob.manager@example.co.uk", 2, None),
)

CATEGORIES: Sequence[Tuple[int, str]] = (
    (1, "Travel"),
    (2, "Meals"),
    (3, "Supplies"),
    (4, "Accommodation"),
    (5, "Other"),
)

STATUSES: Sequence[Tuple[int, str]] = (
    (1, "Draft"),
    (2, "Submitted"),
    (3, "Approved"),
    (4, "Rejected"),
)

# user_id, category_id, status_id, amount_minor, expense_date, description
SAMPLE_EXPENSES: Sequence[Tuple[int, int, int, int, str, str]] = (
    (1, 1, 2, 2540, "2024-01-15", "Taxi from airport to client site"),
    (1, 2, 3, 1425, "2024-01-10", "Client lunch"),
    (1, 3, 1, 799, "2024-02-02", "Notebooks and pens"),
    (1, 4, 4, 12000, "2023-12-04", "Hotel - one night"),
)


def insert_reference_rows(cur: sqlite3.Cursor) -> None:
    cur.executemany(
        "INSERT OR IGNORE INTO roles (id, name, description) VALUES (?, ?, ?)",
        ROLES,
    )
    cur.executemany(
        "INSERT OR IGNORE INTO expense_statuses (id, name) VALUES (?, ?)",
        STATUSES,
    )
    cur.executemany(
        "INSERT OR IGNORE INTO expense_categories (id, name) VALUES (?, ?)",
        CATEGORIES,
    )
    # Managers first so employee rows can reference them
    for user in sorted(USERS, key=lambda u: u[4] is not None):
        cur.execute(
            "INSERT OR IGNORE INTO users (id, name, email, role_id, manager_id) VALUES (?, ?, ?, ?, ?)",
            user,
        )


def seed_sample_expenses(db_path: Path) -> int:
    """Insert sample expenses when none exist; return the number inserted."""
    with sqlite3.connect(db_path) as conn:
        cur = conn.cursor()
        cur.execute("SELECT COUNT(*) FROM expenses")
        row = cur.fetchone()
        if row and row[0]:
            return 0
        cur.executemany(
            """
            INSERT INTO expenses (user_id, category_id, status_id, amount_minor, expense_date, description)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            SAMPLE_EXPENSES,
        )
        conn.commit()
        return len(SAMPLE_EXPENSES)
