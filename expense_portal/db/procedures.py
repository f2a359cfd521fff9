"""Named stored-procedure catalog.

SQLite has no stored procedures, so each procedure is a named, parameterized
statement. The gateway only ever executes entries from this catalog and binds
caller values through named placeholders (``:filter``, ``:status`` ...); no
caller-supplied text is ever spliced into SQL.

Result columns use the snake_case names the gateway's row mappers expect.
"""

from __future__ import annotations
from typing import Dict, NamedTuple, Tuple

from .schema import BASIC_UTC_NOW


class Procedure(NamedTuple):
    name: str
    sql: str
    params: Tuple[str, ...] = ()


_EXPENSE_SELECT = """
SELECT
    e.id AS expense_id,
    e.user_id,
    e.category_id,
    e.status_id,
    e.amount_minor,
    e.currency,
    e.expense_date,
    e.description,
    e.receipt_file,
    e.submitted_at,
    e.reviewed_by,
    e.reviewed_at,
    e.created_at,
    u.name AS user_name,
    c.name AS category_name,
    s.name AS status_name,
    r.name AS reviewer_name
FROM expenses e
JOIN users u ON u.id = e.user_id
JOIN expense_categories c ON c.id = e.category_id
JOIN expense_statuses s ON s.id = e.status_id
LEFT JOIN users r ON r.id = e.reviewed_by
"""

_TEXT_FILTER = """(
    :filter IS NULL
    OR e.description LIKE '%' || :filter || '%'
    OR c.name LIKE '%' || :filter || '%'
)"""

_ORDER = "ORDER BY e.expense_date DESC, e.id DESC"

_REVIEWED = "lower(:status) IN ('approved', 'rejected')"

GET_EXPENSES = Procedure(
    "GetExpenses",
    f"""{_EXPENSE_SELECT}
WHERE {_TEXT_FILTER}
  AND (:status IS NULL OR s.name = :status COLLATE NOCASE)
{_ORDER}""",
    ("filter", "status"),
)

GET_PENDING_EXPENSES = Procedure(
    "GetPendingExpenses",
    f"""{_EXPENSE_SELECT}
WHERE {_TEXT_FILTER}
  AND s.name IN ('Draft', 'Submitted')
{_ORDER}""",
    ("filter",),
)

GET_EXPENSE_BY_ID = Procedure(
    "GetExpenseById",
    f"{_EXPENSE_SELECT}WHERE e.id = :expense_id",
    ("expense_id",),
)

CREATE_EXPENSE = Procedure(
    "CreateExpense",
    """
INSERT INTO expenses (user_id, category_id, status_id, amount_minor, currency, expense_date, description)
VALUES (
    :user_id,
    :category_id,
    (SELECT id FROM expense_statuses WHERE name = 'Draft'),
    :amount_minor,
    :currency,
    :expense_date,
    :description
)
""",
    ("user_id", "category_id", "amount_minor", "currency", "expense_date", "description"),
)

UPDATE_EXPENSE_STATUS = Procedure(
    "UpdateExpenseStatus",
    f"""
UPDATE expenses SET
    status_id = (SELECT id FROM expense_statuses WHERE name = :status COLLATE NOCASE),
    submitted_at = CASE
        WHEN lower(:status) = 'submitted' THEN ({BASIC_UTC_NOW})
        ELSE submitted_at
    END,
    reviewed_by = CASE WHEN {_REVIEWED} THEN NULLIF(:reviewer_id, 0) ELSE reviewed_by END,
    reviewed_at = CASE WHEN {_REVIEWED} THEN ({BASIC_UTC_NOW}) ELSE reviewed_at END
WHERE id = :expense_id
  AND EXISTS (SELECT 1 FROM expense_statuses WHERE name = :status COLLATE NOCASE)
""",
    ("expense_id", "status", "reviewer_id"),
)

GET_CATEGORIES = Procedure(
    "GetCategories",
    """
SELECT id AS category_id, name AS category_name, is_active
FROM expense_categories
WHERE is_active = 1
ORDER BY id
""",
)

GET_STATUSES = Procedure(
    "GetStatuses",
    "SELECT id AS status_id, name AS status_name FROM expense_statuses ORDER BY id",
)

GET_USERS = Procedure(
    "GetUsers",
    """
SELECT
    u.id AS user_id,
    u.name AS user_name,
    u.email,
    u.role_id,
    u.manager_id,
    u.is_active,
    u.created_at,
    r.name AS role_name
FROM users u
LEFT JOIN roles r ON r.id = u.role_id
WHERE u.is_active = 1
ORDER BY u.id
""",
)

GET_ROLES = Procedure(
    "GetRoles",
    "SELECT id AS role_id, name AS role_name, description FROM roles ORDER BY id",
)

PROCEDURES: Dict[str, Procedure] = {
    p.name: p
    for p in (
        GET_EXPENSES,
        GET_PENDING_EXPENSES,
        GET_EXPENSE_BY_ID,
        CREATE_EXPENSE,
        UPDATE_EXPENSE_STATUS,
        GET_CATEGORIES,
        GET_STATUSES,
        GET_USERS,
        GET_ROLES,
    )
}
