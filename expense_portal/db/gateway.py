"""Data access gateway over the named-procedure catalog.

Responsibilities
----------------
- Open one connection per operation and release it unconditionally.
- Execute only procedures from ``procedures.PROCEDURES`` with bound parameters.
- Map result rows onto the pydantic entities with a fixed column mapping;
  NULL columns become ``None`` on optional fields.
- Translate every store failure into ``DataAccessError``. A single attempt is
  made; retries and fallbacks are the caller's decision.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
import logging
import sqlite3
from typing import Any, Dict, Iterator, List, Mapping, Optional

from expense_portal.core.errors import DataAccessError
from expense_portal.models import Expense, ExpenseCategory, ExpenseStatus, Role, User
from .procedures import PROCEDURES, Procedure

logger = logging.getLogger("app.db")


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromisoformat(value.replace("Z", ""))


def _row_to_expense(row: Mapping[str, Any]) -> Expense:
    return Expense(
        expense_id=row["expense_id"],
        user_id=row["user_id"],
        category_id=row["category_id"],
        status_id=row["status_id"],
        amount_minor=row["amount_minor"],
        currency=row["currency"],
        expense_date=date.fromisoformat(row["expense_date"]),
        description=row["description"],
        receipt_file=row["receipt_file"],
        submitted_at=_parse_ts(row["submitted_at"]),
        reviewed_by=row["reviewed_by"],
        reviewed_at=_parse_ts(row["reviewed_at"]),
        created_at=_parse_ts(row["created_at"]),
        user_name=row["user_name"],
        category_name=row["category_name"],
        status_name=row["status_name"],
        reviewer_name=row["reviewer_name"],
    )


def _row_to_category(row: Mapping[str, Any]) -> ExpenseCategory:
    return ExpenseCategory(
        category_id=row["category_id"],
        category_name=row["category_name"],
        is_active=bool(row["is_active"]),
    )


def _row_to_status(row: Mapping[str, Any]) -> ExpenseStatus:
    return ExpenseStatus(status_id=row["status_id"], status_name=row["status_name"])


def _row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        user_id=row["user_id"],
        user_name=row["user_name"],
        email=row["email"],
        role_id=row["role_id"],
        manager_id=row["manager_id"],
        is_active=bool(row["is_active"]),
        created_at=_parse_ts(row["created_at"]),
        role_name=row["role_name"],
    )


def _row_to_role(row: Mapping[str, Any]) -> Role:
    return Role(
        role_id=row["role_id"],
        role_name=row["role_name"],
        description=row["description"],
    )


class ExpenseGateway:
    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        # mode=rw: a missing database file is a connection failure rather
        # than a freshly created empty database.
        uri = f"{self.db_path.resolve().as_uri()}?mode=rw"
        conn = sqlite3.connect(uri, uri=True)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextmanager
    def _session(self, procedure: str) -> Iterator[sqlite3.Cursor]:
        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise DataAccessError(
                f"Unable to open database '{self.db_path}': {exc}", procedure
            ) from exc
        try:
            yield conn.cursor()
            conn.commit()
        except (sqlite3.Error, OverflowError) as exc:
            # OverflowError: a bound int outside the 64-bit INTEGER range
            conn.rollback()
            raise DataAccessError(f"{procedure} failed: {exc}", procedure) from exc
        finally:
            conn.close()

    def _call(
        self,
        cur: sqlite3.Cursor,
        name: str,
        args: Optional[Dict[str, Any]] = None,
    ) -> sqlite3.Cursor:
        procedure: Optional[Procedure] = PROCEDURES.get(name)
        if procedure is None:
            raise DataAccessError(f"Unknown procedure '{name}'", name)
        args = args or {}
        missing = [p for p in procedure.params if p not in args]
        if missing:
            raise DataAccessError(
                f"{name} missing parameters: {', '.join(missing)}", name
            )
        bound = {p: args[p] for p in procedure.params}
        logger.debug("exec %s", name, extra={"procedure": name})
        return cur.execute(procedure.sql, bound)

    def _query(self, name: str, args: Optional[Dict[str, Any]] = None) -> List[sqlite3.Row]:
        with self._session(name) as cur:
            return self._call(cur, name, args).fetchall()

    # ------------------------------------------------------------------
    # Expenses
    def list_expenses(
        self, filter: Optional[str] = None, status: Optional[str] = None
    ) -> List[Expense]:
        rows = self._query("GetExpenses", {"filter": filter, "status": status})
        return [_row_to_expense(r) for r in rows]

    def list_pending_expenses(self, filter: Optional[str] = None) -> List[Expense]:
        rows = self._query("GetPendingExpenses", {"filter": filter})
        return [_row_to_expense(r) for r in rows]

    def get_expense(self, expense_id: int) -> Optional[Expense]:
        rows = self._query("GetExpenseById", {"expense_id": expense_id})
        return _row_to_expense(rows[0]) if rows else None

    def create_expense(
        self,
        user_id: int,
        category_id: int,
        amount_minor: int,
        expense_date: date,
        description: Optional[str] = None,
        currency: str = "GBP",
    ) -> Expense:
        with self._session("CreateExpense") as cur:
            self._call(
                cur,
                "CreateExpense",
                {
                    "user_id": user_id,
                    "category_id": category_id,
                    "amount_minor": amount_minor,
                    "currency": currency,
                    "expense_date": expense_date.isoformat(),
                    "description": description,
                },
            )
            expense_id = cur.lastrowid
            row = self._call(
                cur, "GetExpenseById", {"expense_id": expense_id}
            ).fetchone()
            if row is None:
                raise DataAccessError(
                    "CreateExpense returned no rows", "CreateExpense"
                )
            return _row_to_expense(row)

    def update_expense_status(
        self, expense_id: int, status: str, reviewer_id: int
    ) -> int:
        """Return the number of rows affected."""
        with self._session("UpdateExpenseStatus") as cur:
            self._call(
                cur,
                "UpdateExpenseStatus",
                {"expense_id": expense_id, "status": status, "reviewer_id": reviewer_id},
            )
            return int(cur.rowcount)

    # ------------------------------------------------------------------
    # Reference data
    def list_categories(self) -> List[ExpenseCategory]:
        return [_row_to_category(r) for r in self._query("GetCategories")]

    def list_statuses(self) -> List[ExpenseStatus]:
        return [_row_to_status(r) for r in self._query("GetStatuses")]

    def list_users(self) -> List[User]:
        return [_row_to_user(r) for r in self._query("GetUsers")]

    def list_roles(self) -> List[Role]:
        return [_row_to_role(r) for r in self._query("GetRoles")]
