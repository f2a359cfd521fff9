"""Fixed demo dataset substituted when the data store is unreachable.

Every function returns fresh objects so callers may mutate them freely.
Descriptions carry a ``(DEMO DATA)`` marker so the records cannot be mistaken
for real ones.
"""

from __future__ import annotations
from datetime import date, datetime, timedelta, timezone
from typing import List

from expense_portal.models import Expense, ExpenseCategory, ExpenseStatus, User

DEMO_MARKER = "DEMO DATA"

_ALICE = (1, "Alice Example")


def _expense(
    expense_id: int,
    category: tuple,
    status: tuple,
    amount_minor: int,
    expense_date: date,
    description: str,
    age_days: int,
) -> Expense:
    return Expense(
        expense_id=expense_id,
        user_id=_ALICE[0],
        user_name=_ALICE[1],
        category_id=category[0],
        category_name=category[1],
        status_id=status[0],
        status_name=status[1],
        amount_minor=amount_minor,
        currency="GBP",
        expense_date=expense_date,
        description=description,
        created_at=datetime.now(timezone.utc) - timedelta(days=age_days),
    )


_TRAVEL = (1, "Travel")
_MEALS = (2, "Meals")
_SUPPLIES = (3, "Supplies")
_SUBMITTED = (2, "Submitted")
_APPROVED = (3, "Approved")


def demo_expenses() -> List[Expense]:
    return [
        _expense(1, _TRAVEL, _SUBMITTED, 12000, date(2024, 1, 15),
                 f"Train tickets to London ({DEMO_MARKER})", 10),
        _expense(2, _MEALS, _SUBMITTED, 6900, date(2024, 1, 10),
                 f"Team lunch meeting ({DEMO_MARKER})", 15),
        _expense(3, _SUPPLIES, _APPROVED, 9950, date(2023, 12, 4),
                 f"Office supplies - printer paper ({DEMO_MARKER})", 50),
        _expense(4, _TRAVEL, _APPROVED, 1920, date(2023, 12, 18),
                 f"Uber to client site ({DEMO_MARKER})", 40),
    ]


def demo_pending_expenses() -> List[Expense]:
    return [
        _expense(1, _TRAVEL, _SUBMITTED, 12000, date(2024, 1, 20),
                 f"Conference travel ({DEMO_MARKER} - Pending)", 5),
        _expense(2, _SUPPLIES, _SUBMITTED, 9950, date(2023, 12, 14),
                 f"Office equipment ({DEMO_MARKER} - Pending)", 10),
    ]


def demo_categories() -> List[ExpenseCategory]:
    names = ("Travel", "Meals", "Supplies", "Accommodation", "Other")
    return [
        ExpenseCategory(category_id=i, category_name=name, is_active=True)
        for i, name in enumerate(names, start=1)
    ]


def demo_statuses() -> List[ExpenseStatus]:
    names = ("Draft", "Submitted", "Approved", "Rejected")
    return [
        ExpenseStatus(status_id=i, status_name=name)
        for i, name in enumerate(names, start=1)
    ]


def demo_users() -> List[User]:
    return [
        User(user_id=1, user_name="Alice Example", email="alice@example.co.uk",
             role_id=1, manager_id=2, role_name="Employee"),
        User(user_id=2, user_name="Bob Manager", email="bob.manager@example.co.uk",
             role_id=2, role_name="Manager"),
    ]
