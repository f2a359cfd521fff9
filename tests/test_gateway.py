from datetime import date
import sqlite3

import pytest

from expense_portal.core.errors import DataAccessError
from expense_portal.db.gateway import ExpenseGateway
from expense_portal.db.migrate import CURRENT_SCHEMA_VERSION, apply_migrations
from expense_portal.db.seed import SAMPLE_EXPENSES, seed_sample_expenses
from expense_portal.models import PENDING_STATUSES


def _ids(expenses):
    return [e.expense_id for e in expenses]


def test_migrations_are_idempotent(settings):
    settings.init_post_load()
    assert apply_migrations(settings.db_path) == CURRENT_SCHEMA_VERSION
    assert apply_migrations(settings.db_path) == CURRENT_SCHEMA_VERSION
    with sqlite3.connect(settings.db_path) as conn:
        assert conn.execute("SELECT COUNT(*) FROM expense_statuses").fetchone()[0] == 4
        assert conn.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 2


def test_sample_expenses_only_seed_empty_table(app):
    db_path = app.state.settings.db_path
    assert seed_sample_expenses(db_path) == 0
    with sqlite3.connect(db_path) as conn:
        count = conn.execute("SELECT COUNT(*) FROM expenses").fetchone()[0]
    assert count == len(SAMPLE_EXPENSES)


def test_list_expenses_newest_first(gateway):
    expenses = gateway.list_expenses()
    assert _ids(expenses) == [3, 1, 2, 4]
    taxi = expenses[1]
    assert taxi.description == "Taxi from airport to client site"
    assert taxi.amount_minor == 2540
    assert taxi.category_name == "Travel"
    assert taxi.status_name == "Submitted"
    assert taxi.user_name == "Alice Example"
    assert taxi.created_at is not None


def test_list_expenses_filters(gateway):
    assert _ids(gateway.list_expenses(filter="lunch")) == [2]
    # Matches on category name as well as description
    assert _ids(gateway.list_expenses(filter="accommodation")) == [4]
    assert _ids(gateway.list_expenses(status="approved")) == [2]
    assert _ids(gateway.list_expenses(filter="taxi", status="Approved")) == []


def test_pending_expenses_are_draft_and_submitted(gateway):
    pending = gateway.list_pending_expenses()
    assert _ids(pending) == [3, 1]
    assert {e.status_name for e in pending} == set(PENDING_STATUSES)
    assert _ids(gateway.list_pending_expenses(filter="notebooks")) == [3]


def test_get_expense(gateway):
    assert gateway.get_expense(2).description == "Client lunch"
    assert gateway.get_expense(999) is None


def test_create_expense_starts_as_draft(gateway):
    created = gateway.create_expense(
        user_id=1,
        category_id=2,
        amount_minor=4500,
        expense_date=date(2024, 3, 1),
        description="Dinner with supplier",
    )
    assert created.expense_id == 5
    assert created.status_name == "Draft"
    assert created.currency == "GBP"
    assert created.formatted_amount == "£45.00"
    assert gateway.get_expense(5).description == "Dinner with supplier"


def test_create_expense_with_unknown_category_fails(gateway):
    with pytest.raises(DataAccessError) as info:
        gateway.create_expense(
            user_id=1, category_id=99, amount_minor=100, expense_date=date(2024, 1, 1)
        )
    assert info.value.procedure == "CreateExpense"
    assert len(gateway.list_expenses()) == 4


def test_submit_stamps_submitted_at_only(gateway):
    assert gateway.update_expense_status(3, "Submitted", 0) == 1
    expense = gateway.get_expense(3)
    assert expense.status_name == "Submitted"
    assert expense.submitted_at is not None
    assert expense.reviewed_by is None
    assert expense.reviewed_at is None


def test_review_stamps_reviewer(gateway):
    assert gateway.update_expense_status(1, "approved", 2) == 1
    expense = gateway.get_expense(1)
    assert expense.status_name == "Approved"
    assert expense.reviewed_by == 2
    assert expense.reviewer_name == "Bob Manager"
    assert expense.reviewed_at is not None


def test_update_status_unknown_id_or_status_changes_nothing(gateway):
    assert gateway.update_expense_status(999, "Approved", 2) == 0
    assert gateway.update_expense_status(1, "Paid", 2) == 0
    assert gateway.get_expense(1).status_name == "Submitted"


def test_reference_data(gateway):
    assert [c.category_name for c in gateway.list_categories()] == [
        "Travel",
        "Meals",
        "Supplies",
        "Accommodation",
        "Other",
    ]
    assert [s.status_name for s in gateway.list_statuses()] == [
        "Draft",
        "Submitted",
        "Approved",
        "Rejected",
    ]
    users = gateway.list_users()
    assert [(u.user_name, u.role_name) for u in users] == [
        ("Alice Example", "Employee"),
        ("Bob Manager", "Manager"),
    ]
    assert users[0].manager_id == 2
    assert [r.role_name for r in gateway.list_roles()] == ["Employee", "Manager"]


def test_missing_database_raises_data_access_error(tmp_path):
    gateway = ExpenseGateway(tmp_path / "nowhere" / "expenses.sqlite3")
    with pytest.raises(DataAccessError) as info:
        gateway.list_expenses()
    assert info.value.procedure == "GetExpenses"
    # mode=rw must not create the file as a side effect
    assert not (tmp_path / "nowhere").exists()


def test_unknown_procedure_is_rejected(gateway):
    with pytest.raises(DataAccessError):
        gateway._query("DropEverything")


def test_upgrade_adds_review_columns_to_old_table(tmp_path):
    db_path = tmp_path / "old.sqlite3"
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE expenses (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                category_id INTEGER NOT NULL,
                status_id INTEGER NOT NULL,
                amount_minor INTEGER NOT NULL,
                currency TEXT NOT NULL DEFAULT 'GBP',
                expense_date TEXT NOT NULL,
                description TEXT,
                created_at TEXT NOT NULL DEFAULT '2024-01-01T00:00:00.000Z'
            )
            """
        )
    assert apply_migrations(db_path) == CURRENT_SCHEMA_VERSION
    with sqlite3.connect(db_path) as conn:
        columns = {row[1] for row in conn.execute("PRAGMA table_info(expenses)")}
        version = conn.execute(
            "SELECT value FROM metadata WHERE key = 'schema_version'"
        ).fetchone()[0]
    assert {"receipt_file", "submitted_at", "reviewed_by", "reviewed_at"} <= columns
    assert version == str(CURRENT_SCHEMA_VERSION)


def test_out_of_range_integer_becomes_data_access_error(gateway):
    with pytest.raises(DataAccessError) as info:
        gateway.update_expense_status(2**70, "Approved", 2)
    assert info.value.procedure == "UpdateExpenseStatus"
