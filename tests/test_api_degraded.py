"""Behaviour when the data store cannot be reached."""

from expense_portal.services.degrade import DEMO_DATA_ERROR
from expense_portal.services.demo_data import DEMO_MARKER


def test_app_starts_without_database(broken_client):
    assert broken_client.get("/health").status_code == 200


def test_list_endpoints_serve_demo_data(broken_client):
    expected_counts = {
        "/api/expenses": 4,
        "/api/expenses/pending": 2,
        "/api/expenses/categories": 5,
        "/api/expenses/statuses": 4,
        "/api/expenses/users": 2,
    }
    for path, count in expected_counts.items():
        r = broken_client.get(path)
        assert r.status_code == 200, path
        body = r.json()
        assert body["success"] is False, path
        assert body["error"] == DEMO_DATA_ERROR, path
        assert len(body["data"]) == count, path
        assert "Error Type: DataAccessError" in body["errorDetails"], path


def test_demo_expenses_are_marked(broken_client):
    body = broken_client.get("/api/expenses").json()
    assert all(DEMO_MARKER in e["description"] for e in body["data"])
    assert "Procedure: GetExpenses" in body["errorDetails"]


def test_get_expense_reports_failure(broken_client):
    r = broken_client.get("/api/expenses/1")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["error"] == "Database connection failed"


def test_create_reports_failure_without_fabricating(broken_client):
    payload = {"amount": 12.5, "expenseDate": "2024-03-01", "categoryId": 1}
    r = broken_client.post("/api/expenses", json=payload)
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["error"] == "Database connection failed - expense not created"


def test_validation_still_applies(broken_client):
    payload = {"amount": -1, "expenseDate": "2024-03-01", "categoryId": 1}
    assert broken_client.post("/api/expenses", json=payload).status_code == 400
    r = broken_client.put("/api/expenses/1/status", json={"status": "Paid"})
    assert r.status_code == 400


def test_status_update_reports_failure(broken_client):
    r = broken_client.put("/api/expenses/1/status", json={"status": "Approved", "reviewerId": 2})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "Database connection failed - status not updated"
