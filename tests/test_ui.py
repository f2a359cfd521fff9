from expense_portal.services.degrade import PAGE_DEMO_DATA_ERROR


def test_expenses_page(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "Taxi from airport to client site" in r.text
    assert "£25.40" in r.text
    assert "15/01/2024" in r.text


def test_expenses_page_filters(client):
    r = client.get("/", params={"status": "Approved"})
    assert "Client lunch" in r.text
    assert "Taxi from airport" not in r.text
    r = client.get("/", params={"filter": "hotel"})
    assert "Hotel - one night" in r.text
    assert "Client lunch" not in r.text


def test_expenses_page_degrades(broken_client):
    r = broken_client.get("/")
    assert r.status_code == 200
    assert PAGE_DEMO_DATA_ERROR in r.text
    assert "Train tickets to London (DEMO DATA)" in r.text


def test_submit_from_list(client, gateway):
    r = client.post("/expenses/3/submit", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/"
    assert gateway.get_expense(3).status_name == "Submitted"


def test_add_expense_form(client):
    r = client.get("/expenses/add")
    assert r.status_code == 200
    assert "Accommodation" in r.text


def test_add_expense(client, gateway):
    form = {
        "amount": "12.50",
        "expense_date": "2024-03-05",
        "category_id": "2",
        "description": "Sandwiches",
    }
    r = client.post("/expenses/add", data=form)
    assert r.status_code == 200
    assert "Expense created successfully!" in r.text
    created = gateway.list_expenses(filter="Sandwiches")
    assert [e.amount_minor for e in created] == [1250]
    assert created[0].status_name == "Draft"


def test_add_expense_validation(client, gateway):
    base = {"expense_date": "2024-03-05", "category_id": "2"}
    r = client.post("/expenses/add", data={**base, "amount": "0"})
    assert "Amount must be greater than 0" in r.text
    r = client.post("/expenses/add", data={**base, "amount": "abc"})
    assert "Amount must be a number" in r.text
    r = client.post("/expenses/add", data={"amount": "5", "expense_date": "", "category_id": "2"})
    assert "Date is required" in r.text
    assert len(gateway.list_expenses()) == 4


def test_approve_page_lists_pending(client):
    r = client.get("/approve")
    assert "Notebooks and pens" in r.text
    assert "Taxi from airport to client site" in r.text
    assert "Client lunch" not in r.text


def test_approve_and_reject(client, gateway):
    r = client.post("/approve/1/approve")
    assert "Expense approved successfully!" in r.text
    approved = gateway.get_expense(1)
    assert approved.status_name == "Approved"
    assert approved.reviewed_by == 2

    r = client.post("/approve/3/reject")
    assert "Expense rejected." in r.text
    assert gateway.get_expense(3).status_name == "Rejected"
    assert "Notebooks and pens" not in r.text


def test_chat_page_demo_mode(client):
    r = client.get("/chat")
    assert r.status_code == 200
    assert "demo mode" in r.text


def test_add_expense_amount_too_large(client, gateway):
    form = {"amount": "100000000000000000000", "expense_date": "2024-03-05", "category_id": "1"}
    r = client.post("/expenses/add", data=form)
    assert r.status_code == 200
    assert "Amount is too large" in r.text
    assert len(gateway.list_expenses()) == 4
