from datetime import datetime

import pytest

from duobrain.core import clock


def _add(client, headers, amount, type_="Expense", category="Food", when=None, description=None):
    body = {"amount": amount, "type": type_, "category": category}
    if when is not None:
        body["transactionDate"] = when.isoformat()
    if description is not None:
        body["description"] = description
    r = client.post("/api/transactions", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def fixed_now(monkeypatch):
    now = datetime(2031, 2, 14, 12, 0, 0)
    monkeypatch.setattr(clock, "utcnow", lambda: now)
    return now


def test_create_defaults(client, auth_headers):
    txn = _add(client, auth_headers, 250.75, category="Groceries")
    assert (txn["type"], txn["amount"], txn["category"], txn["description"]) == ("Expense", 250.75, "Groceries", None)
    assert txn["transactionDate"]
    assert txn["chargeId"] is None and txn["jarId"] is None


def test_create_rejects_recurring_types_and_bad_amounts(client, auth_headers):
    r = client.post("/api/transactions", json={"amount": 10, "type": "RecurringIncome", "category": "Pay"}, headers=auth_headers)
    assert r.status_code == 400
    r = client.post("/api/transactions", json={"amount": 0, "type": "Income", "category": "x"}, headers=auth_headers)
    assert r.status_code == 400
    assert {e["field"] for e in r.json()["errors"]} == {"amount", "category"}
    for amount in (99.999, 1e15):
        r = client.post("/api/transactions", json={"amount": amount, "category": "Food"}, headers=auth_headers)
        assert r.status_code == 400
        assert [e["field"] for e in r.json()["errors"]] == ["amount"]
    assert client.get("/api/transactions", headers=auth_headers).json()["items"] == []


def test_pagination_newest_first(client, auth_headers):
    for day in range(1, 6):
        _add(client, auth_headers, day * 10, when=datetime(2031, 1, day, 9, 0))

    r = client.get("/api/transactions", params={"page": 1, "limit": 2}, headers=auth_headers)
    body = r.json()
    assert (body["totalPages"], body["currentPage"]) == (3, 1)
    assert [t["amount"] for t in body["items"]] == [50, 40]

    body = client.get("/api/transactions", params={"page": 3, "limit": 2}, headers=auth_headers).json()
    assert [t["amount"] for t in body["items"]] == [10]


def test_filters_by_type_and_month(client, auth_headers):
    _add(client, auth_headers, 100, "Income", "Salary", when=datetime(2031, 1, 31, 23, 0))
    _add(client, auth_headers, 40, "Expense", "Food", when=datetime(2031, 2, 1, 0, 30))
    _add(client, auth_headers, 60, "Expense", "Fuel", when=datetime(2031, 1, 5))

    january = client.get("/api/transactions", params={"month": 1, "year": 2031}, headers=auth_headers).json()
    assert sorted(t["amount"] for t in january["items"]) == [60, 100]

    expenses = client.get("/api/transactions", params={"type": "Expense"}, headers=auth_headers).json()
    assert sorted(t["amount"] for t in expenses["items"]) == [40, 60]

    jan_expenses = client.get(
        "/api/transactions", params={"type": "Expense", "month": 1, "year": 2031}, headers=auth_headers
    ).json()
    assert [t["amount"] for t in jan_expenses["items"]] == [60]


def test_summary_for_requested_and_current_month(client, auth_headers, fixed_now):
    _add(client, auth_headers, 1000, "Income", "Salary", when=datetime(2031, 2, 1))
    _add(client, auth_headers, 300, "Expense", "Rent", when=datetime(2031, 2, 3))
    _add(client, auth_headers, 75, "Expense", "Food", when=datetime(2031, 1, 20))

    r = client.get("/api/transactions/summary", headers=auth_headers)
    assert r.json() == {"totalIncome": 1000, "totalExpense": 300}

    r = client.get("/api/transactions/summary", params={"month": 1, "year": 2031}, headers=auth_headers)
    assert r.json() == {"totalIncome": 0, "totalExpense": 75}


def test_spending_trend_covers_every_day(client, auth_headers, fixed_now):
    _add(client, auth_headers, 20, when=datetime(2031, 2, 3, 8))
    _add(client, auth_headers, 30, when=datetime(2031, 2, 3, 19))
    _add(client, auth_headers, 500, "Income", "Salary", when=datetime(2031, 2, 3))
    _add(client, auth_headers, 15, when=datetime(2031, 1, 3))

    trend = client.get("/api/transactions/spending-trend", headers=auth_headers).json()
    assert len(trend) == 28
    assert trend[0] == {"day": "1", "amount": 0}
    assert trend[2] == {"day": "3", "amount": 50}
    assert sum(p["amount"] for p in trend) == 50


def test_get_update_delete(client, auth_headers):
    txn = _add(client, auth_headers, 80, description="Lunch")

    assert client.get(f"/api/transactions/{txn['id']}", headers=auth_headers).json()["description"] == "Lunch"

    r = client.put(
        f"/api/transactions/{txn['id']}",
        json={"amount": 95, "category": "Dining", "description": None},
        headers=auth_headers,
    )
    assert r.status_code == 200
    assert (r.json()["amount"], r.json()["category"], r.json()["description"], r.json()["type"]) == (95, "Dining", None, "Expense")

    r = client.delete(f"/api/transactions/{txn['id']}", headers=auth_headers)
    assert r.json() == {"message": "Transaction deleted successfully."}
    assert client.get(f"/api/transactions/{txn['id']}", headers=auth_headers).status_code == 404


def test_transactions_are_private(client, auth_headers):
    from conftest import signup_and_login

    txn = _add(client, auth_headers, 10)
    other = signup_and_login(client, email="other@example.com")
    assert client.get(f"/api/transactions/{txn['id']}", headers=other).status_code == 404
    assert client.delete(f"/api/transactions/{txn['id']}", headers=other).status_code == 404
    assert client.get("/api/transactions", headers=other).json()["items"] == []


def test_bad_query_params(client, auth_headers):
    assert client.get("/api/transactions", params={"page": 0}, headers=auth_headers).status_code == 400
    assert client.get("/api/transactions", params={"month": 13, "year": 2031}, headers=auth_headers).status_code == 400
