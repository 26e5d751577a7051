from datetime import datetime, timedelta

from duobrain.core import clock


def _create_charge(client, headers, due, **overrides):
    body = {"chargeName": "Electricity", "field": "Utilities", "dueDate": due.isoformat(), "amount": 1200}
    body.update(overrides)
    r = client.post("/api/charges", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def _future(days=10):
    return clock.utcnow().replace(microsecond=0) + timedelta(days=days)


def test_past_due_charge_is_swept_on_read(client, auth_headers):
    charge = _create_charge(client, auth_headers, clock.utcnow() - timedelta(days=2))
    assert charge["status"] == "Upcoming"

    assert client.get("/api/charges", headers=auth_headers).json() == []
    dues = client.get("/api/charges/dues", headers=auth_headers).json()
    assert [(c["id"], c["status"]) for c in dues] == [(charge["id"], "Due")]


def test_sweep_invalidates_cached_upcoming_list(client, auth_headers, monkeypatch):
    charge = _create_charge(client, auth_headers, _future(days=3))
    upcoming = client.get("/api/charges", params={"status": "Upcoming"}, headers=auth_headers).json()
    assert [c["id"] for c in upcoming] == [charge["id"]]

    later = clock.utcnow() + timedelta(days=5)
    monkeypatch.setattr(clock, "utcnow", lambda: later)

    assert client.get("/api/charges", headers=auth_headers).json() == []
    assert [c["id"] for c in client.get("/api/charges/dues", headers=auth_headers).json()] == [charge["id"]]


def test_upcoming_list_is_ordered_by_due_date(client, auth_headers):
    late = _create_charge(client, auth_headers, _future(days=20), chargeName="Rent")
    soon = _create_charge(client, auth_headers, _future(days=2), chargeName="Phone")
    names = [c["chargeName"] for c in client.get("/api/charges", headers=auth_headers).json()]
    assert names == [soon["chargeName"], late["chargeName"]]


def test_mark_paid_creates_one_linked_transaction(client, auth_headers):
    charge = _create_charge(client, auth_headers, _future())

    r = client.patch(f"/api/charges/{charge['id']}/mark-paid", headers=auth_headers)
    assert r.status_code == 200
    assert (r.json()["isPaid"], r.json()["status"]) == (True, "Paid")

    # idempotent
    assert client.patch(f"/api/charges/{charge['id']}/mark-paid", headers=auth_headers).status_code == 200

    items = client.get("/api/transactions", headers=auth_headers).json()["items"]
    assert len(items) == 1
    txn = items[0]
    assert (txn["type"], txn["amount"], txn["category"], txn["description"], txn["chargeId"]) == (
        "Expense", 1200, "Utilities", "Paid: Electricity", charge["id"],
    )
    assert [c["id"] for c in client.get("/api/charges", params={"status": "Paid"}, headers=auth_headers).json()] == [charge["id"]]


def test_mark_not_paid_removes_linked_transaction(client, auth_headers):
    upcoming = _create_charge(client, auth_headers, _future())
    overdue = _create_charge(client, auth_headers, clock.utcnow() - timedelta(days=1), chargeName="Water")
    # an unrelated expense that must survive
    client.post("/api/transactions", json={"amount": 99, "type": "Expense", "category": "Food"}, headers=auth_headers)

    for charge in (upcoming, overdue):
        client.patch(f"/api/charges/{charge['id']}/mark-paid", headers=auth_headers)
    assert len(client.get("/api/transactions", headers=auth_headers).json()["items"]) == 3

    r = client.patch(f"/api/charges/{upcoming['id']}/mark-not-paid", headers=auth_headers)
    assert (r.json()["isPaid"], r.json()["status"]) == (False, "Upcoming")
    r = client.patch(f"/api/charges/{overdue['id']}/mark-not-paid", headers=auth_headers)
    assert (r.json()["isPaid"], r.json()["status"]) == (False, "Due")

    items = client.get("/api/transactions", headers=auth_headers).json()["items"]
    assert [t["category"] for t in items] == ["Food"]


def test_update_charge_due_date_recomputes_status(client, auth_headers):
    charge = _create_charge(client, auth_headers, _future())
    past = (clock.utcnow() - timedelta(days=3)).isoformat()
    r = client.put(f"/api/charges/{charge['id']}", json={"dueDate": past, "amount": 900}, headers=auth_headers)
    assert r.status_code == 200
    assert (r.json()["status"], r.json()["amount"]) == ("Due", 900)


def test_delete_paid_charge_keeps_transaction(client, auth_headers):
    charge = _create_charge(client, auth_headers, _future())
    client.patch(f"/api/charges/{charge['id']}/mark-paid", headers=auth_headers)

    r = client.delete(f"/api/charges/{charge['id']}", headers=auth_headers)
    assert r.json() == {"message": "Charge deleted successfully."}
    items = client.get("/api/transactions", headers=auth_headers).json()["items"]
    assert [(t["description"], t["chargeId"]) for t in items] == [("Paid: Electricity", None)]


def test_unknown_charge_is_404(client, auth_headers):
    assert client.patch("/api/charges/42/mark-paid", headers=auth_headers).status_code == 404
    assert client.patch("/api/charges/42/mark-not-paid", headers=auth_headers).status_code == 404
    assert client.put("/api/charges/42", json={"amount": 5}, headers=auth_headers).status_code == 404


def test_bad_status_filter_is_validation_error(client, auth_headers):
    r = client.get("/api/charges", params={"status": "Later"}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "status"


def test_due_date_with_offset_is_stored_as_utc(client, auth_headers):
    due = datetime(2031, 3, 1, 10, 0, 0).isoformat() + "+05:30"
    r = client.post(
        "/api/charges",
        json={"chargeName": "Insurance", "field": "Insurance", "dueDate": due, "amount": 5000},
        headers=auth_headers,
    )
    assert r.json()["dueDate"].startswith("2031-03-01T04:30:00")
