def test_fresh_profile_has_defaults_and_no_secrets(client, auth_headers):
    r = client.get("/api/user/profile", headers=auth_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["fullName"] == "Asha Rao"
    assert (body["monthlyIncome"], body["incomeType"]) == (0, "Monthly")
    assert (body["incomeSources"], body["recurringExpenses"]) == ([], [])
    assert (body["financeTipsOptIn"], body["onboardingDone"]) == (False, False)
    for secret in ("hashedPassword", "password", "otp", "otpExpires"):
        assert secret not in body


def test_partial_update(client, auth_headers):
    r = client.put(
        "/api/user/profile",
        json={"monthlyIncome": 42000, "incomeType": "Irregular", "financeTipsOptIn": True},
        headers=auth_headers,
    )
    assert r.status_code == 200
    body = r.json()
    assert (body["fullName"], body["monthlyIncome"], body["incomeType"], body["financeTipsOptIn"]) == (
        "Asha Rao", 42000, "Irregular", True,
    )
    assert client.get("/api/user/profile", headers=auth_headers).json()["monthlyIncome"] == 42000


def test_income_source_lifecycle(client, auth_headers):
    r = client.post("/api/user/profile/income-sources", json={"sourceName": "Rent", "amount": 8000}, headers=auth_headers)
    assert r.status_code == 201
    r = client.post("/api/user/profile/income-sources", json={"sourceName": "Tutoring", "amount": 3000}, headers=auth_headers)
    sources = r.json()["incomeSources"]
    assert [s["sourceName"] for s in sources] == ["Rent", "Tutoring"]
    rent_id = sources[0]["id"]

    r = client.put(f"/api/user/profile/income-sources/{rent_id}", json={"sourceName": "Flat rent", "amount": 9000}, headers=auth_headers)
    assert r.json()["incomeSources"][0] == {"id": rent_id, "sourceName": "Flat rent", "amount": 9000}

    r = client.delete(f"/api/user/profile/income-sources/{rent_id}", headers=auth_headers)
    assert [s["sourceName"] for s in r.json()["incomeSources"]] == ["Tutoring"]

    r = client.delete(f"/api/user/profile/income-sources/{rent_id}", headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["detail"] == "Income source not found"


def test_recurring_expense_lifecycle(client, auth_headers):
    r = client.post("/api/user/profile/recurring-expenses", json={"expenseName": "Netflix", "amount": 649}, headers=auth_headers)
    assert r.status_code == 201
    expense_id = r.json()["recurringExpenses"][0]["id"]

    r = client.put(f"/api/user/profile/recurring-expenses/{expense_id}", json={"expenseName": "Netflix", "amount": 499}, headers=auth_headers)
    assert r.json()["recurringExpenses"][0]["amount"] == 499

    assert client.delete(f"/api/user/profile/recurring-expenses/{expense_id}", headers=auth_headers).json()["recurringExpenses"] == []
    r = client.put(f"/api/user/profile/recurring-expenses/{expense_id}", json={"expenseName": "Netflix", "amount": 1}, headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["detail"] == "Expense not found"


def test_cannot_touch_another_users_sub_items(client, auth_headers):
    from conftest import signup_and_login

    r = client.post("/api/user/profile/income-sources", json={"sourceName": "Rent", "amount": 8000}, headers=auth_headers)
    source_id = r.json()["incomeSources"][0]["id"]
    other = signup_and_login(client, email="other@example.com")
    assert client.delete(f"/api/user/profile/income-sources/{source_id}", headers=other).status_code == 404


def test_profile_validation(client, auth_headers):
    r = client.put("/api/user/profile", json={"monthlyIncome": -1, "incomeType": "Weekly"}, headers=auth_headers)
    assert r.status_code == 400
    assert {e["field"] for e in r.json()["errors"]} == {"monthlyIncome", "incomeType"}
