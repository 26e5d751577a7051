from conftest import ONBOARDING_PAYLOAD


def test_submit_builds_profile_goals_and_jars(client, auth_headers):
    r = client.post("/api/onboarding/submit", json=ONBOARDING_PAYLOAD, headers=auth_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Onboarding completed successfully!"

    user = body["user"]
    assert (user["monthlyIncome"], user["incomeType"], user["onboardingDone"], user["financeTipsOptIn"]) == (
        50000, "Monthly", True, True,
    )
    assert [(s["sourceName"], s["amount"]) for s in user["incomeSources"]] == [("Freelance", 5000)]
    assert sorted((e["expenseName"], e["amount"]) for e in user["recurringExpenses"]) == [
        ("Gym", 2000), ("Internet", 1000), ("Rent", 15000),
    ]

    goals = client.get("/api/goals", headers=auth_headers).json()
    assert sorted((g["goalName"], g["targetAmount"]) for g in goals) == [
        ("Guitar", 15000), ("New Laptop", 80000), ("Weekend Trip", 20000),
    ]
    laptop = next(g for g in goals if g["goalName"] == "New Laptop")
    assert laptop["targetDate"].startswith("2030-01-01")

    jars = client.get("/api/jars", headers=auth_headers).json()
    assert sorted((j["jarName"], j["goalAmount"], j["amountSaved"]) for j in jars) == [
        ("Guitar", 15000, 0), ("New Laptop", 80000, 0), ("Weekend Trip", 20000, 0),
    ]

    details = client.get("/api/auth/init-details", headers=auth_headers).json()
    assert details["onboardingDone"] is True


def test_submit_twice_is_rejected(client, onboarded_headers):
    r = client.post("/api/onboarding/submit", json=ONBOARDING_PAYLOAD, headers=onboarded_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Onboarding already completed."
    assert len(client.get("/api/goals", headers=onboarded_headers).json()) == 3


def test_unknown_predefined_goal_gets_generic_name(client, auth_headers):
    payload = {
        **ONBOARDING_PAYLOAD,
        "goals": {"predefinedGoals": {"yacht": {"amount": 999}}, "customGoals": [], "financeTips": False},
    }
    client.post("/api/onboarding/submit", json=payload, headers=auth_headers)
    assert [g["goalName"] for g in client.get("/api/goals", headers=auth_headers).json()] == ["Goal"]


def test_submit_invalidates_cached_profile(client, auth_headers):
    assert client.get("/api/user/profile", headers=auth_headers).json()["onboardingDone"] is False
    assert client.get("/api/jars", headers=auth_headers).json() == []
    client.post("/api/onboarding/submit", json=ONBOARDING_PAYLOAD, headers=auth_headers)
    assert client.get("/api/user/profile", headers=auth_headers).json()["onboardingDone"] is True
    assert len(client.get("/api/jars", headers=auth_headers).json()) == 3


def test_submit_validation(client, auth_headers):
    payload = {**ONBOARDING_PAYLOAD, "income": {"monthlyIncome": 1000, "incomeType": "weekly"}}
    r = client.post("/api/onboarding/submit", json=payload, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "income.incomeType"


def test_submit_with_stale_user_row_is_rejected(client, onboarded_headers, monkeypatch):
    from sqlalchemy.orm.attributes import set_committed_value

    from duobrain.services import onboarding

    real_load_user = onboarding.load_user

    def load_before_other_commit(db, principal):
        # a concurrent submission read the row before the first one committed
        user = real_load_user(db, principal)
        set_committed_value(user, "onboarding_done", False)
        return user

    monkeypatch.setattr(onboarding, "load_user", load_before_other_commit)
    r = client.post("/api/onboarding/submit", json=ONBOARDING_PAYLOAD, headers=onboarded_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Onboarding already completed."
    assert len(client.get("/api/goals", headers=onboarded_headers).json()) == 3
    assert len(client.get("/api/jars", headers=onboarded_headers).json()) == 3
