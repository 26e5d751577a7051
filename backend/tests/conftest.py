import fakeredis
import pytest
from fastapi.testclient import TestClient

from duobrain.core.config import SimpleSettings
from duobrain.main import create_app

PASSWORD = "s3cret-pass"


@pytest.fixture
def settings():
    return SimpleSettings(
        DATABASE_URL="sqlite://",
        REDIS_URL="redis://unused",
        SECRET_KEY="test-secret",
        AUTO_CREATE_TABLES=True,
        CORS_ORIGINS=["http://localhost:5173"],
        LOG_LEVEL="WARNING",
        EMAIL_USER="",
        EMAIL_PASS="",
        GENAI_API_KEY="",
    )


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def app(settings, redis_client):
    return create_app(settings=settings, redis_client=redis_client)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(client):
    """Session on the same in-memory database the app uses."""
    session = client.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def signup_and_login(client, email="asha@example.com", full_name="Asha Rao", password=PASSWORD):
    r = client.post("/api/auth/signup", json={"fullName": full_name, "email": email, "password": password})
    assert r.status_code == 201, r.text
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}


@pytest.fixture
def auth_headers(client):
    return signup_and_login(client)


ONBOARDING_PAYLOAD = {
    "income": {
        "monthlyIncome": 50000,
        "incomeType": "monthly",
        "additionalSources": [{"name": "Freelance", "amount": 5000}],
    },
    "expenses": {
        "predefinedExpenses": {"Rent": 15000, "Internet": 1000},
        "customExpenses": [{"name": "Gym", "amount": 2000}],
    },
    "goals": {
        "predefinedGoals": {"laptop": {"amount": 80000, "date": "2030-01-01T00:00:00"}, "trip": {"amount": 20000}},
        "customGoals": [{"name": "Guitar", "amount": 15000}],
        "financeTips": True,
    },
}


@pytest.fixture
def onboarded_headers(client, auth_headers):
    r = client.post("/api/onboarding/submit", json=ONBOARDING_PAYLOAD, headers=auth_headers)
    assert r.status_code == 200, r.text
    return auth_headers
