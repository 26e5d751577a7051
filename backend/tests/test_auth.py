from datetime import timedelta

from duobrain.core.config import SimpleSettings
from duobrain.db import models
from duobrain.services import security

from conftest import PASSWORD, signup_and_login


def test_signup_login_and_init_details(client):
    headers = signup_and_login(client, email="Asha@Example.com")
    r = client.get("/api/auth/init-details", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"email": "asha@example.com", "fullName": "Asha Rao", "onboardingDone": False}


def test_login_response_shape(client):
    client.post("/api/auth/signup", json={"fullName": "Ravi K", "email": "ravi@example.com", "password": PASSWORD})
    r = client.post("/api/auth/login", json={"email": "ravi@example.com", "password": PASSWORD})
    body = r.json()
    assert r.status_code == 200
    assert body["token"]
    assert body["user"]["email"] == "ravi@example.com"
    assert body["user"]["fullName"] == "Ravi K"
    assert isinstance(body["user"]["id"], int)


def test_duplicate_signup_rejected(client):
    payload = {"fullName": "Asha Rao", "email": "asha@example.com", "password": PASSWORD}
    assert client.post("/api/auth/signup", json=payload).status_code == 201
    r = client.post("/api/auth/signup", json=payload)
    assert r.status_code == 400
    assert r.json()["detail"] == "User with this email already exists."


def test_concurrent_duplicate_signup_rejected(client, monkeypatch):
    from duobrain.api.routes import auth

    payload = {"fullName": "Asha Rao", "email": "asha@example.com", "password": PASSWORD}
    assert client.post("/api/auth/signup", json=payload).status_code == 201
    # the second request checked before the first one committed
    monkeypatch.setattr(auth, "_find_user", lambda db, email: None)
    r = client.post("/api/auth/signup", json=payload)
    assert r.status_code == 400
    assert r.json()["detail"] == "User with this email already exists."


def test_wrong_password_is_400(client):
    signup_and_login(client)
    r = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "nope-nope"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid credentials."


def test_signup_validation_errors(client):
    r = client.post("/api/auth/signup", json={"fullName": "A", "email": "not-an-email", "password": "short"})
    assert r.status_code == 400
    body = r.json()
    assert body["detail"] == "Validation failed"
    fields = {e["field"] for e in body["errors"]}
    assert {"fullName", "email", "password"} <= fields


def test_missing_token_is_401(client):
    r = client.get("/api/jars")
    assert r.status_code == 401
    assert r.json()["detail"] == "Not authorized, no token provided."


def test_garbage_token_is_401(client):
    r = client.get("/api/jars", headers={"Authorization": "Bearer not.a.jwt"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Not authorized, token failed."


def test_expired_token_is_401(client, settings):
    signup_and_login(client)
    token = security.create_access_token("asha@example.com", settings, expires_delta=timedelta(minutes=-5))
    r = client.get("/api/jars", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_token_signed_with_other_secret_is_401(client):
    signup_and_login(client)
    other = SimpleSettings(SECRET_KEY="someone-else")
    token = security.create_access_token("asha@example.com", other)
    assert client.get("/api/jars", headers={"Authorization": f"Bearer {token}"}).status_code == 401


def test_token_for_unknown_user_is_401(client, settings):
    token = security.create_access_token("ghost@example.com", settings)
    r = client.get("/api/jars", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_otp_flow(client, db):
    signup_and_login(client)
    r = client.post("/api/auth/send-otp", json={"email": "asha@example.com"})
    assert r.status_code == 200

    user = db.query(models.User).filter_by(email="asha@example.com").one()
    assert user.otp and len(user.otp) == 6

    bad = "000000" if user.otp != "000000" else "111111"
    assert client.post("/api/auth/verify-otp", json={"email": "asha@example.com", "otp": bad}).status_code == 400

    r = client.post("/api/auth/verify-otp", json={"email": "asha@example.com", "otp": user.otp})
    assert r.status_code == 200
    assert r.json()["token"]

    # single use
    r = client.post("/api/auth/verify-otp", json={"email": "asha@example.com", "otp": user.otp})
    assert r.status_code == 400


def test_expired_otp_rejected(client, db):
    signup_and_login(client)
    client.post("/api/auth/send-otp", json={"email": "asha@example.com"})
    user = db.query(models.User).filter_by(email="asha@example.com").one()
    user.otp_expires = user.otp_expires - timedelta(minutes=11)
    db.commit()
    r = client.post("/api/auth/verify-otp", json={"email": "asha@example.com", "otp": user.otp})
    assert r.status_code == 400


def test_send_otp_unknown_user_is_404(client):
    r = client.post("/api/auth/send-otp", json={"email": "nobody@example.com"})
    assert r.status_code == 404


def test_password_helpers():
    hashed = security.hash_password("pa55word!")
    assert hashed != "pa55word!"
    assert security.verify_password("pa55word!", hashed)
    assert not security.verify_password("wrong", hashed)
    assert not security.verify_password("x", "not-a-hash")


def test_generate_otp_is_six_digits():
    for _ in range(50):
        otp = security.generate_otp()
        assert len(otp) == 6 and otp.isdigit()
