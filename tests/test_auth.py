"""
Signup, login and sign-in session tracking.
"""
from conftest import password_matches
from reclaim.core.database import SessionLocal
from reclaim.models.user_session import UserSession


def signup(client, **overrides):
    body = {"name": "Asha Rao", "email": "Asha@X.edu", "password": "long-password", "college": "X College"}
    body.update(overrides)
    return client.post("/auth/signup", json=body)


def login(client, email="asha@x.edu", password="long-password"):
    return client.post("/auth/login", json={"email": email, "password": password})


def auth_headers(client, **kwargs):
    token = login(client, **kwargs).json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


def test_signup_creates_account(client):
    response = signup(client)

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "User created successfully"
    assert data["user"]["email"] == "asha@x.edu"
    assert data["user"]["college"] == "X College"
    assert "createdAt" in data["user"]
    assert "password" not in data["user"]
    assert password_matches("asha@x.edu", "long-password")


def test_signup_rejects_duplicate_email(client):
    signup(client)
    response = signup(client, email="asha@x.edu")

    assert response.status_code == 400
    assert response.json() == {"error": "User with this email already exists"}


def test_signup_validation(client):
    assert signup(client, name="A").json() == {"error": "Name must be at least 2 characters"}
    assert signup(client, password="short").json() == {"error": "Password must be at least 8 characters"}
    assert signup(client, email="nope").status_code == 400


def test_login_returns_token(client):
    signup(client)
    response = login(client, email="ASHA@x.edu")

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"
    assert response.json()["access_token"]


def test_login_rejects_wrong_password(client):
    signup(client)
    response = login(client, password="wrong-password")

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


def test_login_works_with_password_from_otp_reset(client, sender):
    signup(client)
    client.post("/otp/send", json={"email": "asha@x.edu"})
    client.post("/otp/verify", json={"email": "asha@x.edu", "otp": sender.last_code, "newPassword": "fresh-password"})

    assert login(client).status_code == 401
    assert login(client, password="fresh-password").status_code == 200


def test_session_tracking_requires_token(client):
    response = client.post("/session/login")

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_session_login_records_client(client):
    signup(client)
    headers = auth_headers(client)
    headers.update({"X-Forwarded-For": "10.0.0.7, 172.16.0.1", "User-Agent": "pytest-agent"})

    response = client.post("/session/login", headers=headers)

    assert response.status_code == 200
    session_id = response.json()["sessionId"]
    with SessionLocal() as db:
        record = db.get(UserSession, session_id)
        assert record.ip_address == "10.0.0.7"
        assert record.user_agent == "pytest-agent"
        assert record.logout_at is None


def test_session_logout_by_id(client):
    signup(client)
    headers = auth_headers(client)
    session_id = client.post("/session/login", headers=headers).json()["sessionId"]

    response = client.post("/session/logout", json={"sessionId": session_id}, headers=headers)

    assert response.status_code == 200
    assert response.json() == {"success": True}
    with SessionLocal() as db:
        assert db.get(UserSession, session_id).logout_at is not None


def test_session_logout_without_id_closes_latest_open(client):
    signup(client)
    headers = auth_headers(client)
    first = client.post("/session/login", headers=headers).json()["sessionId"]
    second = client.post("/session/login", headers=headers).json()["sessionId"]

    assert client.post("/session/logout", headers=headers).status_code == 200

    with SessionLocal() as db:
        assert db.get(UserSession, second).logout_at is not None
        assert db.get(UserSession, first).logout_at is None


def test_session_logout_of_foreign_session(client):
    signup(client)
    signup(client, email="other@x.edu")
    owner_headers = auth_headers(client)
    other_headers = auth_headers(client, email="other@x.edu")
    session_id = client.post("/session/login", headers=owner_headers).json()["sessionId"]

    response = client.post("/session/logout", json={"sessionId": session_id}, headers=other_headers)

    assert response.status_code == 404
    assert response.json() == {"error": "Session not found"}


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
