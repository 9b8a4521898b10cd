import pytest
from fastapi.testclient import TestClient

from backend.app.core.security import decode_access_token
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.user import User


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def signup_user(client: TestClient, email: str, password: str):
    return client.post(
        "/api/auth/signup",
        data={
            "email": email,
            "password": password,
            "name": "Login Tester",
            "company_name": "Acme Consulting",
            "company_address": "1 Main Street",
            "bank_name": "First Bank",
            "account_number": "123456789",
            "account_holder_name": "Acme Consulting",
            "ifsc_code": "FBIN0000001",
        },
    )


def test_successful_login_returns_token_for_same_user():
    client = TestClient(app)
    signup = signup_user(client, "login@example.com", "secret1")
    assert signup.status_code == 201
    user_id = signup.json()["user_id"]

    response = client.post("/api/auth/login", json={"email": "login@example.com", "password": "secret1"})
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user_id"] == user_id
    assert data["email"] == "login@example.com"
    payload = decode_access_token(data["access_token"])
    assert payload["sub"] == str(user_id)
    assert payload["email"] == "login@example.com"


def test_login_is_case_insensitive_on_email():
    client = TestClient(app)
    signup_user(client, "Mixed@Example.com", "secret1")
    response = client.post("/api/auth/login", json={"email": "  MIXED@example.COM ", "password": "secret1"})
    assert response.status_code == 200
    assert response.json()["email"] == "mixed@example.com"


def test_wrong_password_and_unknown_email_share_message():
    client = TestClient(app)
    signup_user(client, "wrongpw@example.com", "secret1")
    wrong_password = client.post("/api/auth/login", json={"email": "wrongpw@example.com", "password": "bad"})
    unknown_email = client.post("/api/auth/login", json={"email": "nosuch@example.com", "password": "secret1"})
    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json()["detail"] == "Invalid email or password"
    assert unknown_email.json()["detail"] == wrong_password.json()["detail"]


def test_missing_fields_return_400():
    client = TestClient(app)
    response = client.post("/api/auth/login", json={"email": "", "password": "secret1"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Email is required"
    response = client.post("/api/auth/login", json={"email": "someone@example.com"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Password is required"


def test_missing_hash_returns_401_not_500():
    db = SessionLocal()
    db.add(User(email="badhash@example.com", name="No Hash", hashed_password=None))
    db.commit()
    db.close()
    client = TestClient(app)
    response = client.post("/api/auth/login", json={"email": "badhash@example.com", "password": "secret1"})
    assert response.status_code == 401


def test_validate_endpoint_reports_token_validity():
    client = TestClient(app)
    signup_user(client, "validate@example.com", "secret1")
    token = client.post(
        "/api/auth/login", json={"email": "validate@example.com", "password": "secret1"}
    ).json()["access_token"]

    assert client.post("/api/auth/validate", json={"token": token}).json() == {"valid": True}
    assert client.post("/api/auth/validate", json={"token": "garbage"}).json() == {"valid": False}
    assert client.post("/api/auth/validate", json={}).json() == {"valid": False}
