import pytest
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.company_info import CompanyInfo
from backend.app.models.user import User

SIGNUP_FORM = {
    "email": "owner@example.com",
    "password": "secret1",
    "name": "Jane Owner",
    "company_name": "Acme Consulting",
    "company_address": "1 Main Street, Springfield",
    "bank_name": "First Bank",
    "account_number": "123456789",
    "account_holder_name": "Acme Consulting",
    "ifsc_code": "FBIN0000001",
    "branch_name": "Downtown",
}


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def test_signup_creates_user_and_company_info():
    client = TestClient(app)
    response = client.post("/api/auth/signup", data=SIGNUP_FORM)
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "owner@example.com"
    assert data["access_token"]
    assert "password" not in data
    company = data["company_info"]
    assert company["company_name"] == "Acme Consulting"
    assert company["company_logo_url"] is None
    assert company["bank_details"]["ifsc_code"] == "FBIN0000001"
    assert company["bank_details"]["branch_name"] == "Downtown"
    assert company["bank_details"]["branch_code"] is None

    with SessionLocal() as db:
        user = db.query(User).filter(User.email == "owner@example.com").first()
        assert user is not None
        assert user.hashed_password and user.hashed_password != SIGNUP_FORM["password"]
        assert user.company_info_id == company["id"]


def test_signup_with_logo_stores_file():
    client = TestClient(app)
    response = client.post(
        "/api/auth/signup",
        data=SIGNUP_FORM,
        files={"company_logo": ("logo.png", b"\x89PNG fake image", "image/png")},
    )
    assert response.status_code == 201
    logo_url = response.json()["company_info"]["company_logo_url"]
    assert logo_url.startswith("/uploads/logo_")
    assert logo_url.endswith(".png")

    served = client.get(logo_url)
    assert served.status_code == 200
    assert served.content == b"\x89PNG fake image"


def test_duplicate_email_is_rejected_case_insensitively():
    client = TestClient(app)
    assert client.post("/api/auth/signup", data=SIGNUP_FORM).status_code == 201

    duplicate = dict(SIGNUP_FORM, email="OWNER@Example.com")
    response = client.post("/api/auth/signup", data=duplicate)
    assert response.status_code == 400
    assert "already registered" in response.json()["detail"]

    with SessionLocal() as db:
        assert db.query(User).count() == 1
        assert db.query(CompanyInfo).count() == 1


def test_missing_fields_are_reported_together():
    client = TestClient(app)
    response = client.post("/api/auth/signup", data={"email": "partial@example.com", "password": "secret1"})
    assert response.status_code == 400
    detail = response.json()["detail"]
    for message in ("Name is required", "Company name is required", "IFSC code is required"):
        assert message in detail
    assert "Email is required" not in detail


def test_short_password_is_rejected():
    client = TestClient(app)
    response = client.post("/api/auth/signup", data=dict(SIGNUP_FORM, password="abc"))
    assert response.status_code == 400
    assert response.json()["detail"] == "Password must be at least 6 characters"
    with SessionLocal() as db:
        assert db.query(User).count() == 0
