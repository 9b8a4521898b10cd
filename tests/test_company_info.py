import pytest
from fastapi.testclient import TestClient

from backend.app.core.security import create_access_token, get_password_hash
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.user import User

SIGNUP_FORM = {
    "email": "company@example.com",
    "password": "secret1",
    "name": "Company Owner",
    "company_name": "Acme Consulting",
    "company_address": "1 Main Street",
    "bank_name": "First Bank",
    "account_number": "123456789",
    "account_holder_name": "Acme Consulting",
    "ifsc_code": "FBIN0000001",
}


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def signup_token(client: TestClient) -> str:
    response = client.post("/api/auth/signup", data=SIGNUP_FORM)
    assert response.status_code == 201
    return response.json()["access_token"]


def test_company_info_requires_auth():
    client = TestClient(app)
    assert client.get("/api/auth/company-info").status_code == 401
    response = client.get("/api/auth/company-info", headers={"Authorization": "Bearer invalidtoken"})
    assert response.status_code == 401


def test_get_company_info_returns_profile():
    client = TestClient(app)
    token = signup_token(client)
    response = client.get("/api/auth/company-info", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    data = response.json()
    assert data["company_name"] == "Acme Consulting"
    assert data["bank_details"]["account_number"] == "123456789"


def test_company_info_missing_returns_404():
    with SessionLocal() as db:
        user = User(email="bare@example.com", name="Bare", hashed_password=get_password_hash("secret1"))
        db.add(user)
        db.commit()
        db.refresh(user)
        token = create_access_token(user_id=user.id, email=user.email)
    client = TestClient(app)
    response = client.get("/api/auth/company-info", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 404


def test_update_company_info_is_partial():
    client = TestClient(app)
    token = signup_token(client)
    headers = {"Authorization": f"Bearer {token}"}
    response = client.put(
        "/api/auth/company-info",
        json={"company_address": "2 Side Street", "bank_details": {"branch_code": "BR-9"}},
        headers=headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["company_name"] == "Acme Consulting"
    assert data["company_address"] == "2 Side Street"
    assert data["bank_details"]["branch_code"] == "BR-9"
    assert data["bank_details"]["bank_name"] == "First Bank"


def test_update_company_info_rejects_blank_name():
    client = TestClient(app)
    token = signup_token(client)
    response = client.put(
        "/api/auth/company-info", json={"company_name": "  "}, headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 400


@pytest.mark.parametrize(
    "field, message",
    [
        ("bank_name", "Bank name cannot be blank"),
        ("account_number", "Account number cannot be blank"),
        ("account_holder_name", "Account holder name cannot be blank"),
        ("ifsc_code", "IFSC code cannot be blank"),
    ],
)
def test_update_company_info_rejects_blank_bank_field(field, message):
    client = TestClient(app)
    token = signup_token(client)
    headers = {"Authorization": f"Bearer {token}"}
    for value in ("  ", None):
        response = client.put("/api/auth/company-info", json={"bank_details": {field: value}}, headers=headers)
        assert response.status_code == 400
        assert response.json()["detail"] == message

    stored = client.get("/api/auth/company-info", headers=headers).json()
    assert stored["bank_details"][field] == SIGNUP_FORM[field]


def test_update_company_info_can_clear_branch():
    client = TestClient(app)
    token = signup_token(client)
    headers = {"Authorization": f"Bearer {token}"}
    client.put("/api/auth/company-info", json={"bank_details": {"branch_name": "Downtown"}}, headers=headers)
    response = client.put("/api/auth/company-info", json={"bank_details": {"branch_name": ""}}, headers=headers)
    assert response.status_code == 200
    assert response.json()["bank_details"]["branch_name"] is None
