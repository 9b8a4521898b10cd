import pytest
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import engine
from backend.app.main import app


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def signup_and_token(client: TestClient, email: str) -> str:
    response = client.post(
        "/api/auth/signup",
        data={
            "email": email,
            "password": "secret1",
            "name": "Owner",
            "company_name": "Acme Consulting",
            "company_address": "1 Main Street",
            "bank_name": "First Bank",
            "account_number": "123456789",
            "account_holder_name": "Acme Consulting",
            "ifsc_code": "FBIN0000001",
        },
    )
    assert response.status_code == 201
    return response.json()["access_token"]


def invoice_payload(number: str = "INV-001", employee_id: str = "EMP-1", **overrides):
    payload = {
        "invoice_number": number,
        "date": "2024-03-05",
        "employee_name": "John Contractor",
        "employee_id": employee_id,
        "employee_email": "john@example.com",
        "employee_address": "42 Elm Road",
        "employee_mobile": "+1 555 0100",
        "services": [
            {"description": "Backend development", "hours": 10, "rate": 50},
            {"description": "Code review", "hours": 2.5, "rate": 40},
        ],
        "tax_rate": 18,
    }
    payload.update(overrides)
    return payload


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_create_invoice_returns_derived_totals():
    client = TestClient(app)
    token = signup_and_token(client, "inv1@example.com")
    response = client.post("/api/invoices", json=invoice_payload(), headers=auth(token))
    assert response.status_code == 201
    data = response.json()
    assert data["invoice_number"] == "INV-001"
    assert [item["description"] for item in data["services"]] == ["Backend development", "Code review"]
    assert data["services"][0]["total"] == pytest.approx(500.0)
    assert data["subtotal"] == pytest.approx(600.0)
    assert data["tax_amount"] == pytest.approx(108.0)
    assert data["grand_total"] == pytest.approx(708.0)


def test_invoices_require_auth():
    client = TestClient(app)
    assert client.get("/api/invoices").status_code == 401
    assert client.post("/api/invoices", json=invoice_payload()).status_code == 401


def test_invalid_payload_returns_400():
    client = TestClient(app)
    token = signup_and_token(client, "inv2@example.com")
    response = client.post(
        "/api/invoices", json=invoice_payload(employee_email="not-an-email"), headers=auth(token)
    )
    assert response.status_code == 400
    assert "employee_email" in response.json()["detail"]

    missing = invoice_payload()
    del missing["services"]
    assert client.post("/api/invoices", json=missing, headers=auth(token)).status_code == 400


def test_update_replaces_fields_and_items():
    client = TestClient(app)
    token = signup_and_token(client, "inv3@example.com")
    created = client.post("/api/invoices", json=invoice_payload(), headers=auth(token)).json()

    updated = invoice_payload(
        number="INV-001-A",
        services=[{"description": "Support", "hours": 1, "rate": 100}],
        tax_rate=0,
    )
    response = client.put(f"/api/invoices/{created['id']}", json=updated, headers=auth(token))
    assert response.status_code == 200
    data = response.json()
    assert data["invoice_number"] == "INV-001-A"
    assert len(data["services"]) == 1
    assert data["grand_total"] == pytest.approx(100.0)

    fetched = client.get(f"/api/invoices/{created['id']}", headers=auth(token)).json()
    assert fetched["services"] == data["services"]


def test_update_missing_invoice_returns_404():
    client = TestClient(app)
    token = signup_and_token(client, "inv4@example.com")
    response = client.put("/api/invoices/999", json=invoice_payload(), headers=auth(token))
    assert response.status_code == 404


def test_delete_then_get_returns_404():
    client = TestClient(app)
    token = signup_and_token(client, "inv5@example.com")
    created = client.post("/api/invoices", json=invoice_payload(), headers=auth(token)).json()

    response = client.delete(f"/api/invoices/{created['id']}", headers=auth(token))
    assert response.status_code == 200
    assert client.get(f"/api/invoices/{created['id']}", headers=auth(token)).status_code == 404
    assert client.delete(f"/api/invoices/{created['id']}", headers=auth(token)).status_code == 404


def test_list_is_newest_first_and_owner_scoped():
    client = TestClient(app)
    token_a = signup_and_token(client, "inv6a@example.com")
    token_b = signup_and_token(client, "inv6b@example.com")
    first = client.post("/api/invoices", json=invoice_payload("A-1"), headers=auth(token_a)).json()
    second = client.post("/api/invoices", json=invoice_payload("A-2"), headers=auth(token_a)).json()
    client.post("/api/invoices", json=invoice_payload("B-1"), headers=auth(token_b))

    listed = client.get("/api/invoices", headers=auth(token_a)).json()
    assert [inv["id"] for inv in listed] == [second["id"], first["id"]]

    other = client.get(f"/api/invoices/{first['id']}", headers=auth(token_b))
    assert other.status_code == 404


def test_list_by_employee():
    client = TestClient(app)
    token = signup_and_token(client, "inv7@example.com")
    client.post("/api/invoices", json=invoice_payload("E-1", employee_id="EMP-1"), headers=auth(token))
    client.post("/api/invoices", json=invoice_payload("E-2", employee_id="EMP-2"), headers=auth(token))

    response = client.get("/api/invoices/employee/EMP-2", headers=auth(token))
    assert response.status_code == 200
    assert [inv["invoice_number"] for inv in response.json()] == ["E-2"]


def test_download_returns_pdf_attachment():
    client = TestClient(app)
    token = signup_and_token(client, "inv8@example.com")
    created = client.post("/api/invoices", json=invoice_payload(), headers=auth(token)).json()

    response = client.get(f"/api/invoices/{created['id']}/download", headers=auth(token))
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert 'filename="Invoice_INV-001.pdf"' in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")

    missing = client.get("/api/invoices/999/download", headers=auth(token))
    assert missing.status_code == 404


def test_download_survives_unreadable_logo():
    client = TestClient(app)
    response = client.post(
        "/api/auth/signup",
        data={
            "email": "badlogo@example.com",
            "password": "secret1",
            "name": "Owner",
            "company_name": "Acme Consulting",
            "company_address": "1 Main Street",
            "bank_name": "First Bank",
            "account_number": "123456789",
            "account_holder_name": "Acme Consulting",
            "ifsc_code": "FBIN0000001",
        },
        files={"company_logo": ("logo.png", b"not an image", "image/png")},
    )
    assert response.status_code == 201
    assert response.json()["company_info"]["company_logo_url"]
    token = response.json()["access_token"]
    created = client.post("/api/invoices", json=invoice_payload(), headers=auth(token)).json()

    download = client.get(f"/api/invoices/{created['id']}/download", headers=auth(token))
    assert download.status_code == 200
    assert download.content.startswith(b"%PDF")
