"""Integration tests for the loan application endpoints"""

import pytest
from fastapi.testclient import TestClient
from mfi_backoffice.infrastructure.database.models import LoanProduct


@pytest.fixture
def application(client: TestClient, application_payload) -> dict:
    response = client.post("/v1/applications", json=application_payload)
    assert response.status_code == 201
    return response.json()


def test_submit_application_is_public(client: TestClient, application_payload):
    response = client.post("/v1/applications", json=application_payload)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "Pending"
    assert data["loanType"] == "Business Loan"
    assert data["loanAmount"] == 5_000_000
    assert data["createdAt"] == data["updatedAt"]
    assert "X-Request-ID" in response.headers


def test_submit_application_below_product_minimum(client: TestClient, application_payload):
    application_payload["loanAmount"] = 500_000

    response = client.post("/v1/applications", json=application_payload)

    assert response.status_code == 400
    assert "Loan amount must be between 1,000,000 and 50,000,000" in response.json()["error"]


def test_submit_application_tenure_out_of_range(client: TestClient, application_payload):
    application_payload["tenure"] = 48

    response = client.post("/v1/applications", json=application_payload)

    assert response.status_code == 400
    assert response.json()["error"].startswith("Tenure must be between 6 and 36")


def test_submit_application_missing_fields(client: TestClient, application_payload):
    del application_payload["email"]
    del application_payload["income"]

    response = client.post("/v1/applications", json=application_payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields", "details": ["email", "income"]}


def test_submit_application_unknown_product(client: TestClient, application_payload):
    application_payload["loanProductId"] = "00000000-0000-0000-0000-000000000000"

    response = client.post("/v1/applications", json=application_payload)

    assert response.status_code == 400
    assert response.json()["error"] == "Selected loan product does not exist"


def test_list_applications_requires_auth(client: TestClient, application):
    assert client.get("/v1/applications").status_code == 401
    assert client.get("/v1/applications", headers={"Authorization": "Bearer junk"}).status_code == 401


def test_list_applications_filters(client: TestClient, application_payload, officer_headers):
    client.post("/v1/applications", json=application_payload)
    client.post(
        "/v1/applications",
        json=dict(application_payload, fullName="Chinedu Eze", email="chinedu@example.com"),
    )

    everyone = client.get("/v1/applications", params={"status": "All"}, headers=officer_headers).json()
    assert len(everyone) == 2
    assert everyone[0]["fullName"] == "Chinedu Eze"  # newest first

    found = client.get("/v1/applications", params={"search": "AMINA"}, headers=officer_headers).json()
    assert [a["email"] for a in found] == ["amina@example.com"]

    limited = client.get("/v1/applications", params={"limit": 1}, headers=officer_headers).json()
    assert len(limited) == 1

    approved = client.get("/v1/applications", params={"status": "Approved"}, headers=officer_headers).json()
    assert approved == []


def test_get_application(client: TestClient, application, officer_headers):
    response = client.get(f"/v1/applications/{application['id']}", headers=officer_headers)

    assert response.status_code == 200
    assert response.json()["fullName"] == "Amina Okafor"


def test_get_application_not_found(client: TestClient, officer_headers):
    response = client.get("/v1/applications/00000000-0000-0000-0000-000000000000", headers=officer_headers)
    assert response.status_code == 404


def test_status_update_is_idempotent(client: TestClient, application, officer_headers):
    url = f"/v1/applications/{application['id']}"

    first = client.put(url, json={"status": "Approved"}, headers=officer_headers)
    second = client.put(url, json={"status": "Approved"}, headers=officer_headers)

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["status"] == "Approved"
    assert second.json()["updatedAt"] >= first.json()["updatedAt"]
    assert first.json()["updatedAt"] >= application["updatedAt"]


def test_status_update_rejects_unknown_status(client: TestClient, application, officer_headers):
    response = client.put(
        f"/v1/applications/{application['id']}",
        json={"status": "Disbursed"},
        headers=officer_headers,
    )

    assert response.status_code == 400
    assert "Invalid status" in response.json()["error"]


def test_field_update_rechecks_loan_terms(client: TestClient, application, officer_headers):
    url = f"/v1/applications/{application['id']}"

    rejected = client.put(url, json={"loanAmount": 100}, headers=officer_headers)
    assert rejected.status_code == 400

    accepted = client.put(url, json={"loanAmount": 7_500_000, "notes": "Raised after visit"}, headers=officer_headers)
    assert accepted.status_code == 200
    assert accepted.json()["loanAmount"] == 7_500_000
    assert accepted.json()["notes"] == "Raised after visit"


def test_field_update_rejects_null_required_field(client: TestClient, application, officer_headers):
    response = client.put(
        f"/v1/applications/{application['id']}",
        json={"address": None},
        headers=officer_headers,
    )
    assert response.status_code == 400


def test_delete_application_requires_privileged_role(client: TestClient, application, officer_headers, admin_headers):
    url = f"/v1/applications/{application['id']}"

    assert client.delete(url, headers=officer_headers).status_code == 403
    assert client.delete(url, headers=admin_headers).status_code == 200
    assert client.get(url, headers=officer_headers).status_code == 404


def test_payment_summary(client: TestClient, application, officer_headers):
    response = client.get(
        f"/v1/applications/{application['id']}/payment-summary",
        params={"annualRate": 10, "schedule": "true"},
        headers=officer_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["annualRate"] == 10
    assert data["monthlyPayment"] == pytest.approx(439_579.44, abs=1)
    assert data["processingFeeAmount"] == 100_000
    assert data["loanToIncomeRatio"] == 52
    assert data["debtToIncomeRatio"] == 54.9
    assert len(data["schedule"]) == 12
    assert data["schedule"][-1]["balance"] == 0


def test_payment_summary_defaults_to_product_minimum_rate(client: TestClient, application, officer_headers):
    response = client.get(f"/v1/applications/{application['id']}/payment-summary", headers=officer_headers)

    assert response.status_code == 200
    assert response.json()["annualRate"] == 12.0
    assert response.json()["schedule"] is None


def test_payment_summary_falls_back_when_product_deleted(
    client: TestClient, application, product, officer_headers, admin_headers
):
    client.delete(f"/v1/products/{product.id}", headers=admin_headers)

    response = client.get(f"/v1/applications/{application['id']}/payment-summary", headers=officer_headers)

    assert response.status_code == 200
    assert response.json()["annualRate"] == 10.0
    assert response.json()["processingFeeAmount"] == 0


def test_payment_summary_for_overlong_stored_tenure(client: TestClient, db, application_payload, officer_headers):
    """Products stored before the tenure ceiling existed still answer with 400, not a crash"""
    legacy = LoanProduct(
        name="Legacy Mortgage",
        min_amount=1_000_000,
        max_amount=50_000_000,
        min_tenure=1,
        max_tenure=100_000,
        min_interest=10.0,
        max_interest=12.0,
        processing_fee=0.0,
    )
    db.add(legacy)
    db.commit()
    application_payload.update(loanProductId=str(legacy.id), tenure=100_000)
    created = client.post("/v1/applications", json=application_payload)
    assert created.status_code == 201

    response = client.get(f"/v1/applications/{created.json()['id']}/payment-summary", headers=officer_headers)

    assert response.status_code == 400
    assert "too large" in response.json()["error"]
