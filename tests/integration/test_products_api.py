"""Integration tests for the loan product endpoints"""

from fastapi.testclient import TestClient
from mfi_backoffice.infrastructure.database.repositories import ProductRepository


def product_body(**overrides) -> dict:
    body = {
        "name": "Salary Advance",
        "description": "Short-term advance against salary",
        "minAmount": 50_000,
        "maxAmount": 500_000,
        "minTenure": 1,
        "maxTenure": 6,
        "minInterest": 5.0,
        "maxInterest": 8.0,
        "processingFee": 1.0,
        "features": ["Same-day payout"],
        "eligibility": ["Salaried employee"],
    }
    body.update(overrides)
    return body


def test_list_products_is_public(client: TestClient, product):
    response = client.get("/v1/products")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["name"] == "Business Loan"
    assert data[0]["minAmount"] == 1_000_000
    assert data[0]["processingFee"] == 2.0


def test_list_products_status_filter(client: TestClient, product, officer_headers):
    client.post("/v1/products", json=product_body(status="Inactive"), headers=officer_headers)

    assert len(client.get("/v1/products", params={"status": "Inactive"}).json()) == 1
    assert len(client.get("/v1/products", params={"status": "Active"}).json()) == 1
    assert len(client.get("/v1/products", params={"status": "All"}).json()) == 2


def test_create_product(client: TestClient, officer_headers):
    response = client.post("/v1/products", json=product_body(), headers=officer_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "Active"
    assert data["features"] == ["Same-day payout"]
    assert data["createdAt"]


def test_create_product_requires_auth(client: TestClient):
    response = client.post("/v1/products", json=product_body())

    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized - No token provided"


def test_create_product_rejects_inverted_ranges(client: TestClient, officer_headers):
    response = client.post("/v1/products", json=product_body(minAmount=900_000), headers=officer_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid product ranges"
    assert response.json()["details"]


def test_create_product_rejects_duplicate_name(client: TestClient, product, officer_headers):
    response = client.post("/v1/products", json=product_body(name="Business Loan"), headers=officer_headers)
    assert response.status_code == 400


def test_create_product_missing_fields(client: TestClient, officer_headers):
    response = client.post("/v1/products", json={"name": "Incomplete"}, headers=officer_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields"


def test_get_product(client: TestClient, product):
    response = client.get(f"/v1/products/{product.id}")

    assert response.status_code == 200
    assert response.json()["id"] == str(product.id)


def test_get_product_not_found(client: TestClient):
    response = client.get("/v1/products/00000000-0000-0000-0000-000000000000")

    assert response.status_code == 404
    assert response.json() == {"error": "Product not found"}


def test_get_product_malformed_id(client: TestClient):
    response = client.get("/v1/products/not-a-uuid")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid Product ID format"


def test_update_product_checks_merged_ranges(client: TestClient, product, officer_headers):
    response = client.put(
        f"/v1/products/{product.id}",
        json={"maxAmount": 500_000},
        headers=officer_headers,
    )
    assert response.status_code == 400

    response = client.put(
        f"/v1/products/{product.id}",
        json={"maxAmount": 60_000_000, "description": "Raised ceiling"},
        headers=officer_headers,
    )
    assert response.status_code == 200
    assert response.json()["maxAmount"] == 60_000_000
    assert response.json()["minAmount"] == 1_000_000


def test_delete_product_requires_privileged_role(client: TestClient, product, officer_headers, admin_headers):
    response = client.delete(f"/v1/products/{product.id}", headers=officer_headers)
    assert response.status_code == 403
    assert response.json()["error"] == "Forbidden - Insufficient permissions"

    response = client.delete(f"/v1/products/{product.id}", headers=admin_headers)
    assert response.status_code == 200
    assert client.get(f"/v1/products/{product.id}").status_code == 404


def test_create_product_rejects_unbounded_tenure(client: TestClient, officer_headers):
    response = client.post("/v1/products", json=product_body(maxTenure=100_000), headers=officer_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_update_product_rejects_unbounded_tenure(client: TestClient, product, officer_headers):
    response = client.put(f"/v1/products/{product.id}", json={"maxTenure": 601}, headers=officer_headers)
    assert response.status_code == 400


def test_duplicate_name_race_is_a_validation_error(client: TestClient, product, officer_headers, monkeypatch):
    """The unique column still answers 400 when the name check is passed concurrently"""
    monkeypatch.setattr(ProductRepository, "name_taken", lambda self, name, exclude_id=None: False)

    response = client.post("/v1/products", json=product_body(name="Business Loan"), headers=officer_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "A product named 'Business Loan' already exists"
    assert len(client.get("/v1/products").json()) == 1


def test_rename_race_is_a_validation_error(client: TestClient, product, officer_headers, monkeypatch):
    other = client.post("/v1/products", json=product_body(), headers=officer_headers).json()
    monkeypatch.setattr(ProductRepository, "name_taken", lambda self, name, exclude_id=None: False)

    response = client.put(f"/v1/products/{other['id']}", json={"name": "Business Loan"}, headers=officer_headers)

    assert response.status_code == 400
    assert client.get(f"/v1/products/{other['id']}").json()["name"] == "Salary Advance"
