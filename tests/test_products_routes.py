"""Tests des routes de stock (`/api/products`): CRUD, alertes de seuil et propriété."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.helpers import make_admin, register
from vetstock.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_CREATED,
    HTTP_FORBIDDEN,
    HTTP_NO_CONTENT,
    HTTP_NOT_FOUND,
    HTTP_OK,
)


def _create(client: TestClient, **fields) -> dict:
    payload = {"name": "Luvas", "quantity": 10, "minQuantity": 5}
    payload.update(fields)
    r = client.post("/api/products", json=payload)
    assert r.status_code == HTTP_CREATED, r.text
    return r.json()


def test_create_forces_owner_and_uses_camel_case(client: TestClient) -> None:
    user = register(client)
    product = _create(client, userId=999, maxQuantity=50, category="EPI")
    assert product["userId"] == user["id"]
    assert product["minQuantity"] == 5
    assert product["maxQuantity"] == 50
    assert product["category"] == "EPI"


def test_low_stock_on_create_produces_alert(client: TestClient) -> None:
    register(client)
    product = _create(client, quantity=5, minQuantity=10)
    alerts = client.get("/api/alerts").json()
    assert len(alerts) == 1
    assert alerts[0]["type"] == "estoque"
    assert alerts[0]["itemId"] == product["id"]
    assert "abaixo do estoque mínimo" in alerts[0]["message"]
    assert "5 unidades" in alerts[0]["message"]
    assert alerts[0]["resolved"] is False


def test_high_stock_on_create_produces_alert(client: TestClient) -> None:
    register(client)
    _create(client, quantity=20, minQuantity=5, maxQuantity=15)
    [alert] = client.get("/api/alerts").json()
    assert "acima do estoque máximo" in alert["message"]


def test_update_reevaluates_thresholds(client: TestClient) -> None:
    register(client)
    product = _create(client)
    assert client.get("/api/alerts").json() == []
    r = client.put(f"/api/products/{product['id']}", json={"quantity": 2})
    assert r.status_code == HTTP_OK
    assert r.json()["quantity"] == 2
    assert r.json()["name"] == "Luvas"
    assert len(client.get("/api/alerts").json()) == 1


def test_update_can_clear_optional_fields(client: TestClient) -> None:
    register(client)
    product = _create(client, maxQuantity=50, category="EPI")
    r = client.put(f"/api/products/{product['id']}", json={"maxQuantity": None, "name": None})
    body = r.json()
    assert body["maxQuantity"] is None
    assert body["name"] == "Luvas"
    assert body["category"] == "EPI"


def test_negative_quantity_is_rejected(client: TestClient) -> None:
    register(client)
    r = client.post("/api/products", json={"name": "X", "quantity": -1})
    assert r.status_code == HTTP_BAD_REQUEST


def test_list_is_scoped_to_owner(client: TestClient, other_client: TestClient) -> None:
    register(client)
    register(other_client, email="outra@vet.com")
    _create(client, name="Mine")
    _create(other_client, name="Theirs")
    assert [p["name"] for p in client.get("/api/products").json()] == ["Mine"]


def test_foreign_product_is_forbidden(client: TestClient, other_client: TestClient) -> None:
    register(client)
    register(other_client, email="outra@vet.com")
    product = _create(client)
    url = f"/api/products/{product['id']}"
    assert other_client.get(url).status_code == HTTP_FORBIDDEN
    assert other_client.put(url, json={"quantity": 1}).status_code == HTTP_FORBIDDEN
    r = other_client.delete(url)
    assert r.status_code == HTTP_FORBIDDEN
    assert r.json() == {"message": "Permissão negada"}
    assert client.get(url).status_code == HTTP_OK


def test_admin_can_access_any_product(
    client: TestClient, other_client: TestClient, container
) -> None:
    register(client)
    product = _create(client)
    make_admin(container, other_client)
    url = f"/api/products/{product['id']}"
    assert other_client.get(url).status_code == HTTP_OK
    assert other_client.put(url, json={"quantity": 11}).json()["quantity"] == 11


def test_delete_and_not_found(client: TestClient) -> None:
    register(client)
    product = _create(client)
    url = f"/api/products/{product['id']}"
    assert client.delete(url).status_code == HTTP_NO_CONTENT
    r = client.get(url)
    assert r.status_code == HTTP_NOT_FOUND
    assert r.json() == {"message": "Produto não encontrado"}
    assert client.delete(url).status_code == HTTP_NOT_FOUND


def test_invalid_id(client: TestClient) -> None:
    register(client)
    r = client.get("/api/products/abc")
    assert r.status_code == HTTP_BAD_REQUEST
    assert r.json() == {"message": "ID inválido"}
