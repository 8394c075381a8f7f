"""Tests pour l'endpoint de santé de l'application."""

from fastapi.testclient import TestClient

from vetstock.core.http_constants import HTTP_OK


def test_health(client: TestClient):
    """Teste que l'endpoint de santé retourne un statut OK et le stockage actif."""
    r = client.get("/health")
    assert r.status_code == HTTP_OK
    assert r.json() == {"status": "ok", "storage": "memory"}


def test_default_app_is_importable():
    """L'application par défaut (singleton du conteneur) répond aussi."""
    from vetstock.app.main import app

    r = TestClient(app).get("/health")
    assert r.status_code == HTTP_OK
    assert r.json()["status"] == "ok"
