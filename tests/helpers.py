"""Constantes et fonctions utilitaires partagées par les tests d'API."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi.testclient import TestClient

from vetstock.core.container import Container
from vetstock.core.http_constants import HTTP_CREATED, HTTP_OK

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
WEBHOOK_SECRET = "whsec_test"


def register(
    client: TestClient,
    name: str = "Clínica Centro",
    email: str = "centro@vet.com",
    password: str = "secret1",
) -> dict:
    """Inscrit un utilisateur via l'API (le client garde le cookie de session)."""
    r = client.post("/api/register", json={"name": name, "email": email, "password": password})
    assert r.status_code == HTTP_CREATED, r.text
    return r.json()


def make_admin(container: Container, client: TestClient) -> dict:
    """Crée un administrateur en base et connecte `client` avec son compte."""
    container.accounts.register(
        "Admin", "root@vet.com", "admin123", container.now(), user_type="admin"
    )
    r = client.post("/api/login", json={"email": "root@vet.com", "password": "admin123"})
    assert r.status_code == HTTP_OK, r.text
    return r.json()


def iso(dt: datetime) -> str:
    """Horodatage ISO-8601 tel qu'envoyé par le front."""
    return dt.isoformat().replace("+00:00", "Z")
