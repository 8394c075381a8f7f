"""Configuration de test pour pytest.

Ajoute la racine du projet au sys.path et fournit un conteneur isolé par test (horloge figée,
stockage en mémoire, passerelle de paiement factice) ainsi que des clients HTTP.
"""

import os
import sys

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so that
# imports like `from vetstock...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from tests.fakes import FakeBillingGateway, FrozenClock  # noqa: E402
from tests.helpers import NOW, WEBHOOK_SECRET  # noqa: E402
from vetstock.app.main import create_app  # noqa: E402
from vetstock.core.container import Container  # noqa: E402
from vetstock.core.settings import Settings  # noqa: E402
from vetstock.infra.repositories import build_memory_store  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    """Paramètres de test: pas d'admin créé au démarrage, webhook configuré."""
    return Settings(
        APP_DEBUG=False,
        SEED_ADMIN=False,
        SESSION_SECRET="test-secret",
        STRIPE_WEBHOOK_SECRET=WEBHOOK_SECRET,
        REDIS_URL=None,
        REQUIRE_REDIS=False,
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def gateway() -> FakeBillingGateway:
    return FakeBillingGateway()


@pytest.fixture
def container(settings, clock, gateway) -> Container:
    return Container(
        settings=settings, clock=clock, store=build_memory_store(), billing_gateway=gateway
    )


@pytest.fixture
def app(container):
    return create_app(container)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def other_client(app) -> TestClient:
    """Second client (cookies séparés) pour les scénarios multi-utilisateurs."""
    return TestClient(app)
