"""
Application principale FastAPI.

Ce module assemble tous les composants de l'application : middlewares, gestion d'erreurs, routes et
métriques de l'API de gestion de clinique vétérinaire.

Responsabilités du module:
- Initialiser le logging structuré
- Construire l'application FastAPI avec son titre/debug
- Attacher le conteneur (services et stockage) à `app.state`
- Ajouter les middlewares (request id, timing, métriques)
- Monter les routers (santé, comptes, stock, animaux, vaccins, alertes, facturation)
"""

from __future__ import annotations

from fastapi import FastAPI

from vetstock.api.errors import register_error_handlers
from vetstock.api.routes_alerts import router as alerts_router
from vetstock.api.routes_animals import router as animals_router
from vetstock.api.routes_auth import router as auth_router
from vetstock.api.routes_billing import router as billing_router
from vetstock.api.routes_health import router as health_router
from vetstock.api.routes_products import router as products_router
from vetstock.api.routes_vaccines import router as vaccines_router
from vetstock.app.metrics import PrometheusMiddleware, metrics_router
from vetstock.core.container import Container
from vetstock.core.logging import setup_logging
from vetstock.middlewares.request_id import RequestIDMiddleware
from vetstock.middlewares.timing import TimingMiddleware


def create_app(container: Container | None = None) -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Étapes:
    - Configure le logging structuré (structlog)
    - Lit les paramètres d'exécution du conteneur (le singleton par défaut)
    - Ajoute les middlewares utiles au debug/traçabilité
    - Publie les routes métier, de santé et de métriques
    """
    if container is None:
        from vetstock.core.container import container as default_container

        container = default_container
    settings = container.settings
    setup_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG)
    app.state.container = container
    register_error_handlers(app)
    # Le dernier ajouté est le plus externe: le request id couvre tous les logs.
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(products_router)
    app.include_router(animals_router)
    app.include_router(vaccines_router)
    app.include_router(alerts_router)
    app.include_router(billing_router)
    app.include_router(metrics_router)
    return app


app = create_app()
