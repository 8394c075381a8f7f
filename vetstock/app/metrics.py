"""
Métriques Prometheus de l'API VetStock.

Deux familles:
- HTTP: nombre de requêtes par méthode/route/statut et latence par route. Le label `route` est le
  gabarit de la route (`/api/products/{product_id}`), jamais le chemin brut.
- Métier: alertes émises par type, accès refusés faute d'essai ou d'abonnement.
"""

import time

from fastapi import APIRouter, Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from vetstock.core.http_constants import HTTP_INTERNAL_SERVER_ERROR

metrics_router = APIRouter(tags=["metrics"])

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "route", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latency of HTTP requests", ["route"]
)

ALERTS_EMITTED = Counter(
    "vetstock_alerts_emitted_total",
    "Alerts appended by stock and vaccine threshold rules",
    ["type"],
)
ENTITLEMENT_DENIED = Counter(
    "vetstock_entitlement_denied_total",
    "Requests refused because the trial expired without subscription",
)


def route_label(request: Request) -> str:
    """Gabarit de la route appariée, `unmatched` pour les chemins inconnus."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


@metrics_router.get("/metrics")
def metrics():
    """Exposition Prometheus (format texte) du registre par défaut."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Compte et chronomètre chaque requête; une exception non gérée compte comme un 500."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        status = HTTP_INTERNAL_SERVER_ERROR
        try:
            response: Response = await call_next(request)
            status = response.status_code
            return response
        finally:
            route = route_label(request)
            REQUEST_COUNT.labels(request.method, route, str(status)).inc()
            REQUEST_LATENCY.labels(route).observe(time.perf_counter() - started)
