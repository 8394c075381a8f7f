"""
Endpoint de santé pour vérifier la disponibilité de l'API et du stockage.

Expose `/health` pour signaler l'état général de l'application et le backend de stockage actif.
"""

from fastapi import APIRouter

from vetstock.api.deps import container_dep
from vetstock.core.container import Container

router = APIRouter(tags=["health"])


@router.get("/health")
def health(c: Container = container_dep):
    """Vérifie la disponibilité de l'API et le backend de stockage."""
    return {"status": "ok", "storage": c.storage_backend}
