"""
Routes de facturation.

- `POST /api/get-or-create-subscription`: abonnement Stripe de l'utilisateur courant (session
  requise, droit d'accès non requis pour pouvoir s'abonner après l'essai).
- `POST /api/webhook/stripe`: événements Stripe signés; le corps brut est nécessaire à la
  vérification de signature.
"""

import structlog
from fastapi import APIRouter, Request

from vetstock.api.deps import container_dep, current_user_dep
from vetstock.api.schemas import SubscriptionResponse, WebhookAck
from vetstock.core.container import Container
from vetstock.domain.entities import User
from vetstock.domain.errors import ValidationError
from vetstock.infra.billing import WEBHOOK_ERRORS

router = APIRouter(prefix="/api", tags=["billing"])
log = structlog.get_logger(__name__)


@router.post("/get-or-create-subscription", response_model=SubscriptionResponse)
def get_or_create_subscription(user: User = current_user_dep, c: Container = container_dep):
    """Retourne l'abonnement existant de l'utilisateur ou en crée un."""
    return c.billing.get_or_create_subscription(user)


@router.post("/webhook/stripe", response_model=WebhookAck)
async def stripe_webhook(request: Request, c: Container = container_dep):
    """Reçoit un événement Stripe, vérifie sa signature et l'applique."""
    secret = c.settings.STRIPE_WEBHOOK_SECRET
    if not secret:
        raise ValidationError("Webhook secret not configured")
    payload = await request.body()
    signature = request.headers.get("stripe-signature", "")
    try:
        event = c.billing_gateway.construct_event(payload, signature, secret)
    except WEBHOOK_ERRORS as err:
        log.warning("stripe_webhook_rejected", error=type(err).__name__)
        raise ValidationError(f"Webhook Error: {err}") from err
    c.billing.handle_event(event)
    return WebhookAck()
