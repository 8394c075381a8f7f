"""
Orchestration des abonnements.

Récupère ou crée l'abonnement Stripe d'un utilisateur et persiste ses identifiants, et applique
les événements de webhook pertinents (suppression d'abonnement).
"""

from __future__ import annotations

from typing import Any

import structlog

from vetstock.domain.entities import User
from vetstock.domain.services import AccountService

log = structlog.get_logger(__name__)

SUBSCRIPTION_DELETED = "customer.subscription.deleted"
SUBSCRIPTION_UPDATED = "customer.subscription.updated"


def _subscription_id(event: Any) -> str | None:
    """Id de l'objet de l'événement; `stripe.Event` ne s'utilise que par indexation."""
    try:
        return event["data"]["object"]["id"]
    except KeyError:
        return None


class BillingService:
    """Service métier de facturation."""

    def __init__(self, gateway, accounts: AccountService, price_id: str):
        """Initialise le service avec la passerelle, les comptes et le prix Stripe."""
        self.gateway = gateway
        self.accounts = accounts
        self.price_id = price_id

    def get_or_create_subscription(self, user: User) -> dict[str, Any]:
        """Retourne l'abonnement existant ou en crée un (client réutilisé s'il existe).

        Retour: dict avec `subscription_id` et `client_secret`.
        """
        if user.stripe_subscription_id:
            info = self.gateway.retrieve_subscription(user.stripe_subscription_id)
            return {"subscription_id": info.subscription_id, "client_secret": info.client_secret}

        customer_id = user.stripe_customer_id or self.gateway.create_customer(
            email=user.email, name=user.name
        )
        info = self.gateway.create_subscription(customer_id, self.price_id)
        self.accounts.attach_billing(user.id, customer_id, info.subscription_id)
        log.info(
            "subscription_created",
            user_id=user.id,
            subscription_id=info.subscription_id,
        )
        return {"subscription_id": info.subscription_id, "client_secret": info.client_secret}

    def handle_event(self, event: Any) -> User | None:
        """Applique un événement Stripe; retourne l'utilisateur modifié, le cas échéant."""
        event_type = event["type"]
        log.info("stripe_webhook_received", event_type=event_type)
        if event_type not in (SUBSCRIPTION_DELETED, SUBSCRIPTION_UPDATED):
            return None
        subscription_id = _subscription_id(event)
        if not subscription_id:
            return None
        user = self.accounts.find_by_subscription(subscription_id)
        if user is None:
            log.warning("stripe_subscription_unknown", subscription_id=subscription_id)
            return None
        if event_type == SUBSCRIPTION_DELETED:
            log.info("subscription_cleared", user_id=user.id, subscription_id=subscription_id)
            return self.accounts.clear_subscription(user.id)
        return None
