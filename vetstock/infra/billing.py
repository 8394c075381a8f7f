"""
Passerelle Stripe pour les abonnements.

Enveloppe minimale du SDK `stripe`: création/récupération de clients et d'abonnements, et
vérification de signature des webhooks. La logique métier (qui persiste quoi) vit dans
`vetstock.domain.billing`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import stripe

from vetstock.domain.errors import BillingError, BillingUnavailableError

_EXPAND = ["latest_invoice.payment_intent"]

# Erreurs possibles à la vérification d'un webhook (charge illisible, signature invalide).
WEBHOOK_ERRORS = (ValueError, stripe.SignatureVerificationError)


@dataclass(frozen=True)
class SubscriptionInfo:
    """Abonnement côté fournisseur, réduit à ce que le front consomme."""

    subscription_id: str
    client_secret: str | None = None


def _field(obj: Any, name: str) -> Any:
    """Lit un champ d'objet Stripe (ou dict) sans lever si absent."""
    if obj is None or isinstance(obj, str):
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def client_secret_of(subscription: Any) -> str | None:
    """Extrait `latest_invoice.payment_intent.client_secret` si développé."""
    invoice = _field(subscription, "latest_invoice")
    intent = _field(invoice, "payment_intent")
    return _field(intent, "client_secret")


class StripeBillingGateway:
    """Accès à l'API Stripe avec la clé secrète configurée."""

    def __init__(self, secret_key: str | None):
        """Mémorise la clé secrète (None = paiements désactivés)."""
        self.secret_key = secret_key

    @property
    def configured(self) -> bool:
        """Vrai si une clé secrète Stripe est disponible."""
        return bool(self.secret_key)

    def _initialize(self) -> None:
        if not self.configured:
            raise BillingUnavailableError()
        stripe.api_key = self.secret_key

    def retrieve_subscription(self, subscription_id: str) -> SubscriptionInfo:
        """Récupère un abonnement existant."""
        self._initialize()
        try:
            sub = stripe.Subscription.retrieve(subscription_id, expand=_EXPAND)
        except stripe.StripeError as err:
            raise BillingError(str(err.user_message or err)) from err
        return SubscriptionInfo(subscription_id=sub.id, client_secret=client_secret_of(sub))

    def create_customer(self, email: str, name: str) -> str:
        """Crée un client Stripe et retourne son id."""
        self._initialize()
        try:
            customer = stripe.Customer.create(email=email, name=name)
        except stripe.StripeError as err:
            raise BillingError(str(err.user_message or err)) from err
        return customer.id

    def create_subscription(self, customer_id: str, price_id: str) -> SubscriptionInfo:
        """Crée un abonnement en attente de paiement pour le client."""
        self._initialize()
        try:
            sub = stripe.Subscription.create(
                customer=customer_id,
                items=[{"price": price_id}],
                payment_behavior="default_incomplete",
                expand=_EXPAND,
            )
        except stripe.StripeError as err:
            raise BillingError(str(err.user_message or err)) from err
        return SubscriptionInfo(subscription_id=sub.id, client_secret=client_secret_of(sub))

    def construct_event(self, payload: bytes, sig_header: str, secret: str) -> Any:
        """Vérifie la signature d'un webhook et retourne l'événement.

        Raises:
            ValueError: Charge utile illisible.
            stripe.SignatureVerificationError: Signature invalide.
        """
        return stripe.Webhook.construct_event(payload, sig_header, secret)
