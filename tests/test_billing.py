"""
Tests de la facturation: abonnement Stripe de l'utilisateur et webhooks.

Les routes utilisent la passerelle factice; la passerelle Stripe réelle est testée à part pour la
vérification de signature et l'enveloppe des erreurs du SDK.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time

import pytest
import stripe
from fastapi.testclient import TestClient

from tests.fakes import VALID_SIGNATURE
from tests.helpers import WEBHOOK_SECRET, register
from vetstock.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_OK,
    HTTP_SERVICE_UNAVAILABLE,
    HTTP_UNAUTHORIZED,
)
from vetstock.domain.errors import BillingError, BillingUnavailableError
from vetstock.infra.billing import StripeBillingGateway, client_secret_of


def _event(event_type: str, subscription_id: str) -> bytes:
    return json.dumps(
        {"id": "evt_1", "type": event_type, "data": {"object": {"id": subscription_id}}}
    ).encode()


def _post_webhook(client: TestClient, payload: bytes, signature: str = VALID_SIGNATURE):
    return client.post(
        "/api/webhook/stripe",
        content=payload,
        headers={"stripe-signature": signature, "content-type": "application/json"},
    )


# Abonnement


def test_get_or_create_subscription_creates_and_persists(
    client: TestClient, container, gateway
) -> None:
    user = register(client)
    r = client.post("/api/get-or-create-subscription")
    assert r.status_code == HTTP_OK
    assert r.json() == {"subscriptionId": "sub_1", "clientSecret": "sub_1_secret"}
    assert gateway.customers == [("centro@vet.com", "Clínica Centro")]
    assert gateway.subscriptions == [("cus_1", container.settings.STRIPE_PRICE_ID)]

    stored = container.accounts.get(user["id"])
    assert stored.stripe_customer_id == "cus_1"
    assert stored.stripe_subscription_id == "sub_1"
    assert client.get("/api/user").json()["stripeSubscriptionId"] == "sub_1"


def test_existing_subscription_is_retrieved(client: TestClient, gateway) -> None:
    register(client)
    client.post("/api/get-or-create-subscription")
    r = client.post("/api/get-or-create-subscription")
    assert r.json()["subscriptionId"] == "sub_1"
    assert gateway.retrieved == ["sub_1"]
    assert len(gateway.subscriptions) == 1


def test_existing_customer_is_reused(client: TestClient, container, gateway) -> None:
    user = register(client)
    container.accounts.attach_billing(user["id"], "cus_old", None)
    client.post("/api/get-or-create-subscription")
    assert gateway.customers == []
    assert gateway.subscriptions[0][0] == "cus_old"


def test_subscription_allowed_after_trial_expiry(client: TestClient, clock) -> None:
    register(client)
    clock.advance(days=10)
    assert client.post("/api/get-or-create-subscription").status_code == HTTP_OK
    # Subscribed users regain access
    assert client.get("/api/products").status_code == HTTP_OK


def test_subscription_requires_session(client: TestClient) -> None:
    r = client.post("/api/get-or-create-subscription")
    assert r.status_code == HTTP_UNAUTHORIZED


def test_provider_error_is_400(client: TestClient, gateway) -> None:
    register(client)
    gateway.error = "Your card was declined."
    r = client.post("/api/get-or-create-subscription")
    assert r.status_code == HTTP_BAD_REQUEST
    assert r.json() == {"message": "Your card was declined."}


def test_unconfigured_provider_is_503(client: TestClient, gateway) -> None:
    register(client)
    gateway.configured = False
    r = client.post("/api/get-or-create-subscription")
    assert r.status_code == HTTP_SERVICE_UNAVAILABLE


# Webhooks


def test_webhook_deleted_subscription_clears_it(client: TestClient, container) -> None:
    user = register(client)
    container.accounts.attach_billing(user["id"], "cus_1", "sub_9")
    r = _post_webhook(client, _event("customer.subscription.deleted", "sub_9"))
    assert r.status_code == HTTP_OK
    assert r.json() == {"received": True}
    stored = container.accounts.get(user["id"])
    assert stored.stripe_subscription_id is None
    assert stored.stripe_customer_id == "cus_1"


def test_webhook_updated_subscription_keeps_it(client: TestClient, container) -> None:
    user = register(client)
    container.accounts.attach_billing(user["id"], "cus_1", "sub_9")
    r = _post_webhook(client, _event("customer.subscription.updated", "sub_9"))
    assert r.status_code == HTTP_OK
    assert container.accounts.get(user["id"]).stripe_subscription_id == "sub_9"


def test_webhook_ignores_unknown_events_and_subscriptions(client: TestClient) -> None:
    assert _post_webhook(client, _event("invoice.paid", "sub_1")).status_code == HTTP_OK
    r = _post_webhook(client, _event("customer.subscription.deleted", "sub_unknown"))
    assert r.status_code == HTTP_OK


def test_webhook_bad_signature(client: TestClient) -> None:
    r = _post_webhook(client, _event("invoice.paid", "sub_1"), signature="t=1,v1=forged")
    assert r.status_code == HTTP_BAD_REQUEST
    assert r.json()["message"].startswith("Webhook Error")


def test_webhook_without_secret(client: TestClient, container) -> None:
    container.settings.STRIPE_WEBHOOK_SECRET = None
    r = _post_webhook(client, _event("invoice.paid", "sub_1"))
    assert r.status_code == HTTP_BAD_REQUEST


# Passerelle Stripe


def _sign(payload: bytes, secret: str, timestamp: int) -> str:
    signed = f"{timestamp}.{payload.decode()}".encode()
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def test_stripe_gateway_verifies_signatures() -> None:
    gateway = StripeBillingGateway("sk_test_x")
    payload = _event("customer.subscription.deleted", "sub_1")
    event = gateway.construct_event(
        payload, _sign(payload, WEBHOOK_SECRET, int(time.time())), WEBHOOK_SECRET
    )
    assert event["type"] == "customer.subscription.deleted"
    assert event["data"]["object"]["id"] == "sub_1"

    with pytest.raises(stripe.SignatureVerificationError):
        gateway.construct_event(
            payload, _sign(payload, "whsec_other", int(time.time())), WEBHOOK_SECRET
        )


def test_stripe_gateway_requires_secret_key() -> None:
    gateway = StripeBillingGateway(None)
    assert gateway.configured is False
    with pytest.raises(BillingUnavailableError):
        gateway.create_customer("a@vet.com", "A")


def test_stripe_gateway_wraps_sdk_errors(monkeypatch) -> None:
    def _fail(**kwargs):
        raise stripe.APIConnectionError("network down")

    monkeypatch.setattr(stripe.Customer, "create", _fail)
    with pytest.raises(BillingError, match="network down"):
        StripeBillingGateway("sk_test_x").create_customer("a@vet.com", "A")


def test_client_secret_extraction() -> None:
    expanded = {"id": "sub_1", "latest_invoice": {"payment_intent": {"client_secret": "pi_s"}}}
    assert client_secret_of(expanded) == "pi_s"
    assert client_secret_of({"id": "sub_1", "latest_invoice": "in_1"}) is None
    assert client_secret_of({"id": "sub_1"}) is None


def _signed_event(payload: dict):
    """Construit un vrai `stripe.Event` signé, comme le ferait la route de webhook."""
    body = json.dumps(payload).encode()
    gateway = StripeBillingGateway("sk_test_x")
    return gateway.construct_event(
        body, _sign(body, WEBHOOK_SECRET, int(time.time())), WEBHOOK_SECRET
    )


def test_sdk_deleted_event_clears_subscription(client: TestClient, container) -> None:
    user = register(client)
    container.accounts.attach_billing(user["id"], "cus_1", "sub_9")
    event = _signed_event(
        {
            "id": "evt_1",
            "object": "event",
            "type": "customer.subscription.deleted",
            "data": {"object": {"id": "sub_9", "object": "subscription", "status": "canceled"}},
        }
    )
    assert isinstance(event, stripe.Event)

    updated = container.billing.handle_event(event)
    assert updated is not None
    assert container.accounts.get(user["id"]).stripe_subscription_id is None


def test_sdk_event_without_object_id_is_ignored(client: TestClient, container) -> None:
    user = register(client)
    container.accounts.attach_billing(user["id"], "cus_1", "sub_9")
    event = _signed_event(
        {
            "id": "evt_2",
            "object": "event",
            "type": "customer.subscription.deleted",
            "data": {"object": {"object": "subscription"}},
        }
    )
    assert container.billing.handle_event(event) is None
    assert container.accounts.get(user["id"]).stripe_subscription_id == "sub_9"
