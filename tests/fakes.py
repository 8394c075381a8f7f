"""
Fakes pour les tests unitaires.

Ce module fournit des implémentations factices déterministes: horloge figée, client Redis en
mémoire (sous-ensemble des commandes utilisées par les dépôts) et passerelle de paiement.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from typing import Any

from vetstock.domain.errors import BillingError, BillingUnavailableError
from vetstock.infra.billing import SubscriptionInfo

VALID_SIGNATURE = "t=1,v1=valid"


class FrozenClock:
    """Horloge figée, avançable à la main."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        """Avance l'horloge (arguments de `timedelta`)."""
        self.now += timedelta(**delta)


class FakePipeline:
    """Pipeline Redis: met les commandes en file et les exécute à `execute()`."""

    def __init__(self, client: FakeRedis):
        self.client = client
        self.calls: list[tuple[Any, tuple, dict]] = []

    def __getattr__(self, name: str):
        method = getattr(self.client, name)

        def queue(*args: Any, **kwargs: Any) -> FakePipeline:
            self.calls.append((method, args, kwargs))
            return self

        return queue

    def execute(self) -> list[Any]:
        results = [method(*args, **kwargs) for method, args, kwargs in self.calls]
        self.calls = []
        return results


class FakeRedis:
    """Client Redis en mémoire (valeurs en str, comme avec `decode_responses=True`)."""

    def __init__(self, fail_ping: bool = False):
        self.kv: dict[str, str] = {}
        self.sets: dict[str, set[str]] = {}
        self.fail_ping = fail_ping

    def ping(self) -> bool:
        if self.fail_ping:
            raise ConnectionError("redis down")
        return True

    def get(self, key: str) -> str | None:
        return self.kv.get(key)

    def set(self, key: str, value: str) -> bool:
        self.kv[key] = value
        return True

    def mget(self, keys: list[str]) -> list[str | None]:
        return [self.kv.get(k) for k in keys]

    def incr(self, key: str) -> int:
        value = int(self.kv.get(key, 0)) + 1
        self.kv[key] = str(value)
        return value

    def sadd(self, key: str, *members: Any) -> int:
        current = self.sets.setdefault(key, set())
        added = {str(m) for m in members} - current
        current.update(added)
        return len(added)

    def srem(self, key: str, *members: Any) -> int:
        current = self.sets.get(key, set())
        removed = {str(m) for m in members} & current
        current.difference_update(removed)
        return len(removed)

    def smembers(self, key: str) -> set[str]:
        return set(self.sets.get(key, set()))

    def delete(self, *keys: str) -> int:
        return sum(1 for k in keys if self.kv.pop(k, None) is not None)

    def pipeline(self) -> FakePipeline:
        return FakePipeline(self)


class FakeBillingGateway:
    """Passerelle de paiement en mémoire.

    Les webhooks sont des JSON bruts; seule la signature `VALID_SIGNATURE` est acceptée.
    """

    def __init__(self, configured: bool = True, error: str | None = None):
        self.configured = configured
        self.error = error
        self.customers: list[tuple[str, str]] = []
        self.subscriptions: list[tuple[str, str]] = []
        self.retrieved: list[str] = []

    def _check(self) -> None:
        if not self.configured:
            raise BillingUnavailableError()
        if self.error:
            raise BillingError(self.error)

    def retrieve_subscription(self, subscription_id: str) -> SubscriptionInfo:
        self._check()
        self.retrieved.append(subscription_id)
        return SubscriptionInfo(subscription_id, f"{subscription_id}_secret")

    def create_customer(self, email: str, name: str) -> str:
        self._check()
        self.customers.append((email, name))
        return f"cus_{len(self.customers)}"

    def create_subscription(self, customer_id: str, price_id: str) -> SubscriptionInfo:
        self._check()
        self.subscriptions.append((customer_id, price_id))
        subscription_id = f"sub_{len(self.subscriptions)}"
        return SubscriptionInfo(subscription_id, f"{subscription_id}_secret")

    def construct_event(self, payload: bytes, sig_header: str, secret: str) -> Any:
        if sig_header != VALID_SIGNATURE:
            raise ValueError("No signatures found matching the expected signature")
        return json.loads(payload)
