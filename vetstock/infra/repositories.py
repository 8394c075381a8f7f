"""
Repositories pour la gestion des données.

Ce module fournit les dépôts d'entités (utilisateurs, animaux, vaccins, produits, alertes) avec deux
implémentations interchangeables: en mémoire (défaut, dev/tests) et Redis. Les identifiants sont
des entiers attribués de façon monotone par type d'entité.

Les mises à jour remplacent l'enregistrement entier (fusion superficielle puis revalidation):
aucun lecteur ne voit d'enregistrement partiellement écrit; deux écritures concurrentes sur le même
id se résolvent en "dernier écrit gagne".
"""

from __future__ import annotations

import itertools
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import redis
from pydantic import BaseModel

from vetstock.domain.entities import Alert, Animal, Product, User, Vaccine

M = TypeVar("M", bound=BaseModel)


def _merge(model: type[M], current: M, changes: dict[str, Any]) -> M:
    """Fusionne `changes` sur `current` et revalide l'enregistrement complet."""
    data = current.model_dump()
    data.update(changes)
    data["id"] = current.id
    return model.model_validate(data)


class InMemoryRepo(Generic[M]):
    """
    Dépôt en mémoire (utilisé pour dev/tests).

    Stocke les enregistrements dans un dict local, non persistant.
    """

    def __init__(self, model: type[M]):
        """Initialise une base mémoire vide pour le modèle donné."""
        self.model = model
        self._db: dict[int, M] = {}
        # next() sur itertools.count est atomique sous le GIL
        self._ids = itertools.count(1)

    def create(self, **fields: Any) -> M:
        """Attribue le prochain id, insère et renvoie l'enregistrement."""
        record = self.model(id=next(self._ids), **fields)
        self._db[record.id] = record
        return record

    def get(self, record_id: int) -> M | None:
        """Retourne un enregistrement par id, ou None s'il est absent."""
        return self._db.get(record_id)

    def list(self) -> list[M]:
        """Retourne tous les enregistrements par id croissant."""
        return [self._db[k] for k in sorted(self._db)]

    def filter(self, predicate: Callable[[M], bool]) -> list[M]:
        """Parcours linéaire filtré."""
        return [r for r in self.list() if predicate(r)]

    def update(self, record_id: int, changes: dict[str, Any]) -> M | None:
        """Fusionne les champs fournis et remplace l'enregistrement; None si absent."""
        current = self._db.get(record_id)
        if current is None:
            return None
        updated = _merge(self.model, current, changes)
        self._db[record_id] = updated
        return updated

    def delete(self, record_id: int) -> bool:
        """Supprime un enregistrement; False s'il n'existait pas."""
        return self._db.pop(record_id, None) is not None


class RedisRepo(Generic[M]):
    """Dépôt adossé à Redis (clés: `{prefix}:{kind}:{id}`, `:ids`, `:seq`)."""

    def __init__(self, client: Any, model: type[M], kind: str, prefix: str = "vetstock"):
        """Associe le dépôt à un client Redis et à un espace de clés."""
        self.client = client
        self.model = model
        self.kind = kind
        self._ns = f"{prefix}:{kind}"

    def _key(self, record_id: int) -> str:
        return f"{self._ns}:{record_id}"

    @property
    def _ids_key(self) -> str:
        return f"{self._ns}:ids"

    @property
    def _seq_key(self) -> str:
        return f"{self._ns}:seq"

    def _write(self, record: M) -> None:
        self.client.set(self._key(record.id), record.model_dump_json())

    def create(self, **fields: Any) -> M:
        """Attribue un id via INCR, sérialise en JSON et indexe l'id."""
        record_id = int(self.client.incr(self._seq_key))
        record = self.model(id=record_id, **fields)
        pipe = self.client.pipeline()
        pipe.set(self._key(record_id), record.model_dump_json())
        pipe.sadd(self._ids_key, record_id)
        pipe.execute()
        return record

    def get(self, record_id: int) -> M | None:
        """Charge et désérialise l'enregistrement, si présent."""
        raw = self.client.get(self._key(record_id))
        return self.model.model_validate_json(raw) if raw else None

    def list(self) -> list[M]:
        """Charge tous les enregistrements indexés, par id croissant."""
        ids = sorted(int(i) for i in self.client.smembers(self._ids_key))
        if not ids:
            return []
        raws = self.client.mget([self._key(i) for i in ids])
        return [self.model.model_validate_json(raw) for raw in raws if raw]

    def filter(self, predicate: Callable[[M], bool]) -> list[M]:
        """Parcours linéaire filtré."""
        return [r for r in self.list() if predicate(r)]

    def update(self, record_id: int, changes: dict[str, Any]) -> M | None:
        """Fusionne les champs fournis et réécrit l'enregistrement; None si absent."""
        current = self.get(record_id)
        if current is None:
            return None
        updated = _merge(self.model, current, changes)
        self._write(updated)
        return updated

    def delete(self, record_id: int) -> bool:
        """Supprime l'enregistrement et son entrée d'index."""
        pipe = self.client.pipeline()
        pipe.delete(self._key(record_id))
        pipe.srem(self._ids_key, record_id)
        removed, _ = pipe.execute()
        return bool(removed)


class UserQueries:
    """Recherches spécifiques aux utilisateurs (balayage linéaire)."""

    def get_by_email(self, email: str) -> User | None:
        """Recherche un utilisateur par email, sans tenir compte de la casse."""
        wanted = email.strip().lower()
        return next((u for u in self.list() if u.email.lower() == wanted), None)

    def get_by_subscription_id(self, subscription_id: str) -> User | None:
        """Recherche l'utilisateur rattaché à un abonnement Stripe."""
        return next(
            (u for u in self.list() if u.stripe_subscription_id == subscription_id), None
        )


class InMemoryUserRepo(InMemoryRepo[User], UserQueries):
    """Dépôt utilisateurs en mémoire."""

    def __init__(self):
        """Initialise une base mémoire vide."""
        super().__init__(User)


class RedisUserRepo(RedisRepo[User], UserQueries):
    """Dépôt utilisateurs via Redis."""

    def __init__(self, client: Any, prefix: str = "vetstock"):
        """Associe le dépôt au client Redis."""
        super().__init__(client, User, "user", prefix)


@dataclass
class Store:
    """Ensemble des dépôts d'un processus (un par type d'entité)."""

    users: Any
    animals: Any
    vaccines: Any
    products: Any
    alerts: Any
    backend: str = "memory"


def build_memory_store() -> Store:
    """Construit un stockage en mémoire isolé."""
    return Store(
        users=InMemoryUserRepo(),
        animals=InMemoryRepo(Animal),
        vaccines=InMemoryRepo(Vaccine),
        products=InMemoryRepo(Product),
        alerts=InMemoryRepo(Alert),
        backend="memory",
    )


def build_redis_store(client: Any = None, url: str | None = None) -> Store:
    """Construit un stockage Redis à partir d'un client existant ou d'une URL.

    Vérifie la connexion (PING) pour permettre un repli en mémoire côté appelant.
    """
    if client is None:
        if not url:
            raise ValueError("redis client or url required")
        client = redis.Redis.from_url(url, decode_responses=True)
    client.ping()
    return Store(
        users=RedisUserRepo(client),
        animals=RedisRepo(client, Animal, "animal"),
        vaccines=RedisRepo(client, Vaccine, "vaccine"),
        products=RedisRepo(client, Product, "product"),
        alerts=RedisRepo(client, Alert, "alert"),
        backend="redis",
    )
