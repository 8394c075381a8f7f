"""
Entités du domaine métier.

Ce module définit les enregistrements manipulés par l'application (utilisateurs, animaux, vaccins,
produits, alertes). Les attributs Python sont en snake_case, le JSON exposé en camelCase.
"""

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UserType = Literal["admin", "user"]
AlertType = Literal["estoque", "vacina"]


def _as_utc(value: datetime) -> datetime:
    """Rend un datetime conscient du fuseau (UTC par défaut pour les valeurs naïves)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class Record(BaseModel):
    """Base commune: alias camelCase et population par nom Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(Record):
    """Compte d'une clinique (ou administrateur)."""

    id: int
    name: str
    email: str
    password_hash: str
    user_type: UserType = "user"
    active: bool = True
    trial_start_date: UtcDatetime
    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = None


class Animal(Record):
    """Animal suivi par un tuteur (utilisateur propriétaire)."""

    id: int
    name: str
    species: str
    breed: str | None = None
    tutor_id: int


class Vaccine(Record):
    """Vaccin appliqué à un animal."""

    id: int
    name: str
    application_date: UtcDatetime
    expiration_date: UtcDatetime
    animal_id: int


class Product(Record):
    """Produit en stock avec seuils minimum/maximum."""

    id: int
    name: str
    quantity: int = 0
    min_quantity: int = 0
    max_quantity: int | None = None
    category: str | None = None
    user_id: int


class Alert(Record):
    """Notification générée par une règle de seuil, à résoudre explicitement."""

    id: int
    type: AlertType
    message: str
    created_at: UtcDatetime
    user_id: int
    item_id: int | None = None
    resolved: bool = False


class DashboardStats(Record):
    """Agrégats affichés sur le tableau de bord."""

    product_count: int = Field(ge=0)
    stock_alerts: int = Field(ge=0)
    animal_count: int = Field(ge=0)
    expiring_vaccines: int = Field(ge=0)
