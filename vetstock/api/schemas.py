# Schémas Pydantic exposés par l'API (requêtes et réponses), JSON en camelCase.

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from vetstock.domain.entities import UserType, UtcDatetime, Vaccine


class ApiModel(BaseModel):
    """Base des schémas d'API: alias camelCase, noms Python acceptés en entrée."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PatchModel(ApiModel):
    """Charge utile de mise à jour partielle.

    `changes()` ne garde que les champs envoyés; un `null` explicite n'est conservé que pour les
    champs effaçables (`clearable`).
    """

    clearable: ClassVar[frozenset[str]] = frozenset()

    def changes(self) -> dict[str, Any]:
        """Champs à fusionner sur l'enregistrement existant (noms Python)."""
        return {
            k: v
            for k, v in self.model_dump(exclude_unset=True).items()
            if v is not None or k in self.clearable
        }


# Comptes


class RegisterPayload(ApiModel):
    """Inscription d'un nouvel utilisateur."""

    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    user_type: UserType = "user"


class LoginPayload(ApiModel):
    """Connexion d'un utilisateur."""

    email: EmailStr
    password: str = Field(min_length=6)


class UserUpdatePayload(PatchModel):
    """Édition du profil."""

    name: str | None = Field(default=None, min_length=1)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=6)


class UserResponse(ApiModel):
    """Utilisateur sans hash de mot de passe, avec ses droits calculés."""

    id: int
    name: str
    email: str
    user_type: UserType
    active: bool
    trial_start_date: UtcDatetime
    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = None
    is_subscribed: bool
    trial_days_left: int


# Produits


class ProductCreate(ApiModel):
    """Création d'un produit (le propriétaire est l'utilisateur connecté)."""

    name: str = Field(min_length=1)
    quantity: int = Field(default=0, ge=0)
    min_quantity: int = Field(default=0, ge=0)
    max_quantity: int | None = Field(default=None, ge=0)
    category: str | None = None


class ProductUpdate(PatchModel):
    """Mise à jour partielle d'un produit."""

    clearable: ClassVar[frozenset[str]] = frozenset({"max_quantity", "category"})

    name: str | None = Field(default=None, min_length=1)
    quantity: int | None = Field(default=None, ge=0)
    min_quantity: int | None = Field(default=None, ge=0)
    max_quantity: int | None = Field(default=None, ge=0)
    category: str | None = None


# Animaux


class AnimalCreate(ApiModel):
    """Création d'un animal (le tuteur est l'utilisateur connecté)."""

    name: str = Field(min_length=1)
    species: str = Field(min_length=1)
    breed: str | None = None


class AnimalUpdate(PatchModel):
    """Mise à jour partielle d'un animal."""

    clearable: ClassVar[frozenset[str]] = frozenset({"breed"})

    name: str | None = Field(default=None, min_length=1)
    species: str | None = Field(default=None, min_length=1)
    breed: str | None = None


# Vaccins


class VaccineCreate(ApiModel):
    """Création d'un vaccin pour un animal de l'utilisateur."""

    name: str = Field(min_length=1)
    application_date: UtcDatetime
    expiration_date: UtcDatetime
    animal_id: int


class VaccineUpdate(PatchModel):
    """Mise à jour partielle d'un vaccin."""

    name: str | None = Field(default=None, min_length=1)
    application_date: UtcDatetime | None = None
    expiration_date: UtcDatetime | None = None
    animal_id: int | None = None


class VaccineAnimal(ApiModel):
    """Résumé de l'animal joint à un vaccin dans les listes."""

    name: str
    species: str


class VaccineWithAnimal(Vaccine):
    """Vaccin enrichi de son animal."""

    animal: VaccineAnimal


# Facturation


class SubscriptionResponse(ApiModel):
    """Abonnement à confirmer côté client (Stripe Elements)."""

    subscription_id: str
    client_secret: str | None = None


class WebhookAck(ApiModel):
    """Accusé de réception d'un webhook."""

    received: bool = True


class MessageResponse(ApiModel):
    """Réponse textuelle simple."""

    message: str
