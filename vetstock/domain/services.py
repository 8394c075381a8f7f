from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

import structlog

from vetstock.app.metrics import ALERTS_EMITTED
from vetstock.domain.alert_rules import (
    DEFAULT_VACCINE_ALERT_DAYS,
    AlertDraft,
    is_above_maximum,
    is_below_minimum,
    stock_alerts,
    vaccine_alert,
)
from vetstock.domain.auth import hash_password, verify_password
from vetstock.domain.entities import (
    Alert,
    Animal,
    DashboardStats,
    Product,
    User,
    UserType,
    Vaccine,
)
from vetstock.domain.entitlements import (
    DEFAULT_TRIAL_DAYS,
    get_trial_days_left,
    is_subscription_active,
)
from vetstock.domain.errors import NotFoundError, ValidationError

log = structlog.get_logger(__name__)


class AccountService:
    """Service des comptes utilisateurs.

    Responsabilités:
    - Inscription (mot de passe haché, début d'essai à `now`) et authentification.
    - Édition du profil et rattachement des identifiants de facturation.
    - Projection publique d'un utilisateur avec ses droits calculés.
    """

    def __init__(self, users, trial_days: int = DEFAULT_TRIAL_DAYS):
        """Initialise le service avec le dépôt utilisateurs et la durée d'essai."""
        self.users = users
        self.trial_days = trial_days

    def register(
        self,
        name: str,
        email: str,
        password: str,
        now: datetime,
        user_type: UserType = "user",
    ) -> User:
        """Crée un compte; l'email doit être unique (insensible à la casse)."""
        if self.users.get_by_email(email):
            raise ValidationError("Este email já está em uso")
        user = self.users.create(
            name=name,
            email=email,
            password_hash=hash_password(password),
            user_type=user_type,
            active=True,
            trial_start_date=now,
        )
        log.info("user_registered", user_id=user.id, user_type=user.user_type)
        return user

    def authenticate(self, email: str, password: str) -> User | None:
        """Retourne l'utilisateur si les identifiants sont valides et le compte actif."""
        user = self.users.get_by_email(email)
        if not user or not user.active or not verify_password(password, user.password_hash):
            log.info("login_failed", reason="invalid_credentials")
            return None
        return user

    def get(self, user_id: int) -> User | None:
        """Retourne un utilisateur par id."""
        return self.users.get(user_id)

    def update_profile(self, user: User, changes: dict[str, Any]) -> User:
        """Met à jour nom/email/mot de passe (le mot de passe est re-haché)."""
        updates: dict[str, Any] = {}
        if changes.get("name") is not None:
            updates["name"] = changes["name"]
        email = changes.get("email")
        if email is not None and email.lower() != user.email.lower():
            if self.users.get_by_email(email):
                raise ValidationError("Este email já está em uso")
            updates["email"] = email
        if changes.get("password"):
            updates["password_hash"] = hash_password(changes["password"])
        if not updates:
            return user
        return self.users.update(user.id, updates) or user

    def attach_billing(
        self, user_id: int, customer_id: str | None, subscription_id: str | None
    ) -> User | None:
        """Enregistre les identifiants client/abonnement Stripe."""
        return self.users.update(
            user_id,
            {"stripe_customer_id": customer_id, "stripe_subscription_id": subscription_id},
        )

    def find_by_subscription(self, subscription_id: str) -> User | None:
        """Retourne l'utilisateur rattaché à un abonnement."""
        return self.users.get_by_subscription_id(subscription_id)

    def clear_subscription(self, user_id: int) -> User | None:
        """Détache l'abonnement (le client Stripe est conservé)."""
        return self.users.update(user_id, {"stripe_subscription_id": None})

    def seed_admin(self, name: str, email: str, password: str, now: datetime) -> User:
        """Crée le compte administrateur par défaut s'il n'existe pas encore."""
        existing = self.users.get_by_email(email)
        if existing:
            return existing
        return self.register(name, email, password, now, user_type="admin")

    def describe(self, user: User, now: datetime) -> dict[str, Any]:
        """Projection publique: utilisateur sans hash, avec `isSubscribed`/`trialDaysLeft`."""
        data = user.model_dump(exclude={"password_hash"})
        data["is_subscribed"] = is_subscription_active(user, now, self.trial_days)
        data["trial_days_left"] = get_trial_days_left(user, now, self.trial_days)
        return data


class AlertService:
    """Ajout, lecture et résolution des alertes."""

    def __init__(self, alerts):
        """Initialise le service avec le dépôt d'alertes."""
        self.alerts = alerts

    def emit(self, drafts: list[AlertDraft], now: datetime) -> list[Alert]:
        """Ajoute les brouillons comme alertes non résolues.

        Un échec d'écriture est journalisé puis ignoré: l'enregistrement déclencheur reste acquis.
        """
        created: list[Alert] = []
        for draft in drafts:
            try:
                alert = self.alerts.create(
                    type=draft.type,
                    message=draft.message,
                    created_at=now,
                    user_id=draft.user_id,
                    item_id=draft.item_id,
                    resolved=False,
                )
            except Exception:
                log.exception("alert_emission_failed", alert_type=draft.type, item_id=draft.item_id)
                continue
            ALERTS_EMITTED.labels(draft.type).inc()
            log.info(
                "alert_emitted",
                alert_id=alert.id,
                alert_type=alert.type,
                user_id=alert.user_id,
                item_id=alert.item_id,
            )
            created.append(alert)
        return created

    def list_for_user(self, user_id: int) -> list[Alert]:
        """Alertes d'un utilisateur, plus récentes d'abord."""
        alerts = self.alerts.filter(lambda a: a.user_id == user_id)
        return sorted(alerts, key=lambda a: (a.created_at, a.id), reverse=True)

    def get(self, alert_id: int) -> Alert:
        """Retourne une alerte ou lève NotFoundError."""
        alert = self.alerts.get(alert_id)
        if alert is None:
            raise NotFoundError("Alerta não encontrado")
        return alert

    def resolve(self, alert_id: int) -> Alert:
        """Marque l'alerte comme résolue (idempotent, sens unique)."""
        alert = self.get(alert_id)
        if alert.resolved:
            return alert
        resolved = self.alerts.update(alert_id, {"resolved": True})
        if resolved is None:
            raise NotFoundError("Alerta não encontrado")
        log.info("alert_resolved", alert_id=alert_id)
        return resolved


class InventoryService:
    """Gestion des produits; chaque création/mise à jour évalue les seuils de stock."""

    def __init__(self, products, alert_service: AlertService):
        """Initialise le service avec le dépôt produits et le service d'alertes."""
        self.products = products
        self.alert_service = alert_service

    def list_for_user(self, user_id: int) -> list[Product]:
        """Produits appartenant à l'utilisateur."""
        return self.products.filter(lambda p: p.user_id == user_id)

    def get(self, product_id: int) -> Product:
        """Retourne un produit ou lève NotFoundError."""
        product = self.products.get(product_id)
        if product is None:
            raise NotFoundError("Produto não encontrado")
        return product

    def create(self, user_id: int, data: dict[str, Any], now: datetime) -> Product:
        """Crée un produit pour `user_id` puis évalue les alertes de stock."""
        product = self.products.create(**{**data, "user_id": user_id})
        self.alert_service.emit(stock_alerts(product), now)
        return product

    def update(self, product_id: int, changes: dict[str, Any], now: datetime) -> Product:
        """Met à jour un produit puis réévalue les alertes sur l'enregistrement fusionné."""
        product = self.products.update(product_id, changes)
        if product is None:
            raise NotFoundError("Produto não encontrado")
        self.alert_service.emit(stock_alerts(product), now)
        return product

    def delete(self, product_id: int) -> None:
        """Supprime un produit."""
        if not self.products.delete(product_id):
            raise NotFoundError("Produto não encontrado")


class ClinicService:
    """Gestion des animaux et de leurs vaccins."""

    def __init__(
        self,
        animals,
        vaccines,
        alert_service: AlertService,
        vaccine_alert_days: int = DEFAULT_VACCINE_ALERT_DAYS,
    ):
        """Initialise le service avec les dépôts animaux/vaccins et le service d'alertes."""
        self.animals = animals
        self.vaccines = vaccines
        self.alert_service = alert_service
        self.vaccine_alert_days = vaccine_alert_days

    # Animaux

    def list_animals_for_user(self, user_id: int) -> list[Animal]:
        """Animaux dont l'utilisateur est le tuteur."""
        return self.animals.filter(lambda a: a.tutor_id == user_id)

    def get_animal(self, animal_id: int) -> Animal:
        """Retourne un animal ou lève NotFoundError."""
        animal = self.animals.get(animal_id)
        if animal is None:
            raise NotFoundError("Animal não encontrado")
        return animal

    def create_animal(self, tutor_id: int, data: dict[str, Any]) -> Animal:
        """Crée un animal pour le tuteur donné."""
        return self.animals.create(**{**data, "tutor_id": tutor_id})

    def update_animal(self, animal_id: int, changes: dict[str, Any]) -> Animal:
        """Met à jour un animal."""
        animal = self.animals.update(animal_id, changes)
        if animal is None:
            raise NotFoundError("Animal não encontrado")
        return animal

    def delete_animal(self, animal_id: int) -> None:
        """Supprime un animal (ses vaccins restent, sans propriétaire résolu)."""
        if not self.animals.delete(animal_id):
            raise NotFoundError("Animal não encontrado")

    # Vaccins

    def list_vaccines_for_animal(self, animal_id: int) -> list[Vaccine]:
        """Vaccins d'un animal."""
        return self.vaccines.filter(lambda v: v.animal_id == animal_id)

    def list_vaccines_for_user(self, user_id: int) -> list[Vaccine]:
        """Vaccins de tous les animaux de l'utilisateur."""
        animal_ids = {a.id for a in self.list_animals_for_user(user_id)}
        return self.vaccines.filter(lambda v: v.animal_id in animal_ids)

    def expiring_for_user(
        self, user_id: int, now: datetime, days: int | None = None
    ) -> list[Vaccine]:
        """Vaccins expirant strictement entre `now` et `now + days`."""
        window = self.vaccine_alert_days if days is None else days
        limit = now + timedelta(days=window)
        return [
            v
            for v in self.list_vaccines_for_user(user_id)
            if now < v.expiration_date < limit
        ]

    def get_vaccine(self, vaccine_id: int) -> Vaccine:
        """Retourne un vaccin ou lève NotFoundError."""
        vaccine = self.vaccines.get(vaccine_id)
        if vaccine is None:
            raise NotFoundError("Vacina não encontrada")
        return vaccine

    def animal_of(self, vaccine: Vaccine) -> Animal | None:
        """Animal rattaché au vaccin, s'il existe encore."""
        return self.animals.get(vaccine.animal_id)

    def create_vaccine(self, data: dict[str, Any], now: datetime) -> Vaccine:
        """Crée un vaccin puis évalue l'alerte d'expiration."""
        vaccine = self.vaccines.create(**data)
        if vaccine.expiration_date < vaccine.application_date:
            log.warning("vaccine_dates_inverted", vaccine_id=vaccine.id)
        draft = vaccine_alert(vaccine, self.animal_of(vaccine), now, self.vaccine_alert_days)
        if draft is not None:
            self.alert_service.emit([draft], now)
        return vaccine

    def update_vaccine(self, vaccine_id: int, changes: dict[str, Any]) -> Vaccine:
        """Met à jour un vaccin (aucune réévaluation d'alerte)."""
        vaccine = self.vaccines.update(vaccine_id, changes)
        if vaccine is None:
            raise NotFoundError("Vacina não encontrada")
        return vaccine

    def delete_vaccine(self, vaccine_id: int) -> None:
        """Supprime un vaccin."""
        if not self.vaccines.delete(vaccine_id):
            raise NotFoundError("Vacina não encontrada")


class DashboardService:
    """Agrégats du tableau de bord, calculés sur l'état courant."""

    def __init__(self, inventory: InventoryService, clinic: ClinicService):
        """Initialise le service avec les services inventaire et clinique."""
        self.inventory = inventory
        self.clinic = clinic

    def stats(self, user_id: int, now: datetime) -> DashboardStats:
        """Compte produits, produits hors seuils, animaux et vaccins proches d'expiration.

        `stock_alerts` compte les produits actuellement hors seuils, pas les alertes stockées.
        """
        products = self.inventory.list_for_user(user_id)
        out_of_bounds = sum(1 for p in products if is_below_minimum(p) or is_above_maximum(p))
        return DashboardStats(
            product_count=len(products),
            stock_alerts=out_of_bounds,
            animal_count=len(self.clinic.list_animals_for_user(user_id)),
            expiring_vaccines=len(self.clinic.expiring_for_user(user_id, now)),
        )
