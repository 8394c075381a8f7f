"""
Règles de génération d'alertes (stock et vaccins).

Les règles sont des fonctions pures: elles reçoivent un enregistrement (et `now` pour les vaccins)
et retournent des brouillons d'alerte. L'ajout effectif au stockage est fait par `AlertService`.
Aucune déduplication: chaque écriture qui viole un seuil produit de nouveaux brouillons.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from vetstock.domain.entities import AlertType, Animal, Product, Vaccine
from vetstock.domain.entitlements import days_between

DEFAULT_VACCINE_ALERT_DAYS = 30


@dataclass(frozen=True)
class AlertDraft:
    """Alerte à créer (sans id ni date de création)."""

    type: AlertType
    message: str
    user_id: int
    item_id: int | None = None


def is_below_minimum(product: Product) -> bool:
    """Stock strictement inférieur au minimum."""
    return product.quantity < product.min_quantity


def is_above_maximum(product: Product) -> bool:
    """Stock strictement supérieur au maximum (un maximum absent ou nul est ignoré)."""
    return bool(product.max_quantity) and product.quantity > product.max_quantity


def stock_alerts(product: Product) -> list[AlertDraft]:
    """Évalue les seuils de stock d'un produit créé ou mis à jour.

    Les deux règles sont indépendantes et peuvent produire chacune une alerte.
    """
    drafts: list[AlertDraft] = []
    if is_below_minimum(product):
        drafts.append(
            AlertDraft(
                type="estoque",
                message=(
                    f"Produto {product.name} está abaixo do estoque mínimo "
                    f"({product.quantity} unidades)"
                ),
                user_id=product.user_id,
                item_id=product.id,
            )
        )
    if is_above_maximum(product):
        drafts.append(
            AlertDraft(
                type="estoque",
                message=(
                    f"Produto {product.name} está acima do estoque máximo "
                    f"({product.quantity} unidades)"
                ),
                user_id=product.user_id,
                item_id=product.id,
            )
        )
    return drafts


def vaccine_alert(
    vaccine: Vaccine,
    animal: Animal | None,
    now: datetime,
    window_days: int = DEFAULT_VACCINE_ALERT_DAYS,
) -> AlertDraft | None:
    """Évalue l'expiration d'un vaccin au moment de sa création.

    Retourne None si l'échéance dépasse `window_days` ou si l'animal est introuvable.
    """
    if animal is None:
        return None
    days = days_between(now, vaccine.expiration_date)
    if days > window_days:
        return None
    return AlertDraft(
        type="vacina",
        message=f"Vacina {vaccine.name} para {animal.name} vence em {days} dias",
        user_id=animal.tutor_id,
        item_id=vaccine.id,
    )
