"""
Routes de gestion du stock (`/api/products`).

Toutes les routes exigent une session et un droit d'accès actif; les accès par id sont réservés au
propriétaire du produit ou à un administrateur. Création et mise à jour déclenchent l'évaluation
des alertes de stock.
"""

from fastapi import APIRouter, Response

from vetstock.api.deps import container_dep, subscribed_user_dep
from vetstock.api.schemas import ProductCreate, ProductUpdate
from vetstock.core.container import Container
from vetstock.core.http_constants import HTTP_CREATED, HTTP_NO_CONTENT
from vetstock.domain.entities import Product, User
from vetstock.domain.tenancy import ensure_can_access

router = APIRouter(prefix="/api/products", tags=["products"])


def _owned_product(product_id: int, user: User, c: Container) -> Product:
    product = c.inventory.get(product_id)
    ensure_can_access(user, product.user_id)
    return product


@router.get("", response_model=list[Product])
def list_products(user: User = subscribed_user_dep, c: Container = container_dep):
    """Liste les produits de l'utilisateur courant."""
    return c.inventory.list_for_user(user.id)


@router.post("", status_code=HTTP_CREATED, response_model=Product)
def create_product(
    p: ProductCreate, user: User = subscribed_user_dep, c: Container = container_dep
):
    """Crée un produit appartenant à l'utilisateur courant."""
    return c.inventory.create(user.id, p.model_dump(), c.now())


@router.get("/{product_id}", response_model=Product)
def get_product(
    product_id: int, user: User = subscribed_user_dep, c: Container = container_dep
):
    """Retourne un produit (propriétaire ou administrateur)."""
    return _owned_product(product_id, user, c)


@router.put("/{product_id}", response_model=Product)
def update_product(
    product_id: int,
    p: ProductUpdate,
    user: User = subscribed_user_dep,
    c: Container = container_dep,
):
    """Met à jour un produit et réévalue ses seuils."""
    _owned_product(product_id, user, c)
    return c.inventory.update(product_id, p.changes(), c.now())


@router.delete("/{product_id}", status_code=HTTP_NO_CONTENT)
def delete_product(
    product_id: int, user: User = subscribed_user_dep, c: Container = container_dep
):
    """Supprime un produit."""
    _owned_product(product_id, user, c)
    c.inventory.delete(product_id)
    return Response(status_code=HTTP_NO_CONTENT)
