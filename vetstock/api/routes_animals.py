"""
Routes des animaux (`/api/animals`).

Le tuteur d'un animal créé est toujours l'utilisateur connecté; l'accès par id est réservé au
tuteur ou à un administrateur.
"""

from fastapi import APIRouter, Response

from vetstock.api.deps import container_dep, owned_animal, subscribed_user_dep
from vetstock.api.schemas import AnimalCreate, AnimalUpdate
from vetstock.core.container import Container
from vetstock.core.http_constants import HTTP_CREATED, HTTP_NO_CONTENT
from vetstock.domain.entities import Animal, User

router = APIRouter(prefix="/api/animals", tags=["animals"])


@router.get("", response_model=list[Animal])
def list_animals(user: User = subscribed_user_dep, c: Container = container_dep):
    """Liste les animaux de l'utilisateur courant."""
    return c.clinic.list_animals_for_user(user.id)


@router.post("", status_code=HTTP_CREATED, response_model=Animal)
def create_animal(
    p: AnimalCreate, user: User = subscribed_user_dep, c: Container = container_dep
):
    """Crée un animal dont le tuteur est l'utilisateur courant."""
    return c.clinic.create_animal(user.id, p.model_dump())


@router.get("/{animal_id}", response_model=Animal)
def get_animal(animal_id: int, user: User = subscribed_user_dep, c: Container = container_dep):
    """Retourne un animal."""
    return owned_animal(animal_id, user, c)


@router.put("/{animal_id}", response_model=Animal)
def update_animal(
    animal_id: int,
    p: AnimalUpdate,
    user: User = subscribed_user_dep,
    c: Container = container_dep,
):
    """Met à jour un animal."""
    owned_animal(animal_id, user, c)
    return c.clinic.update_animal(animal_id, p.changes())


@router.delete("/{animal_id}", status_code=HTTP_NO_CONTENT)
def delete_animal(
    animal_id: int, user: User = subscribed_user_dep, c: Container = container_dep
):
    """Supprime un animal."""
    owned_animal(animal_id, user, c)
    c.clinic.delete_animal(animal_id)
    return Response(status_code=HTTP_NO_CONTENT)
