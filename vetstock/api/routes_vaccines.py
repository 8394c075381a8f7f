"""
Routes des vaccins (`/api/vaccines`).

L'autorisation passe par l'animal du vaccin: seul son tuteur (ou un administrateur) peut lire ou
modifier le vaccin. La création évalue l'alerte d'expiration.
"""

from fastapi import APIRouter, Response

from vetstock.api.deps import container_dep, owned_animal, subscribed_user_dep
from vetstock.api.schemas import VaccineCreate, VaccineUpdate, VaccineWithAnimal
from vetstock.core.container import Container
from vetstock.core.http_constants import HTTP_CREATED, HTTP_NO_CONTENT
from vetstock.domain.entities import Animal, User, Vaccine
from vetstock.domain.errors import NotFoundError
from vetstock.domain.tenancy import ensure_can_access

router = APIRouter(prefix="/api/vaccines", tags=["vaccines"])

UNKNOWN_ANIMAL = {"name": "Desconhecido", "species": "Desconhecido"}


def _owned_vaccine(vaccine_id: int, user: User, c: Container) -> tuple[Vaccine, Animal]:
    vaccine = c.clinic.get_vaccine(vaccine_id)
    animal = c.clinic.animal_of(vaccine)
    if animal is None:
        raise NotFoundError("Animal não encontrado")
    ensure_can_access(user, animal.tutor_id)
    return vaccine, animal


@router.get("", response_model=list[VaccineWithAnimal])
def list_vaccines(user: User = subscribed_user_dep, c: Container = container_dep):
    """Liste les vaccins des animaux de l'utilisateur, avec l'animal joint."""
    enriched = []
    for vaccine in c.clinic.list_vaccines_for_user(user.id):
        animal = c.clinic.animal_of(vaccine)
        summary = {"name": animal.name, "species": animal.species} if animal else UNKNOWN_ANIMAL
        enriched.append({**vaccine.model_dump(), "animal": summary})
    return enriched


@router.post("", status_code=HTTP_CREATED, response_model=Vaccine)
def create_vaccine(
    p: VaccineCreate, user: User = subscribed_user_dep, c: Container = container_dep
):
    """Enregistre un vaccin pour un animal de l'utilisateur."""
    owned_animal(p.animal_id, user, c)
    return c.clinic.create_vaccine(p.model_dump(), c.now())


@router.get("/{vaccine_id}", response_model=Vaccine)
def get_vaccine(
    vaccine_id: int, user: User = subscribed_user_dep, c: Container = container_dep
):
    """Retourne un vaccin."""
    vaccine, _ = _owned_vaccine(vaccine_id, user, c)
    return vaccine


@router.put("/{vaccine_id}", response_model=Vaccine)
def update_vaccine(
    vaccine_id: int,
    p: VaccineUpdate,
    user: User = subscribed_user_dep,
    c: Container = container_dep,
):
    """Met à jour un vaccin; un changement d'animal exige aussi la propriété du nouvel animal."""
    vaccine, _ = _owned_vaccine(vaccine_id, user, c)
    changes = p.changes()
    new_animal_id = changes.get("animal_id")
    if new_animal_id is not None and new_animal_id != vaccine.animal_id:
        owned_animal(new_animal_id, user, c)
    return c.clinic.update_vaccine(vaccine_id, changes)


@router.delete("/{vaccine_id}", status_code=HTTP_NO_CONTENT)
def delete_vaccine(
    vaccine_id: int, user: User = subscribed_user_dep, c: Container = container_dep
):
    """Supprime un vaccin."""
    _owned_vaccine(vaccine_id, user, c)
    c.clinic.delete_vaccine(vaccine_id)
    return Response(status_code=HTTP_NO_CONTENT)
