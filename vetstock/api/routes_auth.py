"""
Routes d'authentification et de profil.

Inscription, connexion, déconnexion, lecture et édition de l'utilisateur courant. La session est
portée par un cookie HttpOnly contenant un JWT signé.
"""

from fastapi import APIRouter, Response

from vetstock.api.deps import (
    close_session,
    container_dep,
    current_user_dep,
    open_session,
)
from vetstock.api.schemas import (
    LoginPayload,
    MessageResponse,
    RegisterPayload,
    UserResponse,
    UserUpdatePayload,
)
from vetstock.core.container import Container
from vetstock.core.http_constants import HTTP_CREATED
from vetstock.domain.entities import User
from vetstock.domain.errors import AuthenticationError, AuthorizationError

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register", status_code=HTTP_CREATED, response_model=UserResponse)
def register(p: RegisterPayload, response: Response, c: Container = container_dep):
    """Inscrit un nouvel utilisateur et ouvre sa session."""
    if p.user_type == "admin" and not c.settings.ALLOW_ADMIN_SIGNUP:
        raise AuthorizationError("Cadastro de administrador não permitido")
    now = c.now()
    user = c.accounts.register(p.name, str(p.email), p.password, now, user_type=p.user_type)
    open_session(response, c, user)
    return c.accounts.describe(user, now)


@router.post("/login", response_model=UserResponse)
def login(p: LoginPayload, response: Response, c: Container = container_dep):
    """Authentifie un utilisateur et ouvre sa session."""
    user = c.accounts.authenticate(str(p.email), p.password)
    if user is None:
        raise AuthenticationError("Email ou senha inválidos")
    open_session(response, c, user)
    return c.accounts.describe(user, c.now())


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, c: Container = container_dep):
    """Ferme la session courante."""
    close_session(response, c)
    return {"message": "OK"}


@router.get("/user", response_model=UserResponse)
def get_user(user: User = current_user_dep, c: Container = container_dep):
    """Retourne l'utilisateur courant avec ses droits calculés."""
    return c.accounts.describe(user, c.now())


@router.put("/user", response_model=UserResponse)
def update_user(
    p: UserUpdatePayload, user: User = current_user_dep, c: Container = container_dep
):
    """Met à jour le profil de l'utilisateur courant."""
    updated = c.accounts.update_profile(user, p.changes())
    return c.accounts.describe(updated, c.now())
