"""Dépendances partagées pour les routes de l'API.

But du module
-------------
- Exposer le conteneur de l'application aux endpoints.
- Composer la chaîne de garde des requêtes: session -> utilisateur courant -> droit d'accès
  (essai/abonnement). Les contrôles de propriété sont faits dans les routes, sur l'enregistrement
  chargé; `owned_animal` est partagé par les routes animaux et vaccins.
- Émettre et effacer le cookie de session.
"""

from datetime import timedelta

from fastapi import Depends, Request, Response

from vetstock.app.metrics import ENTITLEMENT_DENIED
from vetstock.core.container import Container
from vetstock.domain.auth import create_access_token, decode_token
from vetstock.domain.entities import Animal, User
from vetstock.domain.entitlements import require_active_subscription
from vetstock.domain.errors import AuthenticationError, EntitlementError
from vetstock.domain.tenancy import ensure_can_access


def get_container(request: Request) -> Container:
    """Retourne le conteneur attaché à l'application."""
    return request.app.state.container


container_dep = Depends(get_container)


def _session_token(request: Request, cookie_name: str) -> str | None:
    """Jeton de session: cookie en priorité, sinon en-tête `Authorization: Bearer`."""
    token = request.cookies.get(cookie_name)
    if token:
        return token
    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return None


def open_session(response: Response, c: Container, user: User) -> str:
    """Crée le jeton de session de `user` et le pose en cookie HttpOnly."""
    s = c.settings
    max_age = timedelta(days=s.SESSION_MAX_AGE_DAYS)
    token = create_access_token(
        secret=s.SESSION_SECRET,
        alg=s.SESSION_ALG,
        expires=max_age,
        payload={"sub": str(user.id), "email": user.email},
    )
    response.set_cookie(
        key=s.SESSION_COOKIE_NAME,
        value=token,
        max_age=int(max_age.total_seconds()),
        httponly=True,
        secure=s.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return token


def close_session(response: Response, c: Container) -> None:
    """Efface le cookie de session."""
    response.delete_cookie(c.settings.SESSION_COOKIE_NAME)


def get_current_user(request: Request, c: Container = container_dep) -> User:
    """Extrait et valide l'utilisateur courant à partir de la session."""
    token = _session_token(request, c.settings.SESSION_COOKIE_NAME)
    if not token:
        raise AuthenticationError()
    data = decode_token(token, c.settings.SESSION_SECRET, c.settings.SESSION_ALG)
    if data is None or data.user_id is None:
        raise AuthenticationError()
    user = c.accounts.get(data.user_id)
    if user is None or not user.active:
        raise AuthenticationError()
    return user


current_user_dep = Depends(get_current_user)


def require_subscription(
    user: User = current_user_dep, c: Container = container_dep
) -> User:
    """Refuse l'accès (402) si l'essai est expiré sans abonnement."""
    if not c.settings.ENFORCE_SUBSCRIPTION:
        return user
    try:
        require_active_subscription(user, c.now(), c.settings.TRIAL_DAYS)
    except EntitlementError:
        ENTITLEMENT_DENIED.inc()
        raise
    return user


subscribed_user_dep = Depends(require_subscription)


def owned_animal(animal_id: int, user: User, c: Container) -> Animal:
    """Charge l'animal (404) puis vérifie que `user` en est le tuteur ou un administrateur (403)."""
    animal = c.clinic.get_animal(animal_id)
    ensure_can_access(user, animal.tutor_id)
    return animal
