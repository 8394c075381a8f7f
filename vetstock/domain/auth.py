"""
Module d'authentification et de gestion des jetons de session.

Ce module fournit les fonctions pour le hachage des mots de passe ainsi que la création et la
validation des jetons JWT portés par le cookie de session.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError
from passlib.context import CryptContext
from pydantic import BaseModel

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class TokenData(BaseModel):
    """Données contenues dans un jeton de session."""

    sub: str
    email: str

    @property
    def user_id(self) -> int | None:
        """Identifiant utilisateur numérique, ou None si `sub` est invalide."""
        try:
            return int(self.sub)
        except ValueError:
            return None


def hash_password(p: str) -> str:
    """Hache un mot de passe en utilisant PBKDF2."""
    return pwd_context.hash(p)


def verify_password(p: str, h: str) -> bool:
    """Vérifie un mot de passe contre son hash (False si le hash est illisible)."""
    try:
        return pwd_context.verify(p, h)
    except (ValueError, TypeError):
        return False


def create_access_token(
    secret: str,
    alg: str,
    expires: timedelta,
    payload: dict[str, Any],
) -> str:
    """Crée un jeton JWT signé avec expiration (horloge murale)."""
    to_encode = payload.copy()
    now = datetime.now(UTC)
    to_encode.update({"iat": now, "exp": now + expires})
    return jwt.encode(to_encode, secret, algorithm=alg)


def decode_token(token: str, secret: str, alg: str) -> TokenData | None:
    """Décode et valide un jeton JWT; None si signature, format ou expiration invalides."""
    try:
        data = jwt.decode(token, secret, algorithms=[alg])
        return TokenData(**data)
    except (InvalidTokenError, TypeError, ValueError):
        return None
