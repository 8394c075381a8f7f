"""Ownership rules between users and their records.

Every animal, product and alert belongs to exactly one user; vaccines belong to the tutor of
their animal. Admins may act across ownership boundaries. The owner id always comes from the
stored record, never from the request body.
"""

from __future__ import annotations

from vetstock.domain.entities import User
from vetstock.domain.errors import AuthorizationError


def is_admin(user: User) -> bool:
    """Return True for admin accounts."""
    return user.user_type == "admin"


def can_access(user: User, owner_id: int | None) -> bool:
    """Return True if `user` owns the record or is an admin."""
    return is_admin(user) or (owner_id is not None and owner_id == user.id)


def ensure_can_access(user: User, owner_id: int | None) -> None:
    """Raise AuthorizationError unless `user` owns the record or is an admin."""
    if not can_access(user, owner_id):
        raise AuthorizationError()
