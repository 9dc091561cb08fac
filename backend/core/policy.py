"""Capability checks gating every mutating operation.

Identity comes from fastapi-users; past this module the services only see an
opaque user id string and the yes/no answer of ``check_capability``.
"""
import logging
from enum import Enum

from fastapi import Depends, HTTPException, status

from core.auth import current_active_user
from db.users import User

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    CREATE_COCKTAIL = "cocktails:create"
    EDIT_COCKTAIL = "cocktails:edit"
    CREATE_INGREDIENT = "ingredients:create"
    DELETE_INGREDIENT = "ingredients:delete"
    MANAGE_FAVORITES = "favorites:manage"


# Granted to every active account; anything else needs a superuser.
MEMBER_CAPABILITIES = frozenset({
    Capability.CREATE_COCKTAIL,
    Capability.CREATE_INGREDIENT,
    Capability.MANAGE_FAVORITES,
})


def check_capability(user: User, capability: Capability) -> bool:
    if not user.is_active:
        return False
    if user.is_superuser:
        return True
    return capability in MEMBER_CAPABILITIES


def require_capability(capability: Capability):
    """FastAPI dependency: the authenticated user, or 403 when the policy denies."""

    async def dependency(user: User = Depends(current_active_user)) -> User:
        if not check_capability(user, capability):
            logger.info("Denied %s to user %s", capability.value, user.id)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"You are not allowed to perform {capability.value}"
            )
        return user

    return dependency


def actor_id(user: User) -> str:
    return str(user.id)


async def current_user_id(user: User = Depends(current_active_user)) -> str:
    return actor_id(user)
