"""
Authorization gate - FastAPI dependencies applied per route.

    require_authenticated   valid bearer token of an active user
    require_role(role)      authenticated AND user.role == role
    optional_authenticated  attaches the user when possible, never fails

Role gates depend on require_authenticated, so the role check always runs
after the user has been resolved.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core import errors
from app.models.user import CurrentUser, Role
from app.services.user_service import get_user_service
from app.utils.security import decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def resolve_user(token: str) -> CurrentUser:
    """
    Verify the token and re-fetch the live user record, so deactivation
    takes effect immediately even for unexpired tokens.
    """
    user_id = decode_access_token(token)

    user_data = get_user_service().get_user_by_id(user_id)
    if user_data is None:
        raise errors.Unauthenticated("User not found. Token invalid.")
    if not user_data.get("is_active", True):
        raise errors.Unauthenticated("User account is inactive.")

    return CurrentUser(
        id=user_data["id"],
        email=user_data.get("email", ""),
        role=Role(user_data.get("role", Role.CITIZEN.value)),
        first_name=user_data.get("first_name"),
        last_name=user_data.get("last_name"),
        is_active=user_data.get("is_active", True),
    )


async def require_authenticated(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None or not credentials.credentials:
        raise errors.Unauthenticated()
    return resolve_user(credentials.credentials)


async def optional_authenticated(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[CurrentUser]:
    if credentials is None or not credentials.credentials:
        return None
    try:
        return resolve_user(credentials.credentials)
    except errors.Unauthenticated as e:
        logger.debug(f"Optional auth ignored token: {e.code}")
        return None


def require_role(role: Role):
    async def _require_role(user: CurrentUser = Depends(require_authenticated)) -> CurrentUser:
        if user.role is not role:
            raise errors.Forbidden(f"Access denied. {role.label} role required.")
        return user

    _require_role.__name__ = f"require_{role.value}"
    return _require_role


require_citizen = require_role(Role.CITIZEN)
require_official = require_role(Role.OFFICIAL)
