"""
One-shot provisioning of the default official account.

Invoked only from scripts/provision_official.py, never at server startup,
and refused in production. An existing account is promoted to official and
re-activated, but its password is only replaced when explicitly requested.
"""

import logging
from typing import Dict, List, Optional

from app.core.settings import settings
from app.models.user import Role, UserCreate
from app.services.user_service import get_user_service
from app.utils.security import verify_password

logger = logging.getLogger(__name__)


class ProvisioningRefused(RuntimeError):
    pass


def plan_official_changes(existing: Dict, password: str, reset_password: bool) -> Dict:
    """Fields to change on an existing account to make it the default official."""
    changes: Dict = {}
    if existing.get("role") != Role.OFFICIAL.value:
        changes["role"] = Role.OFFICIAL
    if not existing.get("is_active", False):
        changes["is_active"] = True
    if not existing.get("agree_to_terms", False):
        changes["agree_to_terms"] = True
    if not existing.get("phone"):
        changes["phone"] = settings.DEFAULT_OFFICIAL_PHONE
    if reset_password and not verify_password(password, existing.get("password_hash")):
        changes["password"] = password
    return changes


def provision_default_official(
    apply: bool = False,
    reset_password: bool = False,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> Dict:
    """
    Create or promote the default official account.

    Returns:
        {"action": "create" | "update" | "noop", "email": ..., "changes": [...], "applied": bool}

    Raises:
        ProvisioningRefused: production environment or missing credentials
    """
    if settings.is_production:
        raise ProvisioningRefused("Refusing to provision accounts with ENVIRONMENT=production")

    email = email or settings.DEFAULT_OFFICIAL_EMAIL
    password = password or settings.DEFAULT_OFFICIAL_PASSWORD
    if not email or not password:
        raise ProvisioningRefused("DEFAULT_OFFICIAL_EMAIL and DEFAULT_OFFICIAL_PASSWORD must be set")

    user_service = get_user_service()
    existing = user_service.get_user_by_email(email, include_password=True)

    if existing is None:
        result = {"action": "create", "email": email.lower(), "changes": [], "applied": apply}
        if apply:
            user_service.create_user(
                UserCreate(
                    first_name=settings.DEFAULT_OFFICIAL_FIRST_NAME,
                    last_name=settings.DEFAULT_OFFICIAL_LAST_NAME,
                    email=email,
                    phone=settings.DEFAULT_OFFICIAL_PHONE,
                    password=password,
                    role=Role.OFFICIAL,
                    agree_to_terms=True,
                ),
                is_verified=True,
            )
            logger.info(f"Default official account created: {email}")
        return result

    changes = plan_official_changes(existing, password, reset_password)
    changed_fields: List[str] = sorted(changes)
    if not changes:
        return {"action": "noop", "email": existing["email"], "changes": [], "applied": apply}

    if apply:
        user_service.update_user(existing["id"], changes)
        logger.info(f"Default official account updated: {existing['email']} ({changed_fields})")
    return {"action": "update", "email": existing["email"], "changes": changed_fields, "applied": apply}
