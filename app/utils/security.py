"""
Security utilities: password hashing and signed session tokens.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from app.core import errors
from app.core.settings import settings

logger = logging.getLogger(__name__)

# bcrypt only considers the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Salted, irreversible bcrypt hash of a plaintext password."""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Stored password hash has an unexpected format")
        return False


# Compared against when the account does not exist so both login failure
# paths cost one bcrypt check.
DUMMY_PASSWORD_HASH = hash_password("pakair-dummy-password")


def create_access_token(user_id: str, role: str, expires_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES)).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """
    Verify a session token and return the user ID it carries.

    Raises:
        TokenExpired: signature valid but past its expiry
        TokenInvalid: malformed token, bad signature or missing subject
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise errors.TokenExpired()
    except jwt.InvalidTokenError:
        raise errors.TokenInvalid()

    user_id = payload.get("sub")
    if not user_id or not isinstance(user_id, str):
        raise errors.TokenInvalid()
    return user_id
