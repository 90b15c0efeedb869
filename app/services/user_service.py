"""
User Service - Credential store for users in Firestore.
"""

import logging
from typing import Dict, Optional

from firebase_admin import firestore

from app.config.firebase import get_db
from app.core import errors
from app.core.settings import settings
from app.models.user import Role, UserCreate, UserSummary
from app.utils.firestore_helpers import document_to_dict, is_valid_document_id, where_filter
from app.utils.security import DUMMY_PASSWORD_HASH, hash_password, verify_password

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def public_user(user_data: Optional[Dict]) -> Optional[Dict]:
    """Strip credential fields from a stored user record."""
    if user_data is None:
        return None
    return {k: v for k, v in user_data.items() if k != "password_hash"}


class UserService:
    """
    Service for user management in Firestore.

    Emails are stored lowercase and must be unique. Password hashes are only
    returned when a caller explicitly asks for them.
    """

    @property
    def db(self):
        return get_db()

    def get_user_by_id(self, user_id: str, include_password: bool = False) -> Optional[Dict]:
        if not is_valid_document_id(user_id):
            return None
        doc = self.db.collection(USERS_COLLECTION).document(user_id).get()
        user_data = document_to_dict(doc)
        return user_data if include_password else public_user(user_data)

    def get_user_by_email(self, email: str, include_password: bool = False) -> Optional[Dict]:
        users_ref = self.db.collection(USERS_COLLECTION)
        query = where_filter(users_ref, "email", "==", normalize_email(email)).limit(1)

        docs = list(query.stream())
        if not docs:
            return None

        user_data = document_to_dict(docs[0])
        return user_data if include_password else public_user(user_data)

    def create_user(self, profile: UserCreate, is_verified: bool = False) -> Dict:
        """
        Persist a new user with a hashed password.

        Raises:
            DuplicateEmail: email already registered
        """
        email = normalize_email(profile.email)
        if self.get_user_by_email(email) is not None:
            raise errors.DuplicateEmail()

        user_ref = self.db.collection(USERS_COLLECTION).document()
        user_ref.set({
            "first_name": profile.first_name,
            "last_name": profile.last_name,
            "email": email,
            "phone": profile.phone,
            "password_hash": hash_password(profile.password),
            "role": profile.role.value,
            "is_active": True,
            "is_verified": is_verified,
            "agree_to_terms": profile.agree_to_terms,
            "created_at": firestore.SERVER_TIMESTAMP,
            "updated_at": firestore.SERVER_TIMESTAMP,
        })

        logger.info(f"User created: {user_ref.id} ({profile.role.value})")
        return public_user(document_to_dict(user_ref.get()))

    def register(self, profile: UserCreate) -> Dict:
        """
        Public self-registration. Official accounts are provisioned, not
        self-registered, unless ALLOW_OFFICIAL_REGISTRATION is enabled.
        """
        if profile.role is Role.OFFICIAL and not settings.ALLOW_OFFICIAL_REGISTRATION:
            raise errors.Forbidden("Official accounts cannot be self-registered")
        return self.create_user(profile)

    def authenticate(self, email: str, password: str) -> Dict:
        """
        Check credentials and return the public user record.

        Unknown email and wrong password fail identically.
        """
        user_data = self.get_user_by_email(email, include_password=True)

        if user_data is None:
            verify_password(password, DUMMY_PASSWORD_HASH)
            raise errors.InvalidCredentials()

        if not verify_password(password, user_data.get("password_hash")):
            raise errors.InvalidCredentials()

        if not user_data.get("is_active", True):
            raise errors.Unauthenticated("User account is inactive.")

        return public_user(user_data)

    def update_user(self, user_id: str, update_data: Dict) -> Dict:
        """
        Update user fields. A "password" key is hashed before storage.
        """
        update_data = dict(update_data)
        if "password" in update_data:
            update_data["password_hash"] = hash_password(update_data.pop("password"))
        if "email" in update_data:
            update_data["email"] = normalize_email(update_data["email"])
        if isinstance(update_data.get("role"), Role):
            update_data["role"] = update_data["role"].value
        update_data["updated_at"] = firestore.SERVER_TIMESTAMP

        user_ref = self.db.collection(USERS_COLLECTION).document(user_id)
        user_ref.update(update_data)

        logger.info(f"User updated: {user_id} (fields: {sorted(k for k in update_data if k != 'password_hash')})")
        return public_user(document_to_dict(user_ref.get()))

    def get_user_summary(self, user_id: Optional[str]) -> Optional[UserSummary]:
        if not user_id:
            return None
        user_data = self.get_user_by_id(user_id)
        if user_data is None:
            return UserSummary(id=user_id)
        return UserSummary(
            id=user_id,
            first_name=user_data.get("first_name"),
            last_name=user_data.get("last_name"),
            email=user_data.get("email"),
        )


# Global service instance (singleton pattern)
_user_service = None


def get_user_service() -> UserService:
    """
    Get or create UserService singleton instance.
    """
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
