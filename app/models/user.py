"""
User models for authentication and user management.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class Role(str, Enum):
    """
    The two account roles. Every role-dependent branch goes through this enum.
    """
    CITIZEN = "citizen"
    OFFICIAL = "official"

    @property
    def label(self) -> str:
        return {Role.CITIZEN: "Citizen", Role.OFFICIAL: "Official"}[self]


class UserCreate(BaseModel):
    """Registration payload."""
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone: str = Field(..., min_length=7, max_length=20)
    password: str = Field(..., min_length=6, max_length=128)
    role: Role = Role.CITIZEN
    agree_to_terms: bool = Field(..., description="Must be true to register")

    @field_validator("first_name", "last_name", "phone")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("agree_to_terms")
    @classmethod
    def must_agree(cls, value: bool) -> bool:
        if not value:
            raise ValueError("You must agree to the terms and conditions")
        return value


class LoginRequest(BaseModel):
    # Not EmailStr: a malformed address fails like any other bad login
    email: str
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """Public view of a user. Never carries the password hash."""
    id: str = Field(..., description="Firestore document ID")
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    role: Role
    is_active: bool = True
    is_verified: bool = False
    agree_to_terms: bool = False
    created_at: Optional[datetime] = None


class UserSummary(BaseModel):
    """Owner / verifier reference embedded in report responses."""
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class AuthResponse(BaseModel):
    """Authentication response."""
    success: bool
    message: str
    user: Optional[UserResponse] = None
    token: Optional[str] = None


class CurrentUser(BaseModel):
    """The live user record resolved from a session token."""
    id: str
    email: str
    role: Role
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool = True
