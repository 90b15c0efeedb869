"""
Authentication endpoints - email + password accounts with bearer tokens.
"""

import logging

from fastapi import APIRouter, Depends, status

from app.core.auth import require_authenticated
from app.models.user import AuthResponse, CurrentUser, LoginRequest, UserCreate, UserResponse
from app.services.user_service import get_user_service
from app.utils.security import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(request: UserCreate):
    """
    Register a new account and return it with a session token.

    Email is normalized to lowercase. Self-registration creates citizens;
    official accounts are provisioned separately.
    Plain def: bcrypt runs in the threadpool, off the event loop.
    """
    user_data = get_user_service().register(request)
    token = create_access_token(user_data["id"], user_data["role"])

    logger.info(f"User registered: {user_data['id']}")
    return AuthResponse(
        success=True,
        message="User registered successfully",
        user=UserResponse(**user_data),
        token=token,
    )


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest):
    """
    Log in with email and password.

    Unknown email and wrong password return the same 401 response.
    Plain def: bcrypt runs in the threadpool, off the event loop.
    """
    user_data = get_user_service().authenticate(request.email, request.password)
    token = create_access_token(user_data["id"], user_data["role"])

    logger.info(f"User authenticated: {user_data['id']}")
    return AuthResponse(
        success=True,
        message="Login successful",
        user=UserResponse(**user_data),
        token=token,
    )


@router.get("/me")
async def get_current_user(user: CurrentUser = Depends(require_authenticated)):
    user_data = get_user_service().get_user_by_id(user.id)
    return {"success": True, "user": UserResponse(**user_data)}
