"""
Authentication API Routes
Registration, login and session management
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from src.middleware.auth import get_bearer_token, get_current_user
from src.models.common_models import MessageResponse, PublicUser
from src.models.user_models import AuthResponse, LoginRequest, RegisterRequest
from src.services.user_manager import UserManager, get_user_manager

# Create router
router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post(
    "/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    request: RegisterRequest, manager: UserManager = Depends(get_user_manager)
):
    """
    **Register a new user**

    Returns a bearer token valid for the configured session lifetime.

    **Errors**:
    - 400: Validation failed or user already exists
    """
    token, user = await manager.register(
        name=request.name, email=request.email, password=request.password
    )
    return {"message": "User registered successfully", "token": token, "user": user}


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, manager: UserManager = Depends(get_user_manager)):
    """
    **Log in**

    **Errors**:
    - 400: Invalid credentials
    """
    token, user = await manager.authenticate(email=request.email, password=request.password)
    return {"message": "Login successful", "token": token, "user": user}


@router.get("/me", response_model=PublicUser)
async def get_me(user: Dict[str, Any] = Depends(get_current_user)):
    """Public profile of the authenticated user"""
    return user


@router.post("/logout", response_model=MessageResponse)
async def logout(
    user: Dict[str, Any] = Depends(get_current_user),
    token: str = Depends(get_bearer_token),
    manager: UserManager = Depends(get_user_manager),
):
    """Revoke the session used for this request"""
    await manager.revoke_session(token)
    return {"message": "Logged out successfully"}
