"""
Pydantic models for registration, login and sessions
"""

from pydantic import EmailStr, Field

from .common_models import CamelModel, PublicUser


class RegisterRequest(CamelModel):
    """Registration request body"""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(CamelModel):
    """Login request body"""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class AuthResponse(CamelModel):
    """Token issued at registration or login"""

    message: str
    token: str
    user: PublicUser
