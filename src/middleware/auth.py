"""
Bearer Token Authentication
Resolves `Authorization: Bearer <token>` to the acting user

- 401: header missing or not a bearer credential
- 403: token unknown, expired, or its user no longer exists
"""

from typing import Any, Dict

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.exceptions import AuthenticationError, InvalidTokenError
from src.services.user_manager import UserManager, get_user_manager
from src.utils.logger import setup_logger

logger = setup_logger()

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


class BearerAuth:
    """Session-token authentication"""

    def extract_token(self, credentials: HTTPAuthorizationCredentials) -> str:
        if credentials is None or not credentials.credentials:
            raise AuthenticationError()
        return credentials.credentials

    async def verify_token(self, token: str, user_manager: UserManager) -> Dict[str, Any]:
        """
        Resolve a token to the public user

        Raises:
            InvalidTokenError: unknown or expired token
        """
        user = await user_manager.resolve_session(token)
        if user is None:
            logger.warning("❌ Invalid or expired token provided")
            raise InvalidTokenError()
        return user


bearer_auth = BearerAuth()


# Dependency functions for FastAPI
async def get_bearer_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    """Raw bearer token of the request (401 when absent)"""
    return bearer_auth.extract_token(credentials)


async def get_current_user(
    request: Request,
    token: str = Depends(get_bearer_token),
    user_manager: UserManager = Depends(get_user_manager),
) -> Dict[str, Any]:
    """FastAPI dependency to get current authenticated user"""
    user = await bearer_auth.verify_token(token, user_manager)
    logger.debug(f"🔐 {request.method} {request.url.path} by user {user['id']}")
    return user
