"""
Custom exceptions for the Bookshelf API
"""

from .api_exceptions import (
    BookshelfError,
    ValidationError,
    NotFoundError,
    AuthenticationError,
    InvalidTokenError,
    AuthorizationError,
    ConflictError,
    ServerError,
    RatingSyncError,
)

__all__ = [
    "BookshelfError",
    "ValidationError",
    "NotFoundError",
    "AuthenticationError",
    "InvalidTokenError",
    "AuthorizationError",
    "ConflictError",
    "ServerError",
    "RatingSyncError",
]
