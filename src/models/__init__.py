"""
Request/response models for the Bookshelf API
"""

from .common_models import CamelModel, PublicUser, Pagination, MessageResponse
from .book_models import (
    BookCreate,
    BookUpdate,
    BookResponse,
    BookSummary,
    BookListResponse,
    BookMutationResponse,
)
from .book_review_models import (
    ReviewCreate,
    ReviewUpdate,
    ReviewResponse,
    ReviewMutationResponse,
)
from .user_models import RegisterRequest, LoginRequest, AuthResponse

__all__ = [
    "CamelModel",
    "PublicUser",
    "Pagination",
    "MessageResponse",
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "BookSummary",
    "BookListResponse",
    "BookMutationResponse",
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "ReviewMutationResponse",
    "RegisterRequest",
    "LoginRequest",
    "AuthResponse",
]
