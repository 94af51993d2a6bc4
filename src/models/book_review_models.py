"""
Book Review Models
Models for reviews and their responses
"""

from datetime import datetime
from typing import Union

from pydantic import Field

from .book_models import BookSummary
from .common_models import CamelModel, PublicUser


class ReviewCreate(CamelModel):
    """Create a review for a book"""

    book_id: str = Field(..., min_length=1, description="Reviewed book id")
    rating: int = Field(..., ge=1, le=5, description="Rating 1-5 stars")
    review_text: str = Field(
        ..., min_length=10, max_length=500, description="Review text"
    )


class ReviewUpdate(CamelModel):
    """Update rating and text of an existing review"""

    rating: int = Field(..., ge=1, le=5, description="Rating 1-5 stars")
    review_text: str = Field(
        ..., min_length=10, max_length=500, description="Review text"
    )


class ReviewResponse(CamelModel):
    """
    Review as returned to clients

    book_id is the bare id on per-book listings and a BookSummary where the
    book is embedded (single review, my reviews).
    """

    id: str = Field(..., alias="_id")
    book_id: Union[BookSummary, str]
    user_id: PublicUser
    rating: int
    review_text: str
    created_at: datetime
    updated_at: datetime


class ReviewMutationResponse(CamelModel):
    """Response for create/update review"""

    message: str
    review: ReviewResponse
