"""
Pydantic Models for the Book catalogue
"""

from datetime import datetime
from typing import List

from pydantic import Field, field_validator

from .common_models import CamelModel, Pagination, PublicUser


class BookCreate(CamelModel):
    """Request model to create a book (also used for full updates)"""

    title: str = Field(..., min_length=1, max_length=200, description="Book title")
    author: str = Field(..., min_length=1, max_length=100, description="Author name")
    description: str = Field(
        ..., min_length=10, max_length=1000, description="Book description"
    )
    genre: str = Field(..., min_length=1, max_length=50, description="Free-text genre")
    year: int = Field(..., ge=1000, description="Publication year")

    @field_validator("year")
    @classmethod
    def validate_year_not_in_future(cls, v):
        """Publication year cannot be after the current calendar year"""
        if v > datetime.utcnow().year:
            raise ValueError("Year cannot be in the future")
        return v


class BookUpdate(BookCreate):
    """Request model to update a book. Derived rating fields are not accepted."""


class BookResponse(CamelModel):
    """Book as returned to clients, with the owner's public identity"""

    id: str = Field(..., alias="_id")
    title: str
    author: str
    description: str
    genre: str
    year: int
    added_by: PublicUser
    average_rating: float = 0.0
    total_reviews: int = 0
    created_at: datetime
    updated_at: datetime


class BookSummary(CamelModel):
    """Short book reference embedded in reviews"""

    id: str = Field(..., alias="_id")
    title: str
    author: str


class BookListResponse(CamelModel):
    """Paginated book listing"""

    books: List[BookResponse]
    pagination: Pagination


class BookMutationResponse(CamelModel):
    """Response for create/update book"""

    message: str
    book: BookResponse
