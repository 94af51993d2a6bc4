"""
Shared Pydantic models for the Bookshelf API
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for all API schemas: snake_case in Python, camelCase on the wire.
    Accepts either spelling on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class PublicUser(CamelModel):
    """Public identity embedded in books and reviews"""

    id: str = Field(..., alias="_id")
    name: str
    email: str


class Pagination(CamelModel):
    """Pagination metadata for book listings"""

    current_page: int
    total_pages: int
    total_books: int
    has_next: bool
    has_prev: bool


class MessageResponse(CamelModel):
    """Generic message response (deletes, logout)"""

    message: str
