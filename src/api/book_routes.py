"""
Book API Routes

Endpoints:
- GET /api/books - Public listing (search, genre, sortBy, page)
- GET /api/books/my-books - Books added by the current user
- GET /api/books/{book_id} - Single book
- POST /api/books - Add a book
- PUT /api/books/{book_id} - Update own book
- DELETE /api/books/{book_id} - Delete own book (and its reviews)
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from src.middleware.auth import get_current_user
from src.models.book_models import (
    BookCreate,
    BookListResponse,
    BookMutationResponse,
    BookResponse,
    BookUpdate,
)
from src.models.common_models import MessageResponse
from src.services.book_manager import BookManager, get_book_manager

router = APIRouter(prefix="/api/books", tags=["Books"])


@router.get("", response_model=BookListResponse)
async def list_books(
    page: int = Query(1, ge=1, description="1-based page number"),
    search: Optional[str] = Query(
        None, description="Matches title, author or description (case-insensitive)"
    ),
    genre: Optional[str] = Query(None, description="Genre substring"),
    sort_by: Optional[str] = Query(
        None, alias="sortBy", description="title | author | year | rating"
    ),
    manager: BookManager = Depends(get_book_manager),
):
    """
    **List books**

    - **Public endpoint**
    - **search** and **genre** combine with AND
    - **sortBy**: title/author ascending, year/rating descending, newest first when unset
    - A page past the end returns an empty list
    """
    return await manager.list_books(
        page=page, search=search, genre=genre, sort_by=sort_by
    )


@router.get("/my-books", response_model=BookListResponse)
async def list_my_books(
    page: int = Query(1, ge=1),
    user: Dict[str, Any] = Depends(get_current_user),
    manager: BookManager = Depends(get_book_manager),
):
    """Books added by the authenticated user, newest first"""
    return await manager.list_user_books(user, page=page)


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(book_id: str, manager: BookManager = Depends(get_book_manager)):
    """Single book with the owner's public identity. 404 if not found."""
    return await manager.get_book(book_id)


@router.post(
    "",
    response_model=BookMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_book(
    book_data: BookCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    manager: BookManager = Depends(get_book_manager),
):
    """
    **Add a book**

    **Authentication required**

    Rating fields start at 0 and are maintained from reviews only.
    """
    book = await manager.create_book(user, book_data)
    return {"message": "Book added successfully", "book": book}


@router.put("/{book_id}", response_model=BookMutationResponse)
async def update_book(
    book_id: str,
    book_data: BookUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    manager: BookManager = Depends(get_book_manager),
):
    """
    **Update a book**

    **Errors**:
    - 400: Validation failed
    - 403: Not the book owner
    - 404: Book not found
    """
    book = await manager.update_book(book_id, user, book_data)
    return {"message": "Book updated successfully", "book": book}


@router.delete("/{book_id}", response_model=MessageResponse)
async def delete_book(
    book_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    manager: BookManager = Depends(get_book_manager),
):
    """Delete an owned book. Its reviews are deleted with it."""
    await manager.delete_book(book_id, user)
    return {"message": "Book deleted successfully"}
