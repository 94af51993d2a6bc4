"""
Book Review Routes

Endpoints:
- GET /api/reviews/book/{book_id} - Reviews of a book
- GET /api/reviews/my-reviews - Reviews by the current user
- GET /api/reviews/{review_id} - Single review
- POST /api/reviews - Create a review
- PUT /api/reviews/{review_id} - Update own review
- DELETE /api/reviews/{review_id} - Delete own review
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status

from src.middleware.auth import get_current_user
from src.models.book_review_models import (
    ReviewCreate,
    ReviewMutationResponse,
    ReviewResponse,
    ReviewUpdate,
)
from src.models.common_models import MessageResponse
from src.services.review_manager import ReviewManager, get_review_manager

router = APIRouter(prefix="/api/reviews", tags=["Book Reviews"])


@router.get("/book/{book_id}", response_model=List[ReviewResponse])
async def get_book_reviews(
    book_id: str, manager: ReviewManager = Depends(get_review_manager)
):
    """Reviews of a book, newest first (public)"""
    return await manager.list_book_reviews(book_id)


@router.get("/my-reviews", response_model=List[ReviewResponse])
async def get_my_reviews(
    user: Dict[str, Any] = Depends(get_current_user),
    manager: ReviewManager = Depends(get_review_manager),
):
    """Reviews written by the authenticated user, with book title and author"""
    return await manager.list_user_reviews(user)


@router.get("/{review_id}", response_model=ReviewResponse)
async def get_review(
    review_id: str, manager: ReviewManager = Depends(get_review_manager)
):
    """Single review. 404 if not found."""
    return await manager.get_review(review_id)


@router.post(
    "",
    response_model=ReviewMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_review(
    review_data: ReviewCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    manager: ReviewManager = Depends(get_review_manager),
):
    """
    **Create a review**

    **Authentication required**

    **Business Logic**:
    - One review per user per book (enforced by unique index)
    - Book averageRating / totalReviews are recomputed before responding

    **Errors**:
    - 400: Validation failed or already reviewed
    - 404: Book not found
    """
    review = await manager.add_review(
        user,
        book_id=review_data.book_id,
        rating=review_data.rating,
        review_text=review_data.review_text,
    )
    return {"message": "Review added successfully", "review": review}


@router.put("/{review_id}", response_model=ReviewMutationResponse)
async def update_review(
    review_id: str,
    review_data: ReviewUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    manager: ReviewManager = Depends(get_review_manager),
):
    """Update rating/text of an own review (403 for other users' reviews)"""
    review = await manager.update_review(
        review_id,
        user,
        rating=review_data.rating,
        review_text=review_data.review_text,
    )
    return {"message": "Review updated successfully", "review": review}


@router.delete("/{review_id}", response_model=MessageResponse)
async def delete_review(
    review_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    manager: ReviewManager = Depends(get_review_manager),
):
    """Delete an own review (hard delete); book rating is recomputed"""
    await manager.delete_review(review_id, user)
    return {"message": "Review deleted successfully"}
