"""
Service layer for Book Reviews
Handles business logic for reviews and keeps book ratings in sync
"""

from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List

from bson import ObjectId
from fastapi import Depends, Request
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from src.config.database import get_database
from src.database.collection_setup import BOOKS, REVIEWS, USERS
from src.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RatingSyncError,
)
from src.services.rating_aggregator import RatingAggregator
from src.utils.logger import setup_logger
from src.utils.response_utils import book_summary, parse_object_id, public_user

logger = setup_logger()

NEWEST_FIRST = [("created_at", -1), ("_id", -1)]


class ReviewManager:
    """Manager for review operations"""

    def __init__(self, db, aggregator: RatingAggregator):
        self.db = db
        self.aggregator = aggregator
        self.reviews_collection = db[REVIEWS]
        self.books_collection = db[BOOKS]
        self.users_collection = db[USERS]

    # ============ READ ============

    async def list_book_reviews(self, book_id: str) -> List[Dict[str, Any]]:
        """
        Reviews of a book, newest first

        An unknown or malformed book id yields an empty list.
        """
        book_oid = parse_object_id(book_id)
        if book_oid is None:
            return []

        reviews = (
            await self.reviews_collection.find({"book_id": book_oid})
            .sort(NEWEST_FIRST)
            .to_list(length=None)
        )
        users = await self._load_by_ids(
            self.users_collection, (r["user_id"] for r in reviews), {"name": 1, "email": 1}
        )

        return [
            self._to_response(review, users.get(review["user_id"]), book=None)
            for review in reviews
        ]

    async def get_review(self, review_id: str) -> Dict[str, Any]:
        """Single review with its author and book embedded"""
        review = await self._find_review(review_id)

        user = await self.users_collection.find_one(
            {"_id": review["user_id"]}, {"name": 1, "email": 1}
        )
        book = await self.books_collection.find_one(
            {"_id": review["book_id"]}, {"title": 1, "author": 1}
        )
        return self._to_response(review, user, book=book, embed_book=True)

    async def list_user_reviews(self, user: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Reviews written by the acting user, newest first, with book info"""
        reviews = (
            await self.reviews_collection.find({"user_id": ObjectId(user["id"])})
            .sort(NEWEST_FIRST)
            .to_list(length=None)
        )
        books = await self._load_by_ids(
            self.books_collection, (r["book_id"] for r in reviews), {"title": 1, "author": 1}
        )

        return [
            self._to_response(
                review, user, book=books.get(review["book_id"]), embed_book=True
            )
            for review in reviews
        ]

    # ============ WRITE ============

    async def add_review(
        self, user: Dict[str, Any], book_id: str, rating: int, review_text: str
    ) -> Dict[str, Any]:
        """
        Add a review for a book

        Args:
            user: Acting user
            book_id: Book ObjectId string
            rating: Rating (1-5)
            review_text: Review content

        Returns:
            Created review

        Raises:
            NotFoundError: book does not exist
            ConflictError: user already reviewed this book
        """
        book_oid = parse_object_id(book_id)
        book = (
            await self.books_collection.find_one({"_id": book_oid}, {"_id": 1})
            if book_oid
            else None
        )
        if not book:
            raise NotFoundError("Book not found")

        user_oid = ObjectId(user["id"])

        # Check if user already reviewed this book
        existing_review = await self.reviews_collection.find_one(
            {"book_id": book_oid, "user_id": user_oid}
        )
        if existing_review:
            raise ConflictError("You have already reviewed this book")

        now = datetime.utcnow()
        review_doc = {
            "book_id": book_oid,
            "user_id": user_oid,
            "rating": rating,
            "review_text": review_text,
            "created_at": now,
            "updated_at": now,
        }

        try:
            result = await self.reviews_collection.insert_one(review_doc)
        except DuplicateKeyError:
            # Lost a race against a concurrent review by the same user
            raise ConflictError("You have already reviewed this book")

        review_doc["_id"] = result.inserted_id
        logger.info(f"✅ User {user['id']} reviewed book {book_id}")

        await self._sync_rating(
            book_oid,
            undo=lambda: self.reviews_collection.delete_one({"_id": review_doc["_id"]}),
        )

        return self._to_response(review_doc, user, book=None)

    async def update_review(
        self, review_id: str, user: Dict[str, Any], rating: int, review_text: str
    ) -> Dict[str, Any]:
        """Change rating and text of the acting user's own review"""
        review = await self._find_own_review(review_id, user, action="update")

        updated = await self.reviews_collection.find_one_and_update(
            {"_id": review["_id"]},
            {
                "$set": {
                    "rating": rating,
                    "review_text": review_text,
                    "updated_at": datetime.utcnow(),
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        if not updated:
            raise NotFoundError("Review not found")

        logger.info(f"✅ Updated review: {review_id}")

        previous = {
            "rating": review["rating"],
            "review_text": review["review_text"],
            "updated_at": review["updated_at"],
        }
        await self._sync_rating(
            review["book_id"],
            undo=lambda: self.reviews_collection.update_one(
                {"_id": review["_id"]}, {"$set": previous}
            ),
        )

        return self._to_response(updated, user, book=None)

    async def delete_review(self, review_id: str, user: Dict[str, Any]) -> None:
        """Delete the acting user's own review (hard delete)"""
        review = await self._find_own_review(review_id, user, action="delete")

        await self.reviews_collection.delete_one({"_id": review["_id"]})
        logger.info(f"🗑️ Deleted review: {review_id}")

        await self._sync_rating(
            review["book_id"],
            undo=lambda: self.reviews_collection.insert_one(review),
        )

    # ============ HELPERS ============

    async def _sync_rating(self, book_id, undo: Callable[[], Awaitable[Any]]):
        """
        Recompute the book rating after a review write

        On storage failure the review write is undone and RatingSyncError
        raised, so callers never report a mutation with a stale rating.
        """
        try:
            await self.aggregator.recompute(book_id)
            return
        except PyMongoError as e:
            logger.error(f"❌ Rating recompute failed for book {book_id}: {e}", exc_info=True)
            cause = e

        try:
            await undo()
            await self.aggregator.recompute(book_id)
            logger.warning(f"↩️ Review change on book {book_id} rolled back")
        except PyMongoError as rollback_error:
            logger.error(
                f"❌ Rollback failed for book {book_id}: {rollback_error}",
                exc_info=True,
            )

        raise RatingSyncError() from cause

    async def _find_review(self, review_id: str) -> Dict[str, Any]:
        object_id = parse_object_id(review_id)
        review = (
            await self.reviews_collection.find_one({"_id": object_id})
            if object_id
            else None
        )
        if not review:
            logger.warning(f"⚠️ Review not found: {review_id}")
            raise NotFoundError("Review not found")
        return review

    async def _find_own_review(
        self, review_id: str, user: Dict[str, Any], action: str
    ) -> Dict[str, Any]:
        review = await self._find_review(review_id)
        if str(review["user_id"]) != user["id"]:
            logger.warning(f"⚠️ User {user['id']} may not {action} review {review_id}")
            raise AuthorizationError(f"Not authorized to {action} this review")
        return review

    async def _load_by_ids(self, collection, ids: Iterable, projection) -> Dict[Any, Any]:
        unique_ids = list(set(ids))
        if not unique_ids:
            return {}
        docs = await collection.find(
            {"_id": {"$in": unique_ids}}, projection
        ).to_list(length=None)
        return {doc["_id"]: doc for doc in docs}

    def _to_response(
        self,
        review: Dict[str, Any],
        user,
        book,
        embed_book: bool = False,
    ) -> Dict[str, Any]:
        if user and "id" in user:
            author = user
        else:
            author = public_user(review["user_id"], user)

        return {
            "id": str(review["_id"]),
            "book_id": (
                book_summary(review["book_id"], book)
                if embed_book
                else str(review["book_id"])
            ),
            "user_id": author,
            "rating": review["rating"],
            "review_text": review["review_text"],
            "created_at": review["created_at"],
            "updated_at": review.get("updated_at", review["created_at"]),
        }


def get_review_manager(request: Request, db=Depends(get_database)) -> ReviewManager:
    """FastAPI dependency; the aggregator is shared app-wide"""
    return ReviewManager(db, request.app.state.rating_aggregator)
