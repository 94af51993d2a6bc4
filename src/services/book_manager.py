"""
Book Manager Service
Database operations for the book catalogue
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from fastapi import Depends
from pymongo import ReturnDocument

from src.config.database import get_database
from src.core.config import APP_CONFIG
from src.database.collection_setup import BOOKS, REVIEWS, USERS
from src.exceptions import AuthorizationError, NotFoundError
from src.models.book_models import BookCreate, BookUpdate
from src.services.book_query_builder import (
    build_book_filter,
    build_book_sort,
    build_pagination,
    page_window,
)
from src.utils.logger import setup_logger
from src.utils.response_utils import parse_object_id, public_user

logger = setup_logger()

CONTENT_FIELDS = ("title", "author", "description", "genre", "year")


class BookManager:
    """Manage books in MongoDB"""

    def __init__(self, db, page_size: int = 10):
        """
        Args:
            db: Motor database
            page_size: Books per page for listings
        """
        self.db = db
        self.page_size = page_size
        self.books_collection = db[BOOKS]
        self.reviews_collection = db[REVIEWS]
        self.users_collection = db[USERS]

    # ============ READ ============

    async def list_books(
        self,
        page: int = 1,
        search: Optional[str] = None,
        genre: Optional[str] = None,
        sort_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Public listing with search, genre filter, sort and pagination

        Args:
            page: 1-based page number
            search: Text matched in title, author or description
            genre: Genre substring
            sort_by: title | author | year | rating (default newest first)

        Returns:
            {"books": [...], "pagination": {...}}
        """
        query = build_book_filter(search=search, genre=genre)
        return await self._paginate(query, build_book_sort(sort_by), page)

    async def list_user_books(self, user: Dict[str, Any], page: int = 1) -> Dict[str, Any]:
        """Books added by the acting user, newest first"""
        query = build_book_filter(added_by=ObjectId(user["id"]))
        return await self._paginate(query, build_book_sort(None), page)

    async def get_book(self, book_id: str) -> Dict[str, Any]:
        book = await self._find_book(book_id)
        owners = await self._load_owners([book])
        return self._to_response(book, owners)

    async def _paginate(self, query, sort, page: int) -> Dict[str, Any]:
        skip, limit = page_window(page, self.page_size)

        total = await self.books_collection.count_documents(query)
        books = (
            await self.books_collection.find(query)
            .sort(sort)
            .skip(skip)
            .limit(limit)
            .to_list(length=limit)
        )
        owners = await self._load_owners(books)

        logger.info(f"📚 Found {len(books)} books (total: {total}, page: {page})")

        return {
            "books": [self._to_response(book, owners) for book in books],
            "pagination": build_pagination(total, page, self.page_size),
        }

    # ============ WRITE ============

    async def create_book(self, user: Dict[str, Any], data: BookCreate) -> Dict[str, Any]:
        now = datetime.utcnow()
        book_doc = {
            **data.model_dump(include=set(CONTENT_FIELDS)),
            "added_by": ObjectId(user["id"]),
            "average_rating": 0.0,
            "total_reviews": 0,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.books_collection.insert_one(book_doc)
        book_doc["_id"] = result.inserted_id
        logger.info(f"✅ Created book: {book_doc['_id']} by user {user['id']}")

        return self._to_response(book_doc, {book_doc["added_by"]: user})

    async def update_book(
        self, book_id: str, user: Dict[str, Any], data: BookUpdate
    ) -> Dict[str, Any]:
        """Replace content fields of an owned book; rating fields are untouched"""
        book = await self._find_owned_book(book_id, user, action="update")

        updates = data.model_dump(include=set(CONTENT_FIELDS))
        updates["updated_at"] = datetime.utcnow()

        updated = await self.books_collection.find_one_and_update(
            {"_id": book["_id"]},
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )
        if not updated:
            # Deleted between the ownership check and the write
            raise NotFoundError("Book not found")

        logger.info(f"✅ Updated book: {book_id}")
        owners = await self._load_owners([updated])
        return self._to_response(updated, owners)

    async def delete_book(self, book_id: str, user: Dict[str, Any]) -> int:
        """
        Delete an owned book and its reviews

        Returns:
            Number of reviews removed with the book
        """
        book = await self._find_owned_book(book_id, user, action="delete")

        # Reviews go first so a failure never leaves reviews without their book
        result = await self.reviews_collection.delete_many({"book_id": book["_id"]})
        await self.books_collection.delete_one({"_id": book["_id"]})

        logger.info(
            f"🗑️ Deleted book: {book_id} ({result.deleted_count} reviews removed)"
        )
        return result.deleted_count

    # ============ HELPERS ============

    async def _find_book(self, book_id: str) -> Dict[str, Any]:
        object_id = parse_object_id(book_id)
        book = (
            await self.books_collection.find_one({"_id": object_id})
            if object_id
            else None
        )
        if not book:
            logger.warning(f"⚠️ Book not found: {book_id}")
            raise NotFoundError("Book not found")
        return book

    async def _find_owned_book(
        self, book_id: str, user: Dict[str, Any], action: str
    ) -> Dict[str, Any]:
        book = await self._find_book(book_id)
        if str(book["added_by"]) != user["id"]:
            logger.warning(f"⚠️ User {user['id']} may not {action} book {book_id}")
            raise AuthorizationError(f"Not authorized to {action} this book")
        return book

    async def _load_owners(self, books: Iterable[Dict[str, Any]]) -> Dict[Any, Any]:
        """One users query for all owners on a page"""
        owner_ids = list({book["added_by"] for book in books})
        if not owner_ids:
            return {}
        users = await self.users_collection.find(
            {"_id": {"$in": owner_ids}}, {"name": 1, "email": 1}
        ).to_list(length=None)
        return {user["_id"]: user for user in users}

    def _to_response(self, book: Dict[str, Any], owners: Dict[Any, Any]) -> Dict[str, Any]:
        owner_id = book["added_by"]
        return {
            "id": str(book["_id"]),
            "title": book["title"],
            "author": book["author"],
            "description": book["description"],
            "genre": book["genre"],
            "year": book["year"],
            "added_by": public_user(owner_id, owners.get(owner_id)),
            "average_rating": book.get("average_rating", 0.0),
            "total_reviews": book.get("total_reviews", 0),
            "created_at": book["created_at"],
            "updated_at": book.get("updated_at", book["created_at"]),
        }


def get_book_manager(db=Depends(get_database)) -> BookManager:
    """FastAPI dependency"""
    return BookManager(db, page_size=APP_CONFIG["books_page_size"])
