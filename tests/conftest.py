"""
Shared fixtures: motor collections replaced by mocks

Run tests:
python -m pytest tests -v
"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from src.database.collection_setup import BOOKS, REVIEWS, SESSIONS, USERS


def make_cursor(docs=None):
    """Cursor mock: sort/skip/limit chain, to_list is awaited"""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=list(docs or []))
    return cursor


def make_collection():
    """Mock motor collection (find/aggregate are sync, the rest awaited)"""
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
    collection.update_one = AsyncMock(return_value=MagicMock(modified_count=1))
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=0))
    collection.count_documents = AsyncMock(return_value=0)
    collection.find = MagicMock(return_value=make_cursor())
    collection.aggregate = MagicMock(return_value=make_cursor())
    return collection


@pytest.fixture
def mock_db():
    """Database mock indexed like a motor database"""
    return {
        USERS: make_collection(),
        BOOKS: make_collection(),
        REVIEWS: make_collection(),
        SESSIONS: make_collection(),
    }


def make_user(name="Alice", email="alice@example.com"):
    return {"id": str(ObjectId()), "name": name, "email": email}


@pytest.fixture
def owner():
    return make_user("Alice", "alice@example.com")


@pytest.fixture
def other_user():
    return make_user("Bob", "bob@example.com")


def make_book_doc(added_by, **overrides):
    now = datetime(2024, 1, 1, 12, 0, 0)
    doc = {
        "_id": ObjectId(),
        "title": "1984",
        "author": "George Orwell",
        "description": "A dystopian novel about surveillance and control.",
        "genre": "Fiction",
        "year": 1949,
        "added_by": ObjectId(added_by) if isinstance(added_by, str) else added_by,
        "average_rating": 0.0,
        "total_reviews": 0,
        "created_at": now,
        "updated_at": now,
    }
    doc.update(overrides)
    return doc


def make_review_doc(book_id, user_id, rating=4, **overrides):
    now = datetime(2024, 1, 2, 12, 0, 0)
    doc = {
        "_id": ObjectId(),
        "book_id": book_id,
        "user_id": ObjectId(user_id) if isinstance(user_id, str) else user_id,
        "rating": rating,
        "review_text": "A chilling and still relevant read.",
        "created_at": now,
        "updated_at": now,
    }
    doc.update(overrides)
    return doc
