"""
Unit Tests for ReviewManager
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, PyMongoError

from src.database.collection_setup import BOOKS, REVIEWS, SESSIONS, USERS
from src.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RatingSyncError,
)
from src.services.rating_aggregator import RatingAggregator
from src.services.review_manager import ReviewManager

from .conftest import make_book_doc, make_collection, make_cursor, make_review_doc


@pytest.fixture
def aggregator():
    agg = MagicMock(spec=RatingAggregator)
    agg.recompute = AsyncMock(return_value={"average_rating": 4.0, "total_reviews": 1})
    return agg


@pytest.fixture
def review_manager(mock_db, aggregator):
    return ReviewManager(mock_db, aggregator)


class TestAddReview:
    @pytest.mark.asyncio
    async def test_add_review_recomputes_rating(
        self, review_manager, mock_db, aggregator, owner, other_user
    ):
        book = make_book_doc(owner["id"])
        mock_db[BOOKS].find_one.return_value = book

        result = await review_manager.add_review(
            other_user, str(book["_id"]), 4, "Great and unsettling classic."
        )

        inserted = mock_db[REVIEWS].insert_one.call_args.args[0]
        assert inserted["book_id"] == book["_id"]
        assert inserted["user_id"] == ObjectId(other_user["id"])
        assert result["book_id"] == str(book["_id"])
        assert result["user_id"] == other_user
        assert result["rating"] == 4
        aggregator.recompute.assert_awaited_once_with(book["_id"])

    @pytest.mark.asyncio
    async def test_missing_book(self, review_manager, mock_db, owner, aggregator):
        with pytest.raises(NotFoundError, match="Book not found"):
            await review_manager.add_review(
                owner, str(ObjectId()), 4, "Great and unsettling classic."
            )
        mock_db[REVIEWS].insert_one.assert_not_called()
        aggregator.recompute.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_review_rejected(
        self, review_manager, mock_db, owner, other_user, aggregator
    ):
        book = make_book_doc(owner["id"])
        mock_db[BOOKS].find_one.return_value = book
        mock_db[REVIEWS].find_one.return_value = make_review_doc(
            book["_id"], other_user["id"]
        )

        with pytest.raises(ConflictError, match="already reviewed"):
            await review_manager.add_review(
                other_user, str(book["_id"]), 5, "Second opinion on the same book."
            )
        mock_db[REVIEWS].insert_one.assert_not_called()
        aggregator.recompute.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_hits_unique_index(
        self, review_manager, mock_db, owner, other_user, aggregator
    ):
        book = make_book_doc(owner["id"])
        mock_db[BOOKS].find_one.return_value = book
        mock_db[REVIEWS].insert_one.side_effect = DuplicateKeyError("E11000")

        with pytest.raises(ConflictError):
            await review_manager.add_review(
                other_user, str(book["_id"]), 5, "Second opinion on the same book."
            )
        aggregator.recompute.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_recompute_removes_review(
        self, review_manager, mock_db, owner, other_user, aggregator
    ):
        book = make_book_doc(owner["id"])
        mock_db[BOOKS].find_one.return_value = book
        review_id = ObjectId()
        mock_db[REVIEWS].insert_one.return_value = MagicMock(inserted_id=review_id)
        aggregator.recompute.side_effect = [PyMongoError("write failed"), None]

        with pytest.raises(RatingSyncError):
            await review_manager.add_review(
                other_user, str(book["_id"]), 4, "Great and unsettling classic."
            )

        mock_db[REVIEWS].delete_one.assert_awaited_once_with({"_id": review_id})
        assert aggregator.recompute.await_count == 2


class TestUpdateReview:
    @pytest.mark.asyncio
    async def test_author_updates(
        self, review_manager, mock_db, owner, other_user, aggregator
    ):
        review = make_review_doc(ObjectId(), other_user["id"], rating=2)
        mock_db[REVIEWS].find_one.return_value = review
        mock_db[REVIEWS].find_one_and_update.return_value = {
            **review,
            "rating": 5,
            "review_text": "Changed my mind entirely.",
        }

        result = await review_manager.update_review(
            str(review["_id"]), other_user, 5, "Changed my mind entirely."
        )

        set_fields = mock_db[REVIEWS].find_one_and_update.call_args.args[1]["$set"]
        assert set_fields["rating"] == 5
        assert "book_id" not in set_fields
        assert "user_id" not in set_fields
        assert result["rating"] == 5
        aggregator.recompute.assert_awaited_once_with(review["book_id"])

    @pytest.mark.asyncio
    async def test_non_author_forbidden(self, review_manager, mock_db, owner, other_user):
        review = make_review_doc(ObjectId(), other_user["id"])
        mock_db[REVIEWS].find_one.return_value = review

        with pytest.raises(AuthorizationError, match="update this review"):
            await review_manager.update_review(
                str(review["_id"]), owner, 1, "Not my review to change."
            )
        mock_db[REVIEWS].find_one_and_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_review(self, review_manager, owner):
        with pytest.raises(NotFoundError, match="Review not found"):
            await review_manager.update_review(
                str(ObjectId()), owner, 3, "Nothing here to update."
            )

    @pytest.mark.asyncio
    async def test_failed_recompute_restores_previous_content(
        self, review_manager, mock_db, other_user, aggregator
    ):
        review = make_review_doc(ObjectId(), other_user["id"], rating=2)
        mock_db[REVIEWS].find_one.return_value = review
        mock_db[REVIEWS].find_one_and_update.return_value = {**review, "rating": 5}
        aggregator.recompute.side_effect = [PyMongoError("write failed"), None]

        with pytest.raises(RatingSyncError):
            await review_manager.update_review(
                str(review["_id"]), other_user, 5, "Changed my mind entirely."
            )

        restore = mock_db[REVIEWS].update_one.call_args.args
        assert restore[0] == {"_id": review["_id"]}
        assert restore[1]["$set"]["rating"] == 2
        assert restore[1]["$set"]["review_text"] == review["review_text"]


class TestDeleteReview:
    @pytest.mark.asyncio
    async def test_author_deletes(self, review_manager, mock_db, other_user, aggregator):
        review = make_review_doc(ObjectId(), other_user["id"])
        mock_db[REVIEWS].find_one.return_value = review

        await review_manager.delete_review(str(review["_id"]), other_user)

        mock_db[REVIEWS].delete_one.assert_awaited_once_with({"_id": review["_id"]})
        aggregator.recompute.assert_awaited_once_with(review["book_id"])

    @pytest.mark.asyncio
    async def test_non_author_forbidden(
        self, review_manager, mock_db, owner, other_user, aggregator
    ):
        review = make_review_doc(ObjectId(), other_user["id"])
        mock_db[REVIEWS].find_one.return_value = review

        with pytest.raises(AuthorizationError, match="delete this review"):
            await review_manager.delete_review(str(review["_id"]), owner)
        mock_db[REVIEWS].delete_one.assert_not_called()
        aggregator.recompute.assert_not_called()

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found(self, review_manager, mock_db, owner):
        with pytest.raises(NotFoundError):
            await review_manager.delete_review("xyz", owner)
        mock_db[REVIEWS].find_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_recompute_reinserts_review(
        self, review_manager, mock_db, other_user, aggregator
    ):
        review = make_review_doc(ObjectId(), other_user["id"])
        mock_db[REVIEWS].find_one.return_value = review
        aggregator.recompute.side_effect = [PyMongoError("write failed"), None]

        with pytest.raises(RatingSyncError):
            await review_manager.delete_review(str(review["_id"]), other_user)

        mock_db[REVIEWS].insert_one.assert_awaited_once_with(review)
        assert aggregator.recompute.await_count == 2

    @pytest.mark.asyncio
    async def test_failed_rollback_still_reports_sync_error(
        self, review_manager, mock_db, other_user, aggregator
    ):
        review = make_review_doc(ObjectId(), other_user["id"])
        mock_db[REVIEWS].find_one.return_value = review
        mock_db[REVIEWS].insert_one.side_effect = PyMongoError("still down")
        aggregator.recompute.side_effect = PyMongoError("write failed")

        with pytest.raises(RatingSyncError):
            await review_manager.delete_review(str(review["_id"]), other_user)
        assert aggregator.recompute.await_count == 1


class TestReadReviews:
    @pytest.mark.asyncio
    async def test_book_reviews_newest_first_with_authors(
        self, review_manager, mock_db, owner, other_user
    ):
        book_id = ObjectId()
        review = make_review_doc(book_id, other_user["id"])
        cursor = make_cursor([review])
        mock_db[REVIEWS].find.return_value = cursor
        mock_db[USERS].find.return_value = make_cursor(
            [{"_id": review["user_id"], "name": "Bob", "email": "bob@example.com"}]
        )

        result = await review_manager.list_book_reviews(str(book_id))

        cursor.sort.assert_called_once_with([("created_at", -1), ("_id", -1)])
        assert result[0]["user_id"] == other_user
        assert result[0]["book_id"] == str(book_id)

    @pytest.mark.asyncio
    async def test_unknown_book_has_no_reviews(self, review_manager, mock_db):
        assert await review_manager.list_book_reviews("bad-id") == []
        mock_db[REVIEWS].find.assert_not_called()

    @pytest.mark.asyncio
    async def test_single_review_embeds_book(
        self, review_manager, mock_db, owner, other_user
    ):
        book = make_book_doc(owner["id"])
        review = make_review_doc(book["_id"], other_user["id"])
        mock_db[REVIEWS].find_one.return_value = review
        mock_db[USERS].find_one.return_value = {
            "_id": review["user_id"],
            "name": "Bob",
            "email": "bob@example.com",
        }
        mock_db[BOOKS].find_one.return_value = {
            "_id": book["_id"],
            "title": "1984",
            "author": "George Orwell",
        }

        result = await review_manager.get_review(str(review["_id"]))

        assert result["book_id"] == {
            "id": str(book["_id"]),
            "title": "1984",
            "author": "George Orwell",
        }
        assert result["user_id"]["name"] == "Bob"

    @pytest.mark.asyncio
    async def test_my_reviews_embed_books(self, review_manager, mock_db, owner, other_user):
        book = make_book_doc(owner["id"])
        review = make_review_doc(book["_id"], other_user["id"])
        mock_db[REVIEWS].find.return_value = make_cursor([review])
        mock_db[BOOKS].find.return_value = make_cursor(
            [{"_id": book["_id"], "title": "1984", "author": "George Orwell"}]
        )

        result = await review_manager.list_user_reviews(other_user)

        assert mock_db[REVIEWS].find.call_args.args[0] == {
            "user_id": ObjectId(other_user["id"])
        }
        assert result[0]["book_id"]["title"] == "1984"
        assert result[0]["user_id"] == other_user


class _StoredReviews:
    """Just enough of a reviews collection to run the real aggregator"""

    def __init__(self):
        self.docs = {}

    async def find_one(self, query, projection=None):
        for doc in self.docs.values():
            if all(doc.get(key) == value for key, value in query.items()):
                return dict(doc)
        return None

    async def insert_one(self, doc):
        doc.setdefault("_id", ObjectId())
        self.docs[doc["_id"]] = dict(doc)
        return MagicMock(inserted_id=doc["_id"])

    async def delete_one(self, query):
        removed = self.docs.pop(query["_id"], None)
        return MagicMock(deleted_count=1 if removed else 0)

    def aggregate(self, pipeline):
        book_id = pipeline[0]["$match"]["book_id"]
        ratings = [d["rating"] for d in self.docs.values() if d["book_id"] == book_id]
        if not ratings:
            return make_cursor([])
        return make_cursor([{"_id": book_id, "total": sum(ratings), "count": len(ratings)}])


class _StoredBooks:
    def __init__(self, book):
        self.book = book

    async def find_one(self, query, projection=None):
        return dict(self.book) if query["_id"] == self.book["_id"] else None

    async def update_one(self, query, update):
        self.book.update(update["$set"])
        return MagicMock(modified_count=1)


@pytest.mark.asyncio
async def test_review_lifecycle_keeps_rating_in_sync(owner, other_user):
    """Add, reject duplicate, then delete a review and follow the book rating"""
    book = make_book_doc(owner["id"], title="1984", genre="Fiction", year=1949)
    reviews = _StoredReviews()
    db = {
        USERS: make_collection(),
        BOOKS: _StoredBooks(book),
        REVIEWS: reviews,
        SESSIONS: make_collection(),
    }
    manager = ReviewManager(db, RatingAggregator(db))

    created = await manager.add_review(
        other_user, str(book["_id"]), 4, "Great and unsettling classic."
    )
    assert book["average_rating"] == 4.0
    assert book["total_reviews"] == 1

    with pytest.raises(ConflictError):
        await manager.add_review(
            other_user, str(book["_id"]), 2, "Trying to review it twice."
        )
    assert book["total_reviews"] == 1

    await manager.delete_review(created["id"], other_user)
    assert book["average_rating"] == 0.0
    assert book["total_reviews"] == 0
    assert reviews.docs == {}
