"""
Rating aggregation for books

Keeps books.average_rating / books.total_reviews equal to a function of the
book's current reviews. This is the only writer of those two fields.
"""

import asyncio
import weakref
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict

from src.database.collection_setup import BOOKS, REVIEWS
from src.utils.logger import setup_logger

logger = setup_logger()

ONE_DECIMAL = Decimal("0.1")


def compute_average(total: int, count: int) -> float:
    """
    Mean rating rounded half-up to one decimal (4.25 -> 4.3)

    Args:
        total: Sum of ratings
        count: Number of ratings

    Returns:
        Rounded mean, or 0.0 when there are no ratings
    """
    if count <= 0:
        return 0.0
    mean = Decimal(total) / Decimal(count)
    return float(mean.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))


def summary_pipeline(book_id) -> list:
    return [
        {"$match": {"book_id": book_id}},
        {
            "$group": {
                "_id": "$book_id",
                "total": {"$sum": "$rating"},
                "count": {"$sum": 1},
            }
        },
    ]


class RatingAggregator:
    """Recomputes derived rating fields after review mutations"""

    def __init__(self, db):
        self.db = db
        self.books_collection = db[BOOKS]
        self.reviews_collection = db[REVIEWS]
        self._locks = weakref.WeakValueDictionary()

    def _lock_for(self, book_id) -> asyncio.Lock:
        key = str(book_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def calculate_summary(self, book_id) -> Dict[str, Any]:
        """Read the current rating summary of a book without writing it"""
        results = await self.reviews_collection.aggregate(
            summary_pipeline(book_id)
        ).to_list(length=None)

        if not results:
            return {"average_rating": 0.0, "total_reviews": 0}

        stats = results[0]
        return {
            "average_rating": compute_average(stats["total"], stats["count"]),
            "total_reviews": stats["count"],
        }

    async def recompute(self, book_id) -> Dict[str, Any]:
        """
        Recompute and store a book's average_rating and total_reviews

        Calls for the same book are serialized; each write uses a summary
        read taken right before it, so the last call always wins with
        fresh data.

        Args:
            book_id: Book ObjectId

        Returns:
            The stored summary
        """
        async with self._lock_for(book_id):
            summary = await self.calculate_summary(book_id)
            await self.books_collection.update_one(
                {"_id": book_id}, {"$set": summary}
            )

        logger.info(
            f"⭐ Book {book_id} rating: {summary['average_rating']} "
            f"({summary['total_reviews']} reviews)"
        )
        return summary
