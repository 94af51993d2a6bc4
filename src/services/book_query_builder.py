"""
Query building for book listings: filters, sort order and pagination
"""

import math
import re
from typing import Any, Dict, List, Optional, Tuple

# sortBy value -> MongoDB sort keys
SORT_OPTIONS = {
    "title": [("title", 1)],
    "author": [("author", 1)],
    "year": [("year", -1)],
    "rating": [("average_rating", -1)],
}
DEFAULT_SORT = [("created_at", -1)]

SEARCH_FIELDS = ("title", "author", "description")


def _contains(text: str) -> Dict[str, str]:
    """Case-insensitive substring match on literal text"""
    return {"$regex": re.escape(text), "$options": "i"}


def build_book_filter(
    search: Optional[str] = None,
    genre: Optional[str] = None,
    added_by: Any = None,
) -> Dict[str, Any]:
    """
    Build the MongoDB filter for a book listing

    Args:
        search: Free text matched against title, author or description
        genre: Substring matched against genre
        added_by: Owner ObjectId (my-books listing)

    Returns:
        Filter document; all given criteria must hold
    """
    query: Dict[str, Any] = {}

    search = search.strip() if search else ""
    if search:
        query["$or"] = [{field: _contains(search)} for field in SEARCH_FIELDS]

    genre = genre.strip() if genre else ""
    if genre:
        query["genre"] = _contains(genre)

    if added_by is not None:
        query["added_by"] = added_by

    return query


def build_book_sort(sort_by: Optional[str] = None) -> List[Tuple[str, int]]:
    """Sort keys for sortBy; unknown or missing values sort newest first"""
    sort = SORT_OPTIONS.get(sort_by or "", DEFAULT_SORT)
    # _id tie-breaker keeps page boundaries stable
    return list(sort) + [("_id", -1)]


def page_window(page: int, page_size: int) -> Tuple[int, int]:
    """(skip, limit) for a 1-based page number"""
    if page < 1:
        raise ValueError("page must be a positive integer")
    return (page - 1) * page_size, page_size


def build_pagination(total: int, page: int, page_size: int) -> Dict[str, Any]:
    """
    Pagination metadata

    totalPages is 0 when nothing matches; a page past the end is reported
    as-is with hasNext False.
    """
    total_pages = math.ceil(total / page_size) if total else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        "total_books": total,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }
