"""
Response utilities for API endpoints
"""

from typing import Any, Dict, List, Optional, Sequence

from bson import ObjectId
from bson.errors import InvalidId

UNKNOWN_USER = {"name": "Unknown User", "email": ""}


def parse_object_id(value: Any) -> Optional[ObjectId]:
    """ObjectId from a path/body value, or None when it is not a valid id"""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def public_user(user_id: ObjectId, user: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Public identity of a user document (name and email only)"""
    source = user or UNKNOWN_USER
    return {"id": str(user_id), "name": source["name"], "email": source["email"]}


def book_summary(book_id: ObjectId, book: Optional[Dict[str, Any]]) -> Any:
    """Embedded book reference; falls back to the bare id for deleted books"""
    if not book:
        return str(book_id)
    return {"id": str(book_id), "title": book["title"], "author": book["author"]}


def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Flatten pydantic/FastAPI error dicts to field-level messages

    ("body", "reviewText") -> "reviewText"; query params keep their name.
    """
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body",)]
        if loc and loc[0] in ("query", "path", "header"):
            loc = loc[1:]
        formatted.append(
            {
                "field": ".".join(loc) or "body",
                "message": error.get("msg", "Invalid value"),
            }
        )
    return formatted
