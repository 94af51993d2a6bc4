"""
Collections, schema validators and indexes for the Bookshelf database

Collections:
- users: registered accounts (unique lower-cased email)
- books: catalogue entries with derived average_rating / total_reviews
- reviews: one review per (book_id, user_id)
- sessions: bearer token digests with TTL expiry
"""

from pymongo import ASCENDING, DESCENDING

from src.utils.logger import setup_logger

logger = setup_logger()

USERS = "users"
BOOKS = "books"
REVIEWS = "reviews"
SESSIONS = "sessions"

COLLECTION_VALIDATORS = {
    USERS: {
        "$jsonSchema": {
            "bsonType": "object",
            "required": ["name", "email", "password_hash", "created_at"],
            "properties": {
                "name": {"bsonType": "string", "minLength": 1, "maxLength": 100},
                "email": {"bsonType": "string", "minLength": 3},
                "password_hash": {"bsonType": "string"},
                "created_at": {"bsonType": "date"},
            },
        }
    },
    BOOKS: {
        "$jsonSchema": {
            "bsonType": "object",
            "required": [
                "title",
                "author",
                "description",
                "genre",
                "year",
                "added_by",
                "average_rating",
                "total_reviews",
                "created_at",
                "updated_at",
            ],
            "properties": {
                "title": {"bsonType": "string", "minLength": 1, "maxLength": 200},
                "author": {"bsonType": "string", "minLength": 1, "maxLength": 100},
                "description": {
                    "bsonType": "string",
                    "minLength": 10,
                    "maxLength": 1000,
                },
                "genre": {"bsonType": "string", "minLength": 1, "maxLength": 50},
                # Upper bound (current year) is enforced by the request schema
                "year": {"bsonType": ["int", "long"], "minimum": 1000},
                "added_by": {"bsonType": "objectId"},
                "average_rating": {
                    "bsonType": ["double", "int", "long", "decimal"],
                    "minimum": 0,
                    "maximum": 5,
                },
                "total_reviews": {"bsonType": ["int", "long"], "minimum": 0},
                "created_at": {"bsonType": "date"},
                "updated_at": {"bsonType": "date"},
            },
        }
    },
    REVIEWS: {
        "$jsonSchema": {
            "bsonType": "object",
            "required": [
                "book_id",
                "user_id",
                "rating",
                "review_text",
                "created_at",
                "updated_at",
            ],
            "properties": {
                "book_id": {"bsonType": "objectId"},
                "user_id": {"bsonType": "objectId"},
                "rating": {"bsonType": ["int", "long"], "minimum": 1, "maximum": 5},
                "review_text": {
                    "bsonType": "string",
                    "minLength": 10,
                    "maxLength": 500,
                },
                "created_at": {"bsonType": "date"},
                "updated_at": {"bsonType": "date"},
            },
        }
    },
    SESSIONS: {
        "$jsonSchema": {
            "bsonType": "object",
            "required": ["token_hash", "user_id", "created_at", "expires_at"],
            "properties": {
                "token_hash": {"bsonType": "string"},
                "user_id": {"bsonType": "objectId"},
                "created_at": {"bsonType": "date"},
                "expires_at": {"bsonType": "date"},
            },
        }
    },
}

# (keys, options) per collection
COLLECTION_INDEXES = {
    USERS: [
        ([("email", ASCENDING)], {"unique": True, "name": "email_unique"}),
    ],
    BOOKS: [
        ([("genre", ASCENDING)], {"name": "genre_filter"}),
        ([("year", DESCENDING)], {"name": "year_sort"}),
        ([("average_rating", DESCENDING)], {"name": "rating_sort"}),
        ([("created_at", DESCENDING)], {"name": "newest_first"}),
        (
            [("added_by", ASCENDING), ("created_at", DESCENDING)],
            {"name": "owner_books_list"},
        ),
    ],
    REVIEWS: [
        (
            [("book_id", ASCENDING), ("user_id", ASCENDING)],
            {"unique": True, "name": "unique_book_user_review"},
        ),
        (
            [("book_id", ASCENDING), ("created_at", DESCENDING)],
            {"name": "book_reviews_list"},
        ),
        (
            [("user_id", ASCENDING), ("created_at", DESCENDING)],
            {"name": "user_reviews_list"},
        ),
    ],
    SESSIONS: [
        ([("token_hash", ASCENDING)], {"unique": True, "name": "token_hash_unique"}),
        (
            [("expires_at", ASCENDING)],
            {"expireAfterSeconds": 0, "name": "session_expiration"},
        ),
    ],
}


async def ensure_collections(db):
    """
    Create collections with their validators, or refresh the validator
    on collections that already exist

    Args:
        db: Motor database
    """
    existing = set(await db.list_collection_names())

    for name, validator in COLLECTION_VALIDATORS.items():
        if name in existing:
            await db.command("collMod", name, validator=validator)
            logger.info(f"🔁 Refreshed validator: {name}")
        else:
            await db.create_collection(name, validator=validator)
            logger.info(f"✅ Created collection: {name}")


async def ensure_indexes(db):
    """Create all indexes (no-op for indexes that already exist)"""
    for name, indexes in COLLECTION_INDEXES.items():
        collection = db[name]
        for keys, options in indexes:
            await collection.create_index(keys, **options)
            logger.info(f"✅ Index verified: {name}.{options['name']}")


async def setup_database(db):
    """Collections first, then indexes"""
    try:
        await ensure_collections(db)
        await ensure_indexes(db)
    except Exception as e:
        logger.error(f"❌ Error setting up collections: {e}")
        raise
