#!/usr/bin/env python3
"""
Create collections, schema validators and indexes for the Bookshelf database

Collections: users, books, reviews, sessions
The unique (book_id, user_id) index on reviews guarantees one review per user
per book even if application logic fails.
"""

import asyncio

from src.config.database import MongoDatabase
from src.core.config import APP_CONFIG
from src.database.collection_setup import COLLECTION_INDEXES, setup_database


async def main():
    mongo = MongoDatabase(APP_CONFIG["mongodb_uri"], APP_CONFIG["mongodb_name"])
    db = await mongo.connect()
    print(f"🔗 Connected to MongoDB: {APP_CONFIG['mongodb_name']}")

    try:
        await setup_database(db)

        for name in COLLECTION_INDEXES:
            print(f"\nAll indexes on {name}:")
            async for index in db[name].list_indexes():
                print(f"   - {index['name']}: {dict(index.get('key', {}))}")
    finally:
        mongo.close()

    print("\n✅ Setup complete!")


if __name__ == "__main__":
    asyncio.run(main())
