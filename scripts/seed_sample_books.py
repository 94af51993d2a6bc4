#!/usr/bin/env python3
"""
Seed a demo account and a few books for local development

Ratings start at 0; they only change through reviews.
"""

import asyncio
import os

from src.config.database import MongoDatabase
from src.core.config import APP_CONFIG
from src.database.collection_setup import BOOKS, setup_database
from src.exceptions import ConflictError
from src.models.book_models import BookCreate
from src.services.book_manager import BookManager
from src.services.user_manager import UserManager

DEMO_NAME = "Default"
DEMO_EMAIL = os.getenv("SEED_EMAIL", "default@example.com")
DEMO_PASSWORD = os.getenv("SEED_PASSWORD", "password")

SAMPLE_BOOKS = [
    {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "description": "A classic American novel set in the Jazz Age, following the mysterious Jay Gatsby and his obsession with the beautiful Daisy Buchanan.",
        "genre": "Fiction",
        "year": 1925,
    },
    {
        "title": "The Alchemist",
        "author": "Paulo Coelho",
        "description": "A philosophical novel that tells the story of Santiago, a young shepherd who dreams of discovering a hidden treasure.",
        "genre": "Fiction",
        "year": 1988,
    },
    {
        "title": "1984",
        "author": "George Orwell",
        "description": "A dystopian novel about surveillance, propaganda and a man who dares to think for himself.",
        "genre": "Fiction",
        "year": 1949,
    },
]


async def main():
    mongo = MongoDatabase(APP_CONFIG["mongodb_uri"], APP_CONFIG["mongodb_name"])
    db = await mongo.connect()

    try:
        await setup_database(db)
        users = UserManager(db)

        try:
            _, user = await users.register(DEMO_NAME, DEMO_EMAIL, DEMO_PASSWORD)
            print(f"👤 Created demo user {user['email']}")
        except ConflictError:
            _, user = await users.authenticate(DEMO_EMAIL, DEMO_PASSWORD)
            print(f"👤 Using existing demo user {user['email']}")

        books = BookManager(db)
        for data in SAMPLE_BOOKS:
            if await db[BOOKS].find_one({"title": data["title"]}):
                print(f"   ⏭️  {data['title']} already present")
                continue
            book = await books.create_book(user, BookCreate(**data))
            print(f"   ✅ {book['title']} ({book['id']})")
    finally:
        mongo.close()


if __name__ == "__main__":
    asyncio.run(main())
