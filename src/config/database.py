"""
MongoDB client lifecycle for the Bookshelf API

The client is created once in the application lifespan, stored on
app.state, and handed to request handlers through get_database().
"""

from fastapi import Request
import motor.motor_asyncio
from pymongo.errors import PyMongoError

from src.utils.logger import setup_logger

logger = setup_logger()


class MongoDatabase:
    """Owns the motor client and the database handle for one process"""

    def __init__(self, uri: str, db_name: str):
        self.uri = uri
        self.db_name = db_name
        self.client = None
        self.db = None

    async def connect(self):
        """Open the client and verify the server answers"""
        self.client = motor.motor_asyncio.AsyncIOMotorClient(
            self.uri, serverSelectionTimeoutMS=10000, tz_aware=False
        )
        self.db = self.client[self.db_name]

        # Test connection
        await self.client.admin.command("ping")
        logger.info(f"✅ Connected to MongoDB database: {self.db_name}")
        return self.db

    async def ping(self) -> bool:
        if self.client is None:
            return False
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"⚠️ MongoDB ping failed: {e}")
            return False

    def close(self):
        if self.client is not None:
            self.client.close()
            logger.info("🛑 MongoDB connection closed")
        self.client = None
        self.db = None


def get_database(request: Request):
    """FastAPI dependency: database handle of the running app"""
    return request.app.state.mongo.db
