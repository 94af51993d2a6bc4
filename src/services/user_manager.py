"""
User Management Service
Accounts, credentials and bearer sessions in MongoDB
"""

import asyncio
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from fastapi import Depends
from pymongo.errors import DuplicateKeyError

from src.config.database import get_database
from src.core.config import APP_CONFIG
from src.database.collection_setup import SESSIONS, USERS
from src.exceptions import ConflictError, ValidationError
from src.utils.logger import setup_logger
from src.utils.password_utils import (
    generate_session_token,
    hash_password,
    hash_session_token,
    verify_password,
)
from src.utils.response_utils import parse_object_id, public_user

logger = setup_logger()


class UserManager:
    """Manages users and their sessions"""

    def __init__(
        self,
        db,
        session_ttl_hours: int = 24,
        hash_iterations: int = 260000,
    ):
        self.db = db
        self.users_collection = db[USERS]
        self.sessions_collection = db[SESSIONS]
        self.session_ttl = timedelta(hours=session_ttl_hours)
        self.hash_iterations = hash_iterations

    async def register(
        self, name: str, email: str, password: str
    ) -> Tuple[str, Dict[str, Any]]:
        """
        Create an account and open a session for it

        Args:
            name: Display name
            email: Email (stored lower-cased, unique)
            password: Plain password, only its salted hash is stored

        Returns:
            (bearer token, public user)
        """
        email = email.strip().lower()

        if await self.users_collection.find_one({"email": email}):
            raise ConflictError("User already exists")

        # PBKDF2 is CPU-bound; keep it off the event loop
        password_hash = await asyncio.to_thread(
            hash_password, password, self.hash_iterations
        )
        user_doc = {
            "name": name,
            "email": email,
            "password_hash": password_hash,
            "created_at": datetime.utcnow(),
        }

        try:
            result = await self.users_collection.insert_one(user_doc)
        except DuplicateKeyError:
            # Concurrent registration with the same email
            raise ConflictError("User already exists")

        user_doc["_id"] = result.inserted_id
        logger.info(f"👤 Registered user {user_doc['_id']}")

        token = await self.issue_session(user_doc["_id"])
        return token, public_user(user_doc["_id"], user_doc)

    async def authenticate(
        self, email: str, password: str
    ) -> Tuple[str, Dict[str, Any]]:
        """
        Check credentials and open a session

        Unknown email and wrong password fail with the same message.
        """
        user = await self.users_collection.find_one({"email": email.strip().lower()})
        valid = bool(user) and await asyncio.to_thread(
            verify_password, password, user.get("password_hash", "")
        )
        if not valid:
            logger.warning("⚠️ Failed login attempt")
            raise ValidationError("Invalid credentials")

        token = await self.issue_session(user["_id"])
        logger.info(f"🔑 User {user['_id']} logged in")
        return token, public_user(user["_id"], user)

    async def get_public_user(self, user_id) -> Optional[Dict[str, Any]]:
        object_id = parse_object_id(user_id)
        if object_id is None:
            return None
        user = await self.users_collection.find_one(
            {"_id": object_id}, {"name": 1, "email": 1}
        )
        return public_user(object_id, user) if user else None

    # ============ SESSIONS ============

    async def issue_session(self, user_id) -> str:
        """Store a new session and return its raw token"""
        token = generate_session_token()
        now = datetime.utcnow()
        await self.sessions_collection.insert_one(
            {
                "token_hash": hash_session_token(token),
                "user_id": user_id,
                "created_at": now,
                "expires_at": now + self.session_ttl,
            }
        )
        return token

    async def resolve_session(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Public user behind a bearer token

        Returns None for unknown or expired tokens and for sessions whose
        user no longer exists.
        """
        session = await self.sessions_collection.find_one(
            {"token_hash": hash_session_token(token)}
        )
        if not session:
            return None

        # TTL monitor runs about once a minute; expired-but-present is still invalid
        if session["expires_at"] <= datetime.utcnow():
            return None

        return await self.get_public_user(session["user_id"])

    async def revoke_session(self, token: str) -> bool:
        result = await self.sessions_collection.delete_one(
            {"token_hash": hash_session_token(token)}
        )
        return result.deleted_count > 0


def get_user_manager(db=Depends(get_database)) -> UserManager:
    """FastAPI dependency"""
    return UserManager(
        db,
        session_ttl_hours=APP_CONFIG["session_ttl_hours"],
        hash_iterations=APP_CONFIG["password_hash_iterations"],
    )
