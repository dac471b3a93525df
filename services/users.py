import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument

logger = logging.getLogger("users")

USERS_COLLECTION = "users"


class MongoUserStore:
    def __init__(self, db: AsyncIOMotorDatabase):
        self._users = db[USERS_COLLECTION]

    async def ensure_indexes(self):
        await self._users.create_index([("user_id", ASCENDING)], unique=True)

    async def touch(self, user_id: int, first_name: str = "", last_name: str = "", username: str = "") -> dict:
        """Upserts the user and counts one interaction."""
        now = datetime.now(timezone.utc)
        return await self._users.find_one_and_update(
            {"user_id": user_id},
            {
                "$set": {
                    "first_name": first_name or "",
                    "last_name": last_name or "",
                    "username": username or "",
                    "last_active": now,
                },
                "$setOnInsert": {"created_at": now, "is_blocked": False},
                "$inc": {"total_interactions": 1},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    async def get(self, user_id: int) -> Optional[dict]:
        return await self._users.find_one({"user_id": user_id})

    async def reachable_users(self) -> list[dict]:
        return await self._users.find({"is_blocked": {"$ne": True}}).to_list(length=None)

    async def all_users(self) -> list[dict]:
        return await self._users.find({}).to_list(length=None)

    async def mark_blocked(self, user_id: int):
        await self._users.update_one({"user_id": user_id}, {"$set": {"is_blocked": True}})
        logger.info(f"🚫 User {user_id} marked as blocked")

    async def stats(self) -> dict:
        day_ago = datetime.now(timezone.utc) - timedelta(days=1)
        total = await self._users.count_documents({})
        blocked = await self._users.count_documents({"is_blocked": True})
        return {
            "total": total,
            "active": total - blocked,
            "blocked": blocked,
            "recent": await self._users.count_documents({"last_active": {"$gte": day_ago}}),
        }
