"""
Catalog of already published tracks.

One Mongo collection per namespace, each keyed by the provider-native id
(YouTube video id, Saavn song id, Spotify track id). Entries are written once,
after a successful upload to the distribution channel, and never updated.
"""
import logging
from typing import Optional, Pattern

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from services.models import NAMESPACE_ORDER, CatalogEntry, Namespace

logger = logging.getLogger("catalog")


class MongoCatalog:
    def __init__(self, db: AsyncIOMotorDatabase):
        self._db = db

    def _collection(self, namespace: Namespace):
        return self._db[namespace.value]

    async def ensure_indexes(self):
        for namespace in NAMESPACE_ORDER:
            await self._collection(namespace).create_index(
                [("provider_id", ASCENDING)], unique=True
            )
        await self._collection(Namespace.AUDIO).create_index([("source_url", ASCENDING)])
        logger.info("🗂 Catalog indexes ensured")

    async def find_by_provider_id(self, namespace: Namespace, provider_id: str) -> Optional[CatalogEntry]:
        doc = await self._collection(namespace).find_one({"provider_id": provider_id})
        return CatalogEntry.from_document(namespace, doc) if doc else None

    async def find_by_id(self, namespace: Namespace, entry_id: str) -> Optional[CatalogEntry]:
        if not ObjectId.is_valid(entry_id):
            return None
        doc = await self._collection(namespace).find_one({"_id": ObjectId(entry_id)})
        return CatalogEntry.from_document(namespace, doc) if doc else None

    async def find_by_source_url(self, namespace: Namespace, url: str) -> Optional[CatalogEntry]:
        doc = await self._collection(namespace).find_one({"source_url": url})
        return CatalogEntry.from_document(namespace, doc) if doc else None

    async def search(self, namespace: Namespace, pattern: Pattern) -> list[CatalogEntry]:
        """Entries whose title or artist matches pattern, in storage order."""
        cursor = self._collection(namespace).find(
            {"$or": [{"title": pattern}, {"artist": pattern}]}
        )
        docs = await cursor.to_list(length=None)
        return [CatalogEntry.from_document(namespace, doc) for doc in docs]

    async def create(self, entry: CatalogEntry) -> CatalogEntry:
        try:
            result = await self._collection(entry.namespace).insert_one(entry.to_document())
        except DuplicateKeyError:
            # Two selections of the same id raced through the fetch path.
            logger.warning(f"⚠️ {entry.namespace.value}:{entry.provider_id} already catalogued")
            existing = await self.find_by_provider_id(entry.namespace, entry.provider_id)
            return existing or entry

        logger.info(f"💾 Catalogued {entry.namespace.value}:{entry.provider_id} ({entry.title})")
        return CatalogEntry.from_document(
            entry.namespace, {**entry.to_document(), "_id": result.inserted_id}
        )

    async def counts(self) -> dict:
        return {
            namespace.value: await self._collection(namespace).count_documents({})
            for namespace in NAMESPACE_ORDER
        }
