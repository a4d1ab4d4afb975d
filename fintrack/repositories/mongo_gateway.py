"""
MongoGateway - one document per owner per collection.

Document shape: {_id: owner_id, records: [...], updated_at}
A save is a single replace_one, so readers never see a partial snapshot.
"""

import logging
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from fintrack.core.errors import PersistenceUnavailableError
from fintrack.models.records import Collection
from fintrack.repositories.base import CollectionGateway, dump_records, parse_records

logger = logging.getLogger(__name__)


class MongoGateway(CollectionGateway):
    """Collection snapshots stored in MongoDB."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    def _collection(self, collection: Collection):
        return self.db[Collection(collection).value]

    async def load(self, owner_id, collection):
        try:
            doc = await self._collection(collection).find_one({"_id": owner_id})
        except PyMongoError as e:
            logger.error("Failed to load %s for %s: %s", collection, owner_id, e)
            raise PersistenceUnavailableError(f"Failed to load {Collection(collection).value}")
        if not doc:
            return []
        return parse_records(collection, doc.get("records", []))

    async def save(self, owner_id, collection, records):
        doc = {
            "_id": owner_id,
            "records": dump_records(records),
            "updated_at": datetime.now(timezone.utc)
        }
        try:
            await self._collection(collection).replace_one(
                {"_id": owner_id},
                doc,
                upsert=True
            )
        except PyMongoError as e:
            logger.error("Failed to save %s for %s: %s", collection, owner_id, e)
            raise PersistenceUnavailableError(f"Failed to save {Collection(collection).value}")

    async def ping(self):
        if self.db is None:
            return False
        try:
            await self.db.command("ping")
            return True
        except PyMongoError:
            return False
