from fastapi import Depends

from fintrack.core.auth import get_current_owner
from fintrack.core.config import settings
from fintrack.db.mongo import get_db
from fintrack.models.records import Collection
from fintrack.repositories.base import CollectionGateway
from fintrack.repositories.memory_gateway import MemoryGateway
from fintrack.repositories.mongo_gateway import MongoGateway
from fintrack.services.session import LedgerSession

_memory_gateway = MemoryGateway()


def get_gateway() -> CollectionGateway:
    """Persistence gateway selected by PERSISTENCE_BACKEND."""
    if settings.PERSISTENCE_BACKEND == "memory":
        return _memory_gateway
    return MongoGateway(get_db())


def session_for(*collections: Collection):
    """Dependency yielding a request-scoped session with the named collections loaded."""

    async def dependency(
        owner_id: str = Depends(get_current_owner),
        gateway: CollectionGateway = Depends(get_gateway)
    ) -> LedgerSession:
        session = LedgerSession(owner_id, gateway, strict=True)
        await session.load(*collections)
        return session

    return dependency
