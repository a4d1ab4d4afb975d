"""
LedgerSession - one owner's Record Store bound to a persistence gateway.

Mutations are applied to the in-memory store first and then the whole
affected collection is saved. Failure policy:
- load failure: the collection starts empty and is marked degraded; it is
  never written back over the stored snapshot until a reload succeeds
- save failure: the in-memory change is kept and the collection is queued
  for flush()
- strict sessions (request-scoped API use) raise PersistenceUnavailableError
  instead of degrading
"""

import asyncio
import logging
from typing import Any, List, Optional, Set

from pydantic import BaseModel

from fintrack.core.config import settings
from fintrack.core.errors import PersistenceUnavailableError
from fintrack.models.records import Collection, OtherBalance
from fintrack.repositories.base import CollectionGateway
from fintrack.services import mutations
from fintrack.services.record_store import RecordStore

logger = logging.getLogger(__name__)

MAX_RETRY_DELAY = 5.0


class LedgerSession:
    def __init__(
        self,
        owner_id: str,
        gateway: CollectionGateway,
        strict: bool = False,
        retries: Optional[int] = None,
        backoff: Optional[float] = None,
    ):
        self.owner_id = owner_id
        self.gateway = gateway
        self.strict = strict
        self.retries = settings.SAVE_RETRY_ATTEMPTS if retries is None else retries
        self.backoff = settings.SAVE_RETRY_BACKOFF if backoff is None else backoff
        self.store = RecordStore()
        self.degraded: Set[Collection] = set()
        self.pending: Set[Collection] = set()
        self.warnings: List[str] = []

    @property
    def offline(self) -> bool:
        """True while any collection is degraded or has unsaved changes."""
        return bool(self.degraded or self.pending)

    async def load(self, *collections: Collection) -> None:
        """Load collections concurrently; all five when none are named."""
        targets = [Collection(c) for c in collections] or list(Collection)
        results = await asyncio.gather(
            *(self.gateway.load(self.owner_id, c) for c in targets),
            return_exceptions=True
        )
        for collection, result in zip(targets, results):
            if isinstance(result, BaseException):
                self._load_failed(collection, result)
                continue
            self.store.replace(collection, result)
            self.degraded.discard(collection)

        logger.debug(
            "Loaded %s for %s",
            {c.value: len(self.store.records(c)) for c in targets},
            self.owner_id
        )

    def _load_failed(self, collection: Collection, error: BaseException) -> None:
        if not isinstance(error, Exception):
            raise error
        if self.strict:
            if isinstance(error, PersistenceUnavailableError):
                raise error
            raise PersistenceUnavailableError(f"Failed to load {collection.value}") from error
        logger.warning("Load of %s failed for %s: %s", collection.value, self.owner_id, error)
        self.store.replace(collection, [])
        self.degraded.add(collection)
        self._warn(f"{collection.value} could not be loaded; working offline")

    async def commit(self, collection: Collection) -> bool:
        """Save the whole collection; returns False when the write was queued."""
        collection = Collection(collection)
        if collection in self.degraded:
            if self.strict:
                raise PersistenceUnavailableError(f"{collection.value} is unavailable")
            self.pending.add(collection)
            self._warn(f"{collection.value} changes queued until the store is reachable")
            return False

        error = None
        for attempt in range(self.retries + 1):
            try:
                await self.gateway.save(
                    self.owner_id, collection, self.store.snapshot(collection)
                )
                self.pending.discard(collection)
                return True
            except Exception as e:
                error = e
                logger.warning(
                    "Save of %s failed for %s (attempt %d): %s",
                    collection.value, self.owner_id, attempt + 1, e
                )
                if attempt < self.retries:
                    await asyncio.sleep(self.retry_delay(attempt))

        if self.strict:
            if isinstance(error, PersistenceUnavailableError):
                raise error
            raise PersistenceUnavailableError(f"Failed to save {collection.value}") from error
        self.pending.add(collection)
        self._warn(f"{collection.value} could not be saved; changes kept locally")
        return False

    def retry_delay(self, attempt: int) -> float:
        return min(2 ** attempt * self.backoff, MAX_RETRY_DELAY)

    async def flush(self) -> Set[Collection]:
        """Retry queued writes; returns the collections still pending."""
        for collection in list(self.pending):
            if collection in self.degraded and not await self._recover(collection):
                continue
            await self.commit(collection)
        return set(self.pending)

    async def _recover(self, collection: Collection) -> bool:
        """Reload a degraded collection and keep local records it lacks."""
        try:
            stored = await self.gateway.load(self.owner_id, collection)
        except Exception as e:
            logger.warning("Reload of %s still failing: %s", collection.value, e)
            return False
        stored_ids = {r.id for r in stored}
        local = [r for r in self.store.records(collection) if r.id not in stored_ids]
        self.store.replace(collection, list(stored) + local)
        self.degraded.discard(collection)
        return True

    def _warn(self, message: str) -> None:
        self.warnings.append(message)

    # Mutation operations

    async def create(self, collection: Collection, data: Any) -> BaseModel:
        record = mutations.service_for(collection).create(self.store, data)
        logger.info("Created %s %s for %s", Collection(collection).value, record.id, self.owner_id)
        await self.commit(collection)
        return record

    async def update(self, collection: Collection, record_id: str, changes: Any) -> Optional[BaseModel]:
        record = mutations.service_for(collection).update(self.store, record_id, changes)
        if record is None:
            return None
        await self.commit(collection)
        return record

    async def delete(self, collection: Collection, record_id: str) -> List[str]:
        removed = mutations.service_for(collection).delete(self.store, record_id)
        if removed:
            logger.info("Deleted %s %s for %s", Collection(collection).value, removed, self.owner_id)
            await self.commit(collection)
        return removed

    async def add_sub_transaction(self, balance_id: str, data: Any) -> Optional[OtherBalance]:
        balance = mutations.other_balances.add_sub_transaction(self.store, balance_id, data)
        if balance is not None:
            await self.commit(Collection.OTHER_BALANCES)
        return balance

    async def update_sub_transaction(
        self, balance_id: str, transaction_id: str, changes: Any
    ) -> Optional[OtherBalance]:
        balance = mutations.other_balances.update_sub_transaction(
            self.store, balance_id, transaction_id, changes
        )
        if balance is not None:
            await self.commit(Collection.OTHER_BALANCES)
        return balance

    async def delete_sub_transaction(
        self, balance_id: str, transaction_id: str
    ) -> Optional[OtherBalance]:
        balance = mutations.other_balances.delete_sub_transaction(
            self.store, balance_id, transaction_id
        )
        if balance is not None:
            await self.commit(Collection.OTHER_BALANCES)
        return balance
