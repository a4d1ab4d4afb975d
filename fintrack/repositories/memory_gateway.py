import copy
from typing import Dict, List, Tuple

from fintrack.models.records import Collection
from fintrack.repositories.base import CollectionGateway, dump_records, parse_records


class MemoryGateway(CollectionGateway):
    """Process-local gateway for tests and local development."""

    def __init__(self):
        self._snapshots: Dict[Tuple[str, Collection], List[dict]] = {}

    async def load(self, owner_id, collection):
        docs = self._snapshots.get((owner_id, Collection(collection)), [])
        return parse_records(collection, copy.deepcopy(docs))

    async def save(self, owner_id, collection, records):
        self._snapshots[(owner_id, Collection(collection))] = dump_records(records)

    async def ping(self):
        return True
