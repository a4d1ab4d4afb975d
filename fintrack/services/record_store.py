from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from fintrack.models.records import Collection


class RecordStore:
    """
    In-memory collections of one owner's records for one session or request.

    Mutation operations change the lists in place; the aggregation engine
    only reads them.
    """

    def __init__(self, **collections: Iterable[BaseModel]):
        self._records: Dict[Collection, List[BaseModel]] = {c: [] for c in Collection}
        for name, records in collections.items():
            self.replace(Collection(name), records)

    def records(self, collection: Collection) -> List[BaseModel]:
        return self._records[Collection(collection)]

    def replace(self, collection: Collection, records: Iterable[BaseModel]) -> None:
        """Swap in a freshly loaded snapshot."""
        self._records[Collection(collection)] = list(records)

    def index_of(self, collection: Collection, record_id: str) -> Optional[int]:
        for i, record in enumerate(self.records(collection)):
            if record.id == record_id:
                return i
        return None

    def find(self, collection: Collection, record_id: str) -> Optional[BaseModel]:
        index = self.index_of(collection, record_id)
        if index is None:
            return None
        return self.records(collection)[index]

    def children_of(self, collection: Collection, parent_id: str) -> List[BaseModel]:
        return [
            r for r in self.records(collection)
            if getattr(r, "parent_id", None) == parent_id
        ]

    def snapshot(self, collection: Collection) -> List[BaseModel]:
        """Deep copy suitable for handing to a persistence gateway."""
        return [r.model_copy(deep=True) for r in self.records(collection)]

    # Convenience accessors used throughout the aggregation engine

    @property
    def transactions(self):
        return self.records(Collection.TRANSACTIONS)

    @property
    def expenses(self):
        return self.records(Collection.EXPENSES)

    @property
    def interest(self):
        return self.records(Collection.INTEREST)

    @property
    def earnings(self):
        return self.records(Collection.EARNINGS)

    @property
    def other_balances(self):
        return self.records(Collection.OTHER_BALANCES)
