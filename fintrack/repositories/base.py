from abc import ABC, abstractmethod
from typing import List

from pydantic import BaseModel

from fintrack.models.records import Collection


class CollectionGateway(ABC):
    """
    Load/save boundary for whole collections.

    - load returns the owner's full snapshot, or [] when nothing is stored yet
    - save replaces the stored snapshot atomically
    """

    @abstractmethod
    async def load(self, owner_id: str, collection: Collection) -> List[BaseModel]:
        ...

    @abstractmethod
    async def save(self, owner_id: str, collection: Collection, records: List[BaseModel]) -> None:
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """True when the backend is reachable."""
        ...


def dump_records(records: List[BaseModel]) -> List[dict]:
    return [r.model_dump() for r in records]


def parse_records(collection: Collection, docs: List[dict]) -> List[BaseModel]:
    model = Collection(collection).model
    return [model.model_validate(doc) for doc in docs]
