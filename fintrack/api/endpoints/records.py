from typing import List, Type

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from fintrack.api.deps import session_for
from fintrack.core.errors import NotFoundError
from fintrack.models.records import Collection
from fintrack.schemas.stats import DeleteResponse
from fintrack.services.session import LedgerSession


def build_record_router(
    collection: Collection,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    label: str,
    sort_field: str = "date",
) -> APIRouter:
    """List/create/update/delete routes for one owner-scoped collection."""
    router = APIRouter()
    response_model = collection.model
    load = session_for(collection)

    @router.get("", response_model=List[response_model])
    async def list_records(session: LedgerSession = Depends(load)):
        records = session.store.records(collection)
        return sorted(records, key=lambda r: getattr(r, sort_field).timestamp(), reverse=True)

    @router.post("", response_model=response_model, status_code=status.HTTP_201_CREATED)
    async def create_record(body: create_schema, session: LedgerSession = Depends(load)):
        return await session.create(collection, body)

    @router.put("/{record_id}", response_model=response_model)
    async def update_record(
        record_id: str,
        body: update_schema,
        session: LedgerSession = Depends(load)
    ):
        record = await session.update(collection, record_id, body)
        if record is None:
            raise NotFoundError(f"{label} not found")
        return record

    @router.delete("/{record_id}", response_model=DeleteResponse)
    async def delete_record(record_id: str, session: LedgerSession = Depends(load)):
        removed = await session.delete(collection, record_id)
        if not removed:
            raise NotFoundError(f"{label} not found")
        return DeleteResponse(message=f"{label} deleted successfully", deleted_ids=removed)

    return router
