"""
Mutation operations - add/update/delete per record kind.

Every operation takes the RecordStore explicitly and changes it in place.
Input is validated here, before the store is touched; persistence is the
caller's concern (see LedgerSession).
"""

from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from fintrack.core.errors import RecordValidationError
from fintrack.models.base import stored_now
from fintrack.models.records import (
    Collection,
    EntryKind,
    OtherBalance,
    OtherSubTransaction,
)
from fintrack.schemas.records import (
    EarningCreate,
    EarningUpdate,
    ExpenseCreate,
    ExpenseUpdate,
    InterestCreate,
    InterestUpdate,
    LendingCreate,
    LendingUpdate,
    OtherBalanceCreate,
    OtherBalanceUpdate,
    SubTransactionCreate,
    SubTransactionUpdate,
)
from fintrack.services.record_store import RecordStore

OPENING_BALANCE_NOTE = "Opening Balance"


def describe_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(p) for p in err["loc"])
        parts.append(f"{location}: {err['msg']}" if location else err["msg"])
    return "; ".join(parts)


def _coerce(schema: Type[BaseModel], data: Any) -> BaseModel:
    if isinstance(data, schema):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise RecordValidationError(describe_validation_error(e))


def _build(model: Type[BaseModel], fields: Dict[str, Any]) -> BaseModel:
    try:
        return model.model_validate(fields)
    except ValidationError as e:
        raise RecordValidationError(describe_validation_error(e))


class RecordService:
    """create/update/delete for one collection."""

    def __init__(
        self,
        collection: Collection,
        create_schema: Type[BaseModel],
        update_schema: Type[BaseModel],
    ):
        self.collection = collection
        self.model = collection.model
        self.create_schema = create_schema
        self.update_schema = update_schema

    def create(self, store: RecordStore, data: Any) -> BaseModel:
        command = _coerce(self.create_schema, data)
        fields = self._prepare(store, command.model_dump())
        record = _build(self.model, fields)
        store.records(self.collection).append(record)
        return record

    def update(self, store: RecordStore, record_id: str, changes: Any) -> Optional[BaseModel]:
        """Merge the fields the caller set; None when the id is unknown."""
        updates = _coerce(self.update_schema, changes).model_dump(exclude_unset=True)
        index = store.index_of(self.collection, record_id)
        if index is None:
            return None

        records = store.records(self.collection)
        existing = records[index]
        fields = self._prepare(store, {**existing.model_dump(), **updates}, existing)
        record = _build(self.model, fields)
        records[index] = record
        return record

    def delete(self, store: RecordStore, record_id: str) -> List[str]:
        """Remove the record; returns removed ids, empty when not found."""
        index = store.index_of(self.collection, record_id)
        if index is None:
            return []
        del store.records(self.collection)[index]
        return [record_id]

    def _prepare(
        self,
        store: RecordStore,
        fields: Dict[str, Any],
        existing: Optional[BaseModel] = None,
    ) -> Dict[str, Any]:
        """Hook for derived fields and cross-record checks."""
        return fields


class ParentedRecordService(RecordService):
    """
    Records forming a two-level tree through parent_id.

    Deleting a root also deletes its children.
    """

    def _prepare(self, store, fields, existing=None):
        parent_id = fields.get("parent_id")
        if not parent_id:
            fields["parent_id"] = None
            return fields

        if existing is not None and parent_id == existing.parent_id:
            return fields
        if existing is not None and parent_id == existing.id:
            raise RecordValidationError("A record cannot be its own parent")

        parent = store.find(self.collection, parent_id)
        if parent is None:
            raise RecordValidationError(f"Parent record {parent_id} not found")
        if parent.parent_id:
            raise RecordValidationError("Sub-records cannot have sub-records of their own")
        if existing is not None and store.children_of(self.collection, existing.id):
            raise RecordValidationError("A record with sub-records cannot become a sub-record")
        return fields

    def delete(self, store, record_id):
        if store.index_of(self.collection, record_id) is None:
            return []
        removed = [record_id] + [c.id for c in store.children_of(self.collection, record_id)]
        store.replace(
            self.collection,
            [r for r in store.records(self.collection) if r.id not in removed],
        )
        return removed


class InterestService(RecordService):
    def _prepare(self, store, fields, existing=None):
        principal, interest = fields.get("principal"), fields.get("interest")
        if principal is None or interest is None:
            raise RecordValidationError("principal and interest are required")
        # total_amount is always derived, whatever the caller sent
        fields["total_amount"] = principal + interest
        return fields


class OtherBalanceService(RecordService):
    """Balances whose amount follows their own sub-transaction ledger."""

    def create(self, store, data):
        command = _coerce(self.create_schema, data)
        now = stored_now()
        opening = OtherSubTransaction(
            kind=EntryKind.CREDIT,
            note=OPENING_BALANCE_NOTE,
            amount=command.amount,
            date=now,
        )
        record = _build(self.model, {
            "kind": command.kind,
            "label": command.label,
            "amount": opening.signed_amount(),
            "updated_at": now,
            "transactions": [opening],
        })
        store.records(self.collection).append(record)
        return record

    def _prepare(self, store, fields, existing=None):
        fields["updated_at"] = stored_now()
        fields["amount"] = _build(self.model, fields).ledger_total()
        return fields

    def add_sub_transaction(
        self, store: RecordStore, balance_id: str, data: Any
    ) -> Optional[OtherBalance]:
        command = _coerce(SubTransactionCreate, data)
        balance = store.find(self.collection, balance_id)
        if balance is None:
            return None
        fields = command.model_dump()
        if fields["date"] is None:
            fields["date"] = stored_now()
        entry = _build(OtherSubTransaction, fields)
        return self._rebalance(store, balance, balance.transactions + [entry])

    def update_sub_transaction(
        self, store: RecordStore, balance_id: str, transaction_id: str, changes: Any
    ) -> Optional[OtherBalance]:
        updates = _coerce(SubTransactionUpdate, changes).model_dump(exclude_unset=True)
        balance = store.find(self.collection, balance_id)
        if balance is None:
            return None

        found = False
        transactions = []
        for entry in balance.transactions:
            if entry.id == transaction_id:
                found = True
                entry = _build(OtherSubTransaction, {**entry.model_dump(), **updates})
            transactions.append(entry)
        if not found:
            return None
        return self._rebalance(store, balance, transactions)

    def delete_sub_transaction(
        self, store: RecordStore, balance_id: str, transaction_id: str
    ) -> Optional[OtherBalance]:
        balance = store.find(self.collection, balance_id)
        if balance is None:
            return None
        transactions = [t for t in balance.transactions if t.id != transaction_id]
        if len(transactions) == len(balance.transactions):
            return None
        return self._rebalance(store, balance, transactions)

    def _rebalance(
        self, store: RecordStore, balance: OtherBalance, transactions: List[OtherSubTransaction]
    ) -> OtherBalance:
        updated = balance.model_copy(update={
            "transactions": transactions,
            "amount": sum(t.signed_amount() for t in transactions),
            "updated_at": stored_now(),
        })
        index = store.index_of(self.collection, balance.id)
        store.records(self.collection)[index] = updated
        return updated


transactions = ParentedRecordService(Collection.TRANSACTIONS, LendingCreate, LendingUpdate)
expenses = ParentedRecordService(Collection.EXPENSES, ExpenseCreate, ExpenseUpdate)
interest = InterestService(Collection.INTEREST, InterestCreate, InterestUpdate)
earnings = RecordService(Collection.EARNINGS, EarningCreate, EarningUpdate)
other_balances = OtherBalanceService(
    Collection.OTHER_BALANCES, OtherBalanceCreate, OtherBalanceUpdate
)

SERVICES: Dict[Collection, RecordService] = {
    Collection.TRANSACTIONS: transactions,
    Collection.EXPENSES: expenses,
    Collection.INTEREST: interest,
    Collection.EARNINGS: earnings,
    Collection.OTHER_BALANCES: other_balances,
}


def service_for(collection: Collection) -> RecordService:
    return SERVICES[Collection(collection)]
