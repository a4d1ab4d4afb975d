from fastapi import Depends, status

from fintrack.api.deps import session_for
from fintrack.api.endpoints.records import build_record_router
from fintrack.core.errors import NotFoundError
from fintrack.models.records import Collection, OtherBalance
from fintrack.schemas.records import (
    OtherBalanceCreate,
    OtherBalanceUpdate,
    SubTransactionCreate,
    SubTransactionUpdate,
)
from fintrack.services.session import LedgerSession

router = build_record_router(
    Collection.OTHER_BALANCES,
    OtherBalanceCreate,
    OtherBalanceUpdate,
    label="Balance",
    sort_field="updated_at",
)

load_balances = session_for(Collection.OTHER_BALANCES)


@router.post(
    "/{balance_id}/transactions",
    response_model=OtherBalance,
    status_code=status.HTTP_201_CREATED
)
async def add_sub_transaction(
    balance_id: str,
    body: SubTransactionCreate,
    session: LedgerSession = Depends(load_balances)
):
    """Record a credit or debit against a balance"""
    balance = await session.add_sub_transaction(balance_id, body)
    if balance is None:
        raise NotFoundError("Balance not found")
    return balance


@router.put("/{balance_id}/transactions/{transaction_id}", response_model=OtherBalance)
async def update_sub_transaction(
    balance_id: str,
    transaction_id: str,
    body: SubTransactionUpdate,
    session: LedgerSession = Depends(load_balances)
):
    balance = await session.update_sub_transaction(balance_id, transaction_id, body)
    if balance is None:
        raise NotFoundError("Balance transaction not found")
    return balance


@router.delete("/{balance_id}/transactions/{transaction_id}", response_model=OtherBalance)
async def delete_sub_transaction(
    balance_id: str,
    transaction_id: str,
    session: LedgerSession = Depends(load_balances)
):
    balance = await session.delete_sub_transaction(balance_id, transaction_id)
    if balance is None:
        raise NotFoundError("Balance transaction not found")
    return balance
