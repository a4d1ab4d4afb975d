from fastapi import APIRouter
from fintrack.api.endpoints import other_balances, stats
from fintrack.api.endpoints.records import build_record_router
from fintrack.models.records import Collection
from fintrack.schemas.records import (
    EarningCreate,
    EarningUpdate,
    ExpenseCreate,
    ExpenseUpdate,
    InterestCreate,
    InterestUpdate,
    LendingCreate,
    LendingUpdate,
)
from fintrack.schemas.stats import ErrorResponse

api_router = APIRouter(responses={401: {"model": ErrorResponse}})

transactions = build_record_router(Collection.TRANSACTIONS, LendingCreate, LendingUpdate, "Transaction")
expenses = build_record_router(Collection.EXPENSES, ExpenseCreate, ExpenseUpdate, "Expense")
interest = build_record_router(Collection.INTEREST, InterestCreate, InterestUpdate, "Interest transaction")
earnings = build_record_router(Collection.EARNINGS, EarningCreate, EarningUpdate, "Earning")

api_router.include_router(transactions, prefix="/transactions", tags=["transactions"])
api_router.include_router(expenses, prefix="/expenses", tags=["expenses"])
api_router.include_router(interest, prefix="/interest", tags=["interest"])
api_router.include_router(earnings, prefix="/earnings", tags=["earnings"])
api_router.include_router(other_balances.router, prefix="/other-balances", tags=["other-balances"])
api_router.include_router(stats.router, prefix="/stats", tags=["stats"])
