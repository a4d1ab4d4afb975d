from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from fintrack.api.deps import session_for
from fintrack.models.records import Collection, LendingRecord
from fintrack.schemas.stats import (
    BalanceTotals,
    ChartPoint,
    DashboardStats,
    EarningSourceSummary,
    EarningsStats,
    ExpenseGroup,
    ExpenseStats,
    InterestPersonSummary,
    InterestStats,
    LendingGroup,
    PersonSummary,
)
from fintrack.services import aggregation
from fintrack.services.aggregation import PersonRole
from fintrack.services.session import LedgerSession

router = APIRouter()

load_transactions = session_for(Collection.TRANSACTIONS)
load_expenses = session_for(Collection.EXPENSES)
load_interest = session_for(Collection.INTEREST)
load_earnings = session_for(Collection.EARNINGS)
load_balances = session_for(Collection.OTHER_BALANCES)


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(session: LedgerSession = Depends(load_transactions)):
    """Outstanding lent/borrowed totals and active people"""
    return aggregation.dashboard_stats(session.store)


@router.get("/people", response_model=List[PersonSummary])
async def get_people(
    role: PersonRole = Query(PersonRole.BORROWER),
    search: Optional[str] = None,
    session: LedgerSession = Depends(load_transactions)
):
    """People grouped with running balances"""
    return aggregation.people_grouped_by(session.store, role, search)


@router.get("/chart", response_model=List[ChartPoint])
async def get_chart(session: LedgerSession = Depends(load_transactions)):
    """Last 30 days of lending and borrowing"""
    return aggregation.chart_series(session.store)


@router.get("/recent", response_model=List[LendingRecord])
async def get_recent(
    limit: int = Query(5, ge=0, le=100),
    session: LedgerSession = Depends(load_transactions)
):
    return aggregation.recent_records(session.store, limit)


@router.get("/transactions/tree", response_model=List[LendingGroup])
async def get_transaction_tree(session: LedgerSession = Depends(load_transactions)):
    return aggregation.transaction_tree(session.store)


@router.get("/expenses", response_model=ExpenseStats)
async def get_expense_stats(session: LedgerSession = Depends(load_expenses)):
    return aggregation.expense_stats(session.store)


@router.get("/expenses/tree", response_model=List[ExpenseGroup])
async def get_expense_tree(session: LedgerSession = Depends(load_expenses)):
    return aggregation.expense_tree(session.store)


@router.get("/interest", response_model=InterestStats)
async def get_interest_stats(session: LedgerSession = Depends(load_interest)):
    return aggregation.interest_stats(session.store)


@router.get("/interest/people", response_model=List[InterestPersonSummary])
async def get_interest_people(
    search: Optional[str] = None,
    session: LedgerSession = Depends(load_interest)
):
    return aggregation.interest_by_person(session.store, search)


@router.get("/earnings", response_model=EarningsStats)
async def get_earnings_stats(session: LedgerSession = Depends(load_earnings)):
    return aggregation.earnings_stats(session.store)


@router.get("/earnings/sources", response_model=List[EarningSourceSummary])
async def get_earning_sources(
    search: Optional[str] = None,
    session: LedgerSession = Depends(load_earnings)
):
    return aggregation.earnings_by_source(session.store, search)


@router.get("/balances", response_model=BalanceTotals)
async def get_balance_totals(session: LedgerSession = Depends(load_balances)):
    """Cash and bank totals"""
    return aggregation.balance_totals(session.store)
