"""Derived views returned by the aggregation engine."""
from datetime import date, datetime
from typing import List

from fintrack.models.base import CamelModel
from fintrack.models.records import (
    EarningRecord,
    Expense,
    InterestRecord,
    LendingRecord,
)


class DashboardStats(CamelModel):
    total_lent: float = 0
    total_borrowed: float = 0
    net_balance: float = 0
    active_people_count: int = 0


class PersonSummary(CamelModel):
    name: str
    total_amount: float = 0
    amount_returned: float = 0
    remaining_balance: float = 0
    transactions: List[LendingRecord] = []
    type: str  # borrower | lender


class ChartPoint(CamelModel):
    date: date
    label: str
    lending: float = 0
    borrowing: float = 0


class CategoryTotal(CamelModel):
    category: str
    amount: float


class ExpenseStats(CamelModel):
    total_expenses: float = 0
    category_breakdown: List[CategoryTotal] = []
    monthly_total: float = 0


class InterestStats(CamelModel):
    total_principal: float = 0
    total_interest_earned: float = 0
    total_transactions: int = 0


class EarningsStats(CamelModel):
    total_earned: float = 0
    total_sources: int = 0
    monthly_total: float = 0


class InterestPersonSummary(CamelModel):
    name: str
    total_principal: float = 0
    total_interest: float = 0
    total_amount: float = 0
    transaction_count: int = 0
    transactions: List[InterestRecord] = []


class EarningSourceSummary(CamelModel):
    source_name: str
    total_amount: float = 0
    earnings: List[EarningRecord] = []


class BalanceTotals(CamelModel):
    total_cash: float = 0
    total_bank: float = 0
    total_balance: float = 0
    cash_accounts: int = 0
    bank_accounts: int = 0


class LendingGroup(LendingRecord):
    """Root lending record with its sub-transactions."""
    children: List[LendingRecord] = []
    total_with_children: float = 0


class ExpenseGroup(Expense):
    """Root expense with its sub-expenses."""
    children: List[Expense] = []
    total_with_children: float = 0


class HealthResponse(CamelModel):
    status: str
    timestamp: datetime
    database: str


class DeleteResponse(CamelModel):
    message: str
    deleted_ids: List[str] = []


class ErrorResponse(CamelModel):
    error: str
