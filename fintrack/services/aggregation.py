"""
Aggregation engine - derived views over a RecordStore.

All functions are pure and read-only. Empty collections give zero-valued
results. Dates are bucketed by the local calendar day; naive datetimes are
taken as local time.
"""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional

from fintrack.models.records import (
    BalanceKind,
    TransactionKind,
)
from fintrack.schemas.stats import (
    BalanceTotals,
    CategoryTotal,
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
from fintrack.services.record_store import RecordStore

CHART_DAYS = 30


class PersonRole(str, Enum):
    BORROWER = "borrower"
    LENDER = "lender"


# A borrower owes us: they appear on lending records, and vice versa
ROLE_KINDS = {
    PersonRole.BORROWER: TransactionKind.LENDING,
    PersonRole.LENDER: TransactionKind.BORROWING,
}


def local_day(moment: datetime) -> date:
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def _sort_key(moment: datetime) -> float:
    return moment.timestamp()


def _in_month(moment: datetime, today: date) -> bool:
    day = local_day(moment)
    return day.year == today.year and day.month == today.month


def _matches(name: str, search: Optional[str]) -> bool:
    return not search or search.lower() in name.lower()


def dashboard_stats(store: RecordStore) -> DashboardStats:
    total_lent = 0.0
    total_borrowed = 0.0
    active_people = set()

    for t in store.transactions:
        if t.kind == TransactionKind.LENDING:
            total_lent += t.outstanding()
        else:
            total_borrowed += t.outstanding()
        if t.amount > t.amount_returned:
            active_people.add(t.person_name)

    return DashboardStats(
        total_lent=total_lent,
        total_borrowed=total_borrowed,
        net_balance=total_lent - total_borrowed,
        active_people_count=len(active_people),
    )


def people_grouped_by(
    store: RecordStore, role: PersonRole, search: Optional[str] = None
) -> List[PersonSummary]:
    """
    Group lending records by person.

    role "borrower" groups lending records (people who owe us),
    role "lender" groups borrowing records (people we owe).
    Sorted by remaining balance, highest first; ties keep insertion order.
    """
    role = PersonRole(role)
    kind = ROLE_KINDS[role]

    people: Dict[str, PersonSummary] = {}
    for t in store.transactions:
        if t.kind != kind:
            continue
        person = people.get(t.person_name)
        if person is None:
            person = people[t.person_name] = PersonSummary(name=t.person_name, type=role.value)
        person.total_amount += t.amount
        person.amount_returned += t.amount_returned
        person.remaining_balance = person.total_amount - person.amount_returned
        person.transactions.append(t)

    groups = [p for p in people.values() if _matches(p.name, search)]
    return sorted(groups, key=lambda p: p.remaining_balance, reverse=True)


def chart_series(store: RecordStore, today: Optional[date] = None) -> List[ChartPoint]:
    """Daily lending/borrowing sums for the 30 days ending today."""
    today = today or date.today()
    first = today - timedelta(days=CHART_DAYS - 1)

    points = []
    buckets: Dict[date, ChartPoint] = {}
    for offset in range(CHART_DAYS):
        day = first + timedelta(days=offset)
        point = ChartPoint(date=day, label=f"{day:%b} {day.day}")
        buckets[day] = point
        points.append(point)

    for t in store.transactions:
        point = buckets.get(local_day(t.date))
        if point is None:
            continue
        if t.kind == TransactionKind.LENDING:
            point.lending += t.amount
        else:
            point.borrowing += t.amount

    return points


def recent_records(store: RecordStore, limit: int = 5):
    records = sorted(store.transactions, key=lambda t: _sort_key(t.date), reverse=True)
    return records[:max(limit, 0)]


def expense_stats(store: RecordStore, today: Optional[date] = None) -> ExpenseStats:
    today = today or date.today()
    categories: Dict[str, float] = {}
    total = 0.0
    monthly = 0.0

    for e in store.expenses:
        total += e.amount
        categories[e.category] = categories.get(e.category, 0.0) + e.amount
        if _in_month(e.date, today):
            monthly += e.amount

    breakdown = [CategoryTotal(category=c, amount=a) for c, a in categories.items()]
    breakdown.sort(key=lambda c: c.amount, reverse=True)

    return ExpenseStats(
        total_expenses=total,
        category_breakdown=breakdown,
        monthly_total=monthly,
    )


def interest_stats(store: RecordStore) -> InterestStats:
    return InterestStats(
        total_principal=sum(t.principal for t in store.interest),
        total_interest_earned=sum(t.interest for t in store.interest),
        total_transactions=len(store.interest),
    )


def earnings_stats(store: RecordStore, today: Optional[date] = None) -> EarningsStats:
    today = today or date.today()
    return EarningsStats(
        total_earned=sum(e.amount for e in store.earnings),
        total_sources=len({e.source_name for e in store.earnings}),
        monthly_total=sum(e.amount for e in store.earnings if _in_month(e.date, today)),
    )


def record_tree(records: Iterable, group_model):
    """Root records with their children attached, in collection order."""
    records = list(records)
    children: Dict[str, list] = {}
    for r in records:
        if r.parent_id:
            children.setdefault(r.parent_id, []).append(r)

    groups = []
    for r in records:
        if r.parent_id:
            continue
        kids = children.get(r.id, [])
        groups.append(group_model(
            **r.model_dump(),
            children=kids,
            total_with_children=r.amount + sum(c.amount for c in kids),
        ))
    return groups


def transaction_tree(store: RecordStore) -> List[LendingGroup]:
    return record_tree(store.transactions, LendingGroup)


def expense_tree(store: RecordStore) -> List[ExpenseGroup]:
    return record_tree(store.expenses, ExpenseGroup)


def interest_by_person(
    store: RecordStore, search: Optional[str] = None
) -> List[InterestPersonSummary]:
    people: Dict[str, InterestPersonSummary] = {}
    for t in store.interest:
        person = people.get(t.person_name)
        if person is None:
            person = people[t.person_name] = InterestPersonSummary(name=t.person_name)
        person.total_principal += t.principal
        person.total_interest += t.interest
        person.total_amount += t.total_amount
        person.transaction_count += 1
        person.transactions.append(t)

    groups = [p for p in people.values() if _matches(p.name, search)]
    return sorted(groups, key=lambda p: p.total_amount, reverse=True)


def earnings_by_source(
    store: RecordStore, search: Optional[str] = None
) -> List[EarningSourceSummary]:
    sources: Dict[str, list] = {}
    for e in store.earnings:
        sources.setdefault(e.source_name, []).append(e)

    summaries = [
        EarningSourceSummary(
            source_name=name,
            total_amount=sum(e.amount for e in earnings),
            earnings=sorted(earnings, key=lambda e: _sort_key(e.date), reverse=True),
        )
        for name, earnings in sources.items()
        if _matches(name, search)
    ]
    return sorted(summaries, key=lambda s: s.total_amount, reverse=True)


def balance_totals(store: RecordStore) -> BalanceTotals:
    cash = [b for b in store.other_balances if b.kind == BalanceKind.CASH]
    bank = [b for b in store.other_balances if b.kind == BalanceKind.BANK]
    total_cash = sum(b.amount for b in cash)
    total_bank = sum(b.amount for b in bank)
    return BalanceTotals(
        total_cash=total_cash,
        total_bank=total_bank,
        total_balance=total_cash + total_bank,
        cash_accounts=len(cash),
        bank_accounts=len(bank),
    )
