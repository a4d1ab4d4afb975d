"""
Domain records owned by a single user.

Design principles:
- One collection per record kind, persisted as a whole snapshot
- Lending records and expenses form a two-level parent/child tree
- Derived fields (interest total, balance amount) are recomputed by the
  mutation operations, never trusted from the caller
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from fintrack.models.base import CamelModel, new_id, stored_now


class TransactionStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class TransactionKind(str, Enum):
    LENDING = "lending"
    BORROWING = "borrowing"


class BalanceKind(str, Enum):
    CASH = "cash"
    BANK = "bank"


class EntryKind(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class LendingRecord(CamelModel):
    """
    Money lent to or borrowed from a person.

    Invariants:
    - amount > 0, amount_returned >= 0
    - parent_id, if set, names a root record in the same collection
    """
    id: str = Field(default_factory=new_id)
    person_name: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    date: datetime
    note: Optional[str] = None
    status: TransactionStatus = TransactionStatus.PENDING
    kind: TransactionKind = Field(..., alias="type")
    amount_returned: float = Field(default=0, ge=0)
    parent_id: Optional[str] = None

    def outstanding(self) -> float:
        """How much remains unreturned."""
        return self.amount - self.amount_returned


class Expense(CamelModel):
    id: str = Field(default_factory=new_id)
    title: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    category: str = Field(..., min_length=1)
    date: datetime
    note: Optional[str] = None
    payment_method: Optional[str] = None
    parent_id: Optional[str] = None


class InterestRecord(CamelModel):
    """Interest-bearing loan: total_amount == principal + interest."""
    id: str = Field(default_factory=new_id)
    person_name: str = Field(..., min_length=1)
    principal: float = Field(..., ge=0)
    interest: float = Field(..., ge=0)
    total_amount: float = 0
    date: datetime
    remarks: Optional[str] = None


class EarningRecord(CamelModel):
    id: str = Field(default_factory=new_id)
    source_name: str = Field(..., min_length=1)
    earning_name: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    date: datetime
    remarks: Optional[str] = None


class OtherSubTransaction(CamelModel):
    """Ledger entry owned by exactly one OtherBalance."""
    id: str = Field(default_factory=new_id)
    kind: EntryKind = Field(..., alias="type")
    note: str = ""
    amount: float = Field(..., ge=0)
    date: datetime = Field(default_factory=stored_now)

    def signed_amount(self) -> float:
        return self.amount if self.kind == EntryKind.CREDIT else -self.amount


class OtherBalance(CamelModel):
    """
    Cash or bank balance backed by its own sub-ledger.

    Invariant: amount == sum(credits) - sum(debits)
    """
    id: str = Field(default_factory=new_id)
    kind: BalanceKind = Field(..., alias="type")
    label: str = Field(..., min_length=1)
    amount: float = 0
    updated_at: datetime = Field(default_factory=stored_now)
    transactions: List[OtherSubTransaction] = []

    def ledger_total(self) -> float:
        return sum(t.signed_amount() for t in self.transactions)


class Collection(str, Enum):
    TRANSACTIONS = "transactions"
    EXPENSES = "expenses"
    INTEREST = "interest"
    EARNINGS = "earnings"
    OTHER_BALANCES = "other_balances"

    @property
    def model(self) -> type:
        return RECORD_MODELS[self]


RECORD_MODELS = {
    Collection.TRANSACTIONS: LendingRecord,
    Collection.EXPENSES: Expense,
    Collection.INTEREST: InterestRecord,
    Collection.EARNINGS: EarningRecord,
    Collection.OTHER_BALANCES: OtherBalance,
}
