"""Create and update commands, one pair per record kind."""
from datetime import datetime
from typing import Optional

from pydantic import Field

from fintrack.models.base import CamelModel
from fintrack.models.records import (
    BalanceKind,
    EntryKind,
    TransactionKind,
    TransactionStatus,
)


class LendingCreate(CamelModel):
    person_name: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    date: datetime
    note: Optional[str] = None
    status: TransactionStatus = TransactionStatus.PENDING
    kind: TransactionKind = Field(..., alias="type")
    amount_returned: float = Field(default=0, ge=0)
    parent_id: Optional[str] = None


class LendingUpdate(CamelModel):
    person_name: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = Field(None, gt=0)
    date: Optional[datetime] = None
    note: Optional[str] = None
    status: Optional[TransactionStatus] = None
    kind: Optional[TransactionKind] = Field(None, alias="type")
    amount_returned: Optional[float] = Field(None, ge=0)
    parent_id: Optional[str] = None


class ExpenseCreate(CamelModel):
    title: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    category: str = Field(..., min_length=1)
    date: datetime
    note: Optional[str] = None
    payment_method: Optional[str] = None
    parent_id: Optional[str] = None


class ExpenseUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = Field(None, gt=0)
    category: Optional[str] = Field(None, min_length=1)
    date: Optional[datetime] = None
    note: Optional[str] = None
    payment_method: Optional[str] = None
    parent_id: Optional[str] = None


class InterestCreate(CamelModel):
    """total_amount is accepted for client compatibility but always recomputed."""
    person_name: str = Field(..., min_length=1)
    principal: float = Field(..., ge=0)
    interest: float = Field(..., ge=0)
    total_amount: Optional[float] = None
    date: datetime
    remarks: Optional[str] = None


class InterestUpdate(CamelModel):
    person_name: Optional[str] = Field(None, min_length=1)
    principal: Optional[float] = Field(None, ge=0)
    interest: Optional[float] = Field(None, ge=0)
    total_amount: Optional[float] = None
    date: Optional[datetime] = None
    remarks: Optional[str] = None


class EarningCreate(CamelModel):
    source_name: str = Field(..., min_length=1)
    earning_name: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    date: datetime
    remarks: Optional[str] = None


class EarningUpdate(CamelModel):
    source_name: Optional[str] = Field(None, min_length=1)
    earning_name: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = Field(None, gt=0)
    date: Optional[datetime] = None
    remarks: Optional[str] = None


class OtherBalanceCreate(CamelModel):
    """The initial amount becomes the opening-balance credit."""
    kind: BalanceKind = Field(..., alias="type")
    label: str = Field(..., min_length=1)
    amount: float = Field(default=0, ge=0)


class OtherBalanceUpdate(CamelModel):
    kind: Optional[BalanceKind] = Field(None, alias="type")
    label: Optional[str] = Field(None, min_length=1)


class SubTransactionCreate(CamelModel):
    kind: EntryKind = Field(..., alias="type")
    note: str = ""
    amount: float = Field(..., ge=0)
    date: Optional[datetime] = None


class SubTransactionUpdate(CamelModel):
    kind: Optional[EntryKind] = Field(None, alias="type")
    note: Optional[str] = None
    amount: Optional[float] = Field(None, ge=0)
    date: Optional[datetime] = None
