"""
Transaction model - append-only money ledger.

Design principles:
- One document per money-moving event
- `friend_id` always points at an existing friend (cascade on delete)
- debit entries drive `total_balance`; loan/repay entries drive `owed_amount`
- previous/new balance fields are snapshots for display only, never
  used for recomputation
- money is stored as integer paise
"""

from enum import Enum
from typing import Optional
from datetime import datetime
from bson import ObjectId
from pydantic import Field

from app.models.base import CamelModel, MongoDocument
from app.utils.dates import utcnow
from app.utils.money import from_paise


class TransactionType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"
    LOAN = "loan"
    REPAY = "repay"


LOAN_LEDGER_TYPES = (TransactionType.LOAN.value, TransactionType.REPAY.value)


class TransactionInDB(MongoDocument):
    """
    Ledger entry.

    Invariants:
    - amount_paise >= 0 (strictly positive when written by a money-moving operation)
    - only loan/repay entries are ever amended or deleted individually
    """
    friend_id: ObjectId
    type: TransactionType = TransactionType.DEBIT
    amount_paise: int
    reason: str = ""
    note: Optional[str] = None
    date: datetime = Field(default_factory=utcnow)
    previous_balance_paise: Optional[int] = None
    new_balance_paise: Optional[int] = None

    @property
    def amount(self) -> float:
        return from_paise(self.amount_paise)

    @property
    def previous_balance(self) -> Optional[float]:
        if self.previous_balance_paise is None:
            return None
        return from_paise(self.previous_balance_paise)

    @property
    def new_balance(self) -> Optional[float]:
        if self.new_balance_paise is None:
            return None
        return from_paise(self.new_balance_paise)

    def is_loan_ledger(self) -> bool:
        """Whether this entry counts towards owed_amount."""
        return self.type.value in LOAN_LEDGER_TYPES


class TransactionResponse(CamelModel):
    """Transaction response schema."""
    id: str
    friend_id: str
    type: TransactionType
    amount: float
    reason: str = ""
    note: Optional[str] = None
    date: datetime
    previous_balance: Optional[float] = None
    new_balance: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_db(cls, tx: TransactionInDB) -> "TransactionResponse":
        return cls(
            id=str(tx.id),
            friend_id=str(tx.friend_id),
            type=tx.type,
            amount=tx.amount,
            reason=tx.reason,
            note=tx.note,
            date=tx.date,
            previous_balance=tx.previous_balance,
            new_balance=tx.new_balance,
            created_at=tx.created_at,
            updated_at=tx.updated_at
        )
