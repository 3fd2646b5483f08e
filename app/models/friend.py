from pydantic import Field
from datetime import datetime
from typing import Optional

from app.models.base import CamelModel, MongoDocument
from app.utils.dates import utcnow
from app.utils.money import from_paise


class FriendCreate(CamelModel):
    """Friend creation schema."""
    name: str = Field(..., min_length=1, max_length=100)
    whatsapp: str = Field(..., min_length=1, max_length=32)
    saved_amount: Optional[float] = None
    total_balance: Optional[float] = None


class SavedAmountUpdate(CamelModel):
    """Set the fixed saved reference figure."""
    saved_amount: float


class BalanceUpdate(CamelModel):
    """Overwrite the spendable balance without a ledger entry."""
    total_balance: float


class FriendInDB(MongoDocument):
    """Friend database schema. Money fields are integer paise."""
    name: str
    whatsapp: str
    saved_amount_paise: int = 0
    total_balance_paise: int = 0
    owed_amount_paise: int = 0
    last_updated_at: datetime = Field(default_factory=utcnow)

    @property
    def saved_amount(self) -> float:
        return from_paise(self.saved_amount_paise)

    @property
    def total_balance(self) -> float:
        return from_paise(self.total_balance_paise)

    @property
    def owed_amount(self) -> float:
        return from_paise(self.owed_amount_paise)


class FriendResponse(CamelModel):
    """Friend response schema."""
    id: str
    name: str
    whatsapp: str
    saved_amount: float
    total_balance: float
    owed_amount: float
    last_updated_at: datetime
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_db(cls, friend: FriendInDB) -> "FriendResponse":
        return cls(
            id=str(friend.id),
            name=friend.name,
            whatsapp=friend.whatsapp,
            saved_amount=friend.saved_amount,
            total_balance=friend.total_balance,
            owed_amount=friend.owed_amount,
            last_updated_at=friend.last_updated_at,
            created_at=friend.created_at,
            updated_at=friend.updated_at
        )


class FriendOwed(CamelModel):
    """One row of the loans overview."""
    id: str
    name: str
    whatsapp: str
    owed_amount: float
