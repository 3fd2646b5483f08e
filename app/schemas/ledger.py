from typing import Any, Dict, List, Optional
from pydantic import Field

from app.models.base import CamelModel
from app.models.friend import FriendResponse, FriendOwed
from app.models.transaction import TransactionResponse


class DeductRequest(CamelModel):
    """Request body to debit a friend."""
    amount: float
    note: Optional[str] = None


class FriendUpdateResponse(CamelModel):
    success: bool = True
    friend: FriendResponse


class DebitResponse(CamelModel):
    success: bool = True
    friend: FriendResponse
    transaction: TransactionResponse


class DeleteResponse(CamelModel):
    success: bool = True
    message: str


class LoanCreate(CamelModel):
    """Request body to record a loan."""
    friend_id: str = Field(..., min_length=1)
    amount: float
    reason: str = ""
    send_message: bool = False


class LoanUpdate(CamelModel):
    """Absolute amount or signed increment; amount wins when both are sent."""
    amount: Optional[float] = None
    increment: Optional[float] = None
    reason: Optional[str] = None


class RepayRequest(CamelModel):
    amount: float
    note: Optional[str] = None


class LoanResponse(CamelModel):
    loan: TransactionResponse
    friend: FriendResponse
    send_result: Optional[Dict[str, Any]] = None


class LoanDeleteResponse(CamelModel):
    message: str = "Loan deleted"
    friend: FriendResponse


class FriendLoansResponse(CamelModel):
    friend: FriendResponse
    owed_amount: float
    txs: List[TransactionResponse]


class OverviewResponse(CamelModel):
    friends: List[FriendOwed]
    overall: float


class NotifyResponse(CamelModel):
    ok: bool = True
    send_result: Any = None


class RawSendRequest(CamelModel):
    to: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
