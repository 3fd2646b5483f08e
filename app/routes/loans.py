from fastapi import APIRouter, Depends, status

from app.db.mongo import get_db
from app.models.friend import FriendResponse, FriendOwed
from app.models.transaction import TransactionResponse
from app.schemas.ledger import (
    FriendLoansResponse,
    LoanCreate,
    LoanDeleteResponse,
    LoanResponse,
    LoanUpdate,
    NotifyResponse,
    OverviewResponse,
    RepayRequest,
)
from app.services.loan_service import LoanResult, LoanService
from app.services.notifier import WhatsAppNotifier, get_notifier

router = APIRouter(prefix="/loans", tags=["loans"])


def get_loan_service(
    db = Depends(get_db),
    notifier: WhatsAppNotifier = Depends(get_notifier)
) -> LoanService:
    return LoanService(db, notifier)


def _loan_response(result: LoanResult) -> LoanResponse:
    return LoanResponse(
        loan=TransactionResponse.from_db(result.loan),
        friend=FriendResponse.from_db(result.friend),
        send_result=result.send_result
    )


@router.post("", response_model=LoanResponse, status_code=status.HTTP_201_CREATED)
async def create_loan(payload: LoanCreate, service: LoanService = Depends(get_loan_service)):
    """Record a loan; optionally send the reminder right away."""
    result = await service.create_loan(
        payload.friend_id,
        payload.amount,
        reason=payload.reason,
        send_message=payload.send_message
    )
    return _loan_response(result)


# static paths before /{loan_id}
@router.get("/overview", response_model=OverviewResponse)
async def overview(service: LoanService = Depends(get_loan_service)):
    """Owed amount per friend plus the overall total."""
    friends, overall = await service.overview()
    return OverviewResponse(
        friends=[
            FriendOwed(
                id=str(friend.id),
                name=friend.name,
                whatsapp=friend.whatsapp,
                owed_amount=friend.owed_amount
            )
            for friend in friends
        ],
        overall=overall
    )


@router.get("/friend/{friend_id}", response_model=FriendLoansResponse)
async def friend_loans(friend_id: str, service: LoanService = Depends(get_loan_service)):
    """Loan/repay ledger for one friend with the current owed amount."""
    friend, entries = await service.friend_loans(friend_id)
    return FriendLoansResponse(
        friend=FriendResponse.from_db(friend),
        owed_amount=friend.owed_amount,
        txs=[TransactionResponse.from_db(tx) for tx in entries]
    )


@router.post("/friend/{friend_id}/repay", response_model=LoanResponse)
async def repay(
    friend_id: str,
    payload: RepayRequest,
    service: LoanService = Depends(get_loan_service)
):
    """Record a repayment; rejected when larger than the owed amount."""
    result = await service.record_repayment(friend_id, payload.amount, payload.note)
    return _loan_response(result)


@router.post("/friend/{friend_id}/notify", response_model=NotifyResponse)
async def notify_friend(friend_id: str, service: LoanService = Depends(get_loan_service)):
    """Remind a friend of the total owed; waits for the provider."""
    send_result = await service.notify_friend(friend_id)
    return NotifyResponse(send_result=send_result)


@router.patch("/{loan_id}", response_model=LoanResponse)
async def update_loan(
    loan_id: str,
    payload: LoanUpdate,
    service: LoanService = Depends(get_loan_service)
):
    """Amend a loan entry by absolute amount or increment."""
    result = await service.amend_loan(
        loan_id,
        amount=payload.amount,
        increment=payload.increment,
        reason=payload.reason
    )
    return _loan_response(result)


@router.delete("/{loan_id}", response_model=LoanDeleteResponse)
async def delete_loan(loan_id: str, service: LoanService = Depends(get_loan_service)):
    friend = await service.delete_loan(loan_id)
    return LoanDeleteResponse(friend=FriendResponse.from_db(friend))


@router.post("/{loan_id}/notify", response_model=NotifyResponse)
async def notify_loan(loan_id: str, service: LoanService = Depends(get_loan_service)):
    """Send the reminder for one loan entry; waits for the provider."""
    send_result = await service.notify_loan(loan_id)
    return NotifyResponse(send_result=send_result)
