from fastapi import APIRouter, BackgroundTasks, Depends, status

from app.db.mongo import get_db
from app.models.friend import FriendCreate, FriendResponse, SavedAmountUpdate, BalanceUpdate
from app.models.transaction import TransactionResponse
from app.schemas.ledger import DeductRequest, DebitResponse, DeleteResponse, FriendUpdateResponse
from app.services.balance_service import BalanceService, DebitResult
from app.services.messages import FOOTER_DEDUCT, build_debit_message
from app.services.notifier import WhatsAppNotifier, get_notifier

router = APIRouter(prefix="/friends", tags=["friends"])


def debit_and_notify(
    result: DebitResult,
    note: str | None,
    footer: str,
    background_tasks: BackgroundTasks,
    notifier: WhatsAppNotifier
) -> DebitResponse:
    """Queue the WhatsApp summary of a debit and build the response."""
    friend = result.friend
    message = build_debit_message(
        date=result.transaction.date,
        name=friend.name,
        saved_amount=friend.saved_amount,
        amount=result.transaction.amount,
        previous_balance=result.previous_balance,
        todays_spent=result.todays_spent,
        new_balance=friend.total_balance,
        note=note,
        footer=footer
    )
    # runs after the response is sent
    background_tasks.add_task(notifier.send_in_background, friend.whatsapp, message)

    return DebitResponse(
        friend=FriendResponse.from_db(friend),
        transaction=TransactionResponse.from_db(result.transaction)
    )


@router.post("", response_model=FriendResponse)
async def create_friend(friend_data: FriendCreate, db = Depends(get_db)):
    """Register a friend."""
    service = BalanceService(db)
    friend = await service.create_friend(
        name=friend_data.name,
        whatsapp=friend_data.whatsapp,
        saved_amount=friend_data.saved_amount,
        total_balance=friend_data.total_balance
    )
    return FriendResponse.from_db(friend)


@router.get("", response_model=list[FriendResponse])
async def list_friends(db = Depends(get_db)):
    """List friends, newest first."""
    service = BalanceService(db)
    friends = await service.friends.list_friends()
    return [FriendResponse.from_db(friend) for friend in friends]


@router.patch("/{friend_id}/saved", response_model=FriendUpdateResponse)
async def update_saved_amount(friend_id: str, payload: SavedAmountUpdate, db = Depends(get_db)):
    """Set the fixed saved reference amount."""
    friend = await BalanceService(db).set_saved_amount(friend_id, payload.saved_amount)
    return FriendUpdateResponse(friend=FriendResponse.from_db(friend))


@router.patch("/{friend_id}/balance", response_model=FriendUpdateResponse)
async def update_balance(friend_id: str, payload: BalanceUpdate, db = Depends(get_db)):
    """Overwrite the balance directly; no ledger entry is written."""
    friend = await BalanceService(db).set_total_balance(friend_id, payload.total_balance)
    return FriendUpdateResponse(friend=FriendResponse.from_db(friend))


@router.post("/{friend_id}/deduct", response_model=DebitResponse)
async def deduct(
    friend_id: str,
    payload: DeductRequest,
    background_tasks: BackgroundTasks,
    db = Depends(get_db),
    notifier: WhatsAppNotifier = Depends(get_notifier)
):
    """Debit a friend and send the WhatsApp summary in the background."""
    result = await BalanceService(db).debit(friend_id, payload.amount, payload.note)
    return debit_and_notify(result, payload.note, FOOTER_DEDUCT, background_tasks, notifier)


@router.get("/{friend_id}/transactions", response_model=list[TransactionResponse])
async def list_transactions(friend_id: str, db = Depends(get_db)):
    """Full ledger for a friend, newest first."""
    txs = await BalanceService(db).list_transactions(friend_id)
    return [TransactionResponse.from_db(tx) for tx in txs]


@router.delete("/{friend_id}", response_model=DeleteResponse, status_code=status.HTTP_200_OK)
async def delete_friend(friend_id: str, db = Depends(get_db)):
    """Delete a friend together with all of its transactions."""
    await BalanceService(db).delete_friend(friend_id)
    return DeleteResponse(message="Friend deleted successfully")
