from fastapi import APIRouter, BackgroundTasks, Depends

from app.db.mongo import get_db
from app.routes.friends import debit_and_notify
from app.schemas.ledger import DeductRequest, DebitResponse, NotifyResponse, RawSendRequest
from app.services.balance_service import BalanceService
from app.services.messages import FOOTER_SEND
from app.services.notifier import WhatsAppNotifier, get_notifier

router = APIRouter(tags=["send"])


@router.post("/send/{friend_id}", response_model=DebitResponse)
async def send_money(
    friend_id: str,
    payload: DeductRequest,
    background_tasks: BackgroundTasks,
    db = Depends(get_db),
    notifier: WhatsAppNotifier = Depends(get_notifier)
):
    """Same debit as /friends/{id}/deduct with the no-reply footer."""
    result = await BalanceService(db).debit(friend_id, payload.amount, payload.note)
    return debit_and_notify(result, payload.note, FOOTER_SEND, background_tasks, notifier)


@router.post("/test-send", response_model=NotifyResponse)
async def test_send(payload: RawSendRequest, notifier: WhatsAppNotifier = Depends(get_notifier)):
    """Send an arbitrary message and wait for the provider's answer."""
    send_result = await notifier.send(payload.to, payload.body)
    return NotifyResponse(send_result=send_result)
