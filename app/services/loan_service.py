"""
Loan ledger and the owed amount derived from it.

owed_amount on a friend is a materialised view of the ledger:

    owed_amount == sum(loan.amount) - sum(repay.amount)

Every create, amend or delete of a loan/repay entry ends with
recompute_owed(), which re-aggregates the friend's entries and replaces the
stored figure. Nothing here increments owed_amount in place. Sums run on
integer paise, so a full repayment brings the figure back to exactly 0.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.exceptions import (
    InvalidAmountError,
    NotFoundError,
    NotificationFailedError,
    NotificationUnavailableError,
    OverRepaymentError,
    ValidationError,
)
from app.core.logging import get_logger
from app.models.friend import FriendInDB
from app.models.transaction import TransactionInDB, TransactionType
from app.repositories.friend_repo import FriendRepository
from app.repositories.transaction_repo import TransactionRepository
from app.services.messages import build_loan_reminder
from app.services.notifier import WhatsAppNotifier
from app.utils.money import from_paise
from app.utils.validation import (
    parse_object_id,
    validate_non_negative_amount,
    validate_number,
    validate_positive_amount,
)

log = get_logger(__name__)


@dataclass
class LoanResult:
    loan: TransactionInDB
    friend: FriendInDB
    send_result: Optional[Dict[str, Any]] = None


class LoanService:
    def __init__(self, db: AsyncIOMotorDatabase, notifier: WhatsAppNotifier):
        self.friends = FriendRepository(db)
        self.transactions = TransactionRepository(db)
        self.notifier = notifier

    async def _friend(self, friend_id) -> FriendInDB:
        friend = await self.friends.get_friend(parse_object_id(friend_id, "Friend"))
        if not friend:
            raise NotFoundError("Friend not found")
        return friend

    async def _loan_entry(self, loan_id: str) -> TransactionInDB:
        tx = await self.transactions.get_transaction(parse_object_id(loan_id, "Loan"))
        if not tx or not tx.is_loan_ledger():
            raise NotFoundError("Loan not found")
        return tx

    async def recompute_owed(self, friend_id) -> Tuple[float, FriendInDB]:
        """Re-aggregate the loan ledger and overwrite the friend's owed_amount."""
        oid = parse_object_id(friend_id, "Friend")
        totals = await self.transactions.loan_totals(oid)
        net = totals[TransactionType.LOAN.value] - totals[TransactionType.REPAY.value]

        friend = await self.friends.set_owed_amount(oid, net)
        if not friend:
            raise NotFoundError("Friend not found")

        log.debug("owed_recomputed", friend_id=str(oid), owed_amount_paise=net, **totals)
        return from_paise(net), friend

    async def create_loan(
        self,
        friend_id: str,
        amount: Any,
        reason: str = "",
        send_message: bool = False
    ) -> LoanResult:
        """
        Record money lent to a friend.

        When send_message is set a reminder is sent and awaited. The loan is
        recorded first either way: missing credentials raise afterwards, and
        a provider failure is returned in send_result.
        """
        amt = validate_positive_amount(amount)
        friend = await self._friend(friend_id)

        previous = friend.owed_amount_paise
        loan = await self.transactions.insert_transaction(
            friend.id,
            TransactionType.LOAN,
            amt,
            reason=reason or "",
            previous_balance_paise=previous,
            new_balance_paise=previous + amt
        )
        _, friend = await self.recompute_owed(friend.id)
        log.info("loan_created", friend_id=str(friend.id), loan_id=str(loan.id), amount_paise=amt)

        send_result = None
        if send_message:
            if not self.notifier.is_configured:
                log.warning("loan_reminder_skipped", loan_id=str(loan.id), reason="ultramsg_not_configured")
                raise NotificationUnavailableError("UltraMsg not configured")

            message = build_loan_reminder(
                name=friend.name,
                amount=loan.amount,
                borrowed_at=loan.created_at,
                reason=loan.reason
            )
            try:
                data = await self.notifier.send(friend.whatsapp, message)
                send_result = {"success": True, "data": data}
            except NotificationFailedError as exc:
                log.error("loan_reminder_failed", loan_id=str(loan.id), error=exc.message)
                send_result = {"success": False, "error": exc.message}

        return LoanResult(loan=loan, friend=friend, send_result=send_result)

    async def record_repayment(
        self,
        friend_id: str,
        amount: Any,
        note: Optional[str] = None
    ) -> LoanResult:
        """Record money returned by a friend; owed amount never goes below zero."""
        amt = validate_positive_amount(amount)
        friend = await self._friend(friend_id)

        previous = friend.owed_amount_paise
        if amt > previous:
            raise OverRepaymentError(
                f"Repay amount {from_paise(amt):g} greater than owed amount {from_paise(previous):g}"
            )

        repay = await self.transactions.insert_transaction(
            friend.id,
            TransactionType.REPAY,
            amt,
            note=note or "Repayment",
            previous_balance_paise=previous,
            new_balance_paise=previous - amt
        )
        _, friend = await self.recompute_owed(friend.id)
        log.info("repayment_recorded", friend_id=str(friend.id), amount_paise=amt)
        return LoanResult(loan=repay, friend=friend)

    async def amend_loan(
        self,
        loan_id: str,
        amount: Any = None,
        increment: Any = None,
        reason: Optional[str] = None
    ) -> LoanResult:
        """
        Change a loan ledger entry.

        An absolute `amount` (>= 0) wins over a signed `increment`. The
        resulting amount may not be negative.
        """
        entry = await self._loan_entry(loan_id)

        new_amount = entry.amount_paise
        if amount is not None:
            new_amount = validate_non_negative_amount(amount)
        elif increment is not None:
            new_amount = entry.amount_paise + validate_number(increment, "increment")
            if new_amount < 0:
                raise InvalidAmountError("increment would make the amount negative")

        updated = await self.transactions.update_loan_entry(entry.id, new_amount, reason)
        if not updated:
            raise NotFoundError("Loan not found")

        _, friend = await self.recompute_owed(entry.friend_id)
        log.info("loan_amended", loan_id=loan_id, amount_paise=new_amount)
        return LoanResult(loan=updated, friend=friend)

    async def delete_loan(self, loan_id: str) -> FriendInDB:
        entry = await self._loan_entry(loan_id)
        await self.transactions.delete_transaction(entry.id)
        _, friend = await self.recompute_owed(entry.friend_id)
        log.info("loan_deleted", loan_id=loan_id, friend_id=str(entry.friend_id))
        return friend

    async def friend_loans(self, friend_id: str) -> Tuple[FriendInDB, List[TransactionInDB]]:
        friend = await self._friend(friend_id)
        entries = await self.transactions.list_loan_ledger(friend.id)
        return friend, entries

    async def overview(self) -> Tuple[List[FriendInDB], float]:
        """Owed amount per friend and the grand total, as stored."""
        friends = await self.friends.list_by_name()
        overall = sum(f.owed_amount_paise for f in friends)
        return friends, from_paise(overall)

    async def notify_loan(self, loan_id: str) -> Dict[str, Any]:
        """Send the reminder for one loan entry and wait for the provider."""
        entry = await self._loan_entry(loan_id)
        friend = await self._friend(entry.friend_id)
        message = build_loan_reminder(
            name=friend.name,
            amount=entry.amount,
            borrowed_at=entry.created_at,
            reason=entry.reason
        )
        return await self.notifier.send(friend.whatsapp, message)

    async def notify_friend(self, friend_id: str) -> Dict[str, Any]:
        """Remind a friend of everything currently owed."""
        friend = await self._friend(friend_id)
        if friend.owed_amount_paise <= 0:
            raise ValidationError("No owed amount to notify")
        message = build_loan_reminder(name=friend.name, amount=friend.owed_amount)
        return await self.notifier.send(friend.whatsapp, message)
