"""
Spendable balance: debits against a friend's total_balance.

The balance moves forward by deltas read from the current document. No
compare-and-set is done: two concurrent debits on one friend can both read
the same previous balance, and the later write wins.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.models.friend import FriendInDB
from app.models.transaction import TransactionInDB, TransactionType
from app.repositories.friend_repo import FriendRepository
from app.repositories.transaction_repo import TransactionRepository
from app.utils.dates import local_day_bounds, utcnow
from app.utils.money import from_paise
from app.utils.validation import parse_object_id, validate_number, validate_positive_amount

log = get_logger(__name__)


@dataclass
class DebitResult:
    friend: FriendInDB
    transaction: TransactionInDB
    previous_balance: float
    todays_spent: float


class BalanceService:
    def __init__(self, db: AsyncIOMotorDatabase, tz: Optional[ZoneInfo] = None):
        self.friends = FriendRepository(db)
        self.transactions = TransactionRepository(db)
        self.tz = tz or ZoneInfo(settings.TIMEZONE)

    async def get_friend(self, friend_id: str) -> FriendInDB:
        friend = await self.friends.get_friend(parse_object_id(friend_id, "Friend"))
        if not friend:
            raise NotFoundError("Friend not found")
        return friend

    async def create_friend(
        self,
        name: str,
        whatsapp: str,
        saved_amount: Optional[float] = None,
        total_balance: Optional[float] = None
    ) -> FriendInDB:
        """
        Register a friend.

        savedAmount falls back to the opening balance; the opening balance
        falls back to the saved amount.
        """
        if not name.strip() or not whatsapp.strip():
            raise ValidationError("name and whatsapp required")

        opening = validate_number(total_balance, "totalBalance") if total_balance is not None else 0
        saved = validate_number(saved_amount, "savedAmount") if saved_amount is not None else opening
        balance = opening or saved or 0

        friend = await self.friends.create_friend(
            name=name.strip(),
            whatsapp=whatsapp.strip(),
            saved_amount_paise=saved,
            total_balance_paise=balance
        )
        log.info("friend_created", friend_id=str(friend.id))
        return friend

    async def list_transactions(self, friend_id: str) -> List[TransactionInDB]:
        friend = await self.get_friend(friend_id)
        return await self.transactions.list_for_friend(friend.id)

    async def set_saved_amount(self, friend_id: str, saved_amount: float) -> FriendInDB:
        friend = await self.get_friend(friend_id)
        amount = validate_number(saved_amount, "savedAmount")
        updated = await self.friends.set_saved_amount(friend.id, amount)
        if not updated:
            raise NotFoundError("Friend not found")
        return updated

    async def set_total_balance(self, friend_id: str, total_balance: float) -> FriendInDB:
        """Manual correction: no ledger entry is written."""
        friend = await self.get_friend(friend_id)
        amount = validate_number(total_balance, "totalBalance")
        updated = await self.friends.set_total_balance(friend.id, amount)
        if not updated:
            raise NotFoundError("Friend not found")
        log.info("balance_overwritten", friend_id=friend_id, total_balance_paise=amount)
        return updated

    async def debit(self, friend_id: str, amount: float, note: Optional[str] = None) -> DebitResult:
        """
        Apply a debit and append its ledger entry.

        Validation and lookup happen before any write. The balance is allowed
        to go negative.
        """
        amt = validate_positive_amount(amount)
        friend = await self.get_friend(friend_id)

        previous_paise = friend.total_balance_paise
        new_paise = previous_paise - amt

        tx = await self.transactions.insert_transaction(
            friend.id,
            TransactionType.DEBIT,
            amt,
            note=note,
            previous_balance_paise=previous_paise,
            new_balance_paise=new_paise
        )

        updated = await self.friends.set_total_balance(friend.id, new_paise, at=tx.date)
        if not updated:
            raise NotFoundError("Friend not found")

        # after the insert so the new entry is part of today's total
        spent = await self.todays_spent(friend.id)

        log.info(
            "debit_applied",
            friend_id=str(friend.id),
            amount_paise=amt,
            previous_balance_paise=previous_paise,
            new_balance_paise=new_paise
        )
        return DebitResult(
            friend=updated,
            transaction=tx,
            previous_balance=from_paise(previous_paise),
            todays_spent=spent
        )

    async def todays_spent(self, friend_id, now: Optional[datetime] = None) -> float:
        """Sum of the friend's debits within the local calendar day of `now`."""
        oid = parse_object_id(friend_id, "Friend")
        start, end = local_day_bounds(now or utcnow(), self.tz)
        return from_paise(await self.transactions.sum_debits_between(oid, start, end))

    async def delete_friend(self, friend_id: str) -> int:
        """Delete a friend and every transaction it owns."""
        friend = await self.get_friend(friend_id)
        removed = await self.transactions.delete_for_friend(friend.id)
        await self.friends.delete_friend(friend.id)
        log.info("friend_deleted", friend_id=friend_id, transactions_removed=removed)
        return removed
