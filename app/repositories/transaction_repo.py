"""
TransactionRepository - the append-only money ledger.

Besides plain CRUD it owns the two ledger aggregations:
1. Sum of debits for a friend inside a time window (today's spend)
2. Loan and repay totals for a friend (source of owed_amount)
"""

from typing import Dict, List, Optional
from datetime import datetime
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId
from pymongo import ReturnDocument

from app.db.mongo import TRANSACTIONS
from app.models.transaction import TransactionInDB, TransactionType, LOAN_LEDGER_TYPES
from app.utils.dates import utcnow


class TransactionRepository:
    """Repository for ledger entries."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[TRANSACTIONS]

    async def insert_transaction(
        self,
        friend_id: ObjectId,
        type: TransactionType,
        amount_paise: int,
        *,
        reason: str = "",
        note: Optional[str] = None,
        date: Optional[datetime] = None,
        previous_balance_paise: Optional[int] = None,
        new_balance_paise: Optional[int] = None
    ) -> TransactionInDB:
        """Append one entry to the ledger. Amounts are integer paise."""
        now = utcnow()
        tx_dict = {
            "friend_id": friend_id,
            "type": type.value,
            "amount_paise": amount_paise,
            "reason": reason,
            "note": note,
            "date": date or now,
            "previous_balance_paise": previous_balance_paise,
            "new_balance_paise": new_balance_paise,
            "created_at": now,
            "updated_at": now
        }

        result = await self.collection.insert_one(tx_dict)
        tx_dict["_id"] = result.inserted_id
        return TransactionInDB(**tx_dict)

    async def get_transaction(self, tx_id: ObjectId) -> TransactionInDB | None:
        doc = await self.collection.find_one({"_id": tx_id})
        if doc:
            return TransactionInDB(**doc)
        return None

    async def list_for_friend(self, friend_id: ObjectId) -> List[TransactionInDB]:
        """Whole ledger for a friend, newest first."""
        cursor = self.collection.find({"friend_id": friend_id}).sort([("date", -1), ("_id", -1)])
        docs = await cursor.to_list(None)
        return [TransactionInDB(**doc) for doc in docs]

    async def list_loan_ledger(self, friend_id: ObjectId) -> List[TransactionInDB]:
        """Loan and repay entries for a friend, newest first."""
        cursor = self.collection.find({
            "friend_id": friend_id,
            "type": {"$in": list(LOAN_LEDGER_TYPES)}
        }).sort([("date", -1), ("_id", -1)])
        docs = await cursor.to_list(None)
        return [TransactionInDB(**doc) for doc in docs]

    async def update_loan_entry(
        self,
        tx_id: ObjectId,
        amount_paise: int,
        reason: Optional[str] = None
    ) -> TransactionInDB | None:
        """Amend amount (and optionally reason) of a loan ledger entry."""
        updates = {"amount_paise": amount_paise, "updated_at": utcnow()}
        if reason is not None:
            updates["reason"] = reason

        result = await self.collection.find_one_and_update(
            {"_id": tx_id},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
        if result:
            return TransactionInDB(**result)
        return None

    async def delete_transaction(self, tx_id: ObjectId) -> bool:
        result = await self.collection.delete_one({"_id": tx_id})
        return result.deleted_count > 0

    async def delete_for_friend(self, friend_id: ObjectId) -> int:
        """Remove every entry owned by a friend."""
        result = await self.collection.delete_many({"friend_id": friend_id})
        return result.deleted_count

    async def sum_debits_between(
        self,
        friend_id: ObjectId,
        start: datetime,
        end: datetime
    ) -> int:
        """Sum of debit amounts (paise) with start <= date <= end."""
        result = await self.collection.aggregate([
            {
                "$match": {
                    "friend_id": friend_id,
                    "type": TransactionType.DEBIT.value,
                    "date": {"$gte": start, "$lte": end}
                }
            },
            {
                "$group": {
                    "_id": None,
                    "total": {"$sum": "$amount_paise"}
                }
            }
        ]).to_list(None)

        return result[0]["total"] if result else 0

    async def loan_totals(self, friend_id: ObjectId) -> Dict[str, int]:
        """
        Totals per loan ledger type for a friend, in paise.

        Returns: {"loan": <sum of loans>, "repay": <sum of repayments>}
        """
        totals = {t: 0 for t in LOAN_LEDGER_TYPES}
        result = await self.collection.aggregate([
            {
                "$match": {
                    "friend_id": friend_id,
                    "type": {"$in": list(LOAN_LEDGER_TYPES)}
                }
            },
            {
                "$group": {
                    "_id": "$type",
                    "total": {"$sum": "$amount_paise"}
                }
            }
        ]).to_list(None)

        for row in result:
            totals[row["_id"]] = row["total"]
        return totals
