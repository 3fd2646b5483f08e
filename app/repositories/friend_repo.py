from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId
from pymongo import ReturnDocument
from datetime import datetime
from typing import Optional

from app.db.mongo import FRIENDS
from app.models.friend import FriendInDB
from app.utils.dates import utcnow


class FriendRepository:
    """Friend database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[FRIENDS]

    async def create_friend(
        self,
        name: str,
        whatsapp: str,
        saved_amount_paise: int = 0,
        total_balance_paise: int = 0
    ) -> FriendInDB:
        """Create a new friend with no loans outstanding."""
        now = utcnow()
        friend_dict = {
            "name": name,
            "whatsapp": whatsapp,
            "saved_amount_paise": saved_amount_paise,
            "total_balance_paise": total_balance_paise,
            "owed_amount_paise": 0,
            "last_updated_at": now,
            "created_at": now,
            "updated_at": now
        }

        result = await self.collection.insert_one(friend_dict)
        friend_dict["_id"] = result.inserted_id
        return FriendInDB(**friend_dict)

    async def list_friends(self) -> list[FriendInDB]:
        """List friends, newest first."""
        cursor = self.collection.find().sort("created_at", -1)
        friends = await cursor.to_list(None)
        return [FriendInDB(**doc) for doc in friends]

    async def list_by_name(self) -> list[FriendInDB]:
        """List friends alphabetically."""
        cursor = self.collection.find().sort("name", 1)
        friends = await cursor.to_list(None)
        return [FriendInDB(**doc) for doc in friends]

    async def get_friend(self, friend_id: ObjectId) -> FriendInDB | None:
        """Get a friend by id."""
        doc = await self.collection.find_one({"_id": friend_id})
        if doc:
            return FriendInDB(**doc)
        return None

    async def update_fields(self, friend_id: ObjectId, updates: dict) -> FriendInDB | None:
        """Set fields on a friend and return the updated document."""
        updates["updated_at"] = utcnow()
        result = await self.collection.find_one_and_update(
            {"_id": friend_id},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
        if result:
            return FriendInDB(**result)
        return None

    async def set_saved_amount(self, friend_id: ObjectId, saved_amount_paise: int) -> FriendInDB | None:
        return await self.update_fields(friend_id, {"saved_amount_paise": saved_amount_paise})

    async def set_total_balance(
        self,
        friend_id: ObjectId,
        total_balance_paise: int,
        at: Optional[datetime] = None
    ) -> FriendInDB | None:
        """Overwrite the spendable balance and stamp the mutation time."""
        return await self.update_fields(friend_id, {
            "total_balance_paise": total_balance_paise,
            "last_updated_at": at or utcnow()
        })

    async def set_owed_amount(self, friend_id: ObjectId, owed_amount_paise: int) -> FriendInDB | None:
        """Replace the materialised owed amount."""
        return await self.update_fields(friend_id, {
            "owed_amount_paise": owed_amount_paise,
            "last_updated_at": utcnow()
        })

    async def delete_friend(self, friend_id: ObjectId) -> bool:
        result = await self.collection.delete_one({"_id": friend_id})
        return result.deleted_count > 0
