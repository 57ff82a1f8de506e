"""
SettlementRepository - the settlement status store.

Tracks which netted obligations were marked as paid. Amount matching uses
a half-cent tolerance because optimized amounts are floating point.
"""

from datetime import datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from settlegraph.models.base import to_object_id
from settlegraph.models.settlement import PersonalSettlement

AMOUNT_TOLERANCE = 0.005


def _amount_window(amount: float) -> dict:
    return {"$gte": amount - AMOUNT_TOLERANCE, "$lte": amount + AMOUNT_TOLERANCE}


class SettlementRepository:
    """Repository for settlement status entries."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.personal_settlements

    async def create(self, entry: PersonalSettlement) -> PersonalSettlement:
        await self.collection.insert_one(entry.to_document())
        return entry

    async def get(self, settlement_id: str) -> Optional[PersonalSettlement]:
        oid = to_object_id(settlement_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        if doc is None:
            return None
        return PersonalSettlement(**doc)

    async def list_for_user(self, username: str) -> List[PersonalSettlement]:
        docs = await self.collection.find({
            "$or": [{"from_user": username}, {"to_user": username}]
        }).sort("created_at", -1).to_list(None)
        return [PersonalSettlement(**doc) for doc in docs]

    async def list_unsettled_for_user(self, username: str) -> List[PersonalSettlement]:
        return [entry for entry in await self.list_for_user(username) if not entry.settled]

    async def find_matching(
        self,
        from_user: str,
        to_user: str,
        amount: float,
        settled: Optional[bool] = None
    ) -> Optional[PersonalSettlement]:
        query = {
            "from_user": from_user,
            "to_user": to_user,
            "amount": _amount_window(amount),
        }
        if settled is not None:
            query["settled"] = settled
        doc = await self.collection.find_one(query)
        if doc is None:
            return None
        return PersonalSettlement(**doc)

    async def mark_settled(self, settlement_id: str, username: str) -> Optional[PersonalSettlement]:
        """
        Mark an entry as paid.

        Only one of the two parties may do so; returns None when the entry
        does not exist or the caller is not a party.
        """
        entry = await self.get(settlement_id)
        if entry is None or not entry.has_party(username):
            return None
        if entry.settled:
            return entry

        now = datetime.now(timezone.utc)
        await self.collection.update_one(
            {"_id": entry.id},
            {"$set": {"settled": True, "settled_at": now, "settled_by": username}}
        )
        return entry.model_copy(update={"settled": True, "settled_at": now, "settled_by": username})

    async def mark_settled_by_info(
        self,
        from_user: str,
        to_user: str,
        amount: float,
        username: str
    ) -> PersonalSettlement:
        """Mark a matching open entry as paid, or record a new paid entry."""
        now = datetime.now(timezone.utc)
        entry = await self.find_matching(from_user, to_user, amount, settled=False)
        if entry is not None:
            await self.collection.update_one(
                {"_id": entry.id},
                {"$set": {"settled": True, "settled_at": now, "settled_by": username}}
            )
            return entry.model_copy(update={"settled": True, "settled_at": now, "settled_by": username})

        entry = PersonalSettlement(
            from_user=from_user,
            to_user=to_user,
            amount=amount,
            settled=True,
            settled_at=now,
            settled_by=username,
        )
        return await self.create(entry)

    async def delete_for_transaction(self, transaction_id: str) -> int:
        result = await self.collection.delete_many({"transaction_id": transaction_id})
        return result.deleted_count
