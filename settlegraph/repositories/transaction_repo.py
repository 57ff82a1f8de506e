"""
TransactionRepository - the transaction store.

Transactions are append-only from the core's perspective: the netting,
graph and layout code only ever read the lists returned here.
"""

import re
from datetime import datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from settlegraph.models.base import to_object_id
from settlegraph.models.transaction import Transaction, TransactionHistory


def _username_pattern(username: str) -> dict:
    return {"$regex": f"^{re.escape(username.strip())}$", "$options": "i"}


class TransactionRepository:
    """Repository for recorded transfers and their deletion history."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.transactions
        self.history = db.transaction_history

    async def create(self, transaction: Transaction) -> Transaction:
        await self.collection.insert_one(transaction.to_document())
        return transaction

    async def get(self, transaction_id: str) -> Optional[Transaction]:
        oid = to_object_id(transaction_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        if doc is None:
            return None
        return Transaction(**doc)

    async def list_all(self) -> List[Transaction]:
        """Every transaction, oldest first."""
        docs = await self.collection.find({}).sort("timestamp", 1).to_list(None)
        return [Transaction(**doc) for doc in docs]

    async def list_for_user(self, username: str) -> List[Transaction]:
        """Transactions the user paid, received or recorded, most recent first."""
        if not username or not username.strip():
            return []
        pattern = _username_pattern(username)
        docs = await self.collection.find({
            "$or": [
                {"payer_username": pattern},
                {"payee_username": pattern},
                {"created_by": pattern},
            ]
        }).sort("timestamp", -1).to_list(None)
        return [Transaction(**doc) for doc in docs]

    async def delete(self, transaction: Transaction, performed_by: Optional[str] = None) -> bool:
        """
        Delete a transaction, recording its payload in the history first.

        Returns False when nothing was deleted.
        """
        await self.record_history(transaction, "DELETED", performed_by)
        result = await self.collection.delete_one({"_id": transaction.id})
        return result.deleted_count > 0

    async def record_history(
        self,
        transaction: Transaction,
        action: str,
        performed_by: Optional[str] = None
    ) -> TransactionHistory:
        entry = TransactionHistory(
            transaction_id=str(transaction.id),
            action=action,
            payload=transaction.model_dump(mode="json", exclude={"id"}) | {"id": str(transaction.id)},
            performed_by=performed_by,
            recorded_at=datetime.now(timezone.utc),
        )
        await self.history.insert_one(entry.to_document())
        return entry

    async def list_history(self) -> List[TransactionHistory]:
        docs = await self.history.find({}).sort("recorded_at", -1).to_list(None)
        return [TransactionHistory(**doc) for doc in docs]
