"""
Settlement status model - tracks whether a netted obligation has been paid.

Entries are created either when a debtor marks an optimized payment as
done, or linked to a concrete transaction. The netting itself never reads
this collection; it only decorates notifications.
"""

from datetime import datetime
from typing import Optional

from settlegraph.models.base import MongoModel


class PersonalSettlement(MongoModel):
    from_user: str   # Who owes money
    to_user: str     # Who should receive
    amount: float
    settled: bool = False
    settled_at: Optional[datetime] = None
    settled_by: Optional[str] = None
    transaction_id: Optional[str] = None

    def has_party(self, username: str) -> bool:
        norm = username.strip().lower()
        return norm in (self.from_user.strip().lower(), self.to_user.strip().lower())
