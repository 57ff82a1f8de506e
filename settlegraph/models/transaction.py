"""
Transaction model - one recorded money transfer between two users.

The payer handed `amount` to the payee, so afterwards the payee owes the
payer. Records are never edited once stored; they are only deleted.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from settlegraph.models.base import MongoModel, _utcnow


class Transaction(MongoModel):
    payer_username: str = ""
    payee_username: str = ""
    amount: float = 0.0
    description: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)
    created_by: Optional[str] = None


class TransactionHistory(MongoModel):
    """Audit record written when a transaction is created or removed."""
    transaction_id: str
    action: str
    payload: dict
    performed_by: Optional[str] = None
    recorded_at: datetime = Field(default_factory=_utcnow)
