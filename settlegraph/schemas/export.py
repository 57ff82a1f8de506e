from datetime import datetime
from typing import List

from pydantic import BaseModel

from settlegraph.schemas.balance import BalanceEntry
from settlegraph.schemas.settlement import SettlementEdge
from settlegraph.schemas.transaction import TransactionResponse


class ExportResponse(BaseModel):
    exported_at: datetime
    exported_by: str
    transactions: List[TransactionResponse]
    balances: List[BalanceEntry]
    settlements: List[SettlementEdge]
    instructions: List[str]
