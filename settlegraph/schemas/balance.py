from pydantic import BaseModel


class BalanceEntry(BaseModel):
    """Net position: positive is owed money (creditor), negative owes money."""
    participant: str
    net_amount: float
