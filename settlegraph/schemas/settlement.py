from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, Field, ConfigDict, field_validator


class SettlementEdge(BaseModel):
    """Directed obligation: from_user (debtor) pays to_user (creditor)."""
    from_user: str
    to_user: str
    amount: float = Field(..., gt=0)

    model_config = ConfigDict(frozen=True)


class OptimizationResult(BaseModel):
    edges: List[SettlementEdge] = []
    instructions: List[str] = []


class SettleByInfoRequest(BaseModel):
    """Identifies an obligation that has no stored identity yet."""
    from_user: str = Field(..., min_length=1)
    to_user: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)


class PersonalSettlementResponse(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="id")
    from_user: str
    to_user: str
    amount: float
    settled: bool
    settled_at: Optional[datetime] = None
    settled_by: Optional[str] = None
    transaction_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> str:
        return str(value)


class NotificationItem(BaseModel):
    from_user: str
    to_user: str
    amount: float
    settled: bool = False
    settlement_id: Optional[str] = None


class NotificationsResponse(BaseModel):
    to_pay: List[NotificationItem] = []
    to_receive: List[NotificationItem] = []

    @property
    def unsettled_count(self) -> int:
        return sum(1 for item in self.to_pay + self.to_receive if not item.settled)
