from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, ConfigDict, field_validator


class TransactionCreate(BaseModel):
    """Request body to record a transfer: payer paid payee `amount`."""
    payer_username: str = Field(..., min_length=1, max_length=100)
    payee_username: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=200)
    timestamp: Optional[datetime] = None

    @field_validator("payer_username", "payee_username")
    @classmethod
    def normalize_username(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("username must not be blank")
        return value


class TransactionResponse(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="id")
    payer_username: str
    payee_username: str
    amount: float
    description: Optional[str] = None
    timestamp: datetime
    created_by: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> str:
        return str(value)


class TransactionHistoryResponse(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="id")
    transaction_id: str
    action: str
    payload: dict
    performed_by: Optional[str] = None
    recorded_at: datetime

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> str:
        return str(value)
