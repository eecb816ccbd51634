# transaction_api/schemas/transaction.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError
from datetime import datetime
from typing import List, Optional
from decimal import Decimal

from transaction_api.db.models import TransactionType

DESCRIPTION_MAX_LENGTH = 255


def _check_description(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if not value.strip():
        raise PydanticCustomError("description_blank", "Description cannot be empty")
    if len(value) > DESCRIPTION_MAX_LENGTH:
        raise PydanticCustomError(
            "description_too_long", "Description must not exceed 255 characters"
        )
    return value


def _check_amount(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return value
    if value <= 0:
        raise PydanticCustomError("amount_not_positive", "Amount must be greater than 0")
    return value


class TransactionCreate(BaseModel):
    description: str
    amount: Decimal = Field(..., max_digits=19, decimal_places=2)
    type: TransactionType

    @field_validator("description")
    @classmethod
    def check_description(cls, value):
        return _check_description(value)

    @field_validator("amount")
    @classmethod
    def check_amount(cls, value):
        return _check_amount(value)


class TransactionUpdate(BaseModel):
    """Partial update: fields left as None keep their stored value."""
    description: Optional[str] = None
    amount: Optional[Decimal] = Field(None, max_digits=19, decimal_places=2)
    type: Optional[TransactionType] = None

    @field_validator("description")
    @classmethod
    def check_description(cls, value):
        return _check_description(value)

    @field_validator("amount")
    @classmethod
    def check_amount(cls, value):
        return _check_amount(value)


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str
    amount: Decimal
    type: TransactionType
    created_at: datetime
    updated_at: datetime


class TransactionPage(BaseModel):
    content: List[TransactionOut]
    page: int
    size: int
    total_elements: int
    total_pages: int
    sort: str
