"""Finance transaction schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from desktown.db.enums import TransactionStatus, TransactionType


class TransactionCreate(BaseModel):
    """Amount is an integer in the smallest currency unit."""
    description: str = Field(..., min_length=1, max_length=2000)
    amount: int = Field(..., gt=0)
    type: TransactionType = TransactionType.EXPENSE
    category: str | None = Field(None, max_length=100)
    receipt_url: str | None = None


class TransactionUpdate(BaseModel):
    description: str | None = Field(None, min_length=1, max_length=2000)
    amount: int | None = Field(None, gt=0)
    type: TransactionType | None = None
    category: str | None = Field(None, max_length=100)
    receipt_url: str | None = None
    status: TransactionStatus | None = None


class TransactionRead(BaseModel):
    id: int
    description: str
    amount: int
    type: TransactionType
    category: str | None
    submitter_id: UUID
    approver_id: UUID | None
    status: TransactionStatus
    receipt_url: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
