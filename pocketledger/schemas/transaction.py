# pocketledger/schemas/transaction.py
from typing import List, Optional
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
import uuid

from pocketledger.models.transaction import TransactionStatus, TransactionType

class TransactionCreate(BaseModel):
    wallet_id: uuid.UUID
    category_id: uuid.UUID
    type: TransactionType
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    description: Optional[str] = Field(None, max_length=255, description="E.g. Lunch with team")
    date: Optional[datetime] = Field(None, description="ISO 8601 date/time; defaults to now")
    status: TransactionStatus = TransactionStatus.completed
    work_date: Optional[datetime] = None
    received_date: Optional[datetime] = None

class TransactionUpdate(BaseModel):
    wallet_id: Optional[uuid.UUID] = None
    category_id: Optional[uuid.UUID] = None
    type: Optional[TransactionType] = None
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=2)
    description: Optional[str] = Field(None, max_length=255)
    date: Optional[datetime] = None
    status: Optional[TransactionStatus] = None

class TransactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    wallet_id: uuid.UUID
    category_id: uuid.UUID
    type: TransactionType
    amount: Decimal
    description: Optional[str] = None
    date: datetime
    status: TransactionStatus
    work_date: Optional[datetime] = None
    received_date: Optional[datetime] = None
    source_goal_id: Optional[uuid.UUID] = None
    paired_transaction_id: Optional[uuid.UUID] = None

class TransactionPage(BaseModel):
    data: List[TransactionRead]
    total: int
    page: int
    limit: int
    total_pages: int
