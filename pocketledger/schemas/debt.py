# pocketledger/schemas/debt.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
import uuid
from pydantic import BaseModel, ConfigDict, Field

from pocketledger.models.debt import DebtStatus, DebtType

class DebtCreate(BaseModel):
    type: DebtType
    person_name: str = Field(..., min_length=2, max_length=100)
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    description: Optional[str] = Field(None, max_length=255)
    due_date: Optional[datetime] = None

class DebtUpdate(BaseModel):
    """Amounts and status move only through payments."""
    person_name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=255)
    due_date: Optional[datetime] = None

class DebtRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    type: DebtType
    person_name: str
    amount: Decimal
    remaining_amount: Decimal
    status: DebtStatus
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

class DebtPage(BaseModel):
    data: List[DebtRead]
    total: int
    page: int
    limit: int
    total_pages: int

class DebtPaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    payment_date: Optional[datetime] = None
    note: Optional[str] = Field(None, max_length=255)

class DebtPaymentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    debt_id: uuid.UUID
    amount: Decimal
    payment_date: datetime
    note: Optional[str] = None

class DebtPaymentResult(BaseModel):
    debt: DebtRead
    payment: DebtPaymentRead
