# pocketledger/schemas/goal.py
from typing import List, Literal, Optional
from decimal import Decimal
from datetime import datetime
import uuid
from pydantic import BaseModel, ConfigDict, Field, model_validator

from pocketledger.models.goal import GoalStatus

class GoalCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    target_amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    current_amount: Decimal = Field(Decimal("0"), ge=0, max_digits=14, decimal_places=2)
    description: Optional[str] = Field(None, max_length=255)
    deadline: Optional[datetime] = None

    @model_validator(mode="after")
    def current_within_target(self):
        if self.current_amount > self.target_amount:
            raise ValueError("Current amount cannot exceed target amount")
        return self

class GoalUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    target_amount: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=2)
    description: Optional[str] = Field(None, max_length=255)
    deadline: Optional[datetime] = None
    # completed is derived from the amounts and cannot be set directly
    status: Optional[Literal["in_progress", "cancelled"]] = None

class GoalRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    description: Optional[str] = None
    target_amount: Decimal
    current_amount: Decimal
    status: GoalStatus
    deadline: Optional[datetime] = None
    created_at: Optional[datetime] = None

class GoalPage(BaseModel):
    data: List[GoalRead]
    total: int
    page: int
    limit: int
    total_pages: int

class ContributionCreate(BaseModel):
    wallet_id: uuid.UUID
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    contribution_date: Optional[datetime] = None
    note: Optional[str] = Field(None, max_length=255)

class ContributionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    goal_id: uuid.UUID
    wallet_id: uuid.UUID
    amount: Decimal
    contribution_date: datetime
    note: Optional[str] = None
    transaction_id: Optional[uuid.UUID] = None
