# pocketledger/schemas/category.py
from typing import Optional
import uuid
from pydantic import BaseModel, ConfigDict, Field

from pocketledger.models.category import CategoryKind
from pocketledger.models.transaction import TransactionType

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    type: TransactionType
    icon: Optional[str] = None
    color: Optional[str] = None

class CategoryUpdate(BaseModel):
    """``type`` is fixed at creation and cannot be changed."""
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    icon: Optional[str] = None
    color: Optional[str] = None

class CategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    type: TransactionType
    kind: CategoryKind
    icon: Optional[str] = None
    color: Optional[str] = None

class CategoryWithCount(CategoryRead):
    transaction_count: int = 0
