# pocketledger/schemas/wallet.py
from datetime import datetime
from decimal import Decimal
from typing import Optional
import uuid
from pydantic import BaseModel, ConfigDict, Field, model_validator

from pocketledger.schemas.transaction import TransactionRead

class WalletCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    balance: Decimal = Field(Decimal("0"), max_digits=14, decimal_places=2, description="Opening balance")
    currency: Optional[str] = Field(None, max_length=10)
    icon: Optional[str] = None
    color: Optional[str] = None

class WalletUpdate(BaseModel):
    """Balance is never editable; it only moves through transactions."""
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    icon: Optional[str] = None
    color: Optional[str] = None

class WalletRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    balance: Decimal
    initial_balance: Decimal
    currency: str
    icon: Optional[str] = None
    color: Optional[str] = None
    is_default: bool
    created_at: Optional[datetime] = None

class WalletWithCount(WalletRead):
    transaction_count: int = 0

class WalletReconciliation(BaseModel):
    wallet_id: uuid.UUID
    cached_balance: Decimal
    ledger_balance: Decimal
    drift: Decimal

class TransferCreate(BaseModel):
    from_wallet_id: uuid.UUID
    to_wallet_id: uuid.UUID
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    description: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def wallets_differ(self):
        if self.from_wallet_id == self.to_wallet_id:
            raise ValueError("Source and destination wallets must differ")
        return self

class TransferRead(BaseModel):
    outgoing: TransactionRead
    incoming: TransactionRead
