# pocketledger/schemas/dashboard.py
import uuid
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel

from pocketledger.models.transaction import TransactionType
from pocketledger.schemas.transaction import TransactionRead

class DebtSummary(BaseModel):
    total_lending: Decimal
    total_borrowing: Decimal
    net_debt: Decimal

class GoalSummary(BaseModel):
    total_target: Decimal
    total_saved: Decimal
    remaining: Decimal

class FinancialSummary(BaseModel):
    total_income: Decimal
    total_expense: Decimal
    net: Decimal
    pending_income: Decimal
    total_wallet_balance: Decimal
    debts: DebtSummary
    goals: GoalSummary

class MonthlyTrend(BaseModel):
    month: str  # YYYY-MM
    income: Decimal
    expense: Decimal
    balance: Decimal

class CategoryTotal(BaseModel):
    category_id: uuid.UUID
    category_name: str
    category_icon: Optional[str] = None
    category_color: Optional[str] = None
    type: TransactionType
    total: Decimal
    count: int

class CategoryBreakdown(BaseModel):
    breakdown: List[CategoryTotal]
    total_amount: Decimal

class RecentTransaction(TransactionRead):
    category_name: str
    wallet_name: str
