# pocketledger/api/v1/routes/dashboard.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import List, Optional

from pocketledger.core.database import get_async_session
from pocketledger.models.user import User
from pocketledger.models.transaction import TransactionType
from pocketledger.schemas.dashboard import CategoryBreakdown, FinancialSummary, MonthlyTrend, RecentTransaction
from pocketledger.services.dashboard import (
    get_category_breakdown,
    get_financial_summary,
    get_recent_transactions,
    get_trends,
)
from pocketledger.api.deps import get_current_user

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

@router.get("/summary", response_model=FinancialSummary)
async def get_dashboard_summary(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Returns the figures behind the dashboard cards:
    - income, expense and net for completed transactions in the window
    - pending income not yet received
    - total balance across wallets
    - outstanding lending and borrowing
    - saved versus targeted for goals in progress
    """
    return await get_financial_summary(user.id, db, start_date=start_date, end_date=end_date)

@router.get("/trends", response_model=List[MonthlyTrend])
async def get_dashboard_trends(
    months: int = Query(6, ge=1, le=60),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Monthly completed income, expense and their difference, oldest month first."""
    return await get_trends(user.id, db, months=months)

@router.get("/category-breakdown", response_model=CategoryBreakdown)
async def get_dashboard_category_breakdown(
    type: Optional[TransactionType] = None,
    period: Optional[str] = Query(None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$", description="YYYY-MM"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await get_category_breakdown(user.id, db, type=type, period=period)

@router.get("/recent-transactions", response_model=List[RecentTransaction])
async def get_dashboard_recent_transactions(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await get_recent_transactions(user.id, db, limit=limit)
