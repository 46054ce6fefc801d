# pocketledger/services/dashboard.py
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pocketledger.models.category import Category
from pocketledger.models.debt import Debt, DebtStatus, DebtType
from pocketledger.models.goal import Goal, GoalStatus
from pocketledger.models.transaction import Transaction, TransactionStatus, TransactionType
from pocketledger.models.wallet import Wallet
from pocketledger.schemas.dashboard import (
    CategoryBreakdown,
    CategoryTotal,
    DebtSummary,
    FinancialSummary,
    GoalSummary,
    MonthlyTrend,
    RecentTransaction,
)
from pocketledger.schemas.transaction import TransactionRead
from pocketledger.utils.timeutils import utcnow

def _decimal(value) -> Decimal:
    return Decimal(str(value or 0))

async def _sum_transactions(
    user_id: uuid.UUID,
    type: TransactionType,
    status: TransactionStatus,
    db: AsyncSession,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Decimal:
    query = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
        Transaction.user_id == user_id,
        Transaction.type == type,
        Transaction.status == status,
    )
    if start_date:
        query = query.where(Transaction.date >= start_date)
    if end_date:
        query = query.where(Transaction.date <= end_date)
    result = await db.execute(query)
    return _decimal(result.scalar_one())

async def _outstanding_debt(user_id: uuid.UUID, type: DebtType, db: AsyncSession) -> Decimal:
    result = await db.execute(
        select(func.coalesce(func.sum(Debt.remaining_amount), 0)).where(
            Debt.user_id == user_id,
            Debt.type == type,
            Debt.status != DebtStatus.completed,
        )
    )
    return _decimal(result.scalar_one())

async def get_financial_summary(
    user_id: uuid.UUID,
    db: AsyncSession,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> FinancialSummary:
    """
    Totals for the dashboard cards. Income and expense cover completed
    transactions in the optional date window; balances, debts and goals are
    current figures.
    """
    total_income = await _sum_transactions(
        user_id, TransactionType.income, TransactionStatus.completed, db, start_date, end_date
    )
    total_expense = await _sum_transactions(
        user_id, TransactionType.expense, TransactionStatus.completed, db, start_date, end_date
    )
    pending_income = await _sum_transactions(
        user_id, TransactionType.income, TransactionStatus.pending, db, start_date, end_date
    )

    result = await db.execute(
        select(func.coalesce(func.sum(Wallet.balance), 0)).where(Wallet.user_id == user_id)
    )
    total_wallet_balance = _decimal(result.scalar_one())

    lending = await _outstanding_debt(user_id, DebtType.lend, db)
    borrowing = await _outstanding_debt(user_id, DebtType.borrow, db)

    result = await db.execute(
        select(
            func.coalesce(func.sum(Goal.target_amount), 0),
            func.coalesce(func.sum(Goal.current_amount), 0),
        ).where(Goal.user_id == user_id, Goal.status == GoalStatus.in_progress)
    )
    total_target, total_saved = result.one()
    total_target, total_saved = _decimal(total_target), _decimal(total_saved)

    return FinancialSummary(
        total_income=total_income,
        total_expense=total_expense,
        net=total_income - total_expense,
        pending_income=pending_income,
        total_wallet_balance=total_wallet_balance,
        debts=DebtSummary(
            total_lending=lending,
            total_borrowing=borrowing,
            net_debt=lending - borrowing,
        ),
        goals=GoalSummary(
            total_target=total_target,
            total_saved=total_saved,
            remaining=total_target - total_saved,
        ),
    )

def months_back(moment: datetime, months: int) -> datetime:
    """Midnight on the first day of the month ``months`` calendar months before ``moment``."""
    index = moment.year * 12 + moment.month - 1 - months
    return moment.replace(
        year=index // 12, month=index % 12 + 1, day=1, hour=0, minute=0, second=0, microsecond=0
    )

def month_bounds(period: str):
    """``YYYY-MM`` to the half-open UTC range [first of month, first of next month)."""
    year, month = (int(part) for part in period.split("-"))
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    return start, months_back(start, -1)

async def get_trends(
    user_id: uuid.UUID,
    db: AsyncSession,
    months: int = 6,
    now: Optional[datetime] = None,
) -> List[MonthlyTrend]:
    """Completed income and expense per calendar month, oldest month first."""
    start_date = months_back(now or utcnow(), months)
    result = await db.execute(
        select(Transaction.type, Transaction.amount, Transaction.date).where(
            Transaction.user_id == user_id,
            Transaction.status == TransactionStatus.completed,
            Transaction.date >= start_date,
        )
    )

    monthly: Dict[str, Dict[TransactionType, Decimal]] = defaultdict(lambda: defaultdict(Decimal))
    for type, amount, date in result.all():
        monthly[date.strftime("%Y-%m")][type] += _decimal(amount)

    trends = []
    for month in sorted(monthly):
        income = monthly[month][TransactionType.income]
        expense = monthly[month][TransactionType.expense]
        trends.append(MonthlyTrend(month=month, income=income, expense=expense, balance=income - expense))
    return trends

async def get_category_breakdown(
    user_id: uuid.UUID,
    db: AsyncSession,
    type: Optional[TransactionType] = None,
    period: Optional[str] = None,
) -> CategoryBreakdown:
    total = func.coalesce(func.sum(Transaction.amount), 0).label("total")
    query = (
        select(Category, total, func.count(Transaction.id).label("count"))
        .join(Transaction, Transaction.category_id == Category.id)
        .where(Transaction.user_id == user_id, Transaction.status == TransactionStatus.completed)
        .group_by(Category.id)
    )
    if type:
        query = query.where(Transaction.type == type)
    if period:
        start_date, end_date = month_bounds(period)
        query = query.where(Transaction.date >= start_date, Transaction.date < end_date)

    result = await db.execute(query)
    breakdown = [
        CategoryTotal(
            category_id=category.id,
            category_name=category.name,
            category_icon=category.icon,
            category_color=category.color,
            type=category.type,
            total=_decimal(amount),
            count=count,
        )
        for category, amount, count in result.all()
    ]
    breakdown.sort(key=lambda item: item.total, reverse=True)
    return CategoryBreakdown(breakdown=breakdown, total_amount=sum((item.total for item in breakdown), Decimal("0")))

async def get_recent_transactions(user_id: uuid.UUID, db: AsyncSession, limit: int = 10) -> List[RecentTransaction]:
    result = await db.execute(
        select(Transaction, Wallet.name)
        .join(Wallet, Transaction.wallet_id == Wallet.id)
        .where(Transaction.user_id == user_id)
        .order_by(desc(Transaction.date))
        .limit(limit)
    )
    return [
        RecentTransaction(
            **TransactionRead.model_validate(tx).model_dump(),
            category_name=tx.category.name,
            wallet_name=wallet_name,
        )
        for tx, wallet_name in result.all()
    ]
