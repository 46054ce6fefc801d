# pocketledger/crud/transaction.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc, func
from pocketledger.models.category import Category, CategoryKind
from pocketledger.models.transaction import Transaction, TransactionStatus, TransactionType
from typing import List, Optional, Tuple
from datetime import datetime
import uuid

async def get_transaction(transaction_id: uuid.UUID, db: AsyncSession) -> Optional[Transaction]:
    result = await db.execute(select(Transaction).where(Transaction.id == transaction_id))
    return result.scalar_one_or_none()

async def get_transactions_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    wallet_id: Optional[uuid.UUID] = None,
    category_id: Optional[uuid.UUID] = None,
    type: Optional[TransactionType] = None,
    status: Optional[TransactionStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    page: int = 1,
    limit: int = 50,
) -> Tuple[List[Transaction], int]:
    """Filtered page of a user's transactions, newest first, plus the total match count."""
    conditions = [Transaction.user_id == user_id]
    if wallet_id:
        conditions.append(Transaction.wallet_id == wallet_id)
    if category_id:
        conditions.append(Transaction.category_id == category_id)
    if type:
        conditions.append(Transaction.type == type)
    if status:
        conditions.append(Transaction.status == status)
    if start_date:
        conditions.append(Transaction.date >= start_date)
    if end_date:
        conditions.append(Transaction.date <= end_date)

    total_result = await db.execute(select(func.count(Transaction.id)).where(*conditions))
    total = total_result.scalar_one() or 0

    result = await db.execute(
        select(Transaction)
        .where(*conditions)
        .order_by(desc(Transaction.date))
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().unique().all()), total

async def get_goal_transactions(
    user_id: uuid.UUID,
    goal_id: uuid.UUID,
    kind: CategoryKind,
    db: AsyncSession,
    per_contribution: Optional[bool] = None,
) -> List[Transaction]:
    """
    Transactions generated on behalf of ``goal_id`` under system categories of
    ``kind``. ``per_contribution`` narrows to rows that do (True) or do
    not (False) point at a single contribution.
    """
    query = select(Transaction).join(Category, Transaction.category_id == Category.id).where(
        Transaction.user_id == user_id,
        Transaction.source_goal_id == goal_id,
        Category.kind == kind,
    )
    if per_contribution is True:
        query = query.where(Transaction.source_contribution_id.is_not(None))
    elif per_contribution is False:
        query = query.where(Transaction.source_contribution_id.is_(None))
    result = await db.execute(query.order_by(Transaction.date))
    return list(result.scalars().unique().all())
