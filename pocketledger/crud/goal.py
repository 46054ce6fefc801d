# pocketledger/crud/goal.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc, func
from pocketledger.models.goal import Goal, GoalContribution, GoalStatus
from typing import List, Optional, Tuple
import uuid

async def get_goal(goal_id: uuid.UUID, db: AsyncSession) -> Optional[Goal]:
    result = await db.execute(select(Goal).where(Goal.id == goal_id))
    return result.scalar_one_or_none()

async def get_goals_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    status: Optional[GoalStatus] = None,
    page: int = 1,
    limit: int = 50,
) -> Tuple[List[Goal], int]:
    conditions = [Goal.user_id == user_id]
    if status:
        conditions.append(Goal.status == status)

    total_result = await db.execute(select(func.count(Goal.id)).where(*conditions))
    total = total_result.scalar_one() or 0
    result = await db.execute(
        select(Goal)
        .where(*conditions)
        .order_by(desc(Goal.created_at))
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total

async def get_contribution(contribution_id: uuid.UUID, db: AsyncSession) -> Optional[GoalContribution]:
    result = await db.execute(select(GoalContribution).where(GoalContribution.id == contribution_id))
    return result.scalar_one_or_none()

async def get_contributions_for_goal(goal_id: uuid.UUID, db: AsyncSession) -> List[GoalContribution]:
    result = await db.execute(
        select(GoalContribution)
        .where(GoalContribution.goal_id == goal_id)
        .order_by(desc(GoalContribution.contribution_date))
    )
    return list(result.scalars().unique().all())

async def get_contribution_by_transaction(transaction_id: uuid.UUID, db: AsyncSession) -> Optional[GoalContribution]:
    result = await db.execute(
        select(GoalContribution).where(GoalContribution.transaction_id == transaction_id)
    )
    return result.scalars().first()
