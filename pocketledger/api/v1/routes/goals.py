# pocketledger/api/v1/routes/goals.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, List, Optional
import math
import uuid

from pocketledger.schemas.goal import (
    ContributionCreate,
    ContributionRead,
    GoalCreate,
    GoalPage,
    GoalRead,
    GoalUpdate,
)
from pocketledger.crud.goal import get_contributions_for_goal, get_goals_for_user
from pocketledger.core.database import get_async_session
from pocketledger.models.goal import GoalStatus
from pocketledger.models.user import User
from pocketledger.services.goals import (
    add_contribution,
    create_goal,
    delete_contribution,
    delete_goal,
    get_owned_goal,
    update_goal,
)
from pocketledger.api.deps import get_current_user

router = APIRouter(prefix="/goals", tags=["goals"])

@router.get("", response_model=GoalPage)
async def read_goals(
    status: Optional[GoalStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goals, total = await get_goals_for_user(user.id, db, status=status, page=page, limit=limit)
    return {
        "data": goals,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit),
    }

@router.post("", response_model=GoalRead, status_code=status.HTTP_201_CREATED)
async def create_goal_endpoint(
    goal_in: GoalCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await create_goal(user.id, goal_in, db)

@router.get("/{goal_id}", response_model=GoalRead)
async def read_goal(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await get_owned_goal(user.id, goal_id, db)

@router.patch("/{goal_id}", response_model=GoalRead)
async def update_goal_endpoint(
    goal_id: uuid.UUID,
    goal_in: GoalUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await update_goal(user.id, goal_id, goal_in, db)

@router.delete("/{goal_id}")
async def delete_goal_endpoint(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
) -> Dict:
    """
    Deletes the goal and refunds each wallet that funded it.

    Returns:
    - **refunds**: refunded amount per wallet id
    """
    refunds = await delete_goal(user.id, goal_id, db)
    return {"refunds": {str(wallet_id): str(amount) for wallet_id, amount in refunds.items()}}

@router.post("/{goal_id}/contributions", response_model=GoalRead, status_code=status.HTTP_201_CREATED)
async def add_contribution_endpoint(
    goal_id: uuid.UUID,
    contribution_in: ContributionCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await add_contribution(user.id, goal_id, contribution_in, db)

@router.get("/{goal_id}/contributions", response_model=List[ContributionRead])
async def read_contributions(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_owned_goal(user.id, goal_id, db)
    return await get_contributions_for_goal(goal.id, db)

@router.delete("/{goal_id}/contributions/{contribution_id}", response_model=GoalRead)
async def delete_contribution_endpoint(
    goal_id: uuid.UUID,
    contribution_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await delete_contribution(user.id, goal_id, contribution_id, db)
