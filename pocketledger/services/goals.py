# pocketledger/services/goals.py
"""
Savings goals funded from wallets.

A contribution debits a wallet through a savings expense transaction and
raises ``Goal.current_amount``; removing it credits the wallet back through
a refund income transaction. Deleting a whole goal refunds every funding
wallet in bulk while keeping the original savings rows as history.
"""
import logging
import uuid
from collections import defaultdict
from decimal import Decimal
from typing import Dict

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from pocketledger.core.db_utils import atomic, get_for_update
from pocketledger.core.exceptions import (
    ExceedsTargetError,
    InsufficientBalanceError,
    InvalidStateError,
    MismatchError,
    NotFoundError,
    UnauthorizedError,
)
from pocketledger.crud.goal import get_contribution, get_goal
from pocketledger.crud.transaction import get_goal_transactions, get_transaction
from pocketledger.crud.wallet import get_wallet
from pocketledger.models.category import CategoryKind
from pocketledger.models.goal import Goal, GoalContribution, GoalStatus
from pocketledger.models.transaction import Transaction, TransactionStatus, TransactionType
from pocketledger.schemas.goal import ContributionCreate, GoalCreate, GoalUpdate
from pocketledger.services.access import ensure_owned
from pocketledger.services.categories import get_or_create_system_category
from pocketledger.services.ledger import Direction, apply_effect, validate_sufficient_balance
from pocketledger.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

SAVING_DESCRIPTION = "Tiết kiệm cho mục tiêu: {name}"
CONTRIBUTION_REFUND_DESCRIPTION = "Hoàn tiền góp mục tiêu: {name}"
GOAL_REFUND_DESCRIPTION = "Hoàn tiền từ mục tiêu đã xóa: {name}"

def status_for_amounts(current: Decimal, target: Decimal) -> GoalStatus:
    return GoalStatus.completed if current >= target else GoalStatus.in_progress

async def create_goal(user_id: uuid.UUID, goal_in: GoalCreate, db: AsyncSession) -> Goal:
    async with atomic(db):
        goal = Goal(
            user_id=user_id,
            name=goal_in.name,
            description=goal_in.description,
            target_amount=goal_in.target_amount,
            current_amount=goal_in.current_amount,
            status=status_for_amounts(goal_in.current_amount, goal_in.target_amount),
            deadline=goal_in.deadline,
        )
        db.add(goal)
    await db.refresh(goal)
    logger.info(f"Created goal {goal.id} '{goal.name}' with target {goal.target_amount}")
    return goal

async def update_goal(user_id: uuid.UUID, goal_id: uuid.UUID, goal_in: GoalUpdate, db: AsyncSession) -> Goal:
    # Only description and deadline can be cleared with an explicit null
    changes = {
        field: value
        for field, value in goal_in.model_dump(exclude_unset=True).items()
        if value is not None or field in ("description", "deadline")
    }
    async with atomic(db):
        goal = ensure_owned(await get_for_update(db, Goal, goal_id), user_id, "Goal")
        target = changes.get("target_amount") or goal.target_amount
        if target < goal.current_amount:
            raise InvalidStateError("Target amount cannot be less than current amount")

        for field in ("name", "description", "deadline"):
            if field in changes:
                setattr(goal, field, changes[field])
        goal.target_amount = target

        requested = changes.get("status")
        if requested == GoalStatus.cancelled.value:
            goal.status = GoalStatus.cancelled
        elif requested == GoalStatus.in_progress.value or goal.status != GoalStatus.cancelled:
            goal.status = status_for_amounts(goal.current_amount, goal.target_amount)

    await db.refresh(goal)
    logger.info(f"Updated goal {goal.id}: {sorted(changes)}")
    return goal

async def add_contribution(
    user_id: uuid.UUID,
    goal_id: uuid.UUID,
    contribution_in: ContributionCreate,
    db: AsyncSession,
) -> Goal:
    amount = contribution_in.amount
    async with atomic(db):
        goal = ensure_owned(await get_for_update(db, Goal, goal_id), user_id, "Goal")
        wallet = ensure_owned(await get_wallet(contribution_in.wallet_id, db), user_id, "Wallet")

        new_current = goal.current_amount + amount
        # Checked before the status so a completed goal reports the bound it hit
        if new_current > goal.target_amount:
            raise ExceedsTargetError()
        if goal.status != GoalStatus.in_progress:
            raise InvalidStateError("Can only contribute to in-progress goals")
        if not await validate_sufficient_balance(db, wallet.id, amount):
            raise InsufficientBalanceError()

        goal.current_amount = new_current
        goal.status = status_for_amounts(new_current, goal.target_amount)

        category = await get_or_create_system_category(
            user_id, CategoryKind.savings, TransactionType.expense, db
        )
        contributed_at = contribution_in.contribution_date or utcnow()
        contribution_id = uuid.uuid4()
        saving = Transaction(
            user_id=user_id,
            wallet_id=wallet.id,
            category_id=category.id,
            type=TransactionType.expense,
            amount=amount,
            description=SAVING_DESCRIPTION.format(name=goal.name),
            date=contributed_at,
            status=TransactionStatus.completed,
            source_goal_id=goal.id,
            source_contribution_id=contribution_id,
        )
        db.add(saving)
        await db.flush()

        db.add(GoalContribution(
            id=contribution_id,
            goal_id=goal.id,
            wallet_id=wallet.id,
            amount=amount,
            contribution_date=contributed_at,
            note=contribution_in.note,
            transaction_id=saving.id,
        ))
        await db.flush()

        await apply_effect(db, wallet.id, amount, TransactionType.expense, Direction.add, require_funds=True)

    await db.refresh(goal)
    logger.info(f"Contributed {amount} from wallet {wallet.id} to goal {goal.id}; now {goal.current_amount}/{goal.target_amount}")
    return goal

async def delete_contribution(
    user_id: uuid.UUID,
    goal_id: uuid.UUID,
    contribution_id: uuid.UUID,
    db: AsyncSession,
) -> Goal:
    async with atomic(db):
        goal = ensure_owned(await get_for_update(db, Goal, goal_id), user_id, "Goal")
        contribution = await get_contribution(contribution_id, db)
        if contribution is None:
            raise NotFoundError("Contribution")
        if contribution.goal_id != goal.id:
            if contribution.goal.user_id != user_id:
                raise UnauthorizedError("Contribution")
            raise MismatchError("Contribution does not belong to this goal")

        new_current = max(Decimal("0"), goal.current_amount - contribution.amount)
        if new_current == 0:
            new_status = GoalStatus.in_progress
        elif new_current >= goal.target_amount:
            new_status = GoalStatus.completed
        elif goal.status == GoalStatus.completed:
            new_status = GoalStatus.in_progress
        else:
            new_status = goal.status

        refund_category = await get_or_create_system_category(
            user_id, CategoryKind.goal_refund, TransactionType.income, db
        )
        db.add(Transaction(
            user_id=user_id,
            wallet_id=contribution.wallet_id,
            category_id=refund_category.id,
            type=TransactionType.income,
            amount=contribution.amount,
            description=CONTRIBUTION_REFUND_DESCRIPTION.format(name=goal.name),
            date=utcnow(),
            status=TransactionStatus.completed,
            source_goal_id=goal.id,
            source_contribution_id=contribution.id,
        ))
        await db.flush()
        await apply_effect(db, contribution.wallet_id, contribution.amount, TransactionType.income, Direction.add)

        saving_id = contribution.transaction_id
        await db.delete(contribution)
        await db.flush()
        # The refund above already restored the money; the funding row goes without a second reversal
        if saving_id is not None:
            saving = await get_transaction(saving_id, db)
            if saving is not None:
                await db.delete(saving)

        goal.current_amount = new_current
        goal.status = new_status

    await db.refresh(goal)
    logger.info(f"Removed contribution {contribution_id} from goal {goal.id}; now {goal.current_amount}/{goal.target_amount}")
    return goal

async def delete_goal(user_id: uuid.UUID, goal_id: uuid.UUID, db: AsyncSession) -> Dict[uuid.UUID, Decimal]:
    """
    Delete a goal, crediting each funding wallet with what it put in.
    Returns the refunded amount per wallet.
    """
    refunds: Dict[uuid.UUID, Decimal] = defaultdict(Decimal)
    async with atomic(db):
        goal = ensure_owned(await get_for_update(db, Goal, goal_id), user_id, "Goal")

        if goal.current_amount > 0:
            savings = await get_goal_transactions(user_id, goal.id, CategoryKind.savings, db)
            for saving in savings:
                if saving.status == TransactionStatus.completed:
                    refunds[saving.wallet_id] += saving.amount

            if refunds:
                refund_category = await get_or_create_system_category(
                    user_id, CategoryKind.goal_refund, TransactionType.income, db
                )
                for wallet_id, amount in refunds.items():
                    db.add(Transaction(
                        user_id=user_id,
                        wallet_id=wallet_id,
                        category_id=refund_category.id,
                        type=TransactionType.income,
                        amount=amount,
                        description=GOAL_REFUND_DESCRIPTION.format(name=goal.name),
                        date=utcnow(),
                        status=TransactionStatus.completed,
                        source_goal_id=goal.id,
                    ))
                    await db.flush()
                    await apply_effect(db, wallet_id, amount, TransactionType.income, Direction.add)

        await db.execute(delete(GoalContribution).where(GoalContribution.goal_id == goal.id))
        await db.delete(goal)

    logger.info(f"Deleted goal {goal_id}; refunded {dict(refunds)}")
    return dict(refunds)

async def get_owned_goal(user_id: uuid.UUID, goal_id: uuid.UUID, db: AsyncSession) -> Goal:
    return ensure_owned(await get_goal(goal_id, db), user_id, "Goal")
