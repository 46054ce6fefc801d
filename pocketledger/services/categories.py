# pocketledger/services/categories.py
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from pocketledger.core.exceptions import InvalidStateError
from pocketledger.crud.category import (
    count_category_transactions,
    delete_category,
    get_category,
    get_system_category,
)
from pocketledger.models.category import Category, CategoryKind
from pocketledger.models.transaction import TransactionType
from pocketledger.services.access import ensure_owned

logger = logging.getLogger(__name__)

# Display attributes of the categories the services create on demand
SYSTEM_CATEGORIES = {
    (CategoryKind.savings, TransactionType.expense): {"name": "Tiết kiệm", "icon": "🎯", "color": "#FCA5A5"},
    (CategoryKind.goal_refund, TransactionType.income): {"name": "Hoàn tiền mục tiêu", "icon": "💰", "color": "#10B981"},
    (CategoryKind.transfer, TransactionType.expense): {"name": "Chuyển tiền", "icon": "🔁", "color": "#64748B"},
    (CategoryKind.transfer, TransactionType.income): {"name": "Nhận chuyển tiền", "icon": "🔁", "color": "#64748B"},
}

async def get_or_create_system_category(
    user_id: uuid.UUID,
    kind: CategoryKind,
    type: TransactionType,
    db: AsyncSession,
) -> Category:
    """
    Find the user's system category for ``(kind, type)``, creating it on
    first use. Does not commit; callers run it inside their unit of work.
    """
    category = await get_system_category(user_id, kind, type, db)
    if category is not None:
        return category

    category = Category(user_id=user_id, kind=kind, type=type, **SYSTEM_CATEGORIES[(kind, type)])
    db.add(category)
    await db.flush()
    logger.info(f"Created system category {kind.value}/{type.value} for user {user_id}")
    return category

async def remove_category(user_id: uuid.UUID, category_id: uuid.UUID, db: AsyncSession) -> None:
    category = ensure_owned(await get_category(category_id, db), user_id, "Category")
    in_use = await count_category_transactions(category.id, db)
    if in_use > 0:
        raise InvalidStateError(
            f"Cannot delete category with existing transactions ({in_use})"
        )
    await delete_category(category, db)
    logger.info(f"Deleted category {category_id} for user {user_id}")
