# pocketledger/crud/category.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc, func
from pocketledger.models.category import Category, CategoryKind
from pocketledger.models.transaction import Transaction, TransactionType
from typing import List, Optional, Tuple
import uuid
from pocketledger.schemas.category import CategoryCreate, CategoryUpdate

async def get_category(category_id: uuid.UUID, db: AsyncSession) -> Optional[Category]:
    result = await db.execute(select(Category).where(Category.id == category_id))
    return result.scalar_one_or_none()

async def get_categories_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    type: Optional[TransactionType] = None,
) -> List[Tuple[Category, int]]:
    """Categories with their transaction counts, newest first."""
    tx_count = (
        select(func.count(Transaction.id))
        .where(Transaction.category_id == Category.id)
        .correlate(Category)
        .scalar_subquery()
    )
    query = select(Category, tx_count).where(Category.user_id == user_id)
    if type is not None:
        query = query.where(Category.type == type)
    result = await db.execute(query.order_by(desc(Category.created_at)))
    return [(row[0], row[1]) for row in result.all()]

async def count_category_transactions(category_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(select(func.count(Transaction.id)).where(Transaction.category_id == category_id))
    return result.scalar_one() or 0

async def get_system_category(
    user_id: uuid.UUID,
    kind: CategoryKind,
    type: TransactionType,
    db: AsyncSession,
) -> Optional[Category]:
    result = await db.execute(
        select(Category)
        .where(Category.user_id == user_id, Category.kind == kind, Category.type == type)
        .order_by(Category.created_at)
        .limit(1)
    )
    return result.scalar_one_or_none()

async def create_category_for_user(user_id: uuid.UUID, cat_in: CategoryCreate, db: AsyncSession) -> Category:
    new_cat = Category(**cat_in.model_dump(), user_id=user_id, kind=CategoryKind.user)
    db.add(new_cat)
    await db.commit()
    await db.refresh(new_cat)
    return new_cat

async def update_category(category: Category, cat_in: CategoryUpdate, db: AsyncSession) -> Category:
    # A null name means unchanged; icon and color may be cleared
    for field, value in cat_in.model_dump(exclude_unset=True).items():
        if value is None and field == "name":
            continue
        setattr(category, field, value)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category

async def delete_category(category: Category, db: AsyncSession) -> None:
    await db.delete(category)
    await db.commit()


# Default categories to be created for every new user
DEFAULT_CATEGORIES: List[dict] = [
    {"name": "Ăn uống", "type": TransactionType.expense, "icon": "🍔", "color": "#ef4444"},
    {"name": "Mua sắm", "type": TransactionType.expense, "icon": "🛒", "color": "#f59e0b"},
    {"name": "Di chuyển", "type": TransactionType.expense, "icon": "🚗", "color": "#3b82f6"},
    {"name": "Nhà ở", "type": TransactionType.expense, "icon": "🏠", "color": "#8b5cf6"},
    {"name": "Giải trí", "type": TransactionType.expense, "icon": "🎮", "color": "#ec4899"},
    {"name": "Y tế", "type": TransactionType.expense, "icon": "⚕️", "color": "#10b981"},
    {"name": "Giáo dục", "type": TransactionType.expense, "icon": "📚", "color": "#6366f1"},
    {"name": "Khác", "type": TransactionType.expense, "icon": "📦", "color": "#6b7280"},
    {"name": "Lương", "type": TransactionType.income, "icon": "💰", "color": "#22c55e"},
    {"name": "Khác", "type": TransactionType.income, "icon": "💵", "color": "#10b981"},
]

def build_default_categories(user_id: uuid.UUID) -> List[Category]:
    """Unsaved default category rows for a newly registered user."""
    return [
        Category(user_id=user_id, kind=CategoryKind.user, **cat)
        for cat in DEFAULT_CATEGORIES
    ]
