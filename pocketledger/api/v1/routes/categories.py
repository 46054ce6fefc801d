# pocketledger/api/v1/routes/categories.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from pocketledger.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate, CategoryWithCount
from pocketledger.crud.category import (
    create_category_for_user,
    get_categories_for_user,
    get_category,
    update_category,
)
from pocketledger.core.database import get_async_session
from pocketledger.models.transaction import TransactionType
from pocketledger.models.user import User
from pocketledger.services.access import ensure_owned
from pocketledger.services.categories import remove_category
from pocketledger.api.deps import get_current_user

router = APIRouter(prefix="/categories", tags=["categories"])

@router.get("", response_model=List[CategoryWithCount])
async def read_categories(
    type: Optional[TransactionType] = None,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    rows = await get_categories_for_user(user.id, db, type=type)
    return [
        CategoryWithCount.model_validate(category).model_copy(update={"transaction_count": count})
        for category, count in rows
    ]

@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(
    cat_in: CategoryCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await create_category_for_user(user.id, cat_in, db)

@router.get("/{category_id}", response_model=CategoryRead)
async def read_category(
    category_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return ensure_owned(await get_category(category_id, db), user.id, "Category")

@router.patch("/{category_id}", response_model=CategoryRead)
async def update_category_endpoint(
    category_id: uuid.UUID,
    cat_in: CategoryUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    # Type is fixed once transactions may reference the category
    category = ensure_owned(await get_category(category_id, db), user.id, "Category")
    return await update_category(category, cat_in, db)

@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category_endpoint(
    category_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    await remove_category(user.id, category_id, db)
    return None
