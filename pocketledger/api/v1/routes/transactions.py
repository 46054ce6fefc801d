# pocketledger/api/v1/routes/transactions.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import Optional
import math
import uuid

from pocketledger.schemas.transaction import (
    TransactionCreate,
    TransactionPage,
    TransactionRead,
    TransactionUpdate,
)
from pocketledger.crud.transaction import get_transaction, get_transactions_for_user
from pocketledger.core.database import get_async_session
from pocketledger.models.transaction import TransactionStatus, TransactionType
from pocketledger.models.user import User
from pocketledger.services.access import ensure_owned
from pocketledger.services.ledger import (
    create_transaction,
    delete_transaction,
    mark_received,
    update_transaction,
)
from pocketledger.api.deps import get_current_user

router = APIRouter(prefix="/transactions", tags=["transactions"])

@router.get("", response_model=TransactionPage)
async def read_transactions(
    wallet_id: Optional[uuid.UUID] = None,
    category_id: Optional[uuid.UUID] = None,
    type: Optional[TransactionType] = None,
    status: Optional[TransactionStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    transactions, total = await get_transactions_for_user(
        user.id,
        db,
        wallet_id=wallet_id,
        category_id=category_id,
        type=type,
        status=status,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    return {
        "data": transactions,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit),
    }

@router.post("", response_model=TransactionRead, status_code=status.HTTP_201_CREATED)
async def create_transaction_endpoint(
    tx_in: TransactionCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await create_transaction(user.id, tx_in, db)

@router.get("/{transaction_id}", response_model=TransactionRead)
async def read_transaction(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return ensure_owned(await get_transaction(transaction_id, db), user.id, "Transaction")

@router.put("/{transaction_id}", response_model=TransactionRead)
@router.patch("/{transaction_id}", response_model=TransactionRead)
async def update_transaction_endpoint(
    transaction_id: uuid.UUID,
    tx_in: TransactionUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await update_transaction(user.id, transaction_id, tx_in, db)

@router.patch("/{transaction_id}/mark-received", response_model=TransactionRead)
async def mark_received_endpoint(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await mark_received(user.id, transaction_id, db)

@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction_endpoint(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    await delete_transaction(user.id, transaction_id, db)
    return None
