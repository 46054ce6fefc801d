# pocketledger/api/v1/routes/debts.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import math
import uuid

from pocketledger.schemas.debt import (
    DebtCreate,
    DebtPage,
    DebtPaymentCreate,
    DebtPaymentRead,
    DebtPaymentResult,
    DebtRead,
    DebtUpdate,
)
from pocketledger.crud.debt import delete_debt, get_debt, get_debts_for_user, get_payments_for_debt, update_debt
from pocketledger.core.database import get_async_session
from pocketledger.models.debt import DebtStatus, DebtType
from pocketledger.models.user import User
from pocketledger.services.access import ensure_owned
from pocketledger.services.debts import create_debt, delete_payment, make_payment
from pocketledger.api.deps import get_current_user

router = APIRouter(prefix="/debts", tags=["debts"])

@router.get("", response_model=DebtPage)
async def read_debts(
    type: Optional[DebtType] = None,
    status: Optional[DebtStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    debts, total = await get_debts_for_user(user.id, db, type=type, status=status, page=page, limit=limit)
    return {
        "data": debts,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit),
    }

@router.post("", response_model=DebtRead, status_code=status.HTTP_201_CREATED)
async def create_debt_endpoint(
    debt_in: DebtCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await create_debt(user.id, debt_in, db)

@router.get("/{debt_id}", response_model=DebtRead)
async def read_debt(
    debt_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return ensure_owned(await get_debt(debt_id, db), user.id, "Debt")

@router.patch("/{debt_id}", response_model=DebtRead)
async def update_debt_endpoint(
    debt_id: uuid.UUID,
    debt_in: DebtUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    # Amounts change only through payments
    debt = ensure_owned(await get_debt(debt_id, db), user.id, "Debt")
    return await update_debt(debt, debt_in, db)

@router.delete("/{debt_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_debt_endpoint(
    debt_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    debt = ensure_owned(await get_debt(debt_id, db), user.id, "Debt")
    await delete_debt(debt, db)
    return None

@router.post("/{debt_id}/payments", response_model=DebtPaymentResult, status_code=status.HTTP_201_CREATED)
async def make_payment_endpoint(
    debt_id: uuid.UUID,
    payment_in: DebtPaymentCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    debt, payment = await make_payment(user.id, debt_id, payment_in, db)
    return {"debt": debt, "payment": payment}

@router.get("/{debt_id}/payments", response_model=List[DebtPaymentRead])
async def read_payments(
    debt_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    debt = ensure_owned(await get_debt(debt_id, db), user.id, "Debt")
    return await get_payments_for_debt(debt.id, db)

@router.delete("/{debt_id}/payments/{payment_id}", response_model=DebtRead)
async def delete_payment_endpoint(
    debt_id: uuid.UUID,
    payment_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await delete_payment(user.id, debt_id, payment_id, db)
