# pocketledger/crud/debt.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete, desc, func
from pocketledger.models.debt import Debt, DebtPayment, DebtStatus, DebtType
from pocketledger.schemas.debt import DebtUpdate
from typing import List, Optional, Tuple
import uuid

async def get_debt(debt_id: uuid.UUID, db: AsyncSession) -> Optional[Debt]:
    result = await db.execute(select(Debt).where(Debt.id == debt_id))
    return result.scalar_one_or_none()

async def get_debts_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    type: Optional[DebtType] = None,
    status: Optional[DebtStatus] = None,
    page: int = 1,
    limit: int = 50,
) -> Tuple[List[Debt], int]:
    conditions = [Debt.user_id == user_id]
    if type:
        conditions.append(Debt.type == type)
    if status:
        conditions.append(Debt.status == status)

    total_result = await db.execute(select(func.count(Debt.id)).where(*conditions))
    total = total_result.scalar_one() or 0
    result = await db.execute(
        select(Debt)
        .where(*conditions)
        .order_by(desc(Debt.created_at))
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total

async def get_payment(payment_id: uuid.UUID, db: AsyncSession) -> Optional[DebtPayment]:
    result = await db.execute(select(DebtPayment).where(DebtPayment.id == payment_id))
    return result.scalar_one_or_none()

async def get_payments_for_debt(debt_id: uuid.UUID, db: AsyncSession) -> List[DebtPayment]:
    result = await db.execute(
        select(DebtPayment)
        .where(DebtPayment.debt_id == debt_id)
        .order_by(desc(DebtPayment.payment_date))
    )
    return list(result.scalars().unique().all())

async def update_debt(debt: Debt, debt_in: DebtUpdate, db: AsyncSession) -> Debt:
    for field, value in debt_in.model_dump(exclude_unset=True).items():
        # person_name is required; description and due_date may be cleared
        if value is None and field == "person_name":
            continue
        setattr(debt, field, value)
    db.add(debt)
    await db.commit()
    await db.refresh(debt)
    return debt

async def delete_debt(debt: Debt, db: AsyncSession) -> None:
    await db.execute(delete(DebtPayment).where(DebtPayment.debt_id == debt.id))
    await db.delete(debt)
    await db.commit()
