# pocketledger/services/debts.py
"""
Debt bookkeeping. ``remaining_amount`` and ``status`` are caches of
``amount`` minus the recorded payments and are written only here.
"""
import logging
import uuid
from decimal import Decimal
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from pocketledger.core.db_utils import atomic, get_for_update
from pocketledger.core.exceptions import (
    ExceedsRemainingError,
    InvalidStateError,
    MismatchError,
    NotFoundError,
    UnauthorizedError,
)
from pocketledger.crud.debt import get_payment
from pocketledger.models.debt import Debt, DebtPayment, DebtStatus
from pocketledger.schemas.debt import DebtCreate, DebtPaymentCreate
from pocketledger.services.access import ensure_owned
from pocketledger.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

def derive_debt_status(remaining: Decimal, amount: Decimal) -> DebtStatus:
    if remaining == 0:
        return DebtStatus.completed
    if remaining < amount:
        return DebtStatus.partial
    return DebtStatus.pending

def clamp_remaining(remaining: Decimal, amount: Decimal) -> Decimal:
    return max(Decimal("0"), min(remaining, amount))

async def create_debt(user_id: uuid.UUID, debt_in: DebtCreate, db: AsyncSession) -> Debt:
    # Debts live outside the wallet ledger: creating one moves no money
    async with atomic(db):
        debt = Debt(
            user_id=user_id,
            type=debt_in.type,
            person_name=debt_in.person_name,
            amount=debt_in.amount,
            remaining_amount=debt_in.amount,
            status=DebtStatus.pending,
            description=debt_in.description,
            due_date=debt_in.due_date,
        )
        db.add(debt)
    await db.refresh(debt)
    logger.info(f"Created {debt.type.value} debt {debt.id} of {debt.amount} with {debt.person_name}")
    return debt

async def make_payment(
    user_id: uuid.UUID,
    debt_id: uuid.UUID,
    payment_in: DebtPaymentCreate,
    db: AsyncSession,
) -> Tuple[Debt, DebtPayment]:
    async with atomic(db):
        debt = ensure_owned(await get_for_update(db, Debt, debt_id), user_id, "Debt")
        if debt.status == DebtStatus.completed:
            raise InvalidStateError("Debt is already fully paid")
        if payment_in.amount <= 0:
            raise InvalidStateError("Payment amount must be positive")
        if payment_in.amount > debt.remaining_amount:
            raise ExceedsRemainingError()

        new_remaining = clamp_remaining(debt.remaining_amount - payment_in.amount, debt.amount)
        payment = DebtPayment(
            debt_id=debt.id,
            amount=payment_in.amount,
            payment_date=payment_in.payment_date or utcnow(),
            note=payment_in.note,
        )
        db.add(payment)
        debt.remaining_amount = new_remaining
        debt.status = derive_debt_status(new_remaining, debt.amount)

    await db.refresh(debt)
    await db.refresh(payment)
    logger.info(f"Recorded payment {payment.id} of {payment.amount} on debt {debt.id}; remaining {debt.remaining_amount}")
    return debt, payment

async def delete_payment(
    user_id: uuid.UUID,
    debt_id: uuid.UUID,
    payment_id: uuid.UUID,
    db: AsyncSession,
) -> Debt:
    async with atomic(db):
        debt = ensure_owned(await get_for_update(db, Debt, debt_id), user_id, "Debt")
        payment = await get_payment(payment_id, db)
        if payment is None:
            raise NotFoundError("Payment")
        if payment.debt_id != debt.id:
            if payment.debt.user_id != user_id:
                raise UnauthorizedError("Payment")
            raise MismatchError("Payment does not belong to this debt")

        new_remaining = clamp_remaining(debt.remaining_amount + payment.amount, debt.amount)
        await db.delete(payment)
        debt.remaining_amount = new_remaining
        debt.status = derive_debt_status(new_remaining, debt.amount)

    await db.refresh(debt)
    logger.info(f"Deleted payment {payment_id} from debt {debt.id}; remaining {debt.remaining_amount}")
    return debt
