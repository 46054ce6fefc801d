# pocketledger/crud/wallet.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc, func, case
from pocketledger.models.transaction import Transaction, TransactionStatus, TransactionType
from pocketledger.models.wallet import Wallet
from pocketledger.schemas.wallet import WalletUpdate
from typing import List, Optional, Tuple
from decimal import Decimal
import uuid

async def get_wallet(wallet_id: uuid.UUID, db: AsyncSession) -> Optional[Wallet]:
    result = await db.execute(select(Wallet).where(Wallet.id == wallet_id))
    return result.scalar_one_or_none()

async def get_wallets_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[Tuple[Wallet, int]]:
    """Wallets with their transaction counts, default wallet first."""
    tx_count = (
        select(func.count(Transaction.id))
        .where(Transaction.wallet_id == Wallet.id)
        .correlate(Wallet)
        .scalar_subquery()
    )
    result = await db.execute(
        select(Wallet, tx_count)
        .where(Wallet.user_id == user_id)
        .order_by(desc(Wallet.is_default), desc(Wallet.created_at))
    )
    return [(row[0], row[1]) for row in result.all()]

async def count_wallets_for_user(user_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(select(func.count(Wallet.id)).where(Wallet.user_id == user_id))
    return result.scalar_one() or 0

async def count_wallet_transactions(wallet_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(select(func.count(Transaction.id)).where(Transaction.wallet_id == wallet_id))
    return result.scalar_one() or 0

async def get_other_wallet(user_id: uuid.UUID, exclude_id: uuid.UUID, db: AsyncSession) -> Optional[Wallet]:
    result = await db.execute(
        select(Wallet)
        .where(Wallet.user_id == user_id, Wallet.id != exclude_id)
        .order_by(Wallet.created_at)
        .limit(1)
    )
    return result.scalar_one_or_none()

async def sum_completed_effects(wallet_id: uuid.UUID, db: AsyncSession) -> Decimal:
    """Signed sum of completed transactions: income positive, expense negative."""
    signed = case(
        (Transaction.type == TransactionType.income, Transaction.amount),
        else_=-Transaction.amount,
    )
    result = await db.execute(
        select(func.coalesce(func.sum(signed), 0))
        .where(Transaction.wallet_id == wallet_id, Transaction.status == TransactionStatus.completed)
    )
    return Decimal(str(result.scalar_one()))

async def update_wallet(wallet: Wallet, wallet_in: WalletUpdate, db: AsyncSession) -> Wallet:
    for field, value in wallet_in.model_dump(exclude_unset=True).items():
        if value is None and field == "name":
            continue
        setattr(wallet, field, value)
    db.add(wallet)
    await db.commit()
    await db.refresh(wallet)
    return wallet
