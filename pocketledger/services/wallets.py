# pocketledger/services/wallets.py
import logging
import uuid

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from pocketledger.core.config import settings
from pocketledger.core.db_utils import atomic
from pocketledger.core.exceptions import InvalidStateError
from pocketledger.crud.wallet import (
    count_wallet_transactions,
    count_wallets_for_user,
    get_other_wallet,
    get_wallet,
)
from pocketledger.models.wallet import Wallet
from pocketledger.schemas.wallet import WalletCreate
from pocketledger.services.access import ensure_owned

logger = logging.getLogger(__name__)

def build_wallet(user_id: uuid.UUID, wallet_in: WalletCreate, is_default: bool) -> Wallet:
    """The opening balance is both the immutable baseline and the first cached balance."""
    return Wallet(
        user_id=user_id,
        name=wallet_in.name,
        initial_balance=wallet_in.balance,
        balance=wallet_in.balance,
        currency=wallet_in.currency or settings.DEFAULT_CURRENCY,
        icon=wallet_in.icon,
        color=wallet_in.color,
        is_default=is_default,
    )

async def create_wallet(user_id: uuid.UUID, wallet_in: WalletCreate, db: AsyncSession) -> Wallet:
    # First wallet is default
    is_first = await count_wallets_for_user(user_id, db) == 0
    async with atomic(db):
        wallet = build_wallet(user_id, wallet_in, is_default=is_first)
        db.add(wallet)
    await db.refresh(wallet)
    logger.info(f"Created wallet {wallet.id} for user {user_id} (default={wallet.is_default})")
    return wallet

async def set_default_wallet(user_id: uuid.UUID, wallet_id: uuid.UUID, db: AsyncSession) -> Wallet:
    wallet = ensure_owned(await get_wallet(wallet_id, db), user_id, "Wallet")
    async with atomic(db):
        await db.execute(
            update(Wallet)
            .where(Wallet.user_id == user_id, Wallet.id != wallet.id)
            .values(is_default=False)
        )
        wallet.is_default = True
    await db.refresh(wallet)
    logger.info(f"Wallet {wallet.id} is now the default for user {user_id}")
    return wallet

async def delete_wallet(user_id: uuid.UUID, wallet_id: uuid.UUID, db: AsyncSession) -> None:
    wallet = ensure_owned(await get_wallet(wallet_id, db), user_id, "Wallet")
    in_use = await count_wallet_transactions(wallet.id, db)
    if in_use > 0:
        raise InvalidStateError(f"Cannot delete wallet with existing transactions ({in_use})")

    async with atomic(db):
        # Hand default-ness over before the default wallet goes
        if wallet.is_default:
            other = await get_other_wallet(user_id, wallet.id, db)
            if other is not None:
                other.is_default = True
        await db.delete(wallet)
    logger.info(f"Deleted wallet {wallet_id} for user {user_id}")
