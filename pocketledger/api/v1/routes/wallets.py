# pocketledger/api/v1/routes/wallets.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid

from pocketledger.schemas.wallet import (
    TransferCreate,
    TransferRead,
    WalletCreate,
    WalletRead,
    WalletReconciliation,
    WalletUpdate,
    WalletWithCount,
)
from pocketledger.crud.wallet import get_wallet, get_wallets_for_user, update_wallet
from pocketledger.core.database import get_async_session
from pocketledger.models.user import User
from pocketledger.services.access import ensure_owned
from pocketledger.services.ledger import reconcile_wallet, transfer
from pocketledger.services.wallets import create_wallet, delete_wallet, set_default_wallet
from pocketledger.api.deps import get_current_user

router = APIRouter(prefix="/wallets", tags=["wallets"])

@router.get("", response_model=List[WalletWithCount])
async def read_wallets(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    rows = await get_wallets_for_user(user.id, db)
    return [
        WalletWithCount.model_validate(wallet).model_copy(update={"transaction_count": count})
        for wallet, count in rows
    ]

@router.post("", response_model=WalletRead, status_code=status.HTTP_201_CREATED)
async def create_wallet_endpoint(
    wallet_in: WalletCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await create_wallet(user.id, wallet_in, db)

@router.post("/transfer", response_model=TransferRead, status_code=status.HTTP_201_CREATED)
async def transfer_endpoint(
    transfer_in: TransferCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    outgoing, incoming = await transfer(user.id, transfer_in, db)
    return {"outgoing": outgoing, "incoming": incoming}

@router.get("/{wallet_id}", response_model=WalletRead)
async def read_wallet(
    wallet_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return ensure_owned(await get_wallet(wallet_id, db), user.id, "Wallet")

@router.patch("/{wallet_id}", response_model=WalletRead)
async def update_wallet_endpoint(
    wallet_id: uuid.UUID,
    wallet_in: WalletUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    wallet = ensure_owned(await get_wallet(wallet_id, db), user.id, "Wallet")
    return await update_wallet(wallet, wallet_in, db)

@router.patch("/{wallet_id}/set-default", response_model=WalletRead)
async def set_default_endpoint(
    wallet_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await set_default_wallet(user.id, wallet_id, db)

@router.get("/{wallet_id}/reconcile", response_model=WalletReconciliation)
async def reconcile_endpoint(
    wallet_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Cached balance next to the balance recomputed from completed transactions."""
    return await reconcile_wallet(user.id, wallet_id, db)

@router.delete("/{wallet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_wallet_endpoint(
    wallet_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    await delete_wallet(user.id, wallet_id, db)
    return None
