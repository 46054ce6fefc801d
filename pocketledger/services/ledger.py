# pocketledger/services/ledger.py
"""
Wallet balance bookkeeping.

``Wallet.balance`` caches ``initial_balance`` plus the signed amounts of the
wallet's completed transactions (income adds, expense subtracts).
``apply_effect`` is the only function that writes it; every transaction
operation below goes through it inside a single ``atomic`` unit of work so
an operation either lands completely or not at all.
"""
import enum
import logging
import uuid
from decimal import Decimal
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pocketledger.core.db_utils import atomic, get_for_update
from pocketledger.core.exceptions import (
    InsufficientBalanceError,
    InvalidStateError,
    NotFoundError,
    TypeMismatchError,
)
from pocketledger.crud.category import get_category
from pocketledger.crud.goal import get_contribution_by_transaction
from pocketledger.crud.transaction import get_goal_transactions, get_transaction
from pocketledger.crud.wallet import get_wallet, sum_completed_effects
from pocketledger.models.category import CategoryKind
from pocketledger.models.transaction import Transaction, TransactionStatus, TransactionType
from pocketledger.models.wallet import Wallet
from pocketledger.schemas.transaction import TransactionCreate, TransactionUpdate
from pocketledger.schemas.wallet import TransferCreate
from pocketledger.services.access import ensure_owned
from pocketledger.services.categories import get_or_create_system_category
from pocketledger.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

class Direction(str, enum.Enum):
    add = "add"
    remove = "remove"

def signed_effect(amount: Decimal, type: TransactionType, direction: Direction = Direction.add) -> Decimal:
    delta = amount if type == TransactionType.income else -amount
    return delta if direction == Direction.add else -delta

async def apply_effect(
    db: AsyncSession,
    wallet_id: uuid.UUID,
    amount: Decimal,
    type: TransactionType,
    direction: Direction = Direction.add,
    require_funds: bool = False,
) -> Wallet:
    """
    Add or remove one transaction's effect on a wallet balance.

    The wallet row is locked for the rest of the enclosing database
    transaction. With ``require_funds`` a debit that would take the balance
    below zero raises ``InsufficientBalanceError`` and nothing is written.
    """
    wallet = await get_for_update(db, Wallet, wallet_id)
    if wallet is None:
        raise NotFoundError("Wallet")

    delta = signed_effect(Decimal(amount), type, direction)
    new_balance = wallet.balance + delta
    if require_funds and delta < 0 and new_balance < 0:
        logger.warning(f"Rejected debit of {-delta} on wallet {wallet_id}: balance {wallet.balance}")
        raise InsufficientBalanceError()

    wallet.balance = new_balance
    await db.flush()
    return wallet

async def validate_sufficient_balance(db: AsyncSession, wallet_id: uuid.UUID, amount: Decimal) -> bool:
    """
    Pre-check used to reject a debit before any write. False when the wallet
    does not exist. ``apply_effect(require_funds=True)`` repeats the check
    under the row lock.
    """
    result = await db.execute(select(Wallet.balance).where(Wallet.id == wallet_id))
    balance = result.scalar_one_or_none()
    if balance is None:
        return False
    return balance >= amount

async def _owned_wallet(user_id: uuid.UUID, wallet_id: uuid.UUID, db: AsyncSession) -> Wallet:
    return ensure_owned(await get_wallet(wallet_id, db), user_id, "Wallet")

async def create_transaction(user_id: uuid.UUID, tx_in: TransactionCreate, db: AsyncSession) -> Transaction:
    wallet = await _owned_wallet(user_id, tx_in.wallet_id, db)
    category = ensure_owned(await get_category(tx_in.category_id, db), user_id, "Category")
    if category.is_system:
        raise InvalidStateError("System categories are reserved for goal and transfer entries")
    if category.type != tx_in.type:
        raise TypeMismatchError(
            f"Category type mismatch: category is for {category.type.value} "
            f"but transaction is {tx_in.type.value}"
        )

    completed = tx_in.status == TransactionStatus.completed
    is_expense = tx_in.type == TransactionType.expense
    if is_expense and completed and not await validate_sufficient_balance(db, wallet.id, tx_in.amount):
        raise InsufficientBalanceError()

    async with atomic(db):
        tx = Transaction(
            user_id=user_id,
            wallet_id=wallet.id,
            category_id=category.id,
            type=tx_in.type,
            amount=tx_in.amount,
            description=tx_in.description,
            date=tx_in.date or utcnow(),
            status=tx_in.status,
            work_date=tx_in.work_date,
            received_date=tx_in.received_date,
        )
        db.add(tx)
        await db.flush()
        if completed:
            await apply_effect(db, wallet.id, tx.amount, tx.type, Direction.add, require_funds=is_expense)

    await db.refresh(tx)
    logger.info(f"Created {tx.type.value} transaction {tx.id} of {tx.amount} ({tx.status.value}) on wallet {wallet.id}")
    return tx

async def update_transaction(
    user_id: uuid.UUID,
    transaction_id: uuid.UUID,
    tx_in: TransactionUpdate,
    db: AsyncSession,
) -> Transaction:
    """
    Reverse the old effect (when it was completed), write the new fields,
    then apply the new effect (when the resulting status is completed).
    A failed balance check on the new effect rolls back the reversal too.
    """
    tx = ensure_owned(await get_transaction(transaction_id, db), user_id, "Transaction")
    if tx.category.is_system:
        raise InvalidStateError(
            "System-generated transactions cannot be edited; use the goal or transfer operations"
        )
    # Explicit nulls on required columns mean "unchanged"
    changes = {
        field: value
        for field, value in tx_in.model_dump(exclude_unset=True).items()
        if value is not None or field == "description"
    }

    new_wallet_id = changes.get("wallet_id", tx.wallet_id)
    new_type = changes.get("type", tx.type)
    new_amount = changes.get("amount", tx.amount)
    new_status = changes.get("status", tx.status)

    if new_wallet_id != tx.wallet_id:
        await _owned_wallet(user_id, new_wallet_id, db)
    category = ensure_owned(
        await get_category(changes.get("category_id", tx.category_id), db), user_id, "Category"
    )
    if category.is_system:
        raise InvalidStateError("Transactions cannot be moved into a system category")
    if category.type != new_type:
        raise TypeMismatchError(
            f"Category type mismatch: category is for {category.type.value} "
            f"but transaction is {new_type.value}"
        )

    old_wallet_id, old_amount, old_type, old_status = tx.wallet_id, tx.amount, tx.type, tx.status

    async with atomic(db):
        if old_status == TransactionStatus.completed:
            await apply_effect(db, old_wallet_id, old_amount, old_type, Direction.remove)

        for field, value in changes.items():
            setattr(tx, field, value)
        await db.flush()

        if new_status == TransactionStatus.completed:
            await apply_effect(
                db,
                new_wallet_id,
                new_amount,
                new_type,
                Direction.add,
                require_funds=new_type == TransactionType.expense,
            )

    await db.refresh(tx)
    logger.info(f"Updated transaction {tx.id}: {sorted(changes)}")
    return tx

async def _partner_transactions(tx: Transaction, db: AsyncSession) -> List[Transaction]:
    """
    System-generated rows that must disappear together with ``tx``:
    the other half of a transfer, the bulk refunds of a deleted goal when a
    savings row goes, or the savings rows when such a refund goes.
    """
    kind = tx.category.kind
    if kind == CategoryKind.transfer and tx.paired_transaction_id:
        partner = await get_transaction(tx.paired_transaction_id, db)
        return [partner] if partner is not None else []

    if tx.source_goal_id is None:
        return []
    if kind == CategoryKind.savings:
        return await get_goal_transactions(
            tx.user_id, tx.source_goal_id, CategoryKind.goal_refund, db, per_contribution=False
        )
    if kind == CategoryKind.goal_refund and tx.source_contribution_id is None:
        return await get_goal_transactions(tx.user_id, tx.source_goal_id, CategoryKind.savings, db)
    return []

async def _reverse_and_delete(tx: Transaction, db: AsyncSession) -> None:
    if tx.status == TransactionStatus.completed:
        await apply_effect(db, tx.wallet_id, tx.amount, tx.type, Direction.remove)
    await db.delete(tx)
    await db.flush()

async def delete_transaction(user_id: uuid.UUID, transaction_id: uuid.UUID, db: AsyncSession) -> None:
    tx = ensure_owned(await get_transaction(transaction_id, db), user_id, "Transaction")
    if tx.category.kind == CategoryKind.savings and await get_contribution_by_transaction(tx.id, db):
        raise InvalidStateError(
            "Transaction funds a goal contribution; delete the contribution instead"
        )

    async with atomic(db):
        partners = await _partner_transactions(tx, db)
        for partner in partners:
            if partner.id != tx.id:
                await _reverse_and_delete(partner, db)
        await _reverse_and_delete(tx, db)

    logger.info(f"Deleted transaction {transaction_id} and {len(partners)} paired transaction(s)")

async def mark_received(user_id: uuid.UUID, transaction_id: uuid.UUID, db: AsyncSession) -> Transaction:
    """Complete a pending income (e.g. a tip earned earlier) and credit its wallet."""
    tx = ensure_owned(await get_transaction(transaction_id, db), user_id, "Transaction")
    if tx.type != TransactionType.income:
        raise InvalidStateError("Only income transactions can be marked as received")
    if tx.status == TransactionStatus.completed:
        raise InvalidStateError("Transaction is already completed")

    async with atomic(db):
        tx.status = TransactionStatus.completed
        tx.received_date = utcnow()
        await db.flush()
        await apply_effect(db, tx.wallet_id, tx.amount, tx.type, Direction.add)

    await db.refresh(tx)
    logger.info(f"Marked transaction {tx.id} as received (+{tx.amount} on wallet {tx.wallet_id})")
    return tx

async def transfer(user_id: uuid.UUID, transfer_in: TransferCreate, db: AsyncSession) -> Tuple[Transaction, Transaction]:
    """Move money between two of the user's wallets as a paired expense/income."""
    source = await _owned_wallet(user_id, transfer_in.from_wallet_id, db)
    target = await _owned_wallet(user_id, transfer_in.to_wallet_id, db)
    if source.id == target.id:
        raise InvalidStateError("Source and destination wallets must differ")
    if source.currency != target.currency:
        raise InvalidStateError("Cannot transfer between wallets with different currencies")
    if not await validate_sufficient_balance(db, source.id, transfer_in.amount):
        raise InsufficientBalanceError()

    async with atomic(db):
        out_category = await get_or_create_system_category(
            user_id, CategoryKind.transfer, TransactionType.expense, db
        )
        in_category = await get_or_create_system_category(
            user_id, CategoryKind.transfer, TransactionType.income, db
        )
        now = utcnow()
        outgoing_id, incoming_id = uuid.uuid4(), uuid.uuid4()
        outgoing = Transaction(
            id=outgoing_id,
            user_id=user_id,
            wallet_id=source.id,
            category_id=out_category.id,
            type=TransactionType.expense,
            amount=transfer_in.amount,
            description=transfer_in.description or f"Chuyển tiền đến {target.name}",
            date=now,
            status=TransactionStatus.completed,
            paired_transaction_id=incoming_id,
        )
        incoming = Transaction(
            id=incoming_id,
            user_id=user_id,
            wallet_id=target.id,
            category_id=in_category.id,
            type=TransactionType.income,
            amount=transfer_in.amount,
            description=transfer_in.description or f"Nhận tiền từ {source.name}",
            date=now,
            status=TransactionStatus.completed,
            paired_transaction_id=outgoing_id,
        )
        db.add_all([outgoing, incoming])
        await db.flush()
        await apply_effect(db, source.id, transfer_in.amount, TransactionType.expense, require_funds=True)
        await apply_effect(db, target.id, transfer_in.amount, TransactionType.income)

    await db.refresh(outgoing)
    await db.refresh(incoming)
    logger.info(f"Transferred {transfer_in.amount} from wallet {source.id} to wallet {target.id}")
    return outgoing, incoming

async def reconcile_wallet(user_id: uuid.UUID, wallet_id: uuid.UUID, db: AsyncSession) -> dict:
    """Compare the cached balance with the one implied by the wallet's transactions."""
    wallet = await _owned_wallet(user_id, wallet_id, db)
    ledger_balance = Decimal(wallet.initial_balance) + await sum_completed_effects(wallet.id, db)
    drift = Decimal(wallet.balance) - ledger_balance
    if drift != 0:
        logger.warning(f"Wallet {wallet.id} balance {wallet.balance} drifts {drift} from its ledger")
    return {
        "wallet_id": wallet.id,
        "cached_balance": wallet.balance,
        "ledger_balance": ledger_balance,
        "drift": drift,
    }
