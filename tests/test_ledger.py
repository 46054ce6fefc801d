# tests/test_ledger.py
import uuid
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from pocketledger.core.exceptions import (
    InsufficientBalanceError,
    InvalidStateError,
    NotFoundError,
    TypeMismatchError,
    UnauthorizedError,
)
from pocketledger.crud.transaction import get_transaction
from pocketledger.models.category import CategoryKind
from pocketledger.models.transaction import Transaction, TransactionStatus, TransactionType
from pocketledger.schemas.transaction import TransactionCreate, TransactionUpdate
from pocketledger.schemas.wallet import TransferCreate
from pocketledger.services.ledger import (
    Direction,
    apply_effect,
    create_transaction,
    delete_transaction,
    mark_received,
    reconcile_wallet,
    signed_effect,
    transfer,
    update_transaction,
    validate_sufficient_balance,
)

from conftest import make_category, make_wallet


async def balance_of(db, wallet):
    await db.refresh(wallet)
    return wallet.balance


async def count_transactions(db):
    result = await db.execute(select(func.count(Transaction.id)))
    return result.scalar_one()


def expense(wallet, category, amount, **kwargs):
    return TransactionCreate(
        wallet_id=wallet.id,
        category_id=category.id,
        type=TransactionType.expense,
        amount=Decimal(amount),
        **kwargs,
    )


def income(wallet, category, amount, **kwargs):
    return TransactionCreate(
        wallet_id=wallet.id,
        category_id=category.id,
        type=TransactionType.income,
        amount=Decimal(amount),
        **kwargs,
    )


def test_signed_effect():
    assert signed_effect(Decimal("10"), TransactionType.income) == Decimal("10")
    assert signed_effect(Decimal("10"), TransactionType.expense) == Decimal("-10")
    assert signed_effect(Decimal("10"), TransactionType.expense, Direction.remove) == Decimal("10")


@pytest.mark.asyncio
async def test_apply_effect_missing_wallet(db):
    with pytest.raises(NotFoundError):
        await apply_effect(db, uuid.uuid4(), Decimal("5"), TransactionType.income)


@pytest.mark.asyncio
async def test_validate_sufficient_balance(db, owner):
    wallet = await make_wallet(db, owner, balance="100")
    assert await validate_sufficient_balance(db, wallet.id, Decimal("100"))
    assert not await validate_sufficient_balance(db, wallet.id, Decimal("100.01"))


@pytest.mark.asyncio
async def test_balance_tracks_completed_transactions(db, owner, expense_category, income_category):
    wallet = await make_wallet(db, owner, balance="1000")

    await create_transaction(owner.id, income(wallet, income_category, "500"), db)
    tx = await create_transaction(owner.id, expense(wallet, expense_category, "200"), db)
    await create_transaction(owner.id, income(wallet, income_category, "80", status=TransactionStatus.pending), db)
    await update_transaction(owner.id, tx.id, TransactionUpdate(amount=Decimal("250")), db)

    assert await balance_of(db, wallet) == Decimal("1250")
    report = await reconcile_wallet(owner.id, wallet.id, db)
    assert report["ledger_balance"] == Decimal("1250")
    assert report["drift"] == Decimal("0")


@pytest.mark.asyncio
async def test_update_amount_applies_difference_only(db, owner, expense_category):
    wallet = await make_wallet(db, owner, balance="1000")
    tx = await create_transaction(owner.id, expense(wallet, expense_category, "100"), db)
    assert await balance_of(db, wallet) == Decimal("900")

    await update_transaction(owner.id, tx.id, TransactionUpdate(amount=Decimal("150")), db)

    assert await balance_of(db, wallet) == Decimal("850")


@pytest.mark.asyncio
async def test_update_moves_effect_between_wallets(db, owner, expense_category):
    first = await make_wallet(db, owner, balance="500", name="Tiền mặt")
    second = await make_wallet(db, owner, balance="500", name="Ngân hàng")
    tx = await create_transaction(owner.id, expense(first, expense_category, "100"), db)

    await update_transaction(owner.id, tx.id, TransactionUpdate(wallet_id=second.id), db)

    assert await balance_of(db, first) == Decimal("500")
    assert await balance_of(db, second) == Decimal("400")


@pytest.mark.asyncio
async def test_failed_update_keeps_old_effect(db, owner, expense_category):
    wallet = await make_wallet(db, owner, balance="200")
    tx = await create_transaction(owner.id, expense(wallet, expense_category, "100"), db)
    tx_id = tx.id

    with pytest.raises(InsufficientBalanceError):
        await update_transaction(owner.id, tx_id, TransactionUpdate(amount=Decimal("500")), db)

    assert await balance_of(db, wallet) == Decimal("100")
    stored = await get_transaction(tx_id, db)
    await db.refresh(stored)
    assert stored.amount == Decimal("100")


@pytest.mark.asyncio
async def test_update_to_pending_reverses_effect(db, owner, expense_category):
    wallet = await make_wallet(db, owner, balance="300")
    tx = await create_transaction(owner.id, expense(wallet, expense_category, "100"), db)

    await update_transaction(owner.id, tx.id, TransactionUpdate(status=TransactionStatus.pending), db)

    assert await balance_of(db, wallet) == Decimal("300")


@pytest.mark.asyncio
async def test_update_rejects_category_of_other_type(db, owner, expense_category, income_category):
    wallet = await make_wallet(db, owner, balance="300")
    tx = await create_transaction(owner.id, expense(wallet, expense_category, "100"), db)

    with pytest.raises(TypeMismatchError):
        await update_transaction(owner.id, tx.id, TransactionUpdate(category_id=income_category.id), db)


@pytest.mark.asyncio
async def test_pending_income_counts_once_received(db, owner, income_category):
    wallet = await make_wallet(db, owner, balance="0")
    tx = await create_transaction(
        owner.id, income(wallet, income_category, "200", status=TransactionStatus.pending), db
    )
    assert await balance_of(db, wallet) == Decimal("0")

    received = await mark_received(owner.id, tx.id, db)

    assert received.status == TransactionStatus.completed
    assert received.received_date is not None
    assert await balance_of(db, wallet) == Decimal("200")

    with pytest.raises(InvalidStateError):
        await mark_received(owner.id, tx.id, db)


@pytest.mark.asyncio
async def test_mark_received_rejects_expense(db, owner, expense_category):
    wallet = await make_wallet(db, owner, balance="500")
    tx = await create_transaction(
        owner.id, expense(wallet, expense_category, "50", status=TransactionStatus.pending), db
    )
    with pytest.raises(InvalidStateError):
        await mark_received(owner.id, tx.id, db)


@pytest.mark.asyncio
async def test_expense_over_balance_is_rejected(db, owner, expense_category):
    wallet = await make_wallet(db, owner, balance="50")

    with pytest.raises(InsufficientBalanceError):
        await create_transaction(owner.id, expense(wallet, expense_category, "100"), db)

    assert await balance_of(db, wallet) == Decimal("50")
    assert await count_transactions(db) == 0


@pytest.mark.asyncio
async def test_pending_expense_skips_balance_check(db, owner, expense_category):
    wallet = await make_wallet(db, owner, balance="50")
    await create_transaction(
        owner.id, expense(wallet, expense_category, "100", status=TransactionStatus.pending), db
    )
    assert await balance_of(db, wallet) == Decimal("50")


@pytest.mark.asyncio
async def test_category_type_must_match(db, owner, expense_category):
    wallet = await make_wallet(db, owner, balance="50")

    with pytest.raises(TypeMismatchError):
        await create_transaction(owner.id, income(wallet, expense_category, "10"), db)

    assert await count_transactions(db) == 0
    assert await balance_of(db, wallet) == Decimal("50")


@pytest.mark.asyncio
async def test_foreign_wallet_is_unauthorized(db, owner, stranger, expense_category):
    wallet = await make_wallet(db, stranger, balance="500")

    with pytest.raises(UnauthorizedError):
        await create_transaction(owner.id, expense(wallet, expense_category, "10"), db)


@pytest.mark.asyncio
async def test_delete_reverses_completed_effect(db, owner, expense_category):
    wallet = await make_wallet(db, owner, balance="300")
    tx = await create_transaction(owner.id, expense(wallet, expense_category, "120"), db)

    await delete_transaction(owner.id, tx.id, db)

    assert await balance_of(db, wallet) == Decimal("300")
    assert await get_transaction(tx.id, db) is None


@pytest.mark.asyncio
async def test_transfer_moves_money_and_deletes_as_pair(db, owner):
    cash = await make_wallet(db, owner, balance="500", name="Tiền mặt")
    bank = await make_wallet(db, owner, balance="100", name="Ngân hàng")

    outgoing, incoming = await transfer(
        owner.id, TransferCreate(from_wallet_id=cash.id, to_wallet_id=bank.id, amount=Decimal("200")), db
    )

    assert outgoing.paired_transaction_id == incoming.id
    assert incoming.paired_transaction_id == outgoing.id
    assert await balance_of(db, cash) == Decimal("300")
    assert await balance_of(db, bank) == Decimal("300")

    await delete_transaction(owner.id, incoming.id, db)

    assert await balance_of(db, cash) == Decimal("500")
    assert await balance_of(db, bank) == Decimal("100")
    assert await count_transactions(db) == 0


@pytest.mark.asyncio
async def test_transfer_requires_funds_and_same_currency(db, owner):
    cash = await make_wallet(db, owner, balance="50", name="Tiền mặt")
    bank = await make_wallet(db, owner, balance="0", name="Ngân hàng")
    dollars = await make_wallet(db, owner, balance="500", name="Đô la", currency="USD")

    with pytest.raises(InsufficientBalanceError):
        await transfer(
            owner.id, TransferCreate(from_wallet_id=cash.id, to_wallet_id=bank.id, amount=Decimal("100")), db
        )
    with pytest.raises(InvalidStateError):
        await transfer(
            owner.id, TransferCreate(from_wallet_id=dollars.id, to_wallet_id=bank.id, amount=Decimal("10")), db
        )
    assert await count_transactions(db) == 0


@pytest.mark.asyncio
async def test_transfer_half_cannot_be_edited_alone(db, owner):
    cash = await make_wallet(db, owner, balance="500", name="Tiền mặt")
    bank = await make_wallet(db, owner, balance="100", name="Ngân hàng")
    outgoing, incoming = await transfer(
        owner.id, TransferCreate(from_wallet_id=cash.id, to_wallet_id=bank.id, amount=Decimal("200")), db
    )

    with pytest.raises(InvalidStateError):
        await update_transaction(owner.id, outgoing.id, TransactionUpdate(amount=Decimal("50")), db)

    assert await balance_of(db, cash) == Decimal("300")
    assert await balance_of(db, bank) == Decimal("300")


@pytest.mark.asyncio
async def test_transaction_cannot_move_into_system_category(db, owner, expense_category):
    wallet = await make_wallet(db, owner, balance="500")
    savings = await make_category(db, owner, TransactionType.expense, name="Tiết kiệm", kind=CategoryKind.savings)
    tx = await create_transaction(owner.id, expense(wallet, expense_category, "100"), db)

    with pytest.raises(InvalidStateError):
        await update_transaction(owner.id, tx.id, TransactionUpdate(category_id=savings.id), db)
    with pytest.raises(InvalidStateError):
        await create_transaction(owner.id, expense(wallet, savings, "50"), db)

    await db.refresh(tx)
    assert tx.category_id == expense_category.id
    assert await balance_of(db, wallet) == Decimal("400")
