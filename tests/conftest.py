# tests/conftest.py
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pocketledger.core.database import Base, get_async_session
from pocketledger.main import app
from pocketledger.models import user, wallet, category, transaction, debt, goal  # noqa: F401
from pocketledger.models.category import Category, CategoryKind
from pocketledger.models.transaction import TransactionType
from pocketledger.models.user import User
from pocketledger.models.wallet import Wallet
from pocketledger.core.security import get_password_hash


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def make_user(db, email="an@example.com", name="An Nguyen"):
    user = User(email=email, name=name, hashed_password=get_password_hash("secret123"))
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_wallet(db, owner, balance="0", name="Ví chính", currency="VND", is_default=False):
    wallet = Wallet(
        user_id=owner.id,
        name=name,
        initial_balance=Decimal(balance),
        balance=Decimal(balance),
        currency=currency,
        is_default=is_default,
    )
    db.add(wallet)
    await db.commit()
    await db.refresh(wallet)
    return wallet


async def make_category(db, owner, type=TransactionType.expense, name=None, kind=CategoryKind.user):
    category = Category(
        user_id=owner.id,
        name=name or f"Danh mục {type.value}",
        type=type,
        kind=kind,
    )
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category


@pytest_asyncio.fixture
async def owner(db):
    return await make_user(db)


@pytest_asyncio.fixture
async def stranger(db):
    return await make_user(db, email="binh@example.com", name="Binh Tran")


@pytest_asyncio.fixture
async def expense_category(db, owner):
    return await make_category(db, owner, TransactionType.expense, name="Ăn uống")


@pytest_asyncio.fixture
async def income_category(db, owner):
    return await make_category(db, owner, TransactionType.income, name="Lương")


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_async_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_async_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def auth_headers(client):
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": "chi@example.com", "name": "Chi Le", "password": "secret123"},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
