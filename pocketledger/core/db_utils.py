"""
Database utilities for transaction boundaries and row locking
"""
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

T = TypeVar('T')

@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    All-or-nothing unit of work.

    Commits when the block exits normally. Any exception raised inside the
    block rolls back every write made through ``db`` since the last commit
    and is re-raised to the caller unchanged.
    """
    try:
        yield db
        await db.commit()
    except Exception as e:
        logger.warning(f"Rolling back unit of work: {type(e).__name__}: {e}")
        await db.rollback()
        raise


async def get_for_update(db: AsyncSession, model: Type[T], row_id: uuid.UUID) -> Optional[T]:
    """
    Load a row with ``SELECT ... FOR UPDATE`` and refresh any copy already
    held in the session, so read-modify-write sees the committed value.
    SQLite ignores the lock clause and serialises writers on its own.
    """
    result = await db.execute(
        select(model)
        .where(model.id == row_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()
