# pocketledger/services/users.py
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pocketledger.core.db_utils import atomic
from pocketledger.core.exceptions import InvalidStateError
from pocketledger.core.security import get_password_hash, verify_password
from pocketledger.crud.category import build_default_categories
from pocketledger.crud.user import get_user_by_email
from pocketledger.models.user import User
from pocketledger.schemas.user import UserCreate, UserUpdate
from pocketledger.schemas.wallet import WalletCreate
from pocketledger.services.wallets import build_wallet

logger = logging.getLogger(__name__)

DEFAULT_WALLET = WalletCreate(name="Tiền mặt", balance=Decimal("0"), icon="💵", color="#22c55e")

async def register_user(user_in: UserCreate, db: AsyncSession) -> User:
    """Create the account together with its default cash wallet and categories."""
    if await get_user_by_email(user_in.email, db) is not None:
        raise InvalidStateError("Email is already registered")

    async with atomic(db):
        user = User(
            email=user_in.email.lower(),
            name=user_in.name,
            hashed_password=get_password_hash(user_in.password),
        )
        db.add(user)
        await db.flush()
        db.add(build_wallet(user.id, DEFAULT_WALLET, is_default=True))
        db.add_all(build_default_categories(user.id))

    await db.refresh(user)
    logger.info(f"User {user.email} has registered")
    return user

async def authenticate_user(email: str, password: str, db: AsyncSession) -> Optional[User]:
    user = await get_user_by_email(email, db)
    if user is None or not verify_password(password, user.hashed_password):
        logger.warning(f"Failed login attempt for {email}")
        return None
    return user

async def update_profile(user: User, profile_in: UserUpdate, db: AsyncSession) -> User:
    changes = profile_in.model_dump(exclude_unset=True, exclude_none=True)

    email = changes.get("email")
    if email and email.lower() != user.email.lower():
        if await get_user_by_email(email, db) is not None:
            raise InvalidStateError("Email is already registered")
    if "new_password" in changes:
        current = changes.get("current_password")
        if not current:
            raise InvalidStateError("Current password is required to set a new one")
        if not verify_password(current, user.hashed_password):
            logger.warning(f"Rejected password change for {user.email}: wrong current password")
            raise InvalidStateError("Current password is incorrect")

    async with atomic(db):
        if email:
            user.email = email.lower()
        if "name" in changes:
            user.name = changes["name"]
        if "new_password" in changes:
            user.hashed_password = get_password_hash(changes["new_password"])
        db.add(user)

    await db.refresh(user)
    logger.info(f"User {user.id} updated profile fields {sorted(changes)}")
    return user
