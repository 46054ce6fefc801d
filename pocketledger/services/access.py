# pocketledger/services/access.py
import uuid
from typing import Optional, TypeVar

from pocketledger.core.exceptions import NotFoundError, UnauthorizedError

T = TypeVar("T")

def ensure_owned(entity: Optional[T], user_id: uuid.UUID, name: str) -> T:
    """Return ``entity`` when it exists and belongs to ``user_id``."""
    if entity is None:
        raise NotFoundError(name)
    if entity.user_id != user_id:
        raise UnauthorizedError(name)
    return entity
