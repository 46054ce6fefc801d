# pocketledger/api/deps.py
from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
import jwt

from pocketledger.core.database import get_async_session
from pocketledger.core.security import decode_access_token
from pocketledger.crud.user import get_user_by_id
from pocketledger.models.user import User

optional_security = HTTPBearer(auto_error=False)

def _credentials_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
) -> User:
    """
    Resolve the user from a bearer token found in:
    - Authorization header
    - access_token cookie
    """
    token = credentials.credentials if credentials and credentials.credentials else None

    if not token:
        token = request.cookies.get("access_token")
        # Cookie may carry the scheme too
        if token and token.startswith("Bearer "):
            token = token[7:]

    if not token:
        raise _credentials_error("Not authenticated")

    try:
        user_id = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise _credentials_error("Token has expired")
    except jwt.InvalidTokenError:
        raise _credentials_error("Invalid token")

    user = await get_user_by_id(user_id, db)
    if not user:
        raise _credentials_error("User not found")
    if not user.is_active:
        raise _credentials_error("Inactive user")
    return user
