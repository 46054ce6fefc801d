# pocketledger/api/v1/routes/auth.py
from fastapi import APIRouter, Depends, Response, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pocketledger.core.database import get_async_session
from pocketledger.core.security import create_access_token
from pocketledger.models.user import User
from pocketledger.schemas.user import Token, UserCreate, UserLogin, UserRead, UserUpdate
from pocketledger.services.users import authenticate_user, register_user, update_profile
from pocketledger.api.deps import get_current_user

router = APIRouter(prefix="/auth", tags=["Authentication"])

def _token_for(user: User) -> Token:
    return Token(access_token=create_access_token(str(user.id)), user=UserRead.model_validate(user))

@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_async_session),
):
    """Create an account with a default cash wallet and starter categories, then sign in."""
    user = await register_user(user_in, db)
    return _token_for(user)

@router.post("/login", response_model=Token)
async def login(
    credentials: UserLogin,
    response: Response,
    db: AsyncSession = Depends(get_async_session),
):
    user = await authenticate_user(credentials.email, credentials.password, db)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Inactive user")
    token = _token_for(user)
    response.set_cookie(key="access_token", value=token.access_token, httponly=True, samesite="lax")
    return token

@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(response: Response):
    """Clears the access token cookie; works without authentication."""
    response.delete_cookie(key="access_token")
    return {"detail": "Successfully logged out"}

@router.get("/me", response_model=UserRead)
async def read_me(user: User = Depends(get_current_user)):
    return user

@router.put("/profile", response_model=UserRead)
async def update_me(
    profile_in: UserUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Change name, email or password; a new password needs the current one."""
    return await update_profile(user, profile_in, db)
