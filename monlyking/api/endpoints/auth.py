"""Authentication endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from monlyking.core.database import get_db
from monlyking.core.security import (
    create_access_token, create_refresh_token, decode_token,
    get_current_user, REFRESH_TOKEN_TYPE,
)
from monlyking.models.user import User
from monlyking.schemas.user import UserCreate, UserLogin, UserResponse, RefreshRequest, Token
from monlyking.services.users import register_user, authenticate

router = APIRouter()


def _token_pair(user_id: int) -> Token:
    return Token(
        access_token=create_access_token(user_id),
        refresh_token=create_refresh_token(user_id),
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
):
    """Register a new user."""
    user = await register_user(db, user_data)
    await db.commit()
    await db.refresh(user)
    return user


@router.post("/login", response_model=Token)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db),
):
    """Exchange email and password for an access/refresh token pair."""
    user = await authenticate(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    await db.commit()
    return _token_pair(user.id)


@router.post("/refresh", response_model=Token)
async def refresh(
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db),
):
    user_id = decode_token(body.refresh_token, expected_type=REFRESH_TOKEN_TYPE)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )

    user = await db.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )
    return _token_pair(user.id)


@router.get("/me", response_model=UserResponse)
async def read_me(user: User = Depends(get_current_user)):
    """Current user's profile."""
    return user
