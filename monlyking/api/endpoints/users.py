"""User profile endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from monlyking.core.database import get_db
from monlyking.core.exceptions import NotFoundError
from monlyking.core.security import get_current_user
from monlyking.models.user import User
from monlyking.schemas.user import UserUpdate, UserResponse, UserProfileResponse, LevelProgressResponse
from monlyking.services.users import level_progress

router = APIRouter()


@router.put("/me", response_model=UserResponse)
async def update_me(
    user_data: UserUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update display name and photo."""
    for field, value in user_data.model_dump(exclude_unset=True).items():
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    return user


@router.get("/me/level", response_model=LevelProgressResponse)
async def my_level(user: User = Depends(get_current_user)):
    return level_progress(user)


@router.get("/{user_id}", response_model=UserProfileResponse)
async def get_profile(
    user_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Public profile with level, rank and progress."""
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User", user_id)

    profile = UserProfileResponse.model_validate(
        {
            **{field: getattr(user, field) for field in UserProfileResponse.model_fields if field != "level_progress"},
            "level_progress": level_progress(user),
        }
    )
    return profile
