"""User and authentication schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, ConfigDict

from monlyking.models.user import UserRole


class UserBase(BaseModel):
    """Base user schema."""
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=20, pattern=r"^[a-zA-Z0-9_]+$")


class UserCreate(UserBase):
    """Schema for registering a user."""
    password: str = Field(..., min_length=6, max_length=72)
    display_name: Optional[str] = Field(None, max_length=100)


class UserUpdate(BaseModel):
    """Schema for updating the caller's own profile."""
    display_name: Optional[str] = Field(None, max_length=100)
    photo_url: Optional[str] = Field(None, max_length=500)


class LevelProgressResponse(BaseModel):
    """Level, rank and progress toward the next level."""
    level: int
    rank: str
    rank_color: str
    total_transaction_value: float
    current_level_transactions: float
    next_level_required: int
    progress: float
    remaining: float
    formatted_total: str


class PublicUserResponse(BaseModel):
    """Profile visible to other users."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    role: UserRole
    level: int
    total_trades: int
    rating: float
    review_count: int
    is_verified: bool
    join_date: datetime


class UserProfileResponse(PublicUserResponse):
    """Public profile plus level progress."""
    level_progress: LevelProgressResponse


class UserResponse(PublicUserResponse):
    """Full profile returned to the user themself and to admins."""
    email: str
    total_transaction_value: float
    wallet_balance: float
    is_banned: bool
    is_disabled: bool
    last_active: Optional[datetime] = None


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class Token(BaseModel):
    """Schema for authentication token."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
