"""Registration, login and profile helpers."""
from datetime import datetime
from decimal import Decimal

import structlog
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from monlyking.core.config import settings
from monlyking.core.exceptions import DuplicateUserError, AccountSuspendedError
from monlyking.core.security import get_password_hash, verify_password
from monlyking.models.user import User, UserRole
from monlyking.schemas.user import UserCreate, LevelProgressResponse
from monlyking.services.levels import (
    rank_for_level, progress_to_next_level, format_transaction_value,
)

logger = structlog.get_logger(__name__)


async def register_user(db: AsyncSession, data: UserCreate) -> User:
    """
    Create an account at level 1 with an empty wallet.

    Raises:
        DuplicateUserError: email or username already taken
    """
    email = data.email.lower()
    result = await db.execute(
        select(User).where(
            or_(User.email == email, User.username == data.username)
        )
    )
    existing = result.scalars().first()
    if existing:
        field = "Email" if existing.email == email else "Username"
        raise DuplicateUserError(f"{field} already registered")

    admin_emails = {e.lower() for e in settings.ADMIN_EMAILS}
    user = User(
        email=email,
        username=data.username,
        hashed_password=get_password_hash(data.password),
        display_name=data.display_name or data.username,
        role=UserRole.ADMIN if email in admin_emails else UserRole.USER,
        is_verified=False,
        is_banned=False,
        is_disabled=False,
        level=1,
        total_transaction_value=Decimal("0"),
        total_trades=0,
        wallet_balance=Decimal("0"),
        rating=0.0,
        review_count=0,
        join_date=datetime.utcnow(),
        last_active=datetime.utcnow(),
    )
    db.add(user)
    await db.flush()

    logger.info("user_registered", user_id=user.id, role=user.role.value)
    return user


async def authenticate(db: AsyncSession, email: str, password: str):
    """
    Check credentials and stamp ``last_active``.

    Returns:
        The user, or None when the credentials are wrong

    Raises:
        AccountSuspendedError: the account is banned or disabled
    """
    result = await db.execute(select(User).where(User.email == email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(password, user.hashed_password):
        logger.info("login_failed", email=email)
        return None

    if not user.is_active:
        logger.warning("login_suspended", user_id=user.id)
        raise AccountSuspendedError()

    user.last_active = datetime.utcnow()
    await db.flush()

    logger.info("user_logged_in", user_id=user.id)
    return user


def level_progress(user: User) -> LevelProgressResponse:
    total = user.total_transaction_value or 0
    rank = rank_for_level(user.level)
    progress = progress_to_next_level(user.level, total)
    return LevelProgressResponse(
        level=user.level,
        rank=rank.name,
        rank_color=rank.color,
        total_transaction_value=float(total),
        current_level_transactions=progress.current_level_transactions,
        next_level_required=progress.next_level_required,
        progress=round(progress.progress, 2),
        remaining=progress.remaining,
        formatted_total=format_transaction_value(total, settings.CURRENCY_CODE),
    )
