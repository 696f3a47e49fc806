"""User model."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, Numeric, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum

from monlyking.core.database import Base


class UserRole(str, enum.Enum):
    """User roles."""
    USER = "user"
    VIP = "vip"
    ADMIN = "admin"


class User(Base):
    """User model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(20), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    display_name = Column(String(100))
    photo_url = Column(String(500))

    # Status
    role = Column(SQLEnum(UserRole), default=UserRole.USER, nullable=False)
    is_verified = Column(Boolean, default=False)
    is_banned = Column(Boolean, default=False)
    is_disabled = Column(Boolean, default=False)

    # Progression, recalculated on every settled order
    level = Column(Integer, default=1, nullable=False)
    total_transaction_value = Column(Numeric(14, 2), default=0, nullable=False)
    total_trades = Column(Integer, default=0, nullable=False)

    # Wallet
    wallet_balance = Column(Numeric(12, 2), default=0, nullable=False)

    # Reputation
    rating = Column(Float, default=0.0)
    review_count = Column(Integer, default=0)

    # Timestamps
    join_date = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_active = Column(DateTime)

    # Relationships
    listings = relationship("GameAccount", back_populates="seller")
    purchases = relationship(
        "Order",
        foreign_keys="Order.buyer_id",
        back_populates="buyer"
    )
    sales = relationship(
        "Order",
        foreign_keys="Order.seller_id",
        back_populates="seller"
    )
    wallet_transactions = relationship("WalletTransaction", back_populates="user")

    @property
    def is_active(self) -> bool:
        return not (self.is_banned or self.is_disabled)

    def __repr__(self):
        return f"<User {self.username}>"
