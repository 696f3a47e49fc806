"""Game account listing models."""
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, Numeric, JSON,
    DateTime, ForeignKey, Enum as SQLEnum, Index, CheckConstraint
)
from sqlalchemy.orm import relationship
import enum

from monlyking.core.database import Base


class Game(str, enum.Enum):
    """Games accounts can be listed for."""
    FIFA = "fifa"
    VALORANT = "valorant"
    LOL = "lol"
    PUBG = "pubg"
    COD = "cod"


class ListingStatus(str, enum.Enum):
    """Listing status."""
    ACTIVE = "active"
    PENDING = "pending"  # reserved by an order in escrow
    SOLD = "sold"
    REMOVED = "removed"


class GameAccount(Base):
    """A game account offered for sale."""

    __tablename__ = "game_accounts"

    id = Column(Integer, primary_key=True, index=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    game = Column(SQLEnum(Game), nullable=False, index=True)
    title = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)

    images = Column(JSON, default=list, nullable=False)
    game_data = Column(JSON, default=dict, nullable=False)

    status = Column(SQLEnum(ListingStatus), default=ListingStatus.ACTIVE, nullable=False, index=True)
    views = Column(Integer, default=0, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    seller = relationship("User", back_populates="listings")
    orders = relationship("Order", back_populates="account")

    __table_args__ = (
        Index('idx_listing_status_created', 'status', 'created_at'),
        Index('idx_listing_game_status', 'game', 'status'),
        Index('idx_listing_seller_status', 'seller_id', 'status'),
        CheckConstraint('price >= 1', name='listing_price_minimum'),
    )

    def __repr__(self):
        return f"<GameAccount {self.title}>"
