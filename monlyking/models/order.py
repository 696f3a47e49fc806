"""Order and escrow models."""
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, Numeric, JSON,
    DateTime, ForeignKey, Enum as SQLEnum, CheckConstraint, Index
)
from sqlalchemy.orm import relationship
import enum

from monlyking.core.database import Base


class OrderStatus(str, enum.Enum):
    """Order status."""
    PENDING = "pending"
    ESCROW = "escrow"
    DELIVERING = "delivering"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    DISPUTED = "disputed"
    CANCELLED = "cancelled"


# Funds are still held for orders in these states
OPEN_ORDER_STATUSES = (
    OrderStatus.ESCROW,
    OrderStatus.DELIVERING,
    OrderStatus.AWAITING_CONFIRMATION,
)

# Orders in these states count toward a user's transaction value
SETTLED_ORDER_STATUSES = (
    OrderStatus.DELIVERED,
    OrderStatus.COMPLETED,
)


class EscrowStatus(str, enum.Enum):
    HELD = "held"
    RELEASED = "released"


class Order(Base):
    """Purchase of a game account, held in escrow until the buyer confirms."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String(32), unique=True, nullable=False, index=True)
    buyer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("game_accounts.id"), nullable=False, index=True)

    # Money
    amount = Column(Numeric(12, 2), nullable=False)
    escrow_amount = Column(Numeric(12, 2), nullable=False)
    commission = Column(Numeric(12, 2))
    seller_payout = Column(Numeric(12, 2))

    status = Column(SQLEnum(OrderStatus), default=OrderStatus.ESCROW, nullable=False, index=True)

    # Credentials attached by the seller
    account_details = Column(JSON)
    notes = Column(Text)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    delivered_at = Column(DateTime)
    completed_at = Column(DateTime)

    # Relationships
    account = relationship("GameAccount", back_populates="orders")
    buyer = relationship("User", foreign_keys=[buyer_id], back_populates="purchases")
    seller = relationship("User", foreign_keys=[seller_id], back_populates="sales")
    escrow = relationship("Escrow", back_populates="order", uselist=False)

    __table_args__ = (
        CheckConstraint('buyer_id != seller_id', name='order_buyer_seller_different'),
        CheckConstraint('amount > 0', name='order_amount_positive'),
        Index('idx_order_buyer_status', 'buyer_id', 'status'),
        Index('idx_order_seller_status', 'seller_id', 'status'),
    )

    def __repr__(self):
        return f"<Order {self.reference}>"


class Escrow(Base):
    """Funds held by the platform for one order."""

    __tablename__ = "escrows"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), unique=True, nullable=False, index=True)
    buyer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(SQLEnum(EscrowStatus), default=EscrowStatus.HELD, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    released_at = Column(DateTime)

    order = relationship("Order", back_populates="escrow")

    def __repr__(self):
        return f"<Escrow order={self.order_id} {self.status}>"
