"""Wallet transaction and wallet request models."""
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, Numeric,
    DateTime, ForeignKey, Enum as SQLEnum, CheckConstraint
)
from sqlalchemy.orm import relationship
import enum

from monlyking.core.database import Base


class WalletTransactionType(str, enum.Enum):
    TOPUP = "topup"
    WITHDRAW = "withdraw"
    PURCHASE = "purchase"
    SALE = "sale"
    FEE = "fee"
    REFUND = "refund"


class WalletTransactionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class WalletRequestType(str, enum.Enum):
    TOPUP = "topup"
    WITHDRAW = "withdraw"


class WalletRequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class WalletTransaction(Base):
    """Ledger line for a wallet balance change. Debits are negative."""

    __tablename__ = "wallet_transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(SQLEnum(WalletTransactionType), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String(300), nullable=False)
    status = Column(SQLEnum(WalletTransactionStatus), default=WalletTransactionStatus.COMPLETED, nullable=False)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True)
    wallet_request_id = Column(Integer, ForeignKey("wallet_requests.id"), index=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    completed_at = Column(DateTime)

    user = relationship("User", back_populates="wallet_transactions")

    def __repr__(self):
        return f"<WalletTransaction {self.type} {self.amount}>"


class WalletRequest(Base):
    """Top-up or withdrawal waiting for an admin decision."""

    __tablename__ = "wallet_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(SQLEnum(WalletRequestType), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    fee_amount = Column(Numeric(12, 2), nullable=False)
    amount_after_fee = Column(Numeric(12, 2), nullable=False)

    wallet_name = Column(String(100))
    payment_method = Column(String(100))
    account_details = Column(Text)

    status = Column(SQLEnum(WalletRequestStatus), default=WalletRequestStatus.PENDING, nullable=False, index=True)
    admin_id = Column(Integer, ForeignKey("users.id"))
    admin_notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    processed_at = Column(DateTime)

    user = relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        CheckConstraint('amount > 0', name='wallet_request_amount_positive'),
    )

    def __repr__(self):
        return f"<WalletRequest {self.type} {self.amount}>"
