"""Support ticket model."""
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text,
    DateTime, ForeignKey, Enum as SQLEnum
)
from sqlalchemy.orm import relationship
import enum

from monlyking.core.database import Base


class TicketCategory(str, enum.Enum):
    ACCOUNT = "account"
    PAYMENT = "payment"
    ORDER = "order"
    TECHNICAL = "technical"
    SECURITY = "security"
    OTHER = "other"


class TicketPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TicketStatus(str, enum.Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class SupportTicket(Base):
    """Support ticket model."""

    __tablename__ = "support_tickets"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String(32), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"))

    category = Column(SQLEnum(TicketCategory), nullable=False)
    subject = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(SQLEnum(TicketPriority), default=TicketPriority.MEDIUM, nullable=False)
    status = Column(SQLEnum(TicketStatus), default=TicketStatus.OPEN, nullable=False, index=True)

    # Staff handling
    admin_id = Column(Integer, ForeignKey("users.id"))
    admin_response = Column(Text)
    admin_notes = Column(Text)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    resolved_at = Column(DateTime)

    user = relationship("User", foreign_keys=[user_id])

    def __repr__(self):
        return f"<SupportTicket {self.reference}>"
