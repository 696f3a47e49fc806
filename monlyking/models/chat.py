"""Chat message model."""
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, Numeric, JSON,
    DateTime, ForeignKey, Enum as SQLEnum, Index
)
import enum

from monlyking.core.database import Base


class MessageType(str, enum.Enum):
    TEXT = "text"
    OFFER = "offer"
    COUNTER_OFFER = "counter_offer"
    PRODUCT = "product"
    IMAGE = "image"


class ChatMessage(Base):
    """
    Message in a two-party chat room.

    ``room`` is the pair key of both participants (see
    ``monlyking.services.chat.room_key``). ``sender_id`` is null for
    messages posted by support staff into a support room.
    """

    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, index=True)
    room = Column(String(100), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), index=True)
    sender_name = Column(String(100), nullable=False)

    type = Column(SQLEnum(MessageType), default=MessageType.TEXT, nullable=False)
    content = Column(Text, nullable=False, default="")
    offer_price = Column(Numeric(12, 2))
    original_price = Column(Numeric(12, 2))
    product_id = Column(Integer, ForeignKey("game_accounts.id"))
    image_url = Column(String(500))

    read_by = Column(JSON, default=list, nullable=False)

    # Moderation
    is_filtered = Column(Boolean, default=False, nullable=False)
    filtered_reason = Column(String(200))

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index('idx_chat_room_created', 'room', 'created_at'),
    )

    def __repr__(self):
        return f"<ChatMessage {self.id} in {self.room}>"
