"""Chat schemas."""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, model_validator

from monlyking.models.chat import MessageType


class MessageCreate(BaseModel):
    """Schema for sending a chat message."""
    type: MessageType = MessageType.TEXT
    content: str = Field("", max_length=500)
    offer_price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    original_price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    product_id: Optional[int] = None
    image_url: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def check_payload(self):
        self.content = self.content.strip()
        if self.type == MessageType.IMAGE:
            if not self.image_url:
                raise ValueError("Image messages need an image_url")
        elif self.type in (MessageType.OFFER, MessageType.COUNTER_OFFER):
            if self.offer_price is None:
                raise ValueError("Offers need an offer_price")
        elif self.type == MessageType.PRODUCT:
            if self.product_id is None:
                raise ValueError("Product messages need a product_id")
        elif not self.content:
            raise ValueError("Message cannot be empty")
        return self


class MessageResponse(BaseModel):
    """Schema for message response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    room: str
    sender_id: Optional[int] = None
    sender_name: str
    type: MessageType
    content: str
    offer_price: Optional[float] = None
    original_price: Optional[float] = None
    product_id: Optional[int] = None
    image_url: Optional[str] = None
    read_by: List[int] = []
    is_filtered: bool
    filtered_reason: Optional[str] = None
    created_at: datetime


class ChatRoomSummary(BaseModel):
    room: str
    other_user_id: Optional[int] = None
    last_message: MessageResponse
    unread_count: int
