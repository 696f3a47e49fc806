"""Support ticket schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from monlyking.models.support import TicketCategory, TicketPriority, TicketStatus


class TicketCreate(BaseModel):
    category: TicketCategory
    subject: str = Field(..., min_length=5, max_length=100)
    description: str = Field(..., min_length=20, max_length=1000)
    priority: TicketPriority = TicketPriority.MEDIUM
    order_id: Optional[int] = None


class TicketStatusUpdate(BaseModel):
    status: TicketStatus
    admin_notes: Optional[str] = Field(None, max_length=2000)


class TicketAdminResponse(BaseModel):
    response: str = Field(..., min_length=1, max_length=2000)


class TicketResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reference: str
    user_id: int
    order_id: Optional[int] = None
    category: TicketCategory
    subject: str
    description: str
    priority: TicketPriority
    status: TicketStatus
    admin_id: Optional[int] = None
    admin_response: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None


class AdminTicketResponse(TicketResponse):
    admin_notes: Optional[str] = None
