"""Order schemas."""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from monlyking.models.order import OrderStatus


class OrderCreate(BaseModel):
    """Schema for purchasing a listing."""
    account_id: int


class AccountCredentials(BaseModel):
    """Credentials the seller hands over for a sold account."""
    username: Optional[str] = Field(None, max_length=200)
    email: Optional[str] = Field(None, max_length=200)
    password: Optional[str] = Field(None, max_length=200)
    recovery_email: Optional[str] = Field(None, max_length=200)
    phone_number: Optional[str] = Field(None, max_length=50)
    two_factor_auth: Optional[str] = Field(None, max_length=500)
    security_questions: Optional[str] = Field(None, max_length=1000)
    additional_info: Optional[str] = Field(None, max_length=2000)


class OrderResponse(BaseModel):
    """Schema for order response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    reference: str
    buyer_id: int
    seller_id: int
    account_id: int
    amount: float
    escrow_amount: float
    commission: Optional[float] = None
    seller_payout: Optional[float] = None
    status: OrderStatus
    account_details: Optional[AccountCredentials] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    delivered_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class OrderList(BaseModel):
    items: List[OrderResponse]
    total: int


class PendingMoneyResponse(BaseModel):
    """Funds currently held in escrow across open orders."""
    orders: List[OrderResponse]
    count: int
    total_amount: float
    by_status: dict[str, int]
