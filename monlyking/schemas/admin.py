"""Admin panel schemas."""
from typing import Optional, List
from pydantic import BaseModel

from monlyking.models.user import UserRole
from monlyking.schemas.chat import MessageResponse
from monlyking.schemas.order import OrderResponse
from monlyking.schemas.user import UserResponse
from monlyking.schemas.wallet import WalletRequestResponse


class UserStatusUpdate(BaseModel):
    """Moderation flags; omitted fields are left unchanged."""
    is_banned: Optional[bool] = None
    is_disabled: Optional[bool] = None
    role: Optional[UserRole] = None


class UserList(BaseModel):
    items: List[UserResponse]
    total: int


class DashboardStats(BaseModel):
    total_users: int
    banned_users: int
    active_listings: int
    total_orders: int
    open_orders: int
    settled_orders: int
    pending_money: float
    commission_earned: float
    pending_wallet_requests: int
    open_tickets: int


class AdminUserDetail(BaseModel):
    """One user with their orders and wallet requests."""
    user: UserResponse
    orders: List[OrderResponse]
    deposit_requests: List[WalletRequestResponse]
    withdraw_requests: List[WalletRequestResponse]
    pending_withdrawals: float


class ChatTranscript(BaseModel):
    """Full history of one room, filtered messages included."""
    room: str
    other_user_id: Optional[int] = None
    filtered_count: int
    messages: List[MessageResponse]
