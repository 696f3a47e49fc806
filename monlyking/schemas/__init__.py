"""Pydantic schemas for API validation."""
from monlyking.schemas.user import (
    UserCreate, UserUpdate, UserResponse, PublicUserResponse, UserProfileResponse,
    LevelProgressResponse, UserLogin, RefreshRequest, Token
)
from monlyking.schemas.listing import (
    ListingCreate, ListingUpdate, ListingResponse, ListingList
)
from monlyking.schemas.order import (
    OrderCreate, AccountCredentials, OrderResponse, OrderList, PendingMoneyResponse
)
from monlyking.schemas.wallet import (
    TopupRequestCreate, WithdrawRequestCreate, WalletRequestDecision,
    WalletRequestResponse, WalletTransactionResponse, WalletSummary, FeeQuote
)
from monlyking.schemas.chat import MessageCreate, MessageResponse, ChatRoomSummary
from monlyking.schemas.support import (
    TicketCreate, TicketStatusUpdate, TicketAdminResponse, TicketResponse,
    AdminTicketResponse
)
from monlyking.schemas.admin import (
    UserStatusUpdate, UserList, DashboardStats, AdminUserDetail, ChatTranscript
)

__all__ = [
    "UserCreate", "UserUpdate", "UserResponse", "PublicUserResponse",
    "UserProfileResponse", "LevelProgressResponse", "UserLogin",
    "RefreshRequest", "Token",
    "ListingCreate", "ListingUpdate", "ListingResponse", "ListingList",
    "OrderCreate", "AccountCredentials", "OrderResponse", "OrderList",
    "PendingMoneyResponse",
    "TopupRequestCreate", "WithdrawRequestCreate", "WalletRequestDecision",
    "WalletRequestResponse", "WalletTransactionResponse", "WalletSummary",
    "FeeQuote",
    "MessageCreate", "MessageResponse", "ChatRoomSummary",
    "TicketCreate", "TicketStatusUpdate", "TicketAdminResponse",
    "TicketResponse", "AdminTicketResponse",
    "UserStatusUpdate", "UserList", "DashboardStats", "AdminUserDetail",
    "ChatTranscript",
]
