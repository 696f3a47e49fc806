"""Database models."""
from monlyking.models.user import User, UserRole
from monlyking.models.listing import GameAccount, Game, ListingStatus
from monlyking.models.order import Order, OrderStatus, Escrow, EscrowStatus
from monlyking.models.wallet import (
    WalletTransaction, WalletTransactionType, WalletTransactionStatus,
    WalletRequest, WalletRequestType, WalletRequestStatus,
)
from monlyking.models.chat import ChatMessage, MessageType
from monlyking.models.support import (
    SupportTicket, TicketCategory, TicketPriority, TicketStatus
)

__all__ = [
    "User",
    "UserRole",
    "GameAccount",
    "Game",
    "ListingStatus",
    "Order",
    "OrderStatus",
    "Escrow",
    "EscrowStatus",
    "WalletTransaction",
    "WalletTransactionType",
    "WalletTransactionStatus",
    "WalletRequest",
    "WalletRequestType",
    "WalletRequestStatus",
    "ChatMessage",
    "MessageType",
    "SupportTicket",
    "TicketCategory",
    "TicketPriority",
    "TicketStatus",
]
