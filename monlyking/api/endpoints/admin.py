"""Admin panel endpoints: moderation, wallet requests, escrow and tickets."""
from collections import Counter
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from monlyking.core.database import get_db
from monlyking.core.exceptions import NotFoundError
from monlyking.core.redis import RedisClient, get_redis
from monlyking.core.security import get_current_admin
from monlyking.models.listing import GameAccount, ListingStatus
from monlyking.models.order import Order, OPEN_ORDER_STATUSES, SETTLED_ORDER_STATUSES
from monlyking.models.support import SupportTicket, TicketStatus
from monlyking.models.user import User
from monlyking.models.wallet import WalletRequest, WalletRequestStatus, WalletRequestType
from monlyking.schemas.admin import (
    UserStatusUpdate, UserList, DashboardStats, AdminUserDetail, ChatTranscript
)
from monlyking.schemas.chat import MessageResponse
from monlyking.schemas.order import OrderResponse, PendingMoneyResponse
from monlyking.schemas.support import TicketStatusUpdate, TicketAdminResponse, AdminTicketResponse
from monlyking.schemas.user import UserResponse
from monlyking.schemas.wallet import WalletRequestDecision, WalletRequestResponse
from monlyking.services import chat as chat_service
from monlyking.services import orders as order_service
from monlyking.services import support as support_service
from monlyking.services import wallet as wallet_service
from monlyking.services.fees import to_money
from monlyking.services.notifications import notify

router = APIRouter()
logger = structlog.get_logger(__name__)


# Users

@router.get("/users", response_model=UserList)
async def list_users(
    search: Optional[str] = None,
    banned: Optional[bool] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    query = select(User)
    if search:
        query = query.where(
            User.email.ilike(f"%{search}%")
            | User.username.ilike(f"%{search}%")
            | User.display_name.ilike(f"%{search}%")
        )
    if banned is not None:
        query = query.where(User.is_banned == banned)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar()

    query = query.order_by(User.join_date.desc(), User.id.desc())
    query = query.offset((page - 1) * page_size).limit(page_size)
    users = (await db.execute(query)).scalars().all()

    return UserList(items=users, total=total)


@router.get("/users/{user_id}", response_model=AdminUserDetail)
async def get_user_detail(
    user_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """Profile of one user with their orders and wallet requests."""
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User", user_id)

    orders = await order_service.list_orders_for_user(db, user.id)
    requests = (await db.execute(
        select(WalletRequest)
        .where(WalletRequest.user_id == user.id)
        .order_by(WalletRequest.created_at.desc(), WalletRequest.id.desc())
    )).scalars().all()

    return AdminUserDetail(
        user=UserResponse.model_validate(user),
        orders=[OrderResponse.model_validate(o) for o in orders],
        deposit_requests=[
            WalletRequestResponse.model_validate(r) for r in requests
            if r.type == WalletRequestType.TOPUP
        ],
        withdraw_requests=[
            WalletRequestResponse.model_validate(r) for r in requests
            if r.type == WalletRequestType.WITHDRAW
        ],
        pending_withdrawals=float(await wallet_service.pending_withdrawals_total(db, user.id)),
    )


@router.get("/users/{user_id}/chats", response_model=list[ChatTranscript])
async def get_user_chats(
    user_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """Read a user's conversations, including messages the filter withheld."""
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User", user_id)

    logger.info("user_chats_viewed", user_id=user.id, admin_id=admin.id)
    return await chat_service.user_transcripts(db, user.id)


@router.patch("/users/{user_id}", response_model=UserResponse)
async def update_user_status(
    user_id: int,
    update: UserStatusUpdate,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """Ban, unban, disable, enable or change the role of a user."""
    if user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admins cannot change their own status",
        )

    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User", user_id)

    changes = update.model_dump(exclude_none=True)
    for field, value in changes.items():
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)

    logger.info("user_status_changed", user_id=user.id, admin_id=admin.id, **{k: str(v) for k, v in changes.items()})
    return user


@router.post("/users/{user_id}/recalculate-level", response_model=UserResponse)
async def recalculate_level(
    user_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """Rebuild a user's level from their settled orders."""
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User", user_id)

    await order_service.recalculate_user_level(db, user)
    await db.commit()
    await db.refresh(user)
    return user


# Wallet requests

@router.get("/wallet-requests", response_model=list[WalletRequestResponse])
async def list_wallet_requests(
    request_status: Optional[WalletRequestStatus] = Query(None, alias="status"),
    request_type: Optional[WalletRequestType] = Query(None, alias="type"),
    user_id: Optional[int] = None,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    query = select(WalletRequest)
    if request_status:
        query = query.where(WalletRequest.status == request_status)
    if request_type:
        query = query.where(WalletRequest.type == request_type)
    if user_id:
        query = query.where(WalletRequest.user_id == user_id)
    query = query.order_by(WalletRequest.created_at.desc(), WalletRequest.id.desc())

    return (await db.execute(query)).scalars().all()


@router.post("/wallet-requests/{request_id}/approve", response_model=WalletRequestResponse)
async def approve_wallet_request(
    request_id: int,
    decision: WalletRequestDecision,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    request = await wallet_service.approve_request(db, request_id, admin, decision.admin_notes)
    await db.commit()
    await db.refresh(request)

    await notify(request.user_id, "wallet_request_approved", request_id=request.id, type=request.type.value)
    return request


@router.post("/wallet-requests/{request_id}/reject", response_model=WalletRequestResponse)
async def reject_wallet_request(
    request_id: int,
    decision: WalletRequestDecision,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    request = await wallet_service.reject_request(db, request_id, admin, decision.admin_notes)
    await db.commit()
    await db.refresh(request)

    await notify(request.user_id, "wallet_request_rejected", request_id=request.id, type=request.type.value)
    return request


# Escrow

@router.get("/pending-money", response_model=PendingMoneyResponse)
async def pending_money(
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """Open orders whose funds are still held in escrow."""
    orders = await order_service.list_open_orders(db)
    total = sum((to_money(o.escrow_amount) for o in orders), to_money(0))

    return PendingMoneyResponse(
        orders=[OrderResponse.model_validate(o) for o in orders],
        count=len(orders),
        total_amount=float(total),
        by_status=dict(Counter(o.status.value for o in orders)),
    )


STATS_CACHE_KEY = "admin:dashboard_stats"
STATS_CACHE_SECONDS = 30


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
    redis: RedisClient = Depends(get_redis),
):
    cached = await redis.get(STATS_CACHE_KEY)
    if cached:
        return DashboardStats(**cached)

    async def count(model, *conditions) -> int:
        return (await db.execute(select(func.count()).select_from(model).where(*conditions))).scalar()

    async def total(column, *conditions):
        return to_money((await db.execute(select(func.coalesce(func.sum(column), 0)).where(*conditions))).scalar() or 0)

    stats = DashboardStats(
        total_users=await count(User),
        banned_users=await count(User, User.is_banned.is_(True)),
        active_listings=await count(GameAccount, GameAccount.status == ListingStatus.ACTIVE),
        total_orders=await count(Order),
        open_orders=await count(Order, Order.status.in_(OPEN_ORDER_STATUSES)),
        settled_orders=await count(Order, Order.status.in_(SETTLED_ORDER_STATUSES)),
        pending_money=float(await total(Order.escrow_amount, Order.status.in_(OPEN_ORDER_STATUSES))),
        commission_earned=float(await total(Order.commission, Order.status.in_(SETTLED_ORDER_STATUSES))),
        pending_wallet_requests=await count(WalletRequest, WalletRequest.status == WalletRequestStatus.PENDING),
        open_tickets=await count(
            SupportTicket,
            SupportTicket.status.in_((TicketStatus.OPEN, TicketStatus.IN_PROGRESS)),
        ),
    )

    await redis.set(STATS_CACHE_KEY, stats.model_dump(), expire=STATS_CACHE_SECONDS)
    return stats


# Support tickets

@router.get("/tickets", response_model=list[AdminTicketResponse])
async def list_tickets(
    ticket_status: Optional[TicketStatus] = Query(None, alias="status"),
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await support_service.list_tickets(db, status=ticket_status)


@router.put("/tickets/{ticket_id}/status", response_model=AdminTicketResponse)
async def update_ticket_status(
    ticket_id: int,
    update: TicketStatusUpdate,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    ticket = await support_service.update_ticket_status(db, ticket_id, update.status, admin, update.admin_notes)
    await db.commit()
    await db.refresh(ticket)
    return ticket


@router.post("/tickets/{ticket_id}/respond", response_model=MessageResponse)
async def respond_to_ticket(
    ticket_id: int,
    body: TicketAdminResponse,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """Answer a ticket; the reply lands in the user's support chat."""
    ticket, message = await support_service.respond_to_ticket(db, ticket_id, body.response, admin)
    await db.commit()
    await db.refresh(message)

    await chat_service.publish_message(message)
    await notify(ticket.user_id, "support_response", ticket_id=ticket.id, reference=ticket.reference)
    return chat_service.message_payload(message, ticket.user_id)
