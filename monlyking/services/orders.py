"""
Order lifecycle: purchase into escrow, delivery of credentials, buyer
confirmation and payout.

    escrow -> delivering -> awaiting_confirmation -> delivered
    escrow ---------------> awaiting_confirmation

Every function works inside the caller's session and only flushes; the
request handler commits, so all writes of one step land together. Rows that
carry money are read with SELECT ... FOR UPDATE.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

import structlog
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from monlyking.core.exceptions import (
    NotFoundError, PermissionDeniedError, InsufficientBalanceError,
    SelfPurchaseError, ListingUnavailableError, InvalidOrderTransitionError,
    AccountSuspendedError,
)
from monlyking.core.metrics import ORDERS_CREATED, ORDERS_SETTLED, COMMISSION_COLLECTED
from monlyking.models.user import User, UserRole
from monlyking.models.listing import GameAccount, ListingStatus
from monlyking.models.order import (
    Order, OrderStatus, Escrow, EscrowStatus,
    OPEN_ORDER_STATUSES, SETTLED_ORDER_STATUSES,
)
from monlyking.models.wallet import WalletTransaction, WalletTransactionType, WalletTransactionStatus
from monlyking.services.fees import settle_order_amount, to_money
from monlyking.services.levels import level_for_value
from monlyking.services.references import generate_order_reference

logger = structlog.get_logger(__name__)

# action -> (statuses it may start from, status it moves to)
TRANSITIONS = {
    "start delivery of": (
        (OrderStatus.ESCROW,),
        OrderStatus.DELIVERING,
    ),
    "add account details to": (
        (OrderStatus.ESCROW, OrderStatus.DELIVERING),
        OrderStatus.AWAITING_CONFIRMATION,
    ),
    "confirm": (
        (OrderStatus.AWAITING_CONFIRMATION,),
        OrderStatus.DELIVERED,
    ),
}


async def _lock_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User", user_id)
    return user


async def _lock_users(db: AsyncSession, *user_ids: int) -> dict[int, User]:
    """Lock several user rows, always in ascending id order."""
    result = await db.execute(
        select(User)
        .where(User.id.in_(user_ids))
        .order_by(User.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    users = {user.id: user for user in result.scalars().all()}
    for user_id in user_ids:
        if user_id not in users:
            raise NotFoundError("User", user_id)
    return users


async def _lock_order(db: AsyncSession, order_id: int) -> Order:
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()
    if not order:
        raise NotFoundError("Order", order_id)
    return order


def _advance(order: Order, action: str) -> None:
    allowed, target = TRANSITIONS[action]
    if order.status not in allowed:
        raise InvalidOrderTransitionError(order.id, order.status.value, action)
    order.status = target


async def create_order(db: AsyncSession, buyer_id: int, account_id: int) -> Order:
    """
    Purchase a listing: debit the buyer and hold the price in escrow.

    Raises:
        NotFoundError: listing does not exist
        SelfPurchaseError: buyer is the seller
        ListingUnavailableError: listing is not active
        InsufficientBalanceError: wallet balance below the price
    """
    buyer = await _lock_user(db, buyer_id)
    if not buyer.is_active:
        raise AccountSuspendedError()

    result = await db.execute(
        select(GameAccount)
        .where(GameAccount.id == account_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    listing = result.scalar_one_or_none()

    if not listing:
        raise NotFoundError("Listing", account_id)

    if listing.seller_id == buyer.id:
        raise SelfPurchaseError()

    if listing.status != ListingStatus.ACTIVE:
        raise ListingUnavailableError(f"Listing is {listing.status.value}")

    price = to_money(listing.price)
    balance = to_money(buyer.wallet_balance)
    if balance < price:
        raise InsufficientBalanceError(balance, price)

    order = Order(
        reference=generate_order_reference(),
        buyer_id=buyer.id,
        seller_id=listing.seller_id,
        account_id=listing.id,
        amount=price,
        escrow_amount=price,
        status=OrderStatus.ESCROW,
        notes=f"Purchase of {listing.title}",
    )
    db.add(order)

    buyer.wallet_balance = balance - price
    listing.status = ListingStatus.PENDING

    await db.flush()

    now = datetime.utcnow()
    db.add(WalletTransaction(
        user_id=buyer.id,
        type=WalletTransactionType.PURCHASE,
        amount=-price,
        description=f"Purchase: {listing.title}",
        status=WalletTransactionStatus.COMPLETED,
        order_id=order.id,
        created_at=now,
        completed_at=now,
    ))
    db.add(Escrow(
        order_id=order.id,
        buyer_id=buyer.id,
        seller_id=listing.seller_id,
        amount=price,
        status=EscrowStatus.HELD,
    ))
    await db.flush()

    ORDERS_CREATED.labels(game=listing.game.value).inc()
    logger.info(
        "order_created",
        order_id=order.id,
        reference=order.reference,
        buyer_id=buyer.id,
        seller_id=listing.seller_id,
        amount=str(price),
    )
    return order


async def start_delivery(db: AsyncSession, order_id: int, seller_id: int) -> Order:
    """Seller acknowledges the order and starts handing the account over."""
    order = await _lock_order(db, order_id)
    if order.seller_id != seller_id:
        raise PermissionDeniedError("Only the seller can deliver this order")

    _advance(order, "start delivery of")
    await db.flush()

    logger.info("order_delivering", order_id=order.id)
    return order


async def add_account_details(
    db: AsyncSession,
    order_id: int,
    seller_id: int,
    details: dict,
) -> Order:
    """Attach the account credentials and wait for the buyer to confirm."""
    order = await _lock_order(db, order_id)
    if order.seller_id != seller_id:
        raise PermissionDeniedError("Only the seller can add account details")

    _advance(order, "add account details to")
    order.account_details = {k: v for k, v in details.items() if v is not None}
    await db.flush()

    logger.info("order_details_added", order_id=order.id)
    return order


async def confirm_delivery(db: AsyncSession, order_id: int, buyer_id: int) -> Order:
    """
    Buyer confirms receipt: release escrow, pay the seller minus commission
    and recalculate both parties' levels.

    Only orders awaiting confirmation can be confirmed, so repeating the call
    raises instead of paying the seller twice.
    """
    order = await _lock_order(db, order_id)
    if order.buyer_id != buyer_id:
        raise PermissionDeniedError("Only the buyer can confirm this order")

    _advance(order, "confirm")

    breakdown = settle_order_amount(order.amount)
    now = datetime.utcnow()

    order.commission = breakdown.fee_amount
    order.seller_payout = breakdown.amount_after_fee
    order.delivered_at = now

    parties = await _lock_users(db, order.buyer_id, order.seller_id)
    buyer, seller = parties[order.buyer_id], parties[order.seller_id]

    seller.wallet_balance = to_money(seller.wallet_balance) + breakdown.amount_after_fee
    seller.total_trades = (seller.total_trades or 0) + 1

    buyer.total_trades = (buyer.total_trades or 0) + 1

    db.add(WalletTransaction(
        user_id=seller.id,
        type=WalletTransactionType.SALE,
        amount=breakdown.amount_after_fee,
        description=(
            f"Sale {order.reference} "
            f"(commission {breakdown.fee_amount})"
        ),
        status=WalletTransactionStatus.COMPLETED,
        order_id=order.id,
        created_at=now,
        completed_at=now,
    ))

    escrow = (await db.execute(
        select(Escrow).where(Escrow.order_id == order.id)
    )).scalar_one_or_none()
    if escrow:
        escrow.status = EscrowStatus.RELEASED
        escrow.released_at = now

    listing = await db.get(GameAccount, order.account_id)
    if listing:
        listing.status = ListingStatus.SOLD

    await db.flush()

    await recalculate_user_level(db, buyer)
    await recalculate_user_level(db, seller)

    ORDERS_SETTLED.inc()
    COMMISSION_COLLECTED.inc(float(breakdown.fee_amount))
    logger.info(
        "order_settled",
        order_id=order.id,
        seller_id=seller.id,
        payout=str(breakdown.amount_after_fee),
        commission=str(breakdown.fee_amount),
    )
    return order


async def settled_value_for_user(db: AsyncSession, user_id: int) -> Decimal:
    """Sum of every settled order the user bought or sold."""
    result = await db.execute(
        select(func.coalesce(func.sum(Order.amount), 0)).where(
            or_(Order.buyer_id == user_id, Order.seller_id == user_id),
            Order.status.in_(SETTLED_ORDER_STATUSES),
        )
    )
    return to_money(result.scalar() or 0)


async def recalculate_user_level(db: AsyncSession, user: User) -> int:
    """Recompute a user's level from the full order history."""
    total = await settled_value_for_user(db, user.id)
    previous = user.level
    user.total_transaction_value = total
    user.level = level_for_value(total)
    await db.flush()

    logger.info(
        "level_recalculated",
        user_id=user.id,
        total_transaction_value=str(total),
        previous_level=previous,
        level=user.level,
    )
    return user.level


async def get_order_for_user(db: AsyncSession, order_id: int, user: User) -> Order:
    """Load an order visible to ``user`` (a party to it, or an admin)."""
    order = await db.get(Order, order_id)
    if not order:
        raise NotFoundError("Order", order_id)

    if user.role != UserRole.ADMIN and user.id not in (order.buyer_id, order.seller_id):
        raise PermissionDeniedError("Not authorized to view this order")

    return order


async def list_orders_for_user(
    db: AsyncSession,
    user_id: int,
    role: Optional[str] = None,
    status: Optional[OrderStatus] = None,
) -> list[Order]:
    """Orders the user bought (``role="buyer"``), sold (``"seller"``) or both."""
    if role == "buyer":
        party = Order.buyer_id == user_id
    elif role == "seller":
        party = Order.seller_id == user_id
    else:
        party = or_(Order.buyer_id == user_id, Order.seller_id == user_id)

    query = select(Order).where(party)
    if status:
        query = query.where(Order.status == status)
    query = query.order_by(Order.created_at.desc(), Order.id.desc())

    result = await db.execute(query)
    return list(result.scalars().all())


async def list_open_orders(db: AsyncSession) -> list[Order]:
    """Orders whose funds are still held in escrow."""
    result = await db.execute(
        select(Order)
        .where(Order.status.in_(OPEN_ORDER_STATUSES))
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return list(result.scalars().all())
