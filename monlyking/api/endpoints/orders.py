"""Order endpoints: purchase, delivery and confirmation."""
from typing import Literal, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from monlyking.core.database import get_db
from monlyking.core.security import get_current_user
from monlyking.models.order import OrderStatus
from monlyking.models.user import User
from monlyking.schemas.order import OrderCreate, AccountCredentials, OrderResponse, OrderList
from monlyking.services import orders as order_service
from monlyking.services.notifications import notify

router = APIRouter()


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Buy a listing; the price moves from the buyer's wallet into escrow."""
    order = await order_service.create_order(db, user.id, order_data.account_id)
    await db.commit()
    await db.refresh(order)

    await notify(order.seller_id, "order_created", order_id=order.id, reference=order.reference)
    return order


@router.get("/", response_model=OrderList)
async def list_orders(
    role: Optional[Literal["buyer", "seller"]] = None,
    status: Optional[OrderStatus] = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Orders the current user bought or sold, newest first."""
    orders = await order_service.list_orders_for_user(db, user.id, role=role, status=status)
    return OrderList(items=orders, total=len(orders))


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await order_service.get_order_for_user(db, order_id, user)


@router.post("/{order_id}/start-delivery", response_model=OrderResponse)
async def start_delivery(
    order_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    order = await order_service.start_delivery(db, order_id, user.id)
    await db.commit()
    await db.refresh(order)

    await notify(order.buyer_id, "order_delivering", order_id=order.id)
    return order


@router.post("/{order_id}/account-details", response_model=OrderResponse)
async def add_account_details(
    order_id: int,
    credentials: AccountCredentials,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Seller hands over the account credentials."""
    order = await order_service.add_account_details(db, order_id, user.id, credentials.model_dump())
    await db.commit()
    await db.refresh(order)

    await notify(order.buyer_id, "order_awaiting_confirmation", order_id=order.id)
    return order


@router.post("/{order_id}/confirm", response_model=OrderResponse)
async def confirm_delivery(
    order_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Buyer confirms the account works; escrow is paid out to the seller."""
    order = await order_service.confirm_delivery(db, order_id, user.id)
    await db.commit()
    await db.refresh(order)

    await notify(order.seller_id, "order_delivered", order_id=order.id, payout=order.seller_payout)
    return order
