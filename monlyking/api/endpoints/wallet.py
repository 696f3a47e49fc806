"""Wallet endpoints."""
from decimal import Decimal
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from monlyking.core.config import settings
from monlyking.core.database import get_db
from monlyking.core.security import get_current_user
from monlyking.models.user import User
from monlyking.models.wallet import WalletTransaction, WalletRequest
from monlyking.schemas.wallet import (
    TopupRequestCreate, WithdrawRequestCreate, WalletRequestResponse,
    WalletTransactionResponse, WalletSummary, FeeQuote,
)
from monlyking.services import wallet as wallet_service
from monlyking.services.fees import calculate_fee, required_payment

router = APIRouter()


@router.get("/", response_model=WalletSummary)
async def get_wallet(
    limit: int = Query(50, ge=1, le=200),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Balance and recent transactions of the current user."""
    result = await db.execute(
        select(WalletTransaction)
        .where(WalletTransaction.user_id == user.id)
        .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
        .limit(limit)
    )
    transactions = result.scalars().all()

    return WalletSummary(
        balance=float(user.wallet_balance),
        currency=settings.CURRENCY_CODE,
        pending_withdrawals=float(await wallet_service.pending_withdrawals_total(db, user.id)),
        transactions=[WalletTransactionResponse.model_validate(t) for t in transactions],
    )


@router.get("/transactions", response_model=list[WalletTransactionResponse])
async def list_transactions(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(WalletTransaction)
        .where(WalletTransaction.user_id == user.id)
        .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
    )
    return result.scalars().all()


@router.get("/fees", response_model=FeeQuote)
async def quote_fee(amount: Decimal = Query(..., gt=0)):
    """Preview the wallet fee on an amount."""
    breakdown = calculate_fee(amount)
    return FeeQuote(
        original_amount=float(breakdown.original_amount),
        fee_amount=float(breakdown.fee_amount),
        amount_after_fee=float(breakdown.amount_after_fee),
        required_payment_for_credit=float(required_payment(amount)),
    )


@router.get("/requests", response_model=list[WalletRequestResponse])
async def list_my_requests(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(WalletRequest)
        .where(WalletRequest.user_id == user.id)
        .order_by(WalletRequest.created_at.desc(), WalletRequest.id.desc())
    )
    return result.scalars().all()


@router.post("/topup", response_model=WalletRequestResponse, status_code=status.HTTP_201_CREATED)
async def request_topup(
    request_data: TopupRequestCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Report an external payment for admin review."""
    request = await wallet_service.create_topup_request(
        db,
        user,
        request_data.amount,
        request_data.wallet_name,
        request_data.payment_method,
    )
    await db.commit()
    await db.refresh(request)
    return request


@router.post("/withdraw", response_model=WalletRequestResponse, status_code=status.HTTP_201_CREATED)
async def request_withdrawal(
    request_data: WithdrawRequestCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    request = await wallet_service.create_withdraw_request(
        db,
        user,
        request_data.amount,
        request_data.payment_method,
        request_data.account_details,
    )
    await db.commit()
    await db.refresh(request)
    return request
