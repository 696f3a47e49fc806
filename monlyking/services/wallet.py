"""Wallet requests: user-submitted top-ups and withdrawals, settled by admins."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from monlyking.core.config import settings
from monlyking.core.exceptions import (
    NotFoundError, InsufficientBalanceError, WithdrawalBelowMinimumError,
    InvalidRequestError,
)
from monlyking.core.metrics import WALLET_REQUESTS
from monlyking.models.user import User
from monlyking.models.wallet import (
    WalletRequest, WalletRequestType, WalletRequestStatus,
    WalletTransaction, WalletTransactionType, WalletTransactionStatus,
)
from monlyking.services.fees import calculate_fee, to_money

logger = structlog.get_logger(__name__)


async def create_topup_request(
    db: AsyncSession,
    user: User,
    amount: Decimal,
    wallet_name: str,
    payment_method: Optional[str] = None,
) -> WalletRequest:
    """Record an external payment; the credit after the fee is applied on approval."""
    breakdown = calculate_fee(amount)
    request = WalletRequest(
        user_id=user.id,
        type=WalletRequestType.TOPUP,
        amount=breakdown.original_amount,
        fee_amount=breakdown.fee_amount,
        amount_after_fee=breakdown.amount_after_fee,
        wallet_name=wallet_name,
        payment_method=payment_method,
        status=WalletRequestStatus.PENDING,
    )
    db.add(request)
    await db.flush()

    WALLET_REQUESTS.labels(type="topup", status="pending").inc()
    logger.info("topup_requested", request_id=request.id, user_id=user.id, amount=str(breakdown.original_amount))
    return request


async def create_withdraw_request(
    db: AsyncSession,
    user: User,
    amount: Decimal,
    payment_method: str,
    account_details: str,
) -> WalletRequest:
    """
    Ask to pay out wallet funds.

    Raises:
        WithdrawalBelowMinimumError: amount under ``MIN_WITHDRAWAL_AMOUNT``
        InsufficientBalanceError: amount above the current balance
    """
    amount = to_money(amount)
    if amount < settings.MIN_WITHDRAWAL_AMOUNT:
        raise WithdrawalBelowMinimumError(to_money(settings.MIN_WITHDRAWAL_AMOUNT))

    balance = to_money(user.wallet_balance)
    if amount > balance:
        raise InsufficientBalanceError(balance, amount)

    breakdown = calculate_fee(amount)
    request = WalletRequest(
        user_id=user.id,
        type=WalletRequestType.WITHDRAW,
        amount=breakdown.original_amount,
        fee_amount=breakdown.fee_amount,
        amount_after_fee=breakdown.amount_after_fee,
        payment_method=payment_method,
        account_details=account_details,
        status=WalletRequestStatus.PENDING,
    )
    db.add(request)
    await db.flush()

    WALLET_REQUESTS.labels(type="withdraw", status="pending").inc()
    logger.info("withdrawal_requested", request_id=request.id, user_id=user.id, amount=str(amount))
    return request


async def _pending_request(db: AsyncSession, request_id: int) -> WalletRequest:
    result = await db.execute(
        select(WalletRequest)
        .where(WalletRequest.id == request_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    request = result.scalar_one_or_none()
    if not request:
        raise NotFoundError("Wallet request", request_id)
    if request.status != WalletRequestStatus.PENDING:
        raise InvalidRequestError(f"Wallet request is already {request.status.value}")
    return request


async def approve_request(
    db: AsyncSession,
    request_id: int,
    admin: User,
    admin_notes: Optional[str] = None,
) -> WalletRequest:
    """
    Apply a pending request to the user's balance.

    Top-ups credit ``amount_after_fee``. Withdrawals debit the full
    ``amount``, never taking the balance below zero.
    """
    request = await _pending_request(db, request_id)

    result = await db.execute(
        select(User)
        .where(User.id == request.user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User", request.user_id)

    now = datetime.utcnow()
    balance = to_money(user.wallet_balance)

    if request.type == WalletRequestType.TOPUP:
        change = to_money(request.amount_after_fee)
        user.wallet_balance = balance + change
        tx_type = WalletTransactionType.TOPUP
        description = f"Wallet top-up via {request.wallet_name or 'transfer'}"
    else:
        change = -min(balance, to_money(request.amount))
        user.wallet_balance = balance + change
        tx_type = WalletTransactionType.WITHDRAW
        description = f"Withdrawal via {request.payment_method or 'transfer'}"

    db.add(WalletTransaction(
        user_id=user.id,
        type=tx_type,
        amount=change,
        description=description,
        status=WalletTransactionStatus.COMPLETED,
        wallet_request_id=request.id,
        created_at=now,
        completed_at=now,
    ))

    request.status = WalletRequestStatus.APPROVED
    request.admin_id = admin.id
    request.admin_notes = admin_notes
    request.processed_at = now
    await db.flush()

    WALLET_REQUESTS.labels(type=request.type.value, status="approved").inc()
    logger.info(
        "wallet_request_approved",
        request_id=request.id,
        user_id=user.id,
        type=request.type.value,
        balance_change=str(change),
        admin_id=admin.id,
    )
    return request


async def reject_request(
    db: AsyncSession,
    request_id: int,
    admin: User,
    admin_notes: Optional[str] = None,
) -> WalletRequest:
    request = await _pending_request(db, request_id)
    request.status = WalletRequestStatus.REJECTED
    request.admin_id = admin.id
    request.admin_notes = admin_notes
    request.processed_at = datetime.utcnow()
    await db.flush()

    WALLET_REQUESTS.labels(type=request.type.value, status="rejected").inc()
    logger.info("wallet_request_rejected", request_id=request.id, admin_id=admin.id)
    return request


async def pending_withdrawals_total(db: AsyncSession, user_id: int) -> Decimal:
    result = await db.execute(
        select(func.coalesce(func.sum(WalletRequest.amount), 0)).where(
            WalletRequest.user_id == user_id,
            WalletRequest.type == WalletRequestType.WITHDRAW,
            WalletRequest.status == WalletRequestStatus.PENDING,
        )
    )
    return to_money(result.scalar() or 0)
