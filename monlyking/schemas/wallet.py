"""Wallet schemas."""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from monlyking.models.wallet import (
    WalletTransactionType, WalletTransactionStatus,
    WalletRequestType, WalletRequestStatus,
)


class TopupRequestCreate(BaseModel):
    """Top-up: the user paid ``amount`` externally and asks for wallet credit."""
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    wallet_name: str = Field(..., min_length=1, max_length=100)
    payment_method: Optional[str] = Field(None, max_length=100)


class WithdrawRequestCreate(BaseModel):
    """Withdrawal of wallet funds to an external account."""
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    payment_method: str = Field(..., min_length=1, max_length=100)
    account_details: str = Field(..., min_length=1, max_length=500)


class WalletRequestDecision(BaseModel):
    admin_notes: Optional[str] = Field(None, max_length=1000)


class WalletRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    type: WalletRequestType
    amount: float
    fee_amount: float
    amount_after_fee: float
    wallet_name: Optional[str] = None
    payment_method: Optional[str] = None
    account_details: Optional[str] = None
    status: WalletRequestStatus
    admin_id: Optional[int] = None
    admin_notes: Optional[str] = None
    created_at: datetime
    processed_at: Optional[datetime] = None


class WalletTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    type: WalletTransactionType
    amount: float
    description: str
    status: WalletTransactionStatus
    order_id: Optional[int] = None
    created_at: datetime
    completed_at: Optional[datetime] = None


class WalletSummary(BaseModel):
    balance: float
    currency: str
    pending_withdrawals: float
    transactions: List[WalletTransactionResponse]


class FeeQuote(BaseModel):
    """Fee preview for an amount."""
    original_amount: float
    fee_amount: float
    amount_after_fee: float
    required_payment_for_credit: float
