"""Commission and wallet fee arithmetic."""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from monlyking.core.config import settings

CENT = Decimal("0.01")


def to_money(value: Union[int, float, str, Decimal]) -> Decimal:
    """Convert to a Decimal rounded half-up to cents."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class FeeBreakdown:
    original_amount: Decimal
    fee_amount: Decimal
    amount_after_fee: Decimal


def calculate_fee(amount, rate: Optional[Decimal] = None) -> FeeBreakdown:
    """Split ``amount`` into the fee retained and the remainder."""
    rate = settings.WALLET_FEE_RATE if rate is None else Decimal(str(rate))
    original = to_money(amount)
    fee = to_money(original * rate)
    return FeeBreakdown(
        original_amount=original,
        fee_amount=fee,
        amount_after_fee=original - fee,
    )


def settle_order_amount(amount) -> FeeBreakdown:
    """Commission and seller payout for a confirmed order."""
    return calculate_fee(amount, settings.COMMISSION_RATE)


def withdrawal_after_fee(amount) -> Decimal:
    return calculate_fee(amount, settings.WALLET_FEE_RATE).amount_after_fee


def topup_credit(amount_paid) -> Decimal:
    return calculate_fee(amount_paid, settings.WALLET_FEE_RATE).amount_after_fee


def required_payment(desired_credit, rate: Optional[Decimal] = None) -> Decimal:
    """
    Gross amount to pay so that ``desired_credit`` remains after the fee.

    1000 credit at 5% needs 1052.63.
    """
    rate = settings.WALLET_FEE_RATE if rate is None else Decimal(str(rate))
    return to_money(Decimal(str(desired_credit)) / (Decimal(1) - rate))
