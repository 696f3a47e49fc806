"""Tests for commission and wallet fee arithmetic."""
from decimal import Decimal

from monlyking.services.fees import (
    calculate_fee,
    settle_order_amount,
    withdrawal_after_fee,
    topup_credit,
    required_payment,
    to_money,
)


def test_order_settlement_splits_commission():
    breakdown = settle_order_amount(1000)
    assert breakdown.fee_amount == Decimal("50.00")
    assert breakdown.amount_after_fee == Decimal("950.00")
    assert breakdown.original_amount == Decimal("1000.00")


def test_withdrawal_fee():
    assert withdrawal_after_fee(500) == Decimal("475.00")


def test_topup_credit():
    assert topup_credit(Decimal("200")) == Decimal("190.00")


def test_fee_rounds_half_up_to_cents():
    breakdown = calculate_fee(Decimal("10.10"))
    # 5% of 10.10 is 0.505
    assert breakdown.fee_amount == Decimal("0.51")
    assert breakdown.amount_after_fee == Decimal("9.59")


def test_fee_parts_add_up():
    for amount in ("1", "33.33", "999.99", "12345.67"):
        breakdown = calculate_fee(Decimal(amount))
        assert breakdown.fee_amount + breakdown.amount_after_fee == breakdown.original_amount


def test_custom_rate():
    assert calculate_fee(100, Decimal("0.1")).amount_after_fee == Decimal("90.00")


def test_required_payment():
    assert required_payment(1000) == Decimal("1052.63")


def test_to_money_from_float():
    assert to_money(0.1 + 0.2) == Decimal("0.30")
