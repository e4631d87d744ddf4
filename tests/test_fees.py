"""Tests for the platform fee split."""

from decimal import Decimal

import pytest

from payrail.services.fees import calculate_fee


@pytest.mark.parametrize(
    "gross",
    ["100", "0.000001", "1", "99.99", "123456.789", "3.33333333"],
)
def test_fee_plus_net_equals_gross(gross):
    breakdown = calculate_fee(Decimal(gross), Decimal("0.005"))
    assert breakdown.fee + breakdown.net == Decimal(gross)
    assert breakdown.net == Decimal(gross) * (Decimal("1") - Decimal("0.005"))


def test_hundred_dollar_invoice():
    breakdown = calculate_fee(Decimal("100"), Decimal("0.005"))
    assert breakdown.fee == Decimal("0.5")
    assert breakdown.net == Decimal("99.5")


def test_zero_rate_pays_everything():
    breakdown = calculate_fee(Decimal("42"), Decimal("0"))
    assert breakdown.fee == 0
    assert breakdown.net == Decimal("42")


@pytest.mark.parametrize("gross", ["0", "-1"])
def test_non_positive_gross_rejected(gross):
    with pytest.raises(ValueError):
        calculate_fee(Decimal(gross), Decimal("0.005"))


def test_rate_out_of_range_rejected():
    with pytest.raises(ValueError):
        calculate_fee(Decimal("10"), Decimal("1"))
