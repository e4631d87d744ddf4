"""Tests for clamping payouts to the live wallet balance."""

from decimal import Decimal

import pytest

from payrail.errors.exceptions import CustodyAPIError
from payrail.models.custody import WalletBalance
from payrail.services.balance_guard import BalanceGuard

from fakes import FakeCustody

NET = Decimal("99.5")


def _guard(balance: str | None = None) -> BalanceGuard:
    balances = [] if balance is None else [WalletBalance(asset_id="asset_usdc_base", balance=Decimal(balance))]
    return BalanceGuard(FakeCustody(balances=balances))


@pytest.mark.asyncio
async def test_sufficient_balance_pays_net():
    check = await _guard("500").check("asset_usdc_base", NET)
    assert check.amount == NET
    assert not check.clamped


@pytest.mark.asyncio
async def test_short_balance_is_clamped():
    check = await _guard("99").check("asset_usdc_base", NET)
    assert check.amount == Decimal("99")
    assert check.clamped
    assert check.available == Decimal("99")


@pytest.mark.asyncio
async def test_zero_balance_keeps_net():
    check = await _guard("0").check("asset_usdc_base", NET)
    assert check.amount == NET
    assert not check.clamped


@pytest.mark.asyncio
async def test_failed_balance_query_keeps_net():
    custody = FakeCustody()
    custody.balances_error = CustodyAPIError("boom", status=503)
    check = await BalanceGuard(custody).check("asset_usdc_base", NET)
    assert check.amount == NET
    assert check.available is None


@pytest.mark.asyncio
async def test_asset_absent_from_balances_keeps_net():
    custody = FakeCustody(balances=[WalletBalance(asset_id="other", balance=Decimal("1"))])
    check = await BalanceGuard(custody).check("asset_usdc_base", NET)
    assert check.amount == NET


@pytest.mark.asyncio
async def test_non_positive_amount_aborts():
    check = await _guard().check("asset_usdc_base", Decimal("0"))
    assert check.aborted
    assert check.amount is None
