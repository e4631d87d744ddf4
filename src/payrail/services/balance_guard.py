"""Clamp payouts to the wallet's live balance."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from payrail.errors.exceptions import CustodyAPIError
from payrail.models.custody import WalletBalance

logger = logging.getLogger(__name__)


class BalanceSource(Protocol):
    async def get_wallet_balances(self, wallet_id: str | None = None) -> list[WalletBalance]: ...


@dataclass(frozen=True)
class BalanceCheck:
    """Outcome of a balance check.

    ``clamped`` marks an adjustment, not an error. ``amount`` is None when the
    payout must be aborted.
    """

    requested: Decimal
    amount: Decimal | None
    available: Decimal | None = None
    clamped: bool = False

    @property
    def aborted(self) -> bool:
        return self.amount is None


class BalanceGuard:
    def __init__(self, source: BalanceSource):
        self.source = source

    async def check(self, asset_id: str, net: Decimal, wallet_id: str | None = None) -> BalanceCheck:
        """Return the amount that can actually be paid out.

        The provider stays the source of truth at payout time, so a failed
        balance query falls back to ``net`` rather than aborting.
        """
        available: Decimal | None = None
        try:
            balances = await self.source.get_wallet_balances(wallet_id)
            for balance in balances:
                if balance.asset_id == asset_id:
                    available = balance.balance
                    break
            else:
                logger.warning(
                    "Asset not present in wallet balances, using computed amount",
                    extra={"asset_id": asset_id, "wallet_id": wallet_id},
                )
        except (CustodyAPIError, ValueError, ArithmeticError) as exc:
            logger.warning(
                "Failed to fetch wallet balance, proceeding with computed amount",
                extra={"asset_id": asset_id, "error": str(exc)},
            )

        amount = net
        clamped = False
        if available is not None and Decimal("0") < available < net:
            logger.warning(
                "Insufficient balance for full payout, clamping amount",
                extra={
                    "calculated": str(net),
                    "available": str(available),
                    "diff": str(net - available),
                },
            )
            amount = available
            clamped = True

        if amount <= 0:
            logger.error("Payout amount is zero or negative, aborting", extra={"amount": str(amount)})
            return BalanceCheck(requested=net, amount=None, available=available)

        return BalanceCheck(requested=net, amount=amount, available=available, clamped=clamped)
