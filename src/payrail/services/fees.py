"""Platform fee calculation for linked settlements."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class FeeBreakdown:
    gross: Decimal
    fee: Decimal
    net: Decimal
    rate: Decimal


def calculate_fee(gross: Decimal, rate: Decimal) -> FeeBreakdown:
    """Split ``gross`` into the platform fee and the freelancer's net payout.

    ``net = gross * (1 - rate)`` and ``fee = gross - net``, so ``fee + net``
    always equals ``gross`` exactly.

    Raises:
        ValueError: ``gross`` is not positive or ``rate`` is outside [0, 1).
    """
    gross = Decimal(gross)
    rate = Decimal(rate)
    if gross <= 0:
        raise ValueError(f"gross amount must be positive, got {gross}")
    if not Decimal("0") <= rate < Decimal("1"):
        raise ValueError(f"fee rate must be in [0, 1), got {rate}")

    net = gross * (Decimal("1") - rate)
    fee = gross - net
    return FeeBreakdown(gross=gross, fee=fee, net=net, rate=rate)
