"""Offramp provider status callbacks and their mapping to order status."""

from pydantic import BaseModel, ConfigDict, Field

from payrail.models.enums import OfframpStatus

OFFRAMP_STATUS_BY_EVENT: dict[str, OfframpStatus] = {
    "order.initiated": OfframpStatus.PENDING,
    "order.pending": OfframpStatus.PENDING,
    "order.validated": OfframpStatus.PROCESSING,
    "order.settled": OfframpStatus.COMPLETED,
    "order.refunded": OfframpStatus.FAILED,
    "order.expired": OfframpStatus.FAILED,
}

TERMINAL_OFFRAMP_STATUSES = frozenset(
    status.value for status in (OfframpStatus.COMPLETED, OfframpStatus.FAILED, OfframpStatus.CANCELLED)
)


def map_offramp_status(event: str) -> OfframpStatus:
    """Map a provider event name to the internal order status (unknown → PENDING)."""
    return OFFRAMP_STATUS_BY_EVENT.get(event, OfframpStatus.PENDING)


def is_terminal(status: str) -> bool:
    """Whether an order in ``status`` accepts no further transitions."""
    return status in TERMINAL_OFFRAMP_STATUSES


class OfframpCallbackData(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(..., min_length=1)
    tx_hash: str | None = Field(None, alias="txHash")
    reason: str | None = None


class OfframpCallback(BaseModel):
    model_config = ConfigDict(extra="ignore")

    event: str = Field(..., min_length=1)
    data: OfframpCallbackData

    @property
    def status(self) -> OfframpStatus:
        return map_offramp_status(self.event)

    @property
    def short_event(self) -> str:
        return self.event.removeprefix("order.")
