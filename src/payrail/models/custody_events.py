"""Strict models for custodial provider webhook payloads.

The provider's payloads are loosely typed: the same field shows up under
different keys depending on event type and API version (``event``/``type``,
``amount``/``value``, ``txHash``/``hash``, ``addressId``/``address.id``).
``parse_custody_event`` normalizes those aliases once and validates the result
into a discriminated union, so downstream code never reaches into raw dicts.
"""

from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from payrail.models.enums import WithdrawalOutcome

DEPOSIT_EVENTS = frozenset({"deposit.success", "deposit.confirmed"})
DEPOSIT_PENDING_EVENTS = frozenset({"deposit.pending"})
WITHDRAWAL_SUCCESS_EVENTS = frozenset({"withdrawal.success", "withdrawal.confirmed"})
WITHDRAWAL_FAILED_EVENTS = frozenset({"withdrawal.failed"})
SWEEP_EVENTS = frozenset({"sweep.success", "sweep.failed"})


class BlockchainRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    symbol: str | None = None


class AssetRef(BaseModel):
    """Asset reference as reported by the webhook (possibly incomplete)."""

    model_config = ConfigDict(extra="ignore")

    asset_id: str | None = None
    symbol: str | None = None
    name: str | None = None
    blockchain: BlockchainRef | None = None
    network: str | None = None

    @property
    def network_hint(self) -> str | None:
        """Chain name the webhook claims, if any."""
        if self.blockchain and self.blockchain.name:
            return self.blockchain.name
        if self.network:
            return self.network
        if self.blockchain and self.blockchain.symbol:
            return self.blockchain.symbol
        return None


class SettlementMetadata(BaseModel):
    """Metadata attached to deposit addresses and withdrawals by this service."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    document_id: str | None = Field(None, alias="documentId")
    user_id: str | None = Field(None, alias="userId")
    wallet_id: str | None = Field(None, alias="walletId")
    offramp_order_id: str | None = Field(None, alias="offrampOrderId")
    deposit_tx_hash: str | None = Field(None, alias="depositTxHash")
    settlement_type: str | None = Field(None, alias="type")


class _EventBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    event_id: str | None = None
    event_type: str


class DepositEvent(_EventBase):
    kind: Literal["deposit"] = "deposit"

    address_id: str | None = None
    custody_transaction_id: str | None = None
    asset: AssetRef = Field(default_factory=AssetRef)
    amount: Decimal = Field(..., gt=0)
    tx_hash: str = Field(..., min_length=1)
    wallet_id: str | None = None
    from_address: str | None = None
    to_address: str | None = None
    metadata: SettlementMetadata = Field(default_factory=SettlementMetadata)

    @property
    def is_linked(self) -> bool:
        return bool(self.metadata.document_id)

    @property
    def token(self) -> str:
        return (self.asset.symbol or "USDC").upper()


class DepositPendingEvent(_EventBase):
    kind: Literal["deposit_pending"] = "deposit_pending"

    address_id: str | None = None
    amount: Decimal | None = None


class WithdrawalEvent(_EventBase):
    kind: Literal["withdrawal"] = "withdrawal"

    outcome: WithdrawalOutcome
    withdrawal_id: str | None = None
    tx_hash: str | None = None
    error: str | None = None
    metadata: SettlementMetadata = Field(default_factory=SettlementMetadata)


class SweepEvent(_EventBase):
    kind: Literal["sweep"] = "sweep"

    succeeded: bool
    address_id: str | None = None
    tx_hash: str | None = None
    amount: Decimal | None = None
    error: str | None = None


class UnrecognizedEvent(_EventBase):
    kind: Literal["unrecognized"] = "unrecognized"


CustodyEvent = Annotated[
    Union[DepositEvent, DepositPendingEvent, WithdrawalEvent, SweepEvent, UnrecognizedEvent],
    Field(discriminator="kind"),
]

_custody_event_adapter: TypeAdapter[CustodyEvent] = TypeAdapter(CustodyEvent)


def _first(*values: Any) -> Any:
    for value in values:
        if value not in (None, ""):
            return value
    return None


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def event_type_of(payload: dict) -> str:
    """Return the event type under either of the provider's keys."""
    return str(_first(payload.get("event"), payload.get("type")) or "unknown")


def audit_fields(payload: dict) -> dict:
    """Project the fields stored on the audit log row.

    Never raises: the audit row is written even for payloads that fail
    strict validation.
    """
    data = _as_dict(payload.get("data"))
    address = _as_dict(data.get("address"))
    return {
        "event_id": _first(payload.get("id")),
        "event_type": event_type_of(payload),
        "address_id": _first(data.get("addressId"), address.get("id")),
        "transaction_id": _first(data.get("transactionId"), data.get("id")),
    }


def _normalize_asset(data: dict) -> dict:
    asset = _as_dict(data.get("asset"))
    nested = _as_dict(asset.get("asset"))
    blockchain = _first(asset.get("blockchain"), nested.get("blockchain"), data.get("blockchain"))
    if isinstance(blockchain, str):
        blockchain = {"name": blockchain}
    return {
        "asset_id": _first(asset.get("id"), data.get("assetId"), nested.get("id")),
        "symbol": _first(asset.get("symbol"), nested.get("symbol")),
        "name": _first(asset.get("name"), nested.get("name")),
        "blockchain": blockchain if isinstance(blockchain, dict) else None,
        "network": _first(asset.get("network"), data.get("network")),
    }


def _kind_for(event_type: str) -> str:
    if event_type in DEPOSIT_EVENTS:
        return "deposit"
    if event_type in DEPOSIT_PENDING_EVENTS:
        return "deposit_pending"
    if event_type in WITHDRAWAL_SUCCESS_EVENTS or event_type in WITHDRAWAL_FAILED_EVENTS:
        return "withdrawal"
    if event_type in SWEEP_EVENTS:
        return "sweep"
    return "unrecognized"


def parse_custody_event(payload: dict) -> CustodyEvent:
    """Normalize a raw webhook body into a validated event model.

    Raises:
        pydantic.ValidationError: If a recognized event is missing required
            fields (e.g. a deposit without a positive amount or tx hash).
    """
    event_type = event_type_of(payload)
    data = _as_dict(payload.get("data"))
    address = _as_dict(data.get("address"))
    kind = _kind_for(event_type)

    normalized: dict[str, Any] = {
        "kind": kind,
        "event_id": _first(payload.get("id")),
        "event_type": event_type,
    }
    tx_hash = _first(data.get("txHash"), data.get("hash"))
    amount = _first(data.get("amount"), data.get("value"))
    address_id = _first(data.get("addressId"), address.get("id"))

    if kind == "deposit":
        normalized.update(
            address_id=address_id,
            custody_transaction_id=_first(data.get("id"), data.get("transactionId")),
            asset=_normalize_asset(data),
            amount=amount,
            tx_hash=tx_hash,
            wallet_id=_first(data.get("walletId"), _as_dict(data.get("wallet")).get("id")),
            from_address=_first(data.get("from"), data.get("sender"), data.get("senderAddress")),
            to_address=_first(data.get("to"), data.get("recipientAddress"), address.get("address")),
            metadata=_as_dict(data.get("metadata")),
        )
    elif kind == "deposit_pending":
        normalized.update(address_id=address_id, amount=amount)
    elif kind == "withdrawal":
        outcome = (
            WithdrawalOutcome.FAILED if event_type in WITHDRAWAL_FAILED_EVENTS else WithdrawalOutcome.SUCCESS
        )
        normalized.update(
            outcome=outcome,
            withdrawal_id=_first(data.get("id"), data.get("transactionId")),
            tx_hash=tx_hash,
            error=_first(data.get("error"), data.get("reason"), data.get("message")),
            metadata=_as_dict(data.get("metadata")),
        )
    elif kind == "sweep":
        normalized.update(
            succeeded=event_type == "sweep.success",
            address_id=address_id,
            tx_hash=tx_hash,
            amount=amount,
            error=_first(data.get("error"), data.get("message")),
        )

    return _custody_event_adapter.validate_python(normalized)
