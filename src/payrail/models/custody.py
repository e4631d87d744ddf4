"""Pydantic models for custodial provider API requests and responses."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from payrail.models.enums import ChainFamily


class CatalogAsset(BaseModel):
    """One enabled asset of the custodial wallet, as reported live."""

    model_config = ConfigDict(extra="ignore")

    asset_id: str
    nested_asset_id: str | None = None
    symbol: str | None = None
    name: str | None = None
    blockchain_name: str | None = None
    blockchain_symbol: str | None = None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "CatalogAsset | None":
        """Build from a provider item, which may wrap the asset under ``asset``.

        Returns None for an item that carries no id at either level.
        """
        nested = item.get("asset") if isinstance(item.get("asset"), dict) else {}
        asset_id = item.get("id") or nested.get("id")
        if not asset_id:
            return None
        blockchain = item.get("blockchain") or nested.get("blockchain") or {}
        if isinstance(blockchain, str):
            blockchain = {"name": blockchain}
        return cls(
            asset_id=str(asset_id),
            nested_asset_id=str(nested["id"]) if nested.get("id") else None,
            symbol=item.get("symbol") or nested.get("symbol"),
            name=item.get("name") or nested.get("name"),
            blockchain_name=blockchain.get("name") or item.get("network") or nested.get("network"),
            blockchain_symbol=blockchain.get("symbol"),
        )

    def matches_id(self, asset_id: str) -> bool:
        return asset_id in (self.asset_id, self.nested_asset_id)


class ResolvedAsset(BaseModel):
    asset_id: str
    chain_family: ChainFamily
    symbol: str | None = None
    blockchain_name: str | None = None

    @property
    def chain_label(self) -> str:
        """Chain name recorded on ledger rows."""
        return (self.blockchain_name or str(self.chain_family)).lower()


class WalletBalance(BaseModel):
    model_config = ConfigDict(extra="ignore")

    asset_id: str
    balance: Decimal

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "WalletBalance | None":
        nested = item.get("asset") if isinstance(item.get("asset"), dict) else {}
        asset_id = item.get("assetId") or nested.get("id") or item.get("id")
        if not asset_id:
            return None
        return cls(
            asset_id=str(asset_id),
            balance=Decimal(str(item.get("balance") or "0")),
        )


class WithdrawalRequest(BaseModel):
    to_address: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    asset_id: str
    chain_family: ChainFamily
    metadata: dict[str, Any] = Field(default_factory=dict)


class WithdrawalResult(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    status: str
    tx_hash: str | None = Field(None, alias="txHash")
