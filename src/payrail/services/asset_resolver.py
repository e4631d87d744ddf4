"""Reconcile a webhook's asset reference against the wallet's live catalog.

The webhook's own asset id and network hint are not reliable on non-default
chains, so the live catalog entry wins whenever one can be matched.
"""

import logging
import time
from typing import Protocol

from payrail.errors.exceptions import AssetResolutionError, CustodyAPIError
from payrail.models.custody import CatalogAsset, ResolvedAsset
from payrail.models.custody_events import AssetRef
from payrail.models.enums import ChainFamily

logger = logging.getLogger(__name__)

STABLE_ASSET_ALIASES: dict[str, frozenset[str]] = {
    "USDC": frozenset({"usdc", "usd coin", "usdc.e"}),
    "USDT": frozenset({"usdt", "tether", "tether usd"}),
    "DAI": frozenset({"dai", "dai stablecoin"}),
}
DEFAULT_ALIAS_GROUP = "USDC"

_SOLANA_NAMES = frozenset({"solana", "sol", "solana-devnet", "solana devnet"})
_EVM_NAMES = frozenset({
    "ethereum", "eth", "base", "base sepolia", "sepolia", "polygon", "matic", "pol",
    "arbitrum", "arbitrum one", "optimism", "op", "bnb smart chain", "bsc", "bnb",
    "celo", "avalanche", "avax", "lisk",
})


class AssetCatalogSource(Protocol):
    async def list_assets(self, wallet_id: str | None = None) -> list[CatalogAsset]: ...


class AssetCatalogCache:
    """Short-lived read-through cache for wallet catalogs.

    Passed explicitly to :class:`AssetResolver`; entries expire after
    ``ttl_seconds`` on the monotonic clock.
    """

    def __init__(self, ttl_seconds: float, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, list[CatalogAsset]]] = {}

    def get(self, wallet_id: str) -> list[CatalogAsset] | None:
        entry = self._entries.get(wallet_id)
        if entry is None:
            return None
        stored_at, assets = entry
        if self._clock() - stored_at > self.ttl_seconds:
            del self._entries[wallet_id]
            return None
        return assets

    def put(self, wallet_id: str, assets: list[CatalogAsset]) -> None:
        self._entries[wallet_id] = (self._clock(), assets)

    def clear(self) -> None:
        self._entries.clear()


def classify_chain(*names: str | None) -> ChainFamily | None:
    """Map a blockchain name or symbol to its chain family, or None if unknown."""
    for name in names:
        if not name:
            continue
        key = name.strip().lower()
        if key in _SOLANA_NAMES or key.startswith("solana"):
            return ChainFamily.SOLANA
        if key in _EVM_NAMES:
            return ChainFamily.EVM
    return None


def alias_group(*labels: str | None) -> str | None:
    for label in labels:
        if not label:
            continue
        key = label.strip().lower()
        for group, aliases in STABLE_ASSET_ALIASES.items():
            if key in aliases:
                return group
    return None


class AssetResolver:
    """Resolve ``(asset_id, chain_family)`` for a deposit."""

    def __init__(self, source: AssetCatalogSource, cache: AssetCatalogCache | None = None):
        self.source = source
        self.cache = cache

    async def _catalog(self, wallet_id: str | None) -> list[CatalogAsset]:
        cache_key = wallet_id or "default"
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached
        try:
            assets = await self.source.list_assets(wallet_id)
        except (CustodyAPIError, ValueError) as exc:
            raise AssetResolutionError("Asset catalog unavailable", {"error": str(exc)}) from exc
        if self.cache is not None and assets:
            self.cache.put(cache_key, assets)
        return assets

    def _match(self, ref: AssetRef, catalog: list[CatalogAsset]) -> CatalogAsset:
        if ref.asset_id:
            for entry in catalog:
                if entry.matches_id(ref.asset_id):
                    return entry

        group = alias_group(ref.symbol, ref.name) or (
            DEFAULT_ALIAS_GROUP if not ref.symbol and not ref.name else None
        )
        if group:
            aliases = STABLE_ASSET_ALIASES[group]
            candidates = [
                entry
                for entry in catalog
                if (entry.symbol or "").lower() in aliases or (entry.name or "").lower() in aliases
            ]
            if candidates:
                hinted = classify_chain(ref.network_hint)
                if hinted is not None:
                    for entry in candidates:
                        if classify_chain(entry.blockchain_name, entry.blockchain_symbol) == hinted:
                            return entry
                return candidates[0]
        elif ref.symbol:
            for entry in catalog:
                if (entry.symbol or "").lower() == ref.symbol.lower():
                    return entry

        logger.warning(
            "Asset not matched by id or symbol, using first catalog entry",
            extra={
                "webhook_asset_id": ref.asset_id,
                "webhook_symbol": ref.symbol,
                "fallback_asset_id": catalog[0].asset_id,
            },
        )
        return catalog[0]

    async def resolve(self, ref: AssetRef, wallet_id: str | None = None) -> ResolvedAsset:
        """Match ``ref`` against the live catalog and determine its chain family.

        Raises:
            AssetResolutionError: The catalog is empty or unreachable, or no
                chain family can be determined.
        """
        catalog = await self._catalog(wallet_id)
        if not catalog:
            raise AssetResolutionError("Wallet asset catalog is empty", {"wallet_id": wallet_id})

        entry = self._match(ref, catalog)
        if ref.asset_id and ref.asset_id != entry.asset_id:
            logger.warning(
                "Webhook asset id differs from catalog, using catalog id",
                extra={"webhook_asset_id": ref.asset_id, "catalog_asset_id": entry.asset_id},
            )

        chain_family = classify_chain(entry.blockchain_name, entry.blockchain_symbol)
        if chain_family is None:
            chain_family = classify_chain(ref.network_hint)
            if chain_family is not None:
                logger.info(
                    "Catalog entry has no chain info, using webhook network hint",
                    extra={"asset_id": entry.asset_id, "network_hint": ref.network_hint},
                )
        if chain_family is None:
            raise AssetResolutionError(
                "Cannot determine chain family for asset",
                {"asset_id": entry.asset_id, "blockchain": entry.blockchain_name},
            )

        return ResolvedAsset(
            asset_id=entry.asset_id,
            chain_family=chain_family,
            symbol=entry.symbol,
            blockchain_name=entry.blockchain_name,
        )
