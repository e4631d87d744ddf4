"""Tests for asset reconciliation against the live wallet catalog."""

import pytest

from payrail.errors.exceptions import AssetResolutionError, CustodyAPIError
from payrail.models.custody import CatalogAsset
from payrail.models.custody_events import AssetRef, BlockchainRef
from payrail.models.enums import ChainFamily
from payrail.services.asset_resolver import AssetCatalogCache, AssetResolver, alias_group, classify_chain

from fakes import BASE_USDC, SOLANA_USDC, FakeCustody

BASE_USDT = CatalogAsset(asset_id="asset_usdt_base", symbol="USDT", name="Tether USD", blockchain_name="base")


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.mark.asyncio
async def test_exact_id_match():
    resolver = AssetResolver(FakeCustody())
    resolved = await resolver.resolve(AssetRef(asset_id="asset_usdc_sol"))
    assert resolved.asset_id == "asset_usdc_sol"
    assert resolved.chain_family == ChainFamily.SOLANA


@pytest.mark.asyncio
async def test_nested_id_match_returns_catalog_id():
    resolver = AssetResolver(FakeCustody())
    resolved = await resolver.resolve(AssetRef(asset_id="usdc_base_inner"))
    assert resolved.asset_id == "asset_usdc_base"
    assert resolved.chain_family == ChainFamily.EVM


@pytest.mark.asyncio
async def test_stale_id_falls_back_to_alias_on_hinted_chain():
    resolver = AssetResolver(FakeCustody())
    ref = AssetRef(asset_id="stale", symbol="USD Coin", blockchain=BlockchainRef(name="Solana"))
    resolved = await resolver.resolve(ref)
    assert resolved.asset_id == "asset_usdc_sol"
    assert resolved.chain_family == ChainFamily.SOLANA


@pytest.mark.asyncio
async def test_missing_symbol_defaults_to_usdc_group():
    resolver = AssetResolver(FakeCustody(assets=[BASE_USDT, BASE_USDC]))
    resolved = await resolver.resolve(AssetRef())
    assert resolved.asset_id == "asset_usdc_base"


@pytest.mark.asyncio
async def test_tether_aliases():
    resolver = AssetResolver(FakeCustody(assets=[BASE_USDC, BASE_USDT]))
    resolved = await resolver.resolve(AssetRef(name="Tether"))
    assert resolved.asset_id == "asset_usdt_base"


@pytest.mark.asyncio
async def test_unmatched_asset_uses_first_catalog_entry():
    resolver = AssetResolver(FakeCustody(assets=[SOLANA_USDC, BASE_USDC]))
    resolved = await resolver.resolve(AssetRef(asset_id="nope", symbol="WETH"))
    assert resolved.asset_id == "asset_usdc_sol"
    assert resolved.chain_family == ChainFamily.SOLANA


@pytest.mark.asyncio
async def test_catalog_chain_wins_over_webhook_hint():
    resolver = AssetResolver(FakeCustody())
    ref = AssetRef(asset_id="asset_usdc_sol", blockchain=BlockchainRef(name="base"))
    resolved = await resolver.resolve(ref)
    assert resolved.chain_family == ChainFamily.SOLANA


@pytest.mark.asyncio
async def test_webhook_hint_used_when_catalog_has_no_chain():
    bare = CatalogAsset(asset_id="asset_bare", symbol="USDC")
    resolver = AssetResolver(FakeCustody(assets=[bare]))
    resolved = await resolver.resolve(AssetRef(asset_id="asset_bare", network="solana"))
    assert resolved.chain_family == ChainFamily.SOLANA


@pytest.mark.asyncio
async def test_unknown_chain_raises():
    bare = CatalogAsset(asset_id="asset_bare", symbol="USDC", blockchain_name="tron")
    resolver = AssetResolver(FakeCustody(assets=[bare]))
    with pytest.raises(AssetResolutionError):
        await resolver.resolve(AssetRef(asset_id="asset_bare"))


@pytest.mark.asyncio
async def test_empty_catalog_raises():
    resolver = AssetResolver(FakeCustody(assets=[]))
    with pytest.raises(AssetResolutionError, match="empty"):
        await resolver.resolve(AssetRef(symbol="USDC"))


@pytest.mark.asyncio
async def test_unreachable_catalog_raises():
    custody = FakeCustody()
    custody.assets_error = CustodyAPIError("timeout")
    with pytest.raises(AssetResolutionError, match="unavailable"):
        await AssetResolver(custody).resolve(AssetRef(symbol="USDC"))


@pytest.mark.asyncio
async def test_without_cache_catalog_is_fetched_every_time():
    custody = FakeCustody()
    resolver = AssetResolver(custody)
    await resolver.resolve(AssetRef(symbol="USDC"))
    await resolver.resolve(AssetRef(symbol="USDC"))
    assert custody.list_calls == 2


@pytest.mark.asyncio
async def test_cache_honours_ttl():
    custody = FakeCustody()
    clock = FakeClock()
    resolver = AssetResolver(custody, AssetCatalogCache(ttl_seconds=30, clock=clock))

    await resolver.resolve(AssetRef(symbol="USDC"), wallet_id="w1")
    clock.now += 29
    await resolver.resolve(AssetRef(symbol="USDC"), wallet_id="w1")
    assert custody.list_calls == 1

    clock.now += 2
    await resolver.resolve(AssetRef(symbol="USDC"), wallet_id="w1")
    assert custody.list_calls == 2


@pytest.mark.asyncio
async def test_cache_is_keyed_by_wallet():
    custody = FakeCustody()
    resolver = AssetResolver(custody, AssetCatalogCache(ttl_seconds=60, clock=FakeClock()))
    await resolver.resolve(AssetRef(symbol="USDC"), wallet_id="w1")
    await resolver.resolve(AssetRef(symbol="USDC"), wallet_id="w2")
    assert custody.list_calls == 2


def test_classify_chain():
    assert classify_chain("Solana") == ChainFamily.SOLANA
    assert classify_chain(None, "SOL") == ChainFamily.SOLANA
    assert classify_chain("Base Sepolia") == ChainFamily.EVM
    assert classify_chain("tron") is None


def test_alias_group():
    assert alias_group("usd coin") == "USDC"
    assert alias_group(None, "Tether USD") == "USDT"
    assert alias_group("WETH") is None
