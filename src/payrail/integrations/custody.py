"""Async client for the custodial wallet provider's REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from payrail.errors.exceptions import CustodyAPIError
from payrail.models.custody import CatalogAsset, WalletBalance, WithdrawalRequest, WithdrawalResult

logger = logging.getLogger(__name__)


class CustodyClient:
    """Wraps the provider endpoints used by settlement.

    Every response is wrapped as ``{"data": ...}``. Transport errors and
    non-2xx responses raise :class:`CustodyAPIError`.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        wallet_id: str,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.wallet_id = wallet_id
        if not api_key:
            logger.warning("Custody API key is not set; provider calls will be rejected")
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"x-api-key": api_key, "Content-Type": "application/json"},
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Custody API transport error", extra={"path": path, "error": str(exc)})
            raise CustodyAPIError(f"Custody API request to {path} failed: {exc}") from exc

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            logger.error(
                "Custody API error",
                extra={"path": path, "status": response.status_code, "body": body},
            )
            message = body.get("message") if isinstance(body, dict) else None
            raise CustodyAPIError(
                message or f"Custody API returned HTTP {response.status_code}",
                status=response.status_code,
                details=body if isinstance(body, dict) else None,
            )

        try:
            body = response.json()
        except ValueError as exc:
            logger.error(
                "Custody API returned a non-JSON body",
                extra={"path": path, "status": response.status_code, "body": response.text[:200]},
            )
            raise CustodyAPIError(
                f"Custody API returned a non-JSON body for {path}", status=response.status_code
            ) from exc
        if not isinstance(body, dict):
            logger.error("Custody API returned an unexpected body", extra={"path": path, "body": body})
            raise CustodyAPIError(
                f"Custody API returned an unexpected body for {path}", status=response.status_code
            )
        return body.get("data")

    def _wallet(self, wallet_id: str | None) -> str:
        return wallet_id or self.wallet_id

    async def list_assets(self, wallet_id: str | None = None) -> list[CatalogAsset]:
        """Return the wallet's enabled-asset catalog."""
        data = await self._request("GET", f"/wallets/{self._wallet(wallet_id)}/assets")
        assets = (CatalogAsset.from_api(item) for item in data or [] if isinstance(item, dict))
        return [asset for asset in assets if asset is not None]

    async def get_wallet_balances(self, wallet_id: str | None = None) -> list[WalletBalance]:
        """Return current balances of every asset held by the wallet."""
        data = await self._request("GET", f"/wallets/{self._wallet(wallet_id)}/balances")
        balances = (WalletBalance.from_api(item) for item in data or [] if isinstance(item, dict))
        return [balance for balance in balances if balance is not None]

    async def initiate_withdrawal(
        self,
        request: WithdrawalRequest,
        wallet_id: str | None = None,
    ) -> WithdrawalResult:
        """Ask the provider to send ``request.amount`` of an asset to an external address."""
        logger.info(
            "Initiating custody withdrawal",
            extra={
                "asset_id": request.asset_id,
                "amount": str(request.amount),
                "chain_family": str(request.chain_family),
            },
        )
        data = await self._request(
            "POST",
            f"/wallets/{self._wallet(wallet_id)}/withdraw",
            json={
                "address": request.to_address,
                "amount": str(request.amount),
                "assetId": request.asset_id,
                "metadata": request.metadata,
            },
        )
        result = WithdrawalResult.model_validate(data or {})
        logger.info("Withdrawal initiated", extra={"withdrawal_id": result.id, "status": result.status})
        return result
