"""Expo push notification sender."""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

_TOKEN_PREFIXES = ("ExponentPushToken[", "ExpoPushToken[")


def is_expo_token(token: str) -> bool:
    return token.startswith(_TOKEN_PREFIXES)


class ExpoPushSender:
    """Posts messages to the Expo push API.

    Delivery is retried on 5xx responses and transport errors, up to
    ``max_attempts``. Failures are reported in the return value, never raised.
    """

    def __init__(
        self,
        api_url: str,
        max_attempts: int = 3,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_url = api_url
        self.max_attempts = max(1, max_attempts)
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send(
        self,
        tokens: list[str],
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> list[dict]:
        """Send one message per valid token; returns the Expo push tickets."""
        messages = [
            {
                "to": token,
                "title": title,
                "body": body,
                "data": data or {},
                "sound": "default",
            }
            for token in tokens
            if is_expo_token(token)
        ]
        if not messages:
            return []

        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        for attempt in range(self.max_attempts):
            try:
                resp = await self._client.post(self.api_url, json=messages, headers=headers)
                if resp.status_code < 300:
                    return resp.json().get("data") or []
                if resp.status_code >= 500 and attempt < self.max_attempts - 1:
                    continue
                logger.warning("Push delivery returned HTTP %s", resp.status_code)
                return []
            except httpx.HTTPError as exc:
                if attempt < self.max_attempts - 1:
                    continue
                logger.warning("Push delivery failed: %s", exc)
                return []
        return []
