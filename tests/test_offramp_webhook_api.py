"""Tests for POST /api/v1/webhooks/offramp."""

import hashlib
from decimal import Decimal

import pytest

from payrail.config import settings
from payrail.db.models import OfframpOrderRow

from fakes import encode, sign

URL = "/api/v1/webhooks/offramp"
SECRET = "offramp-secret"


@pytest.fixture
async def order(db_session, user):
    db_session.add(
        OfframpOrderRow(
            order_id="ord_test",
            user_id=user.user_id,
            provider_order_id="pc_order_1",
            status="PENDING",
            chain="base",
            token="USDC",
            crypto_amount=Decimal("50"),
            fiat_currency="NGN",
            fiat_amount=Decimal("75000"),
            bank_name="GTBank",
            account_number="0123456789",
        )
    )
    await db_session.commit()


def _signed_headers(body: bytes, secret: str = SECRET) -> dict:
    return {
        "content-type": "application/json",
        settings.offramp_signature_header: sign(body, secret, hashlib.sha256),
    }


@pytest.mark.asyncio
async def test_settled_callback_completes_order(client, session_factory, order):
    body = encode({"event": "order.settled", "data": {"id": "pc_order_1"}})
    response = await client.post(URL, content=body, headers={"content-type": "application/json"})

    assert response.status_code == 200
    assert response.json() == {"received": True, "order_id": "ord_test", "status": "COMPLETED"}
    async with session_factory() as session:
        row = await session.get(OfframpOrderRow, "ord_test")
        assert row.status == "COMPLETED"
        assert row.completed_at is not None


@pytest.mark.asyncio
async def test_unknown_order_is_acknowledged(client):
    body = encode({"event": "order.settled", "data": {"id": "pc_missing"}})
    response = await client.post(URL, content=body)
    assert response.status_code == 200
    assert response.json() == {"received": True, "status": "order_not_found"}


@pytest.mark.asyncio
async def test_missing_order_id_is_a_validation_error(client):
    response = await client.post(URL, content=encode({"event": "order.settled", "data": {}}))
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_development_verifies_when_secret_and_signature_present(client, monkeypatch, order):
    monkeypatch.setattr(settings, "offramp_webhook_secret", SECRET)
    body = encode({"event": "order.pending", "data": {"id": "pc_order_1"}})

    bad = await client.post(URL, content=body, headers={settings.offramp_signature_header: "0" * 64})
    assert bad.status_code == 401

    unsigned = await client.post(URL, content=body)
    assert unsigned.status_code == 200


@pytest.mark.asyncio
async def test_production_requires_configured_secret(client, monkeypatch, order):
    monkeypatch.setattr(settings, "environment", "production")
    body = encode({"event": "order.settled", "data": {"id": "pc_order_1"}})
    response = await client.post(URL, content=body, headers=_signed_headers(body))
    assert response.status_code == 500
    assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"


@pytest.mark.asyncio
async def test_production_requires_valid_signature(client, monkeypatch, order):
    monkeypatch.setattr(settings, "environment", "production")
    monkeypatch.setattr(settings, "offramp_webhook_secret", SECRET)
    body = encode({"event": "order.refunded", "data": {"id": "pc_order_1", "reason": "bank rejected"}})

    missing = await client.post(URL, content=body)
    assert missing.status_code == 401

    wrong = await client.post(URL, content=body, headers=_signed_headers(body, "other-secret"))
    assert wrong.status_code == 401

    ok = await client.post(URL, content=body, headers=_signed_headers(body))
    assert ok.status_code == 200
    assert ok.json()["status"] == "FAILED"


@pytest.mark.asyncio
async def test_offramp_webhook_health(client):
    response = await client.get(f"{URL}/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
