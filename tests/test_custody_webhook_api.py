"""End-to-end tests for POST /api/v1/webhooks/custody."""

from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from payrail.config import settings
from payrail.db.models import CustodyEventRow, DocumentRow, TransactionRow
from payrail.repositories.webhook_event_repo import CustodyEventRepository

from fakes import deposit_payload, encode, sign

URL = "/api/v1/webhooks/custody"


async def _post(client, payload: dict | None = None, body: bytes | None = None, signature: str | None = ""):
    body = body if body is not None else encode(payload)
    headers = {"content-type": "application/json"}
    if signature == "":
        signature = sign(body)
    if signature is not None:
        headers[settings.custody_signature_header] = signature
    return await client.post(URL, content=body, headers=headers)


async def _count(session_factory, model, *where) -> int:
    async with session_factory() as session:
        stmt = select(func.count()).select_from(model)
        if where:
            stmt = stmt.where(*where)
        return (await session.execute(stmt)).scalar()


@pytest.mark.asyncio
async def test_valid_deposit_settles_and_pays_out(client, session_factory, document, custody):
    response = await _post(client, deposit_payload())

    assert response.status_code == 200
    assert response.json() == {"received": True}
    assert len(custody.withdrawals) == 1
    assert custody.withdrawals[0].amount == Decimal("99.5")

    async with session_factory() as session:
        doc = await session.get(DocumentRow, "doc_test")
        assert doc.status == "PAID"
    assert await _count(session_factory, CustodyEventRow) == 1


@pytest.mark.asyncio
async def test_bad_signature_is_rejected_without_side_effects(client, session_factory, document, custody):
    response = await _post(client, deposit_payload(), signature="deadbeef")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "SIGNATURE_ERROR"
    assert custody.call_count == 0
    assert await _count(session_factory, CustodyEventRow) == 0
    assert await _count(session_factory, TransactionRow) == 0


@pytest.mark.asyncio
async def test_signature_over_different_body_is_rejected(client, document, custody):
    signature = sign(encode(deposit_payload(amount="1")))
    response = await _post(client, deposit_payload(amount="100"), signature=signature)
    assert response.status_code == 401
    assert custody.call_count == 0


@pytest.mark.asyncio
async def test_missing_signature_is_rejected(client, document, custody):
    response = await _post(client, deposit_payload(), signature=None)
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Missing signature"
    assert custody.call_count == 0


@pytest.mark.asyncio
async def test_unconfigured_api_key_is_a_server_error(client, monkeypatch, document, custody):
    monkeypatch.setattr(settings, "custody_api_key", "")
    response = await _post(client, deposit_payload())
    assert response.status_code == 500
    assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"
    assert custody.call_count == 0


@pytest.mark.asyncio
async def test_duplicate_delivery_pays_out_once(client, session_factory, document, custody):
    first = await _post(client, deposit_payload())
    second = await _post(client, deposit_payload())

    assert first.status_code == 200
    assert second.status_code == 200
    assert len(custody.withdrawals) == 1
    assert await _count(session_factory, TransactionRow, TransactionRow.purpose == "PAYOUT") == 1
    # Both deliveries are audited.
    async with session_factory() as session:
        assert await CustodyEventRepository(session).count_by_type("deposit.success") == 2


@pytest.mark.asyncio
async def test_audit_failure_does_not_block_settlement(client, monkeypatch, session_factory, document, custody):
    async def broken_create(self, **kwargs):
        raise SQLAlchemyError("audit table unavailable")

    monkeypatch.setattr(CustodyEventRepository, "create", broken_create)

    response = await _post(client, deposit_payload())

    assert response.status_code == 200
    assert len(custody.withdrawals) == 1


@pytest.mark.asyncio
async def test_malformed_deposit_is_acknowledged_and_audited(client, session_factory, document, custody):
    response = await _post(client, deposit_payload(amount="0"))

    assert response.status_code == 200
    assert response.json() == {"received": True, "error": "invalid_payload"}
    assert custody.call_count == 0
    assert await _count(session_factory, CustodyEventRow) == 1


@pytest.mark.asyncio
async def test_non_json_body_is_acknowledged(client, custody):
    response = await _post(client, body=b"not json")
    assert response.status_code == 200
    assert response.json() == {"received": True, "error": "invalid_json"}


@pytest.mark.asyncio
async def test_processing_error_is_acknowledged(client, monkeypatch, document, custody):
    async def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr("payrail.api.routes.custody_webhook.process_custody_event", explode)

    response = await _post(client, deposit_payload())
    assert response.status_code == 200
    assert response.json() == {"received": True, "error": "Processing error"}


@pytest.mark.asyncio
async def test_unhandled_event_types_are_acknowledged(client, session_factory, custody):
    response = await _post(client, {"event": "sweep.success", "data": {"txHash": "0xsweep", "amount": "5"}})
    assert response.status_code == 200
    assert response.json() == {"received": True}

    response = await _post(client, {"event": "wallet.created", "data": {}})
    assert response.status_code == 200
    assert custody.call_count == 0
    assert await _count(session_factory, CustodyEventRow) == 2
