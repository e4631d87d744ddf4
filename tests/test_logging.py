"""Log context binding and sensitive-field masking."""

import structlog

from payrail.logging_config import (
    MASK,
    bind_event_context,
    bind_request_context,
    bind_webhook_context,
    clear_request_context,
    mask_sensitive_fields,
)


def test_masks_secrets_and_bank_details():
    event = {
        "event": "Custody API error",
        "signature": "abc123",
        "x-api-key": "live_key",
        "offramp_webhook_secret": "s3cr3t",
        "body": {"account_number": "0123456789", "message": "Insufficient balance"},
        "orders": [{"push_token": "ExponentPushToken[x]", "order_id": "ord_1"}],
        "amount": "99.5",
    }
    masked = mask_sensitive_fields(None, "info", event)

    assert masked["signature"] == MASK
    assert masked["x-api-key"] == MASK
    assert masked["offramp_webhook_secret"] == MASK
    assert masked["body"] == {"account_number": MASK, "message": "Insufficient balance"}
    assert masked["orders"] == [{"push_token": MASK, "order_id": "ord_1"}]
    assert masked["amount"] == "99.5"
    # The input is left untouched.
    assert event["signature"] == "abc123"


def test_request_and_event_context_binding():
    bind_request_context("trc_0123456789", "POST", "/api/v1/webhooks/custody")
    bind_webhook_context("custody")
    bind_event_context("deposit.success", "evt_1")

    ctx = structlog.contextvars.get_contextvars()
    assert ctx == {
        "trace_id": "trc_0123456789",
        "method": "POST",
        "path": "/api/v1/webhooks/custody",
        "webhook_source": "custody",
        "event_type": "deposit.success",
        "event_id": "evt_1",
    }

    clear_request_context()
    assert structlog.contextvars.get_contextvars() == {}
