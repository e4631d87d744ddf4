"""Inbound webhooks from the custodial wallet provider."""

import json
import logging

from fastapi import APIRouter, Request

from payrail.config import settings
from payrail.dependencies import CatalogCacheDep, CustodyClientDep, DBSession, PushSenderDep
from payrail.logging_config import bind_webhook_context
from payrail.models.common import WebhookAck
from payrail.services.custody_events import process_custody_event
from payrail.services.signature import verify_signature

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Webhooks"])


@router.post("/webhooks/custody", response_model=WebhookAck, response_model_exclude_none=True)
async def handle_custody_webhook(
    request: Request,
    db: DBSession,
    custody: CustodyClientDep,
    push_sender: PushSenderDep,
    catalog_cache: CatalogCacheDep,
) -> dict:
    """Verify, audit and process a custody event.

    The provider redelivers anything that is not a 2xx, so once the signature
    passes every outcome is acknowledged with 200; processing errors are
    logged and reported in the body.
    """
    body = await request.body()
    verify_signature(body, request.headers.get(settings.custody_signature_header), settings.custody_api_key)
    bind_webhook_context("custody")

    try:
        payload = json.loads(body)
    except ValueError:
        logger.error("Custody webhook body is not valid JSON")
        return {"received": True, "error": "invalid_json"}
    if not isinstance(payload, dict):
        logger.error("Custody webhook body is not a JSON object")
        return {"received": True, "error": "invalid_payload"}

    try:
        result = await process_custody_event(db, payload, custody, push_sender, catalog_cache)
    except Exception:
        logger.exception("Custody webhook processing error")
        await db.rollback()
        return {"received": True, "error": "Processing error"}

    ack = {"received": True}
    if result.get("error"):
        ack["error"] = result["error"]
    return ack
