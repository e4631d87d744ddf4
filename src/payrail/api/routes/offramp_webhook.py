"""Status callbacks from the fiat offramp provider."""

import hashlib
import json
import logging

from fastapi import APIRouter, Request
from pydantic import ValidationError as PydanticValidationError

from payrail.config import settings
from payrail.dependencies import DBSession, PushSenderDep
from payrail.errors.exceptions import ValidationError
from payrail.logging_config import bind_webhook_context
from payrail.models.common import WebhookAck
from payrail.models.offramp_events import OfframpCallback
from payrail.services.notifier import Notifier
from payrail.services.reconciler import StatusReconciler
from payrail.services.signature import verify_signature

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Webhooks"])


def _check_signature(body: bytes, signature: str | None) -> None:
    secret = settings.offramp_webhook_secret
    if settings.is_production:
        if not secret:
            logger.error("Offramp webhook secret is not configured in production")
        verify_signature(body, signature, secret, hashlib.sha256)
    elif secret and signature:
        verify_signature(body, signature, secret, hashlib.sha256)


@router.post("/webhooks/offramp", response_model=WebhookAck, response_model_exclude_none=True)
async def handle_offramp_webhook(
    request: Request,
    db: DBSession,
    push_sender: PushSenderDep,
) -> dict:
    """Apply an order status callback to the matching offramp order."""
    body = await request.body()
    _check_signature(body, request.headers.get(settings.offramp_signature_header))
    bind_webhook_context("offramp")

    try:
        callback = OfframpCallback.model_validate(json.loads(body))
    except (ValueError, PydanticValidationError) as exc:
        raise ValidationError("Missing event or order ID", {"error": str(exc)}) from exc
    logger.info("Received offramp event", extra={"offramp_event": callback.event})

    try:
        return await StatusReconciler(db, Notifier(db, push_sender)).reconcile_offramp(callback)
    except Exception as exc:
        logger.exception("Offramp webhook processing error")
        await db.rollback()
        return {"received": True, "error": str(exc)}


@router.get("/webhooks/offramp/health")
async def offramp_webhook_health():
    return {"status": "ok"}
