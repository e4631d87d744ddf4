"""Route a verified custody webhook to settlement or reconciliation."""

import logging

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from payrail.config import settings
from payrail.logging_config import bind_event_context
from payrail.models.custody_events import DepositEvent, WithdrawalEvent, parse_custody_event
from payrail.services.asset_resolver import AssetCatalogCache
from payrail.services.event_ledger import record_custody_event
from payrail.services.notifier import Notifier, PushSender
from payrail.services.reconciler import StatusReconciler
from payrail.services.settlement import CustodyGateway, SettlementEngine

logger = logging.getLogger(__name__)


async def process_custody_event(
    session: AsyncSession,
    payload: dict,
    custody: CustodyGateway,
    push_sender: PushSender | None = None,
    catalog_cache: AssetCatalogCache | None = None,
) -> dict:
    """Audit, parse and handle one custody webhook delivery.

    The audit row is written before parsing, so malformed payloads are still
    recorded. Returns a small summary for the acknowledgement body.
    """
    ledger_id = await record_custody_event(session, payload)

    try:
        event = parse_custody_event(payload)
    except PydanticValidationError as exc:
        logger.error(
            "Invalid custody webhook payload",
            extra={"ledger_id": ledger_id, "error": str(exc)},
        )
        return {"error": "invalid_payload"}

    bind_event_context(event.event_type, event.event_id)
    logger.info("Custody webhook event", extra={"ledger_id": ledger_id})

    notifier = Notifier(session, push_sender)
    if isinstance(event, DepositEvent):
        engine = SettlementEngine(
            session,
            custody,
            notifier,
            fee_rate=settings.platform_fee_rate,
            wallet_id=settings.custody_wallet_id or None,
            catalog_cache=catalog_cache,
            default_chain=settings.default_deposit_chain,
        )
        outcome = await engine.settle(event)
        return {"state": outcome.state.value}

    reconciler = StatusReconciler(session, notifier)
    if isinstance(event, WithdrawalEvent):
        await reconciler.reconcile_withdrawal(event)
    else:
        reconciler.log_event(event)
    return {}
