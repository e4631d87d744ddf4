"""Best-effort audit log of every custody webhook delivery."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from payrail.models.custody_events import audit_fields
from payrail.repositories.webhook_event_repo import CustodyEventRepository
from payrail.services.id_generator import EVENT_PREFIX, generate_id

logger = logging.getLogger(__name__)


async def record_custody_event(session: AsyncSession, payload: dict) -> str | None:
    """Insert one audit row for a delivery and commit it.

    The provider's event id is used when present. A redelivery of the same
    event collides on the primary key, in which case the row is written under
    a generated id so every delivery stays visible. Failures are logged and
    swallowed; the audit trail never blocks settlement.

    Returns:
        The id of the stored row, or None if the insert failed.
    """
    fields = audit_fields(payload)
    repo = CustodyEventRepository(session)
    event_id = fields["event_id"] or generate_id(EVENT_PREFIX)

    for attempt in range(2):
        try:
            row = await repo.insert_unique(
                event_id=str(event_id),
                event_type=fields["event_type"],
                address_id=fields["address_id"],
                transaction_id=fields["transaction_id"],
                payload=payload,
            )
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Failed to record webhook event", extra={"error": str(exc)})
            return None
        if row is not None:
            return str(event_id)
        if attempt == 0:
            logger.info("Duplicate webhook delivery", extra={"provider_event_id": event_id})
            event_id = generate_id(EVENT_PREFIX)
    logger.error("Failed to record webhook event: id collision", extra={"provider_event_id": event_id})
    return None
