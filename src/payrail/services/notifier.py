"""In-app and push notifications for freelancers.

Notifications never block settlement: both the row insert and the push
delivery are best-effort. Callers commit their own work before notifying,
since a failed insert rolls the session back.
"""

import logging
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from payrail.models.enums import NotificationType
from payrail.repositories.notification_repo import NotificationRepository
from payrail.repositories.user_repo import DeviceTokenRepository
from payrail.services.id_generator import NOTIFICATION_PREFIX, generate_id

logger = logging.getLogger(__name__)


class PushSender(Protocol):
    async def send(
        self,
        tokens: list[str],
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> list[dict]: ...


class Notifier:
    def __init__(self, session: AsyncSession, push_sender: PushSender | None = None):
        self.session = session
        self.push_sender = push_sender

    async def notify(
        self,
        user_id: str,
        notification_type: NotificationType,
        title: str,
        message: str,
        metadata: dict[str, Any] | None = None,
        push_data: dict[str, Any] | None = None,
    ) -> str | None:
        """Store a notification and push it to the user's devices.

        ``push_data`` replaces the metadata as the push payload when given.

        Returns:
            The notification id, or None if the row could not be stored.
        """
        notification_id = await self._store(user_id, notification_type, title, message, metadata)
        await self._push(user_id, notification_type, title, message, push_data or metadata)
        return notification_id

    async def _store(
        self,
        user_id: str,
        notification_type: NotificationType,
        title: str,
        message: str,
        metadata: dict[str, Any] | None,
    ) -> str | None:
        notification_id = generate_id(NOTIFICATION_PREFIX)
        try:
            await NotificationRepository(self.session).create(
                notification_id=notification_id,
                user_id=user_id,
                notification_type=str(notification_type),
                title=title,
                message=message,
                read=False,
                extra_data=metadata or {},
            )
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error(
                "Failed to store notification",
                extra={"user_id": user_id, "notification_type": str(notification_type), "error": str(exc)},
            )
            return None
        return notification_id

    async def _push(
        self,
        user_id: str,
        notification_type: NotificationType,
        title: str,
        message: str,
        data: dict[str, Any] | None,
    ) -> None:
        if self.push_sender is None:
            return
        try:
            tokens = await DeviceTokenRepository(self.session).list_tokens(user_id)
            if not tokens:
                return
            payload = {"type": str(notification_type), **(data or {})}
            tickets = await self.push_sender.send(tokens, title, message, payload)
            logger.debug("Push delivered", extra={"user_id": user_id, "tickets": len(tickets)})
        except Exception as exc:
            logger.warning("Push notification failed", extra={"user_id": user_id, "error": str(exc)})
