"""Notification repository."""

from sqlalchemy.ext.asyncio import AsyncSession

from payrail.db.models.notification import NotificationRow
from payrail.repositories.base import BaseRepository


class NotificationRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, NotificationRow)

    async def get(self, notification_id: str) -> NotificationRow | None:
        return await self.get_by_id("notification_id", notification_id)
