"""Custody webhook audit log repository."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from payrail.db.models.webhook_event import CustodyEventRow
from payrail.repositories.base import BaseRepository


class CustodyEventRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, CustodyEventRow)

    async def get(self, event_id: str) -> CustodyEventRow | None:
        return await self.get_by_id("event_id", event_id)

    async def count_by_type(self, event_type: str) -> int:
        stmt = select(func.count(CustodyEventRow.event_id)).where(CustodyEventRow.event_type == event_type)
        result = await self.session.execute(stmt)
        return result.scalar() or 0
