"""Offramp order repository."""

from sqlalchemy.ext.asyncio import AsyncSession

from payrail.db.models.offramp_order import OfframpOrderRow
from payrail.repositories.base import BaseRepository


class OfframpOrderRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, OfframpOrderRow)

    async def get(self, order_id: str) -> OfframpOrderRow | None:
        return await self.get_by_id("order_id", order_id)

    async def get_by_provider_order_id(self, provider_order_id: str) -> OfframpOrderRow | None:
        return await self.get_one_by_field("provider_order_id", provider_order_id)
