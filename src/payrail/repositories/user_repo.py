"""User and device token repositories."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payrail.db.models.user import DeviceTokenRow, UserRow
from payrail.repositories.base import BaseRepository


class UserRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, UserRow)

    async def get(self, user_id: str) -> UserRow | None:
        return await self.get_by_id("user_id", user_id)

    async def get_by_custody_address(self, address_id: str) -> UserRow | None:
        return await self.get_one_by_field("custody_address_id", address_id)


class DeviceTokenRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, DeviceTokenRow)

    async def list_tokens(self, user_id: str) -> list[str]:
        stmt = select(DeviceTokenRow.push_token).where(DeviceTokenRow.user_id == user_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
