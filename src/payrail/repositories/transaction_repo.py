"""Transaction ledger and balance repositories."""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from payrail.db.base import utcnow
from payrail.db.models.transaction import TransactionRow, UserBalanceRow
from payrail.models.enums import TransactionPurpose
from payrail.repositories.base import BaseRepository
from payrail.services.id_generator import BALANCE_PREFIX, generate_id

_UPSERT_INSERTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


class TransactionRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, TransactionRow)

    async def get(self, transaction_id: str) -> TransactionRow | None:
        return await self.get_by_id("transaction_id", transaction_id)

    async def get_for_deposit(self, deposit_tx_hash: str, purpose: TransactionPurpose) -> TransactionRow | None:
        stmt = select(TransactionRow).where(
            TransactionRow.deposit_tx_hash == deposit_tx_hash,
            TransactionRow.purpose == purpose.value,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_payout_id(self, payout_id: str) -> TransactionRow | None:
        return await self.get_one_by_field("payout_id", payout_id)


class UserBalanceRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, UserBalanceRow)

    @staticmethod
    def _by_key(user_id: str, chain: str, asset: str):
        return select(UserBalanceRow).where(
            UserBalanceRow.user_id == user_id,
            UserBalanceRow.chain == chain,
            UserBalanceRow.asset == asset,
        )

    async def get(self, user_id: str, chain: str, asset: str) -> UserBalanceRow | None:
        result = await self.session.execute(self._by_key(user_id, chain, asset))
        return result.scalar_one_or_none()

    async def credit(self, user_id: str, chain: str, asset: str, amount: Decimal) -> UserBalanceRow:
        """Add ``amount`` to the running balance, creating the row on first credit.

        A single INSERT .. ON CONFLICT DO UPDATE, so concurrent credits to the
        same (user, chain, asset) key all land.
        """
        dialect = self.session.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f"Balance upsert is not supported on {dialect}")

        stmt = insert(UserBalanceRow).values(
            balance_id=generate_id(BALANCE_PREFIX),
            user_id=user_id,
            chain=chain,
            asset=asset,
            amount=amount,
            updated_at=utcnow(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserBalanceRow.user_id, UserBalanceRow.chain, UserBalanceRow.asset],
            set_={
                "amount": UserBalanceRow.amount + stmt.excluded.amount,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self.session.execute(stmt)

        result = await self.session.execute(
            self._by_key(user_id, chain, asset).execution_options(populate_existing=True)
        )
        return result.scalar_one()
