"""Client repository with earnings aggregation."""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payrail.db.models.client import ClientRow
from payrail.db.models.document import DocumentRow
from payrail.models.enums import DocumentStatus, DocumentType
from payrail.repositories.base import BaseRepository

_OUTSTANDING_STATUSES = (DocumentStatus.SENT, DocumentStatus.VIEWED)


class ClientRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ClientRow)

    async def get(self, client_id: str) -> ClientRow | None:
        return await self.get_by_id("client_id", client_id)

    async def recompute_stats(self, client_id: str) -> ClientRow | None:
        """Recalculate total earnings (PAID documents) and outstanding balance (unpaid invoices)."""
        client = await self.get(client_id)
        if client is None:
            return None

        stmt = select(DocumentRow.amount, DocumentRow.status, DocumentRow.doc_type).where(
            DocumentRow.client_id == client_id
        )
        result = await self.session.execute(stmt)

        total_earnings = Decimal("0")
        outstanding = Decimal("0")
        for amount, status, doc_type in result.all():
            amount = Decimal(amount or 0)
            if status == DocumentStatus.PAID:
                total_earnings += amount
            elif status in _OUTSTANDING_STATUSES and doc_type == DocumentType.INVOICE:
                outstanding += amount

        return await self.update(client, total_earnings=total_earnings, outstanding_balance=outstanding)
