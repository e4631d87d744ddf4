"""Document and milestone repositories."""

from sqlalchemy.ext.asyncio import AsyncSession

from payrail.db.models.document import DocumentRow, MilestoneRow
from payrail.models.enums import DocumentStatus, MilestoneStatus
from payrail.repositories.base import BaseRepository


class DocumentRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, DocumentRow)

    async def get(self, document_id: str) -> DocumentRow | None:
        return await self.get_by_id("document_id", document_id)

    async def mark_paid(self, document: DocumentRow, payment: dict) -> bool:
        """Move a document to PAID and merge payment details into its content.

        Returns False without writing when the document is already PAID for
        the same transaction hash. A CANCELLED document is still marked PAID,
        since the funds did arrive.
        """
        content = dict(document.content or {})
        if document.status == DocumentStatus.PAID and content.get("tx_hash") == payment.get("tx_hash"):
            return False
        content.update(payment)
        await self.update(document, status=DocumentStatus.PAID.value, content=content)
        return True


class MilestoneRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, MilestoneRow)

    async def get(self, milestone_id: str) -> MilestoneRow | None:
        return await self.get_by_id("milestone_id", milestone_id)

    async def find_for_document(self, document: DocumentRow) -> MilestoneRow | None:
        """Return the milestone named in the document content, else the one invoiced by it."""
        milestone_id = (document.content or {}).get("milestone_id")
        if milestone_id:
            return await self.get(milestone_id)
        return await self.get_one_by_field("invoice_id", document.document_id)

    async def mark_paid(self, milestone: MilestoneRow) -> bool:
        if milestone.status == MilestoneStatus.PAID:
            return False
        await self.update(milestone, status=MilestoneStatus.PAID.value)
        return True
