"""Invoice / payment-link documents and project milestones."""

from decimal import Decimal

from sqlalchemy import JSON, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from payrail.db.base import Base, TimestampMixin


class DocumentRow(Base, TimestampMixin):
    __tablename__ = "documents"

    document_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True
    )
    client_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("clients.client_id", ondelete="SET NULL"), nullable=True, index=True
    )
    doc_type: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="DRAFT")
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(20, 8), nullable=True)
    currency: Mapped[str | None] = mapped_column(String(20), nullable=True)
    content: Mapped[dict | None] = mapped_column(JSON, nullable=True)


class MilestoneRow(Base, TimestampMixin):
    __tablename__ = "milestones"

    milestone_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    project_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    invoice_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("documents.document_id", ondelete="SET NULL"), nullable=True, index=True
    )
