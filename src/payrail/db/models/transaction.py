"""Ledger transactions and per-asset running balances."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, DateTime, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payrail.db.base import Base, TimestampMixin, utcnow


class TransactionRow(Base, TimestampMixin):
    __tablename__ = "transactions"
    # One deposit row and one payout row per deposit hash, at most.
    __table_args__ = (
        UniqueConstraint("deposit_tx_hash", "purpose", name="uq_transactions_deposit_purpose"),
    )

    transaction_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True
    )
    document_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("documents.document_id", ondelete="SET NULL"), nullable=True
    )
    tx_type: Mapped[str] = mapped_column(String(30), nullable=False)
    purpose: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    chain: Mapped[str] = mapped_column(String(30), nullable=False)
    tx_hash: Mapped[str | None] = mapped_column(String(256), nullable=True, index=True)
    deposit_tx_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    from_address: Mapped[str | None] = mapped_column(String(256), nullable=True)
    to_address: Mapped[str | None] = mapped_column(String(256), nullable=True)
    token: Mapped[str] = mapped_column(String(20), nullable=False)
    gross_amount: Mapped[Decimal] = mapped_column(Numeric(20, 8), nullable=False)
    platform_fee: Mapped[Decimal] = mapped_column(Numeric(20, 8), nullable=False, default=Decimal("0"))
    net_amount: Mapped[Decimal] = mapped_column(Numeric(20, 8), nullable=False)
    payout_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    extra_data: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class UserBalanceRow(Base):
    __tablename__ = "user_balances"
    __table_args__ = (UniqueConstraint("user_id", "chain", "asset", name="uq_user_balances_user_chain_asset"),)

    balance_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True
    )
    chain: Mapped[str] = mapped_column(String(30), nullable=False)
    asset: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(20, 8), nullable=False, default=Decimal("0"))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )
