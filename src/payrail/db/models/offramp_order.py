"""Fiat offramp orders, updated by provider status callbacks."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from payrail.db.base import Base, TimestampMixin


class OfframpOrderRow(Base, TimestampMixin):
    __tablename__ = "offramp_orders"

    order_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True
    )
    provider_order_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
    chain: Mapped[str] = mapped_column(String(30), nullable=False)
    token: Mapped[str] = mapped_column(String(20), nullable=False)
    crypto_amount: Mapped[Decimal] = mapped_column(Numeric(20, 8), nullable=False)
    tx_hash: Mapped[str | None] = mapped_column(String(256), nullable=True)
    fiat_currency: Mapped[str] = mapped_column(String(10), nullable=False, default="NGN")
    fiat_amount: Mapped[Decimal] = mapped_column(Numeric(20, 2), nullable=False)
    bank_name: Mapped[str] = mapped_column(String(200), nullable=False)
    account_number: Mapped[str] = mapped_column(String(50), nullable=False)
    account_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
