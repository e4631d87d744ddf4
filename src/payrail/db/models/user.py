"""Freelancer accounts and their registered push devices."""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payrail.db.base import Base, TimestampMixin


class UserRow(Base, TimestampMixin):
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True, unique=True)
    display_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    custody_address_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    custody_address: Mapped[str | None] = mapped_column(String(128), nullable=True)
    evm_wallet_address: Mapped[str | None] = mapped_column(String(128), nullable=True)
    solana_wallet_address: Mapped[str | None] = mapped_column(String(128), nullable=True)


class DeviceTokenRow(Base, TimestampMixin):
    __tablename__ = "device_tokens"
    __table_args__ = (UniqueConstraint("user_id", "push_token", name="uq_device_tokens_user_token"),)

    device_token_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True
    )
    push_token: Mapped[str] = mapped_column(String(256), nullable=False)
    platform: Mapped[str | None] = mapped_column(String(20), nullable=True)
