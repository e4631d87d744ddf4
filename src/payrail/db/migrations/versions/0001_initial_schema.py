"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-03-02 10:14:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(128), primary_key=True),
        sa.Column("email", sa.String(320), nullable=True, unique=True),
        sa.Column("display_name", sa.String(200), nullable=True),
        sa.Column("custody_address_id", sa.String(128), nullable=True, index=True),
        sa.Column("custody_address", sa.String(128), nullable=True),
        sa.Column("evm_wallet_address", sa.String(128), nullable=True),
        sa.Column("solana_wallet_address", sa.String(128), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "device_tokens",
        sa.Column("device_token_id", sa.String(128), primary_key=True),
        sa.Column("user_id", sa.String(128), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("push_token", sa.String(256), nullable=False),
        sa.Column("platform", sa.String(20), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "push_token", name="uq_device_tokens_user_token"),
    )
    op.create_table(
        "clients",
        sa.Column("client_id", sa.String(128), primary_key=True),
        sa.Column("user_id", sa.String(128), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("total_earnings", sa.Numeric(18, 2), nullable=False),
        sa.Column("outstanding_balance", sa.Numeric(18, 2), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "documents",
        sa.Column("document_id", sa.String(128), primary_key=True),
        sa.Column("user_id", sa.String(128), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column(
            "client_id", sa.String(128), sa.ForeignKey("clients.client_id", ondelete="SET NULL"), nullable=True, index=True
        ),
        sa.Column("doc_type", sa.String(30), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("amount", sa.Numeric(20, 8), nullable=True),
        sa.Column("currency", sa.String(20), nullable=True),
        sa.Column("content", sa.JSON, nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "milestones",
        sa.Column("milestone_id", sa.String(128), primary_key=True),
        sa.Column("project_id", sa.String(128), nullable=False, index=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column(
            "invoice_id",
            sa.String(128),
            sa.ForeignKey("documents.document_id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        *_timestamps(),
    )
    op.create_table(
        "transactions",
        sa.Column("transaction_id", sa.String(128), primary_key=True),
        sa.Column("user_id", sa.String(128), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column(
            "document_id", sa.String(128), sa.ForeignKey("documents.document_id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("tx_type", sa.String(30), nullable=False),
        sa.Column("purpose", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("chain", sa.String(30), nullable=False),
        sa.Column("tx_hash", sa.String(256), nullable=True, index=True),
        sa.Column("deposit_tx_hash", sa.String(256), nullable=False),
        sa.Column("from_address", sa.String(256), nullable=True),
        sa.Column("to_address", sa.String(256), nullable=True),
        sa.Column("token", sa.String(20), nullable=False),
        sa.Column("gross_amount", sa.Numeric(20, 8), nullable=False),
        sa.Column("platform_fee", sa.Numeric(20, 8), nullable=False),
        sa.Column("net_amount", sa.Numeric(20, 8), nullable=False),
        sa.Column("payout_id", sa.String(128), nullable=True, index=True),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("metadata", sa.JSON, nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("deposit_tx_hash", "purpose", name="uq_transactions_deposit_purpose"),
    )
    op.create_table(
        "user_balances",
        sa.Column("balance_id", sa.String(128), primary_key=True),
        sa.Column("user_id", sa.String(128), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("chain", sa.String(30), nullable=False),
        sa.Column("asset", sa.String(20), nullable=False),
        sa.Column("amount", sa.Numeric(20, 8), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "chain", "asset", name="uq_user_balances_user_chain_asset"),
    )
    op.create_table(
        "notifications",
        sa.Column("notification_id", sa.String(128), primary_key=True),
        sa.Column("user_id", sa.String(128), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("notification_type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("metadata", sa.JSON, nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "offramp_orders",
        sa.Column("order_id", sa.String(128), primary_key=True),
        sa.Column("user_id", sa.String(128), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("provider_order_id", sa.String(128), nullable=False, unique=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("chain", sa.String(30), nullable=False),
        sa.Column("token", sa.String(20), nullable=False),
        sa.Column("crypto_amount", sa.Numeric(20, 8), nullable=False),
        sa.Column("tx_hash", sa.String(256), nullable=True),
        sa.Column("fiat_currency", sa.String(10), nullable=False),
        sa.Column("fiat_amount", sa.Numeric(20, 2), nullable=False),
        sa.Column("bank_name", sa.String(200), nullable=False),
        sa.Column("account_number", sa.String(50), nullable=False),
        sa.Column("account_name", sa.String(200), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "custody_events",
        sa.Column("event_id", sa.String(128), primary_key=True),
        sa.Column("event_type", sa.String(100), nullable=False, index=True),
        sa.Column("address_id", sa.String(128), nullable=True, index=True),
        sa.Column("transaction_id", sa.String(128), nullable=True),
        sa.Column("payload", sa.JSON, nullable=False),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=False, index=True),
    )


def downgrade() -> None:
    for table in (
        "custody_events",
        "offramp_orders",
        "notifications",
        "user_balances",
        "transactions",
        "milestones",
        "documents",
        "clients",
        "device_tokens",
        "users",
    ):
        op.drop_table(table)
