"""String enums shared by the ORM rows, event models and services."""

from enum import StrEnum


class ChainFamily(StrEnum):
    EVM = "EVM"
    SOLANA = "SOLANA"


class DocumentType(StrEnum):
    INVOICE = "INVOICE"
    PAYMENT_LINK = "PAYMENT_LINK"
    PROPOSAL = "PROPOSAL"
    CONTRACT = "CONTRACT"


class DocumentStatus(StrEnum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    VIEWED = "VIEWED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class MilestoneStatus(StrEnum):
    PENDING = "pending"
    INVOICED = "invoiced"
    PAID = "paid"


class TransactionType(StrEnum):
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    PAYMENT_SENT = "PAYMENT_SENT"
    OFFRAMP = "OFFRAMP"
    FEE_COLLECTION = "FEE_COLLECTION"


class TransactionPurpose(StrEnum):
    DEPOSIT = "DEPOSIT"
    PAYOUT = "PAYOUT"


class TransactionStatus(StrEnum):
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    FAILED = "FAILED"


class OfframpStatus(StrEnum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class NotificationType(StrEnum):
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    PAYOUT_INITIATED = "PAYOUT_INITIATED"
    PAYOUT_CONFIRMED = "PAYOUT_CONFIRMED"
    WALLET_SETUP_REQUIRED = "WALLET_SETUP_REQUIRED"
    OFFRAMP = "offramp"
    OFFRAMP_FAILED = "OFFRAMP_FAILED"


class SettlementState(StrEnum):
    RECEIVED = "RECEIVED"
    CLASSIFIED = "CLASSIFIED"
    GENERIC_TOPUP = "GENERIC_TOPUP"
    LINKED_SETTLEMENT = "LINKED_SETTLEMENT"
    SETTLED = "SETTLED"
    AWAITING_WALLET = "AWAITING_WALLET"
    FAILED = "FAILED"


class WithdrawalOutcome(StrEnum):
    SUCCESS = "success"
    FAILED = "failed"
