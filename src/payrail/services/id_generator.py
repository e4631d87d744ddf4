"""Prefixed ID generation for ledger, notification and audit rows."""

import uuid

TRANSACTION_PREFIX = "txn_"
BALANCE_PREFIX = "bal_"
NOTIFICATION_PREFIX = "notif_"
EVENT_PREFIX = "evt_"


def generate_id(prefix: str) -> str:
    """Return ``prefix`` followed by 16 random hex characters, e.g. ``txn_a1b2c3d4e5f6a7b8``."""
    if not prefix.endswith("_"):
        raise ValueError(f"ID prefix must end with '_': {prefix!r}")
    return f"{prefix}{uuid.uuid4().hex[:16]}"
