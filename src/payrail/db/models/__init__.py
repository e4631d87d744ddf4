"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from payrail.db.models.user import UserRow, DeviceTokenRow
from payrail.db.models.client import ClientRow
from payrail.db.models.document import DocumentRow, MilestoneRow
from payrail.db.models.transaction import TransactionRow, UserBalanceRow
from payrail.db.models.notification import NotificationRow
from payrail.db.models.offramp_order import OfframpOrderRow
from payrail.db.models.webhook_event import CustodyEventRow

__all__ = [
    "UserRow",
    "DeviceTokenRow",
    "ClientRow",
    "DocumentRow",
    "MilestoneRow",
    "TransactionRow",
    "UserBalanceRow",
    "NotificationRow",
    "OfframpOrderRow",
    "CustodyEventRow",
]
