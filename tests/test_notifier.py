"""Notification storage and push delivery tests."""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from payrail.models.enums import NotificationType
from payrail.repositories.notification_repo import NotificationRepository
from payrail.services.notifier import Notifier

from fakes import FakePush


@pytest.mark.asyncio
async def test_notify_stores_and_pushes(db_session, user, push):
    notification_id = await Notifier(db_session, push).notify(
        user.user_id,
        NotificationType.PAYMENT_RECEIVED,
        "Payment received",
        "100 USDC received",
        {"document_id": "doc_test"},
    )

    assert notification_id.startswith("notif_")
    stored = await NotificationRepository(db_session).get(notification_id)
    assert stored.notification_type == "PAYMENT_RECEIVED"
    assert stored.read is False
    assert stored.extra_data == {"document_id": "doc_test"}

    assert push.sent == [
        {
            "tokens": ["ExponentPushToken[abc123]"],
            "title": "Payment received",
            "body": "100 USDC received",
            "data": {"type": "PAYMENT_RECEIVED", "document_id": "doc_test"},
        }
    ]


@pytest.mark.asyncio
async def test_push_data_overrides_metadata(db_session, user, push):
    await Notifier(db_session, push).notify(
        user.user_id,
        NotificationType.OFFRAMP,
        "Withdrawal complete",
        "Done",
        {"order_id": "ord_1"},
        push_data={"type": "offramp_status", "order_id": "ord_1"},
    )
    assert push.sent[0]["data"] == {"type": "offramp_status", "order_id": "ord_1"}


@pytest.mark.asyncio
async def test_push_failure_still_stores(db_session, user):
    notifier = Notifier(db_session, FakePush(fail=True))
    notification_id = await notifier.notify(user.user_id, NotificationType.PAYMENT_FAILED, "t", "m")
    assert notification_id is not None
    assert await NotificationRepository(db_session).get(notification_id) is not None


@pytest.mark.asyncio
async def test_storage_failure_is_swallowed(db_session, user, push, monkeypatch):
    async def broken_create(self, **kwargs):
        raise SQLAlchemyError("notifications table locked")

    monkeypatch.setattr(NotificationRepository, "create", broken_create)

    result = await Notifier(db_session, push).notify(user.user_id, NotificationType.PAYMENT_FAILED, "t", "m")
    assert result is None
    # Push is independent of the stored row.
    assert len(push.sent) == 1


@pytest.mark.asyncio
async def test_no_push_sender_only_stores(db_session, user):
    notification_id = await Notifier(db_session).notify(user.user_id, NotificationType.PAYOUT_CONFIRMED, "t", "m")
    stored = await NotificationRepository(db_session).get(notification_id)
    assert stored.notification_type == "PAYOUT_CONFIRMED"
    assert stored.extra_data == {}
