"""Apply provider status callbacks to payout transactions and offramp orders."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from payrail.db.base import utcnow
from payrail.db.models.offramp_order import OfframpOrderRow
from payrail.db.models.transaction import TransactionRow
from payrail.models.custody_events import DepositPendingEvent, SweepEvent, UnrecognizedEvent, WithdrawalEvent
from payrail.models.enums import (
    NotificationType,
    OfframpStatus,
    TransactionPurpose,
    TransactionStatus,
    WithdrawalOutcome,
)
from payrail.models.offramp_events import OfframpCallback, is_terminal
from payrail.repositories.offramp_repo import OfframpOrderRepository
from payrail.repositories.transaction_repo import TransactionRepository
from payrail.services.notifier import Notifier

logger = logging.getLogger(__name__)

OFFRAMP_MESSAGES: dict[str, tuple[str, str]] = {
    "order.initiated": ("Withdrawal started", "Your withdrawal of {amount} {currency} has been initiated."),
    "order.pending": ("Processing withdrawal", "Your withdrawal is being processed by our provider."),
    "order.validated": ("Withdrawal validated", "Your withdrawal has been validated and will be settled shortly."),
    "order.settled": ("Withdrawal complete", "{amount} {currency} has been sent to your bank account."),
    "order.refunded": ("Withdrawal refunded", "Your withdrawal was refunded. Funds have been returned to your wallet."),
    "order.expired": ("Withdrawal expired", "Your withdrawal order has expired. Please try again."),
}


def offramp_message(event: str, amount, currency: str) -> tuple[str, str]:
    """Return the user-facing (title, body) for an offramp status event."""
    title, body = OFFRAMP_MESSAGES.get(event, ("Withdrawal update", f"Status: {event}"))
    return title, body.format(amount=f"{amount:.2f}", currency=currency)


def _mask_account(account_number: str | None) -> str:
    return f"****{account_number[-4:]}" if account_number else ""


class StatusReconciler:
    def __init__(self, session: AsyncSession, notifier: Notifier):
        self.session = session
        self.notifier = notifier
        self.orders = OfframpOrderRepository(session)
        self.transactions = TransactionRepository(session)

    # -- custody withdrawal callbacks ---------------------------------------

    async def reconcile_withdrawal(self, event: WithdrawalEvent) -> dict:
        """Update the offramp order and payout transaction a withdrawal belongs to."""
        failed = event.outcome == WithdrawalOutcome.FAILED
        error = event.error or "Withdrawal failed"
        if failed:
            logger.error(
                "Withdrawal failed",
                extra={"withdrawal_id": event.withdrawal_id, "error": error, "order_id": event.metadata.offramp_order_id},
            )
        else:
            logger.info("Withdrawal succeeded", extra={"withdrawal_id": event.withdrawal_id, "tx_hash": event.tx_hash})

        result: dict = {"order_id": None, "transaction_id": None}
        if event.metadata.offramp_order_id:
            order = await self.orders.get(event.metadata.offramp_order_id)
            if order is None:
                logger.warning("Offramp order for withdrawal not found", extra={"order_id": event.metadata.offramp_order_id})
            elif is_terminal(order.status):
                logger.warning(
                    "Offramp order already final, withdrawal update ignored",
                    extra={"order_id": order.order_id, "status": order.status},
                )
                result["order_id"] = order.order_id
            elif failed:
                result["order_id"] = await self._fail_order(order, error)
            else:
                result["order_id"] = await self._order_sent(order, event.tx_hash)

        payout = await self._find_payout(event)
        if payout is not None:
            if failed:
                result["transaction_id"] = await self._fail_payout(payout, error)
            else:
                result["transaction_id"] = await self._confirm_payout(payout, event.tx_hash)
        return result

    async def _find_payout(self, event: WithdrawalEvent) -> TransactionRow | None:
        if event.withdrawal_id:
            payout = await self.transactions.get_by_payout_id(event.withdrawal_id)
            if payout is not None:
                return payout
        if event.metadata.deposit_tx_hash:
            return await self.transactions.get_for_deposit(event.metadata.deposit_tx_hash, TransactionPurpose.PAYOUT)
        return None

    async def _order_sent(self, order: OfframpOrderRow, tx_hash: str | None) -> str:
        order_id = order.order_id
        await self.orders.update(order, status=OfframpStatus.PROCESSING.value, tx_hash=tx_hash or order.tx_hash)
        await self.session.commit()
        logger.info("Offramp order updated", extra={"order_id": order_id, "status": OfframpStatus.PROCESSING.value})
        return order_id

    async def _fail_order(self, order: OfframpOrderRow, error: str) -> str:
        order_id, user_id = order.order_id, order.user_id
        await self.orders.update(order, status=OfframpStatus.FAILED.value, error_message=error)
        await self.session.commit()
        await self.notifier.notify(
            user_id,
            NotificationType.OFFRAMP_FAILED,
            "Offramp failed",
            "Your offramp request could not be processed. Please try again.",
            {"order_id": order_id, "error": error},
        )
        return order_id

    async def _confirm_payout(self, payout: TransactionRow, tx_hash: str | None) -> str:
        transaction_id, user_id = payout.transaction_id, payout.user_id
        if payout.status == TransactionStatus.CONFIRMED:
            return transaction_id
        net, token = payout.net_amount, payout.token
        await self.transactions.update(
            payout, status=TransactionStatus.CONFIRMED.value, tx_hash=tx_hash or payout.tx_hash
        )
        await self.session.commit()
        await self.notifier.notify(
            user_id,
            NotificationType.PAYOUT_CONFIRMED,
            "Payout confirmed",
            f"{net} {token} has arrived in your wallet.",
            {"transaction_id": transaction_id, "tx_hash": tx_hash},
        )
        return transaction_id

    async def _fail_payout(self, payout: TransactionRow, error: str) -> str:
        transaction_id, user_id = payout.transaction_id, payout.user_id
        if payout.status == TransactionStatus.FAILED:
            return transaction_id
        document_id = payout.document_id
        await self.transactions.update(payout, status=TransactionStatus.FAILED.value, error_message=error)
        await self.session.commit()
        await self.notifier.notify(
            user_id,
            NotificationType.PAYMENT_FAILED,
            "Payout failed",
            "Sending your payment to your wallet failed. Our team has been notified.",
            {"transaction_id": transaction_id, "document_id": document_id, "error": error},
        )
        return transaction_id

    # -- informational custody events ----------------------------------------

    @staticmethod
    def log_event(event: DepositPendingEvent | SweepEvent | UnrecognizedEvent) -> None:
        if isinstance(event, DepositPendingEvent):
            logger.info(
                "Deposit pending",
                extra={"address_id": event.address_id, "amount": str(event.amount) if event.amount else None},
            )
        elif isinstance(event, SweepEvent) and event.succeeded:
            logger.info(
                "Auto-sweep completed",
                extra={"tx_hash": event.tx_hash, "amount": str(event.amount) if event.amount else None},
            )
        elif isinstance(event, SweepEvent):
            logger.error("Auto-sweep failed", extra={"address_id": event.address_id, "error": event.error})
        else:
            logger.info("Unhandled webhook event type", extra={"event_type": event.event_type})

    # -- offramp provider callbacks ----------------------------------------

    async def reconcile_offramp(self, callback: OfframpCallback) -> dict:
        """Apply an offramp status callback to its order and notify the owner."""
        provider_order_id = callback.data.id
        new_status = callback.status
        order = await self.orders.get_by_provider_order_id(provider_order_id)
        if order is None:
            logger.warning("Offramp order not found for callback", extra={"provider_order_id": provider_order_id})
            return {"received": True, "status": "order_not_found"}

        logger.info(
            "Processing offramp status update",
            extra={"order_id": order.order_id, "current_status": order.status, "new_status": new_status.value},
        )
        if is_terminal(order.status) and order.status != new_status.value:
            logger.warning(
                "Offramp order already final, callback ignored",
                extra={"order_id": order.order_id, "status": order.status, "event": callback.event},
            )
            return {"received": True, "order_id": order.order_id, "status": order.status}

        changes: dict = {"status": new_status.value}
        if callback.data.tx_hash:
            changes["tx_hash"] = callback.data.tx_hash
        if new_status == OfframpStatus.COMPLETED:
            changes["completed_at"] = utcnow()
        if new_status == OfframpStatus.FAILED:
            changes["error_message"] = callback.data.reason or f"Order {callback.short_event}"

        order_id, user_id = order.order_id, order.user_id
        fiat_amount, fiat_currency = order.fiat_amount, order.fiat_currency
        bank_name, account = order.bank_name, _mask_account(order.account_number)
        await self.orders.update(order, **changes)
        await self.session.commit()

        title, body = offramp_message(callback.event, fiat_amount, fiat_currency)
        notification_type = (
            NotificationType.OFFRAMP_FAILED if new_status == OfframpStatus.FAILED else NotificationType.OFFRAMP
        )
        await self.notifier.notify(
            user_id,
            notification_type,
            title,
            body,
            {
                "order_id": order_id,
                "provider_order_id": provider_order_id,
                "event": callback.event,
                "status": new_status.value,
                "fiat_amount": str(fiat_amount),
                "fiat_currency": fiat_currency,
            },
            push_data={
                "type": "offramp_status",
                "order_id": order_id,
                "status": new_status.value,
                "fiat_amount": str(fiat_amount),
                "fiat_currency": fiat_currency,
                "bank_name": bank_name,
                "account_number": account,
                "event": callback.event,
            },
        )
        return {"received": True, "order_id": order_id, "status": new_status.value}
