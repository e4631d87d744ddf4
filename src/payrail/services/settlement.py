"""Settlement of confirmed custody deposits.

A deposit either tops up the user's internal balance or, when its address
metadata names a document, settles that document and pays the freelancer out
automatically. The document's PAID state is committed before any payout is
attempted and is never rolled back by a payout failure.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from payrail.config import settings
from payrail.db.models.document import DocumentRow
from payrail.errors.exceptions import AssetResolutionError
from payrail.models.custody import CatalogAsset, WalletBalance, WithdrawalRequest, WithdrawalResult
from payrail.models.custody_events import DepositEvent
from payrail.models.enums import (
    NotificationType,
    SettlementState,
    TransactionPurpose,
    TransactionStatus,
    TransactionType,
)
from payrail.repositories.client_repo import ClientRepository
from payrail.repositories.document_repo import DocumentRepository, MilestoneRepository
from payrail.repositories.transaction_repo import TransactionRepository, UserBalanceRepository
from payrail.repositories.user_repo import UserRepository
from payrail.services.asset_resolver import AssetCatalogCache, AssetResolver
from payrail.services.balance_guard import BalanceCheck, BalanceGuard
from payrail.services.fees import calculate_fee
from payrail.services.id_generator import TRANSACTION_PREFIX, generate_id
from payrail.services.notifier import Notifier
from payrail.services.withdrawal import DispatchResult, Payee, WithdrawalDispatcher

logger = logging.getLogger(__name__)


class CustodyGateway(Protocol):
    async def list_assets(self, wallet_id: str | None = None) -> list[CatalogAsset]: ...

    async def get_wallet_balances(self, wallet_id: str | None = None) -> list[WalletBalance]: ...

    async def initiate_withdrawal(
        self, request: WithdrawalRequest, wallet_id: str | None = None
    ) -> WithdrawalResult: ...


@dataclass
class SettlementOutcome:
    state: SettlementState
    tx_hash: str
    user_id: str | None = None
    document_id: str | None = None
    deposit_transaction_id: str | None = None
    duplicate: bool = False
    balance_check: BalanceCheck | None = None
    payout: DispatchResult | None = None
    error: str | None = None


class SettlementEngine:
    def __init__(
        self,
        session: AsyncSession,
        custody: CustodyGateway,
        notifier: Notifier,
        fee_rate: Decimal | None = None,
        wallet_id: str | None = None,
        catalog_cache: AssetCatalogCache | None = None,
        default_chain: str | None = None,
    ):
        self.session = session
        self.notifier = notifier
        self.fee_rate = settings.platform_fee_rate if fee_rate is None else fee_rate
        self.wallet_id = wallet_id
        self.default_chain = (default_chain or settings.default_deposit_chain).lower()
        self.resolver = AssetResolver(custody, catalog_cache)
        self.balance_guard = BalanceGuard(custody)
        self.dispatcher = WithdrawalDispatcher(session, custody, notifier, wallet_id)
        self.users = UserRepository(session)
        self.transactions = TransactionRepository(session)

    async def settle(self, deposit: DepositEvent) -> SettlementOutcome:
        """Drive a confirmed deposit to a terminal settlement state."""
        logger.info(
            "Deposit received",
            extra={
                "tx_hash": deposit.tx_hash,
                "amount": str(deposit.amount),
                "address_id": deposit.address_id,
                "state": SettlementState.RECEIVED.value,
            },
        )
        state = SettlementState.LINKED_SETTLEMENT if deposit.is_linked else SettlementState.GENERIC_TOPUP
        logger.info(
            "Deposit classified",
            extra={"tx_hash": deposit.tx_hash, "state": state.value, "document_id": deposit.metadata.document_id},
        )
        if state == SettlementState.GENERIC_TOPUP:
            return await self._settle_topup(deposit)
        return await self._settle_linked(deposit)

    async def _find_payee(self, deposit: DepositEvent) -> Payee | None:
        user = None
        if deposit.address_id:
            user = await self.users.get_by_custody_address(deposit.address_id)
        elif deposit.metadata.user_id:
            user = await self.users.get(deposit.metadata.user_id)
        return Payee.from_row(user) if user is not None else None

    def _deposit_chain(self, deposit: DepositEvent) -> str:
        return (deposit.asset.network_hint or self.default_chain).lower()

    async def _record_deposit(self, user: Payee, deposit: DepositEvent, document_id: str | None):
        """Flush the CONFIRMED deposit row; raises IntegrityError on a redelivery."""
        return await self.transactions.create(
            transaction_id=generate_id(TRANSACTION_PREFIX),
            user_id=user.user_id,
            document_id=document_id,
            tx_type=TransactionType.PAYMENT_RECEIVED.value,
            purpose=TransactionPurpose.DEPOSIT.value,
            status=TransactionStatus.CONFIRMED.value,
            chain=self._deposit_chain(deposit),
            tx_hash=deposit.tx_hash,
            deposit_tx_hash=deposit.tx_hash,
            from_address=deposit.from_address,
            to_address=deposit.to_address,
            token=deposit.token,
            gross_amount=deposit.amount,
            platform_fee=Decimal("0"),
            net_amount=deposit.amount,
            extra_data={
                "custody_transaction_id": deposit.custody_transaction_id,
                "address_id": deposit.address_id,
                "document_id": deposit.metadata.document_id,
            },
        )

    # -- generic top-up ---------------------------------------------------

    async def _settle_topup(self, deposit: DepositEvent) -> SettlementOutcome:
        user = await self._find_payee(deposit)
        if user is None:
            logger.error("No user for deposit address", extra={"address_id": deposit.address_id})
            return SettlementOutcome(
                state=SettlementState.FAILED, tx_hash=deposit.tx_hash, error="user_not_found"
            )

        if await self.transactions.get_for_deposit(deposit.tx_hash, TransactionPurpose.DEPOSIT):
            logger.info("Deposit already recorded", extra={"tx_hash": deposit.tx_hash})
            return SettlementOutcome(
                state=SettlementState.SETTLED, tx_hash=deposit.tx_hash, user_id=user.user_id, duplicate=True
            )

        chain = self._deposit_chain(deposit)
        try:
            row = await self._record_deposit(user, deposit, None)
            transaction_id = row.transaction_id
            await UserBalanceRepository(self.session).credit(user.user_id, chain, deposit.token, deposit.amount)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            if await self.transactions.get_for_deposit(deposit.tx_hash, TransactionPurpose.DEPOSIT) is None:
                logger.error("Deposit could not be recorded", extra={"tx_hash": deposit.tx_hash})
                raise
            logger.info("Deposit recorded by a concurrent delivery", extra={"tx_hash": deposit.tx_hash})
            return SettlementOutcome(
                state=SettlementState.SETTLED, tx_hash=deposit.tx_hash, user_id=user.user_id, duplicate=True
            )

        logger.info(
            "Balance credited",
            extra={"user_id": user.user_id, "chain": chain, "asset": deposit.token, "amount": str(deposit.amount)},
        )
        await self.notifier.notify(
            user.user_id,
            NotificationType.PAYMENT_RECEIVED,
            "Deposit received",
            f"You received {deposit.amount} {deposit.token}.",
            {"tx_hash": deposit.tx_hash, "amount": str(deposit.amount), "asset": deposit.token, "chain": chain},
        )
        return SettlementOutcome(
            state=SettlementState.SETTLED,
            tx_hash=deposit.tx_hash,
            user_id=user.user_id,
            deposit_transaction_id=transaction_id,
        )

    # -- linked settlement ------------------------------------------------

    async def _settle_linked(self, deposit: DepositEvent) -> SettlementOutcome:
        document_id = deposit.metadata.document_id
        user = await self._find_payee(deposit)
        if user is None:
            logger.error(
                "No user for deposit address, cannot settle document",
                extra={"address_id": deposit.address_id, "document_id": document_id},
            )
            return SettlementOutcome(
                state=SettlementState.FAILED,
                tx_hash=deposit.tx_hash,
                document_id=document_id,
                error="user_not_found",
            )

        outcome = SettlementOutcome(
            state=SettlementState.LINKED_SETTLEMENT,
            tx_hash=deposit.tx_hash,
            user_id=user.user_id,
            document_id=document_id,
        )
        document = await DocumentRepository(self.session).get(document_id)
        if document is None:
            logger.warning("Linked document not found", extra={"document_id": document_id})
        document_fk = document.document_id if document is not None else None
        paid_for = f" for {document.title}." if document is not None else "."

        await self._mark_document_paid(user, deposit, document, outcome)
        if document is not None:
            await self._update_related_records(document)

        if not outcome.duplicate:
            await self.notifier.notify(
                user.user_id,
                NotificationType.PAYMENT_RECEIVED,
                "Payment received",
                f"You received {deposit.amount} {deposit.token}{paid_for}",
                {"document_id": document_id, "tx_hash": deposit.tx_hash, "amount": str(deposit.amount)},
            )

        return await self._pay_out(user, deposit, document_fk, outcome)

    async def _mark_document_paid(
        self,
        user: Payee,
        deposit: DepositEvent,
        document: DocumentRow | None,
        outcome: SettlementOutcome,
    ) -> None:
        """Record the deposit row and the PAID transition in one commit."""
        document_fk = document.document_id if document is not None else None
        payment = {
            "paid_at": datetime.now(timezone.utc).isoformat(),
            "tx_hash": deposit.tx_hash,
            "payment_token": deposit.token,
            "paid_amount": str(deposit.amount),
            "custody_transaction_id": deposit.custody_transaction_id,
        }
        documents = DocumentRepository(self.session)

        if await self.transactions.get_for_deposit(deposit.tx_hash, TransactionPurpose.DEPOSIT):
            outcome.duplicate = True
        else:
            try:
                row = await self._record_deposit(user, deposit, document_fk)
                outcome.deposit_transaction_id = row.transaction_id
                if document is not None:
                    await documents.mark_paid(document, payment)
                await self.session.commit()
                logger.info("Document marked as PAID", extra={"document_id": document_fk})
                return
            except IntegrityError:
                await self.session.rollback()
                if await self.transactions.get_for_deposit(deposit.tx_hash, TransactionPurpose.DEPOSIT) is None:
                    logger.error("Deposit could not be recorded", extra={"tx_hash": deposit.tx_hash})
                    raise
                outcome.duplicate = True

        logger.info("Duplicate linked deposit delivery", extra={"tx_hash": deposit.tx_hash})
        if document is not None:
            await self.session.refresh(document)
            if await documents.mark_paid(document, payment):
                await self.session.commit()

    async def _update_related_records(self, document: DocumentRow) -> None:
        document_id = document.document_id
        try:
            if document.client_id:
                await ClientRepository(self.session).recompute_stats(document.client_id)
            milestones = MilestoneRepository(self.session)
            milestone = await milestones.find_for_document(document)
            if milestone is not None and await milestones.mark_paid(milestone):
                logger.info("Milestone marked as paid", extra={"milestone_id": milestone.milestone_id})
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error(
                "Failed to update client stats or milestone",
                extra={"document_id": document_id, "error": str(exc)},
            )

    async def _pay_out(
        self,
        user: Payee,
        deposit: DepositEvent,
        document_id: str | None,
        outcome: SettlementOutcome,
    ) -> SettlementOutcome:
        wallet_id = deposit.metadata.wallet_id or deposit.wallet_id or self.wallet_id

        try:
            asset = await self.resolver.resolve(deposit.asset, wallet_id)
        except AssetResolutionError as exc:
            logger.error(
                "Asset resolution failed, payout aborted",
                extra={"tx_hash": deposit.tx_hash, "error": exc.message, "details": exc.details},
            )
            await self._notify_action_required(user, deposit, document_id, exc.message)
            outcome.state = SettlementState.FAILED
            outcome.error = exc.message
            return outcome

        fee = calculate_fee(deposit.amount, self.fee_rate)
        logger.info(
            "Fee calculated",
            extra={"gross": str(fee.gross), "platform_fee": str(fee.fee), "net": str(fee.net)},
        )

        check = await self.balance_guard.check(asset.asset_id, fee.net, wallet_id)
        outcome.balance_check = check
        if check.aborted:
            await self._notify_action_required(user, deposit, document_id, "No balance available for payout")
            outcome.state = SettlementState.FAILED
            outcome.error = "payout_amount_not_positive"
            return outcome

        result = await self.dispatcher.dispatch(user, deposit, asset, fee, check.amount, document_id)
        outcome.payout = result
        outcome.state = result.state
        outcome.error = result.error
        return outcome

    async def _notify_action_required(
        self, user: Payee, deposit: DepositEvent, document_id: str | None, reason: str
    ) -> None:
        await self.notifier.notify(
            user.user_id,
            NotificationType.PAYMENT_FAILED,
            "Payment received, action required",
            f"We received {deposit.amount} {deposit.token} but could not send it to your wallet "
            "automatically. Please contact support.",
            {"document_id": document_id, "tx_hash": deposit.tx_hash, "error": reason},
        )
