"""Automatic payout of a settled deposit to the freelancer's own wallet."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from payrail.db.models.user import UserRow
from payrail.errors.exceptions import CustodyAPIError, MissingWalletError, WithdrawalProviderError
from payrail.models.custody import ResolvedAsset, WithdrawalRequest, WithdrawalResult
from payrail.models.custody_events import DepositEvent
from payrail.models.enums import (
    ChainFamily,
    NotificationType,
    SettlementState,
    TransactionPurpose,
    TransactionStatus,
    TransactionType,
)
from payrail.repositories.transaction_repo import TransactionRepository
from payrail.services.fees import FeeBreakdown
from payrail.services.id_generator import TRANSACTION_PREFIX, generate_id
from payrail.services.notifier import Notifier

logger = logging.getLogger(__name__)


class WithdrawalSource(Protocol):
    async def initiate_withdrawal(
        self, request: WithdrawalRequest, wallet_id: str | None = None
    ) -> WithdrawalResult: ...


@dataclass(frozen=True)
class Payee:
    """Snapshot of the user fields a payout needs.

    Held as plain values because a session rollback expires ORM rows.
    """

    user_id: str
    evm_wallet_address: str | None = None
    solana_wallet_address: str | None = None

    @classmethod
    def from_row(cls, user: UserRow) -> "Payee":
        return cls(
            user_id=user.user_id,
            evm_wallet_address=user.evm_wallet_address,
            solana_wallet_address=user.solana_wallet_address,
        )


@dataclass(frozen=True)
class DispatchResult:
    state: SettlementState
    transaction_id: str | None = None
    payout_id: str | None = None
    error: str | None = None
    duplicate: bool = False


def resolve_destination(user: Payee, chain_family: ChainFamily) -> str:
    """Return the user's wallet address for ``chain_family``.

    Raises:
        MissingWalletError: The user has not set a wallet on that chain.
    """
    if chain_family == ChainFamily.SOLANA:
        address = user.solana_wallet_address
    else:
        address = user.evm_wallet_address
    if not address or not address.strip():
        raise MissingWalletError(user.user_id, str(chain_family))
    return address.strip()


class WithdrawalDispatcher:
    """Claims a payout for a deposit and asks the custodial provider to send it.

    At most one PAYOUT transaction exists per deposit hash, so a redelivered
    deposit never triggers a second provider call. Failed payouts stay FAILED;
    there is no local retry.
    """

    def __init__(
        self,
        session: AsyncSession,
        custody: WithdrawalSource,
        notifier: Notifier,
        wallet_id: str | None = None,
    ):
        self.session = session
        self.custody = custody
        self.notifier = notifier
        self.wallet_id = wallet_id
        self.transactions = TransactionRepository(session)

    async def dispatch(
        self,
        user: Payee,
        deposit: DepositEvent,
        asset: ResolvedAsset,
        fee: FeeBreakdown,
        amount: Decimal,
        document_id: str | None = None,
    ) -> DispatchResult:
        try:
            destination = resolve_destination(user, asset.chain_family)
        except MissingWalletError as exc:
            logger.warning(
                "No destination wallet for payout",
                extra={"user_id": user.user_id, "chain_family": str(asset.chain_family)},
            )
            await self.notifier.notify(
                user.user_id,
                NotificationType.WALLET_SETUP_REQUIRED,
                "Add a wallet to receive your payment",
                f"You received {fee.gross} {deposit.token}. Add a {asset.chain_family} wallet "
                "address in settings so we can send it to you.",
                {"document_id": document_id, "chain_family": str(asset.chain_family), "tx_hash": deposit.tx_hash},
            )
            return DispatchResult(state=SettlementState.AWAITING_WALLET, error=exc.message)

        claim = await self._claim(user, deposit, asset, fee, amount, destination, document_id)
        if claim is None:
            return DispatchResult(state=SettlementState.SETTLED, duplicate=True)
        transaction_id = claim.transaction_id

        try:
            result = await self._initiate(
                WithdrawalRequest(
                    to_address=destination,
                    amount=amount,
                    asset_id=asset.asset_id,
                    chain_family=asset.chain_family,
                    metadata={
                        "type": "auto_payout",
                        "userId": user.user_id,
                        "documentId": document_id,
                        "depositTxHash": deposit.tx_hash,
                    },
                )
            )
        except WithdrawalProviderError as exc:
            await self.transactions.update(claim, status=TransactionStatus.FAILED.value, error_message=exc.message)
            await self.session.commit()
            logger.error(
                "Payout failed",
                extra={"transaction_id": transaction_id, "user_id": user.user_id, "error": exc.message},
            )
            await self.notifier.notify(
                user.user_id,
                NotificationType.PAYMENT_FAILED,
                "Payout could not be processed",
                f"Your payment of {fee.gross} {deposit.token} arrived, but sending it to your wallet "
                "failed. Our team has been notified.",
                {"document_id": document_id, "transaction_id": transaction_id, "error": exc.message},
            )
            return DispatchResult(
                state=SettlementState.FAILED,
                transaction_id=transaction_id,
                error=exc.message,
            )

        await self.transactions.update(claim, payout_id=result.id, tx_hash=result.tx_hash)
        await self.session.commit()
        logger.info(
            "Payout initiated",
            extra={"transaction_id": transaction_id, "payout_id": result.id, "amount": str(amount)},
        )
        await self.notifier.notify(
            user.user_id,
            NotificationType.PAYOUT_INITIATED,
            "Payout on its way",
            f"{amount} {deposit.token} is being sent to your {asset.chain_family} wallet.",
            {"document_id": document_id, "transaction_id": transaction_id, "payout_id": result.id},
        )
        return DispatchResult(
            state=SettlementState.SETTLED,
            transaction_id=transaction_id,
            payout_id=result.id,
        )

    async def _claim(
        self,
        user: Payee,
        deposit: DepositEvent,
        asset: ResolvedAsset,
        fee: FeeBreakdown,
        amount: Decimal,
        destination: str,
        document_id: str | None,
    ):
        """Insert the PROCESSING payout row, or return None if one already exists."""
        existing = await self.transactions.get_for_deposit(deposit.tx_hash, TransactionPurpose.PAYOUT)
        if existing is not None:
            logger.info(
                "Payout already claimed for deposit",
                extra={"tx_hash": deposit.tx_hash, "transaction_id": existing.transaction_id},
            )
            return None
        claim = await self.transactions.insert_unique(
            transaction_id=generate_id(TRANSACTION_PREFIX),
            user_id=user.user_id,
            document_id=document_id,
            tx_type=TransactionType.PAYMENT_SENT.value,
            purpose=TransactionPurpose.PAYOUT.value,
            status=TransactionStatus.PROCESSING.value,
            chain=asset.chain_label,
            deposit_tx_hash=deposit.tx_hash,
            to_address=destination,
            token=(asset.symbol or deposit.token).upper(),
            gross_amount=fee.gross,
            platform_fee=fee.fee,
            net_amount=amount,
            extra_data={
                "document_id": document_id,
                "asset_id": asset.asset_id,
                "chain_family": str(asset.chain_family),
                "calculated_net": str(fee.net),
            },
        )
        if claim is None:
            logger.info("Payout claim lost to a concurrent delivery", extra={"tx_hash": deposit.tx_hash})
        return claim

    async def _initiate(self, request: WithdrawalRequest) -> WithdrawalResult:
        try:
            return await self.custody.initiate_withdrawal(request, self.wallet_id)
        except CustodyAPIError as exc:
            raise WithdrawalProviderError(exc.message, exc.details) from exc
        except PydanticValidationError as exc:
            raise WithdrawalProviderError("Malformed withdrawal response", {"error": str(exc)}) from exc
        except Exception as exc:
            # The PROCESSING claim is already committed; it must end FAILED.
            logger.exception("Unexpected error initiating payout", extra={"asset_id": request.asset_id})
            raise WithdrawalProviderError(
                "Unexpected payout error", {"error": f"{type(exc).__name__}: {exc}"}
            ) from exc
