from __future__ import annotations

import logging
import math
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from credit_ledger.errors import (
    InvalidAmount,
    InvalidArgument,
    InvalidWallet,
    SettlementUnavailable,
    SettlementVerificationError,
)
from credit_ledger.models.payment import PaymentTransaction
from credit_ledger.services.wallet_service import generate_id, is_valid_wallet_address

logger = logging.getLogger(__name__)

VerificationCallback = Callable[[PaymentTransaction, bool], None]

DEFAULT_CONFIRMATION_DELAY_SECONDS = 2.0
DEFAULT_MAX_WORKERS = 8


class PaymentVerifier(Protocol):
    def __call__(self, transaction: PaymentTransaction) -> bool:
        ...


def simulated_verifier(transaction: PaymentTransaction) -> bool:
    return transaction.amount > 0


@dataclass(frozen=True)
class PendingSettlement:
    """The provisional record plus the handle that resolves once verification ends."""

    transaction: PaymentTransaction
    future: Future

    @property
    def transaction_id(self) -> str:
        return self.transaction.id


class SettlementEngine:
    """Issue payment transactions and confirm them on background workers.

    ``send`` records the transaction with ``verified=False`` before it
    returns. A worker then waits ``confirmation_delay_seconds``, asks the
    verifier, flips the stored record under the log lock, calls the
    caller's callback and finally resolves the returned future with the
    transaction id. On any verification failure the record stays
    unverified, the callback receives ``False`` and the future carries a
    SettlementVerificationError. Nothing is retried.

    The transaction log is the only state shared with the workers. Each
    record is immutable and is swapped as a whole, so readers never see a
    half-updated row. The lock is never held across the confirmation delay.
    """

    def __init__(
        self,
        api_key: str,
        *,
        confirmation_delay_seconds: float = DEFAULT_CONFIRMATION_DELAY_SECONDS,
        verifier: Optional[PaymentVerifier] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        clock: Optional[Callable[[], datetime]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not api_key or not api_key.strip():
            raise InvalidArgument("API key cannot be empty")
        if confirmation_delay_seconds < 0:
            raise InvalidArgument("Confirmation delay cannot be negative")
        self._api_key = api_key
        self._delay = confirmation_delay_seconds
        self._verifier: PaymentVerifier = verifier or simulated_verifier
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sleep = sleep
        self._executor = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="settlement")
        self._transactions: dict[str, PaymentTransaction] = {}
        self._lock = threading.Lock()
        self._closed = False

    def initialize(self) -> bool:
        return bool(self._api_key)

    def send(
        self,
        source_wallet: str,
        destination_wallet: str,
        amount: float,
        contribution_id: str,
        on_verified: Optional[VerificationCallback] = None,
    ) -> Future:
        """Record a transaction and return a future of its id.

        The future resolves only after verification has finished. Read the
        id off ``issue(...).transaction`` to get it without blocking.
        """
        return self.issue(source_wallet, destination_wallet, amount, contribution_id, on_verified).future

    def issue(
        self,
        source_wallet: str,
        destination_wallet: str,
        amount: float,
        contribution_id: str,
        on_verified: Optional[VerificationCallback] = None,
    ) -> PendingSettlement:
        if not is_valid_wallet_address(source_wallet):
            raise InvalidWallet(source_wallet, "source wallet")
        if not is_valid_wallet_address(destination_wallet):
            raise InvalidWallet(destination_wallet, "destination wallet")
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount) or amount <= 0:
            raise InvalidAmount(amount)

        transaction = PaymentTransaction(
            id=generate_id(),
            source_wallet=source_wallet,
            destination_wallet=destination_wallet,
            amount=float(amount),
            timestamp=self._clock(),
            contribution_id=contribution_id,
            verified=False,
        )
        with self._lock:
            # submitting under the lock keeps shutdown from slipping in between
            if self._closed:
                raise SettlementUnavailable()
            self._transactions[transaction.id] = transaction
            future = self._executor.submit(self._confirm, transaction, on_verified)
        logger.info(
            "settlement_sent id=%s contribution=%s amount=%.8f destination=%s",
            transaction.id,
            contribution_id,
            transaction.amount,
            destination_wallet,
        )
        return PendingSettlement(transaction=transaction, future=future)

    def _confirm(self, transaction: PaymentTransaction, on_verified: Optional[VerificationCallback]) -> str:
        verified = False
        failure: Optional[str] = None
        try:
            if self._delay:
                self._sleep(self._delay)
            verified = bool(self._verifier(transaction))
            if not verified:
                failure = "not_confirmed"
        except Exception as exc:
            logger.exception("settlement_verification_error id=%s", transaction.id)
            failure = f"{type(exc).__name__}: {exc}"

        current = transaction
        if verified:
            with self._lock:
                current = self._transactions.get(transaction.id, transaction).model_copy(update={"verified": True})
                self._transactions[transaction.id] = current
            logger.info("settlement_verified id=%s", transaction.id)
        else:
            logger.warning("settlement_unverified id=%s reason=%s", transaction.id, failure)

        if on_verified is not None:
            try:
                on_verified(current, verified)
            except Exception:
                logger.exception("settlement_callback_failed id=%s", transaction.id)

        if not verified:
            raise SettlementVerificationError(transaction.id, failure or "not_confirmed")
        return transaction.id

    def verify_payment(self, transaction_id: str) -> bool:
        with self._lock:
            transaction = self._transactions.get(transaction_id)
        return bool(transaction and transaction.verified)

    def get_transaction(self, transaction_id: str) -> Optional[PaymentTransaction]:
        with self._lock:
            return self._transactions.get(transaction_id)

    def get_transactions(self) -> list[PaymentTransaction]:
        with self._lock:
            return list(self._transactions.values())

    def get_transactions_for_contribution(self, contribution_id: str) -> list[PaymentTransaction]:
        with self._lock:
            return [t for t in self._transactions.values() if t.contribution_id == contribution_id]

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> SettlementEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown(wait=True)
