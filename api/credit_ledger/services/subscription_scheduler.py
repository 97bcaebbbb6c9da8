from __future__ import annotations

import copy
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from credit_ledger.errors import CreditLedgerError, InvalidWallet
from credit_ledger.models.payment import PaymentTransaction
from credit_ledger.models.subscription import PaymentSubscription
from credit_ledger.services.payment_ledger import PaymentLedger
from credit_ledger.services.report_formatter import format_btc_amount
from credit_ledger.services.settlement_engine import SettlementEngine, VerificationCallback
from credit_ledger.services.wallet_service import is_valid_wallet_address

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SubscriptionScheduler:
    """Recurring per-contributor payouts, at most one live subscription each.

    ``process_due`` is meant to be called periodically by the owner; each
    due subscription is paid independently, so one failing send never
    blocks the others.
    """

    def __init__(
        self,
        engine: SettlementEngine,
        source_wallet: str,
        *,
        ledger: Optional[PaymentLedger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not is_valid_wallet_address(source_wallet):
            raise InvalidWallet(source_wallet, "source wallet")
        self._engine = engine
        self._source_wallet = source_wallet
        self._ledger = ledger
        self._clock = clock or _now
        self._subscriptions: dict[str, PaymentSubscription] = {}
        self._lock = threading.Lock()
        # one process_due pass at a time
        self._processing = threading.Lock()

    def now(self) -> datetime:
        return self._clock()

    def subscribe(self, contributor_id: str, wallet_address: str, period_days: int) -> PaymentSubscription:
        subscription = PaymentSubscription(
            contributor_id=contributor_id,
            wallet_address=wallet_address,
            period_days=period_days,
            created_at=self.now(),
        )
        self.add_or_replace(subscription)
        return copy.deepcopy(subscription)

    def add_or_replace(self, subscription: PaymentSubscription) -> None:
        subscription = copy.deepcopy(subscription)
        with self._lock:
            replaced = subscription.contributor_id in self._subscriptions
            self._subscriptions[subscription.contributor_id] = subscription
        logger.info(
            "subscription_%s contributor=%s period_days=%s next=%s",
            "replaced" if replaced else "added",
            subscription.contributor_id,
            subscription.period_days,
            subscription.next_payment_date.isoformat(),
        )

    def remove(self, contributor_id: str) -> bool:
        with self._lock:
            return self._subscriptions.pop(contributor_id, None) is not None

    def get(self, contributor_id: str) -> Optional[PaymentSubscription]:
        with self._lock:
            subscription = self._subscriptions.get(contributor_id)
            return copy.deepcopy(subscription) if subscription is not None else None

    def subscriptions(self) -> list[PaymentSubscription]:
        with self._lock:
            return [copy.deepcopy(s) for s in self._subscriptions.values()]

    def due(self) -> list[PaymentSubscription]:
        now = self.now()
        return [s for s in self.subscriptions() if s.is_due(now)]

    def process_due(self, amount_per_payment: float, on_verified: Optional[VerificationCallback] = None) -> int:
        """Pay every due subscription once; return how many sends succeeded.

        Passes are serialized, so a subscription paid by one pass is no longer
        due when the next pass looks at it.
        """
        with self._processing:
            return self._process_due(amount_per_payment, on_verified)

    def _process_due(self, amount_per_payment: float, on_verified: Optional[VerificationCallback]) -> int:
        processed = 0
        now = self.now()
        with self._lock:
            due = [s for s in self._subscriptions.values() if s.is_due(now)]
        for subscription in due:
            try:
                self._engine.send(
                    self._source_wallet,
                    subscription.wallet_address,
                    amount_per_payment,
                    subscription.contributor_id,
                    self._callback_for(subscription, on_verified),
                )
            except CreditLedgerError as exc:
                logger.warning(
                    "subscription_payment_failed contributor=%s error=%s",
                    subscription.contributor_id,
                    exc,
                )
                continue
            with self._lock:
                subscription.advance(self.now())
            processed += 1
        return processed

    def _callback_for(
        self,
        subscription: PaymentSubscription,
        on_verified: Optional[VerificationCallback],
    ) -> VerificationCallback:
        ledger = self._ledger

        def _on_verified(transaction: PaymentTransaction, verified: bool) -> None:
            if verified:
                logger.info(
                    "subscription_payment_verified contributor=%s amount=%s BTC destination=%s",
                    subscription.contributor_id,
                    format_btc_amount(transaction.amount),
                    transaction.destination_wallet,
                )
                if ledger is not None:
                    ledger.record_payment(subscription.contributor_id, transaction.amount)
            else:
                logger.warning("subscription_payment_unverified contributor=%s", subscription.contributor_id)
            if on_verified is not None:
                on_verified(transaction, verified)

        return _on_verified
