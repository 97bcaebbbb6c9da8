from __future__ import annotations

import logging
import math
import threading

from credit_ledger.errors import InvalidAmount, InvalidArgument, InvalidWallet
from credit_ledger.models.contribution import Contribution
from credit_ledger.services.wallet_service import is_valid_wallet_address

logger = logging.getLogger(__name__)


class PaymentLedger:
    """Cumulative amount paid per contributor. Totals only ever grow.

    Settlement callbacks record into the ledger from worker threads, so
    every access goes through one lock.
    """

    def __init__(self, wallet_address: str):
        if not is_valid_wallet_address(wallet_address):
            raise InvalidWallet(wallet_address, "project wallet")
        self._wallet_address = wallet_address
        self._payments: dict[str, float] = {}
        self._lock = threading.Lock()

    @property
    def wallet_address(self) -> str:
        return self._wallet_address

    def record_payment(self, contributor: str, amount: float) -> float:
        """Add ``amount`` to the contributor's total and return the new total."""
        if not contributor or not contributor.strip():
            raise InvalidArgument("Contributor cannot be empty")
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount) or amount <= 0:
            raise InvalidAmount(amount)
        with self._lock:
            total = self._payments.get(contributor, 0.0) + float(amount)
            self._payments[contributor] = total
        logger.info("ledger_payment_recorded contributor=%s amount=%.8f total=%.8f", contributor, amount, total)
        return total

    def record_contribution_payment(self, contribution: Contribution, amount: float) -> float:
        return self.record_payment(contribution.contributor, amount)

    def total_for(self, contributor: str) -> float:
        with self._lock:
            return self._payments.get(contributor, 0.0)

    def totals(self) -> dict[str, float]:
        with self._lock:
            return dict(self._payments)

    def total_paid(self) -> float:
        with self._lock:
            return sum(self._payments.values())
