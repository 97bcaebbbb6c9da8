from __future__ import annotations

import logging
from typing import Optional

from credit_ledger.errors import InvalidAmount, InvalidArgument, UnknownContribution
from credit_ledger.models.contribution import Contribution
from credit_ledger.models.payment import PaymentTransaction
from credit_ledger.services import report_formatter
from credit_ledger.services.contribution_registry import ContributionRegistry
from credit_ledger.services.payment_ledger import PaymentLedger
from credit_ledger.services.settlement_engine import PendingSettlement, SettlementEngine, VerificationCallback
from credit_ledger.services.valuation_engine import ValuationEngine

logger = logging.getLogger(__name__)

MIN_LICENSE_KEY_LENGTH = 8


class License:
    """A licensed project: its contributions and the payments made for them.

    The payout wallet is supplied by the caller; there is no default.
    """

    def __init__(self, project_name: str, license_key: str, project_wallet: str):
        if not project_name or not project_name.strip():
            raise InvalidArgument("Project name cannot be empty")
        if not license_key or not license_key.strip():
            raise InvalidArgument("License key cannot be empty")
        self.project_name = project_name
        self.license_key = license_key
        self.registry = ContributionRegistry()
        self.ledger = PaymentLedger(project_wallet)

    def validate(self) -> bool:
        if not self.project_name or not self.license_key:
            return False
        return len(self.license_key) >= MIN_LICENSE_KEY_LENGTH

    def register_contribution(self, contribution: Contribution) -> str:
        return self.registry.register(contribution)

    def register_and_evaluate(self, contribution: Contribution, code: str, engine: ValuationEngine) -> str:
        """Register, then attach every evaluation of ``code`` to the new contribution."""
        contribution_id = self.registry.register(contribution)
        self.registry.attach_evaluations(contribution_id, engine.evaluate_all(code))
        return contribution_id

    def contributions(self) -> list[Contribution]:
        return self.registry.list()

    def payment_amount(self, contribution_id: str, base_rate_per_line: float) -> float:
        """Credit value x lines of code x base rate."""
        if base_rate_per_line <= 0:
            raise InvalidAmount(base_rate_per_line)
        contribution = self.registry.get(contribution_id)
        if contribution is None:
            raise UnknownContribution(contribution_id)
        return contribution.value() * contribution.line_count * base_rate_per_line

    def settle_contribution(
        self,
        engine: SettlementEngine,
        contribution_id: str,
        source_wallet: str,
        destination_wallet: str,
        base_rate_per_line: float,
        on_verified: Optional[VerificationCallback] = None,
    ) -> PendingSettlement:
        """Send the contribution's payment; the ledger is credited once it verifies.

        A contribution with no evaluations is worth nothing, so the send
        fails with InvalidAmount.
        """
        contribution = self.registry.get(contribution_id)
        amount = self.payment_amount(contribution_id, base_rate_per_line)
        ledger = self.ledger

        def _record(transaction: PaymentTransaction, verified: bool) -> None:
            if verified:
                ledger.record_payment(contribution.contributor, transaction.amount)
            if on_verified is not None:
                on_verified(transaction, verified)

        pending = engine.issue(source_wallet, destination_wallet, amount, contribution_id, _record)
        logger.info(
            "contribution_settlement_issued contribution=%s contributor=%s amount=%.8f tx=%s",
            contribution_id,
            contribution.contributor,
            amount,
            pending.transaction_id,
        )
        return pending

    def license_info(self) -> str:
        return report_formatter.format_license_info(
            self.project_name,
            self.license_key,
            self.validate(),
            self.registry.list(),
        )

    def payment_report(self) -> str:
        return report_formatter.format_payment_report(self.ledger.wallet_address, self.ledger.totals())
