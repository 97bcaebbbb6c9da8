"""Plain-text renderings of valuations, contributions and ledger totals."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Mapping

from credit_ledger.models.contribution import Contribution
from credit_ledger.models.metric import MetricEvaluation
from credit_ledger.models.payment import PaymentTransaction


def format_btc_amount(amount: float) -> str:
    return f"{amount:.8f}"


def format_timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")


def _underline(title: str) -> str:
    return f"{title}\n{'=' * len(title)}\n"


def format_valuation(evaluations: Iterable[MetricEvaluation], score: float) -> str:
    lines = []
    for evaluation in evaluations:
        lines.append(f"{evaluation.kind.value:<14} {evaluation.value:.4f}  {evaluation.rationale}")
    lines.append("")
    lines.append(f"Composite score: {score:.4f}")
    return "\n".join(lines) + "\n"


def format_contribution(contribution: Contribution) -> str:
    start, end = contribution.line_range
    return (
        f"  Contributor: {contribution.contributor}\n"
        f"  File: {contribution.file_id}\n"
        f"  Lines: {start}-{end}\n"
        f"  Value: {contribution.value():.4f}\n"
    )


def format_license_info(
    project_name: str,
    license_key: str,
    valid: bool,
    contributions: Iterable[Contribution],
) -> str:
    out = [_underline("Credit License Information")]
    out.append(f"Project: {project_name}\n")
    out.append(f"License Key: {license_key}\n")
    out.append(f"Validation Status: {'Valid' if valid else 'Invalid'}\n\n")
    out.append("Registered Contributions:\n")
    for contribution in contributions:
        out.append(format_contribution(contribution))
        out.append("\n")
    return "".join(out)


def format_payment_report(wallet_address: str, totals: Mapping[str, float]) -> str:
    out = [_underline("Payment Report"), "\n"]
    out.append(f"Wallet Address: {wallet_address}\n\n")
    out.append("Contributor Payments:\n")
    for contributor in sorted(totals):
        out.append(f"{contributor}: {format_btc_amount(totals[contributor])} BTC\n")
    out.append(f"\nTotal Payments: {format_btc_amount(sum(totals.values()))} BTC\n")
    return "".join(out)


def format_transactions(transactions: Iterable[PaymentTransaction]) -> str:
    rows = []
    for tx in transactions:
        status = "verified" if tx.verified else "pending"
        rows.append(
            f"{format_timestamp(tx.timestamp)}  {tx.id}  {format_btc_amount(tx.amount)} BTC  "
            f"{tx.source_wallet} -> {tx.destination_wallet}  [{tx.contribution_id}] {status}"
        )
    return "\n".join(rows) + ("\n" if rows else "")
