from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse

from credit_ledger.models.error import ErrorDetail
from credit_ledger.models.payment import (
    LedgerEntry,
    LedgerSummary,
    PaymentCreate,
    PaymentTransaction,
    VerificationStatus,
)
from credit_ledger.services import report_formatter
from credit_ledger.services.license_service import License
from credit_ledger.services.settlement_engine import SettlementEngine

router = APIRouter()


def get_engine(request: Request) -> SettlementEngine:
    return request.app.state.settlement_engine


def get_license(request: Request) -> License:
    return request.app.state.license


@router.post(
    "/payments",
    response_model=PaymentTransaction,
    status_code=202,
    responses={422: {"model": ErrorDetail}},
)
def create_payment(payload: PaymentCreate, engine: SettlementEngine = Depends(get_engine)) -> PaymentTransaction:
    """Record a payment; it is returned unverified and confirmed asynchronously."""
    pending = engine.issue(
        payload.source_wallet,
        payload.destination_wallet,
        payload.amount,
        payload.contribution_id,
    )
    return pending.transaction


@router.get("/payments", response_model=list[PaymentTransaction])
def list_payments(
    contribution_id: str | None = None,
    engine: SettlementEngine = Depends(get_engine),
) -> list[PaymentTransaction]:
    if contribution_id:
        return engine.get_transactions_for_contribution(contribution_id)
    return engine.get_transactions()


@router.get(
    "/payments/{transaction_id}",
    response_model=PaymentTransaction,
    responses={404: {"model": ErrorDetail}},
)
def get_payment(transaction_id: str, engine: SettlementEngine = Depends(get_engine)) -> PaymentTransaction:
    transaction = engine.get_transaction(transaction_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return transaction


@router.get("/payments/{transaction_id}/verification", response_model=VerificationStatus)
def get_verification(transaction_id: str, engine: SettlementEngine = Depends(get_engine)) -> VerificationStatus:
    """Unknown ids report ``verified=false`` rather than 404."""
    return VerificationStatus(transaction_id=transaction_id, verified=engine.verify_payment(transaction_id))


@router.get("/ledger", response_model=LedgerSummary)
def get_ledger(license_: License = Depends(get_license)) -> LedgerSummary:
    totals = license_.ledger.totals()
    return LedgerSummary(
        project_wallet=license_.ledger.wallet_address,
        entries=[LedgerEntry(contributor=name, total_paid=totals[name]) for name in sorted(totals)],
        total_paid=sum(totals.values()),
    )


@router.get("/license", response_class=PlainTextResponse)
def get_license_info(license_: License = Depends(get_license)) -> str:
    return license_.license_info()


@router.get("/reports/payments", response_class=PlainTextResponse)
def get_payment_report(license_: License = Depends(get_license)) -> str:
    return license_.payment_report()


@router.get("/reports/transactions", response_class=PlainTextResponse)
def get_transaction_report(engine: SettlementEngine = Depends(get_engine)) -> str:
    return report_formatter.format_transactions(engine.get_transactions())
