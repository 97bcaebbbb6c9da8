from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from credit_ledger.models.contribution import Contribution, ContributionCreate, ContributionView, EvaluationAttach
from credit_ledger.models.error import ErrorDetail
from credit_ledger.models.metric import MetricEvaluation
from credit_ledger.models.payment import PaymentTransaction, SettlementCreate
from credit_ledger.services.license_service import License

router = APIRouter()


def get_license(request: Request) -> License:
    return request.app.state.license


def _view(license_: License, contribution_id: str) -> ContributionView:
    contribution = license_.registry.get(contribution_id)
    if contribution is None:
        raise HTTPException(status_code=404, detail="Contribution not found")
    return ContributionView.from_contribution(contribution)


@router.post(
    "/contributions",
    response_model=ContributionView,
    status_code=201,
    responses={409: {"model": ErrorDetail}, 422: {"model": ErrorDetail}},
)
def create_contribution(
    payload: ContributionCreate,
    request: Request,
    license_: License = Depends(get_license),
) -> ContributionView:
    """Register a line range; with ``code`` every metric is evaluated and attached."""
    contribution = Contribution(
        contributor=payload.contributor,
        file_id=payload.file_id,
        line_start=payload.line_start,
        line_end=payload.line_end,
    )
    if payload.code is None:
        contribution_id = license_.register_contribution(contribution)
    else:
        contribution_id = license_.register_and_evaluate(contribution, payload.code, request.app.state.valuation_engine)
    return _view(license_, contribution_id)


@router.get("/contributions", response_model=list[ContributionView])
def list_contributions(file_id: str | None = None, license_: License = Depends(get_license)) -> list[ContributionView]:
    rows = license_.registry.for_file(file_id) if file_id else license_.registry.list()
    return [ContributionView.from_contribution(row) for row in rows]


@router.get(
    "/contributions/{contribution_id}",
    response_model=ContributionView,
    responses={404: {"model": ErrorDetail}},
)
def get_contribution(contribution_id: str, license_: License = Depends(get_license)) -> ContributionView:
    return _view(license_, contribution_id)


@router.post(
    "/contributions/{contribution_id}/evaluations",
    response_model=ContributionView,
    responses={404: {"model": ErrorDetail}},
)
def attach_evaluation(
    contribution_id: str,
    payload: EvaluationAttach,
    license_: License = Depends(get_license),
) -> ContributionView:
    """Attach one evaluation, replacing any earlier one of the same kind."""
    evaluation = MetricEvaluation(kind=payload.kind, value=payload.value, rationale=payload.rationale)
    license_.registry.attach_evaluation(contribution_id, evaluation)
    return _view(license_, contribution_id)


@router.post(
    "/contributions/{contribution_id}/settlements",
    response_model=PaymentTransaction,
    status_code=202,
    responses={404: {"model": ErrorDetail}, 422: {"model": ErrorDetail}},
)
def settle_contribution(
    contribution_id: str,
    payload: SettlementCreate,
    request: Request,
    license_: License = Depends(get_license),
) -> PaymentTransaction:
    """Pay value x lines x base rate for the contribution; verification runs in the background."""
    rate = payload.base_rate_per_line or request.app.state.settings.base_rate_per_line
    pending = license_.settle_contribution(
        request.app.state.settlement_engine,
        contribution_id,
        payload.source_wallet,
        payload.destination_wallet,
        rate,
    )
    return pending.transaction
