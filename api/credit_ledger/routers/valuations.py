from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from credit_ledger.models.metric import MetricDescriptor, MetricKind, ValuationRequest, ValuationResult
from credit_ledger.services import metric_evaluators
from credit_ledger.services.valuation_engine import ValuationEngine

router = APIRouter()


def get_engine(request: Request) -> ValuationEngine:
    return request.app.state.valuation_engine


@router.get("/metrics", response_model=list[MetricDescriptor])
def list_metrics() -> list[MetricDescriptor]:
    return [MetricDescriptor(kind=kind, description=metric_evaluators.describe(kind)) for kind in MetricKind]


@router.post("/valuations", response_model=ValuationResult)
def create_valuation(payload: ValuationRequest, engine: ValuationEngine = Depends(get_engine)) -> ValuationResult:
    """Evaluate one code fragment against every metric."""
    return engine.evaluate(payload.code)
