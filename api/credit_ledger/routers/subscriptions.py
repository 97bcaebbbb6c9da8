from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from credit_ledger.models.error import ErrorDetail
from credit_ledger.models.subscription import (
    ProcessDueRequest,
    ProcessDueResult,
    SubscriptionCreate,
    SubscriptionView,
)
from credit_ledger.services.subscription_scheduler import SubscriptionScheduler

router = APIRouter()


def get_scheduler(request: Request) -> SubscriptionScheduler:
    return request.app.state.scheduler


@router.post(
    "/subscriptions",
    response_model=SubscriptionView,
    status_code=201,
    responses={422: {"model": ErrorDetail}},
)
def create_subscription(
    payload: SubscriptionCreate,
    scheduler: SubscriptionScheduler = Depends(get_scheduler),
) -> SubscriptionView:
    """Add a subscription, replacing any existing one for the contributor."""
    subscription = scheduler.subscribe(payload.contributor_id, payload.wallet_address, payload.period_days)
    return SubscriptionView.from_subscription(subscription)


@router.get("/subscriptions", response_model=list[SubscriptionView])
def list_subscriptions(scheduler: SubscriptionScheduler = Depends(get_scheduler)) -> list[SubscriptionView]:
    return [SubscriptionView.from_subscription(row) for row in scheduler.subscriptions()]


@router.delete(
    "/subscriptions/{contributor_id}",
    status_code=204,
    responses={404: {"model": ErrorDetail}},
)
def delete_subscription(contributor_id: str, scheduler: SubscriptionScheduler = Depends(get_scheduler)) -> None:
    if not scheduler.remove(contributor_id):
        raise HTTPException(status_code=404, detail="Subscription not found")


@router.post("/subscriptions/process", response_model=ProcessDueResult)
def process_due_subscriptions(
    request: Request,
    payload: ProcessDueRequest | None = None,
    scheduler: SubscriptionScheduler = Depends(get_scheduler),
) -> ProcessDueResult:
    amount = payload.amount if payload and payload.amount is not None else request.app.state.settings.subscription_amount
    return ProcessDueResult(processed=scheduler.process_due(amount))
