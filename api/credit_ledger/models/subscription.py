from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field

from credit_ledger.errors import InvalidArgument, InvalidWallet
from credit_ledger.services.wallet_service import is_valid_wallet_address


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PaymentSubscription:
    """Recurring payout to one contributor every ``period_days`` days."""

    contributor_id: str
    wallet_address: str
    period_days: int
    created_at: datetime = field(default_factory=_now)
    next_payment_date: datetime = field(init=False)

    def __post_init__(self) -> None:
        if not self.contributor_id or not self.contributor_id.strip():
            raise InvalidArgument("Contributor ID cannot be empty")
        if not is_valid_wallet_address(self.wallet_address):
            raise InvalidWallet(self.wallet_address)
        if isinstance(self.period_days, bool) or not isinstance(self.period_days, int) or self.period_days <= 0:
            raise InvalidArgument("Subscription period must be a positive number of days")
        self.next_payment_date = self.created_at + self.period

    @property
    def period(self) -> timedelta:
        return timedelta(days=self.period_days)

    def is_due(self, now: datetime) -> bool:
        return now >= self.next_payment_date

    def advance(self, now: datetime) -> None:
        # from "now", not from the missed date: no back-payment catch-up
        self.next_payment_date = now + self.period


class SubscriptionCreate(BaseModel):
    contributor_id: str
    wallet_address: str
    period_days: int = Field(gt=0)


class SubscriptionView(BaseModel):
    contributor_id: str
    wallet_address: str
    period_days: int
    next_payment_date: datetime

    @classmethod
    def from_subscription(cls, subscription: PaymentSubscription) -> SubscriptionView:
        return cls(
            contributor_id=subscription.contributor_id,
            wallet_address=subscription.wallet_address,
            period_days=subscription.period_days,
            next_payment_date=subscription.next_payment_date,
        )


class ProcessDueRequest(BaseModel):
    amount: Optional[float] = Field(default=None, description="Defaults to the configured subscription amount")


class ProcessDueResult(BaseModel):
    processed: int
