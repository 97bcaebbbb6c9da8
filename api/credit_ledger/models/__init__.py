"""Domain records and pydantic schemas."""

from credit_ledger.models.contribution import Contribution
from credit_ledger.models.error import ErrorDetail
from credit_ledger.models.metric import MetricEvaluation, MetricKind
from credit_ledger.models.payment import PaymentTransaction
from credit_ledger.models.subscription import PaymentSubscription

__all__ = [
    "Contribution",
    "ErrorDetail",
    "MetricEvaluation",
    "MetricKind",
    "PaymentSubscription",
    "PaymentTransaction",
]
