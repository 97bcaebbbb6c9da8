from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from credit_ledger.errors import InvalidArgument
from credit_ledger.models.metric import MetricEvaluation, MetricKind, ValuationResult
from credit_ledger.services import metric_evaluators
from credit_ledger.services.metric_evaluators import Evaluator

DEFAULT_MARKET_COEFFICIENT = 1.0
DEFAULT_CREDIT_RATE = 0.0001


def mean_value(evaluations: Iterable[MetricEvaluation]) -> float:
    values = [evaluation.value for evaluation in evaluations]
    if not values:
        return 0.0
    return sum(values) / len(values)


class ValuationEngine:
    """Run every metric evaluator over a fragment and reduce to one score."""

    def __init__(self, evaluators: Optional[Sequence[Evaluator]] = None):
        self._evaluators: tuple[Evaluator, ...] = tuple(
            metric_evaluators.all_evaluators() if evaluators is None else evaluators
        )

    @property
    def evaluators(self) -> tuple[Evaluator, ...]:
        return self._evaluators

    def evaluate_all(self, code: str) -> list[MetricEvaluation]:
        return [evaluate(code) for evaluate in self._evaluators]

    def calculate_value(self, code: str) -> float:
        return mean_value(self.evaluate_all(code))

    def evaluate(self, code: str) -> ValuationResult:
        evaluations = self.evaluate_all(code)
        return ValuationResult(evaluations=evaluations, score=mean_value(evaluations))


def composite_credit_score(
    evaluations: Iterable[MetricEvaluation],
    weights: Optional[Mapping[MetricKind, float]] = None,
    market_coefficient: float = DEFAULT_MARKET_COEFFICIENT,
) -> float:
    """Weighted sum of evaluation values scaled by a market coefficient.

    With no explicit weights every kind weighs 1/6, so for a complete
    evaluation set and a coefficient of 1.0 this equals the plain mean.
    Kinds missing from ``weights`` contribute nothing.
    """
    if market_coefficient < 0:
        raise InvalidArgument("Market coefficient cannot be negative")
    if weights is None:
        weights = {kind: 1.0 / len(MetricKind) for kind in MetricKind}
    total = sum(evaluation.value * weights.get(evaluation.kind, 0.0) for evaluation in evaluations)
    return total * market_coefficient


def credit_payment(score: float, usage_factor: float, credit_rate: float = DEFAULT_CREDIT_RATE) -> float:
    if usage_factor < 0 or credit_rate < 0:
        raise InvalidArgument("Usage factor and credit rate cannot be negative")
    return score * credit_rate * usage_factor
