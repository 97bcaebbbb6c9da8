from __future__ import annotations

import pytest

from credit_ledger.errors import InvalidArgument
from credit_ledger.models.metric import MetricEvaluation, MetricKind
from credit_ledger.services.valuation_engine import (
    ValuationEngine,
    composite_credit_score,
    credit_payment,
    mean_value,
)

CODE = """/**
 * Sum two values.
 * @param a first
 * @return the sum
 */
int add(int a, int b) {
    // plain addition, O(1)
    return a + b;
}
"""


def _fixed(kind: MetricKind, value: float):
    def evaluate(code: str) -> MetricEvaluation:
        return MetricEvaluation(kind=kind, value=value, rationale="fixed")

    return evaluate


def test_evaluate_all_returns_one_per_kind_in_order() -> None:
    evaluations = ValuationEngine().evaluate_all(CODE)
    assert [e.kind for e in evaluations] == list(MetricKind)


def test_calculate_value_is_mean_of_evaluations() -> None:
    engine = ValuationEngine()
    evaluations = engine.evaluate_all(CODE)
    assert engine.calculate_value(CODE) == pytest.approx(sum(e.value for e in evaluations) / 6)
    result = engine.evaluate(CODE)
    assert result.score == pytest.approx(engine.calculate_value(CODE))
    assert result.evaluations == evaluations


def test_custom_evaluators_and_empty_set() -> None:
    engine = ValuationEngine([_fixed(MetricKind.IMPACT, 0.2), _fixed(MetricKind.NOVELTY, 0.6)])
    assert engine.calculate_value("anything") == pytest.approx(0.4)
    assert ValuationEngine([]).calculate_value("anything") == 0.0
    assert mean_value([]) == 0.0


def test_composite_credit_score_defaults_to_mean() -> None:
    evaluations = ValuationEngine().evaluate_all(CODE)
    assert composite_credit_score(evaluations) == pytest.approx(mean_value(evaluations))


def test_composite_credit_score_weights_and_coefficient() -> None:
    evaluations = [
        MetricEvaluation(kind=MetricKind.IMPACT, value=0.5, rationale="r"),
        MetricEvaluation(kind=MetricKind.NOVELTY, value=1.0, rationale="r"),
    ]
    weights = {MetricKind.IMPACT: 0.4, MetricKind.NOVELTY: 0.2}
    assert composite_credit_score(evaluations, weights, market_coefficient=2.0) == pytest.approx(0.8)
    with pytest.raises(InvalidArgument):
        composite_credit_score(evaluations, market_coefficient=-1.0)


def test_credit_payment() -> None:
    assert credit_payment(0.5, 100) == pytest.approx(0.005)
    assert credit_payment(0.5, 10, credit_rate=0.01) == pytest.approx(0.05)
    with pytest.raises(InvalidArgument):
        credit_payment(0.5, -1)
