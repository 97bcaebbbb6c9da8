from __future__ import annotations

import pytest

from credit_ledger.errors import InvalidAmount, InvalidArgument, InvalidWallet, OverlapConflict, UnknownContribution
from credit_ledger.models.contribution import Contribution
from credit_ledger.models.metric import MetricEvaluation, MetricKind
from credit_ledger.services.license_service import License
from credit_ledger.services.settlement_engine import SettlementEngine
from credit_ledger.services.valuation_engine import ValuationEngine

from conftest import DEST_WALLET, PROJECT_WALLET, SOURCE_WALLET

TIMEOUT = 5


def _license(key: str = "LICENSE-KEY-1234") -> License:
    return License("Credit Ledger", key, PROJECT_WALLET)


def _valued_contribution(license_: License, value: float = 0.5) -> str:
    contribution_id = license_.register_contribution(Contribution("alice", "main.cpp", 0, 99))
    license_.registry.attach_evaluation(
        contribution_id,
        MetricEvaluation(kind=MetricKind.IMPACT, value=value, rationale="fixed"),
    )
    return contribution_id


def test_license_construction_and_validation() -> None:
    assert _license().validate() is True
    assert _license("short").validate() is False
    with pytest.raises(InvalidArgument):
        License("", "LICENSE-KEY-1234", PROJECT_WALLET)
    with pytest.raises(InvalidWallet):
        License("Credit Ledger", "LICENSE-KEY-1234", "nope")


def test_register_and_evaluate_attaches_all_metrics() -> None:
    license_ = _license()
    contribution_id = license_.register_and_evaluate(
        Contribution("alice", "main.cpp", 0, 2),
        "int add(int a, int b) {\n    return a + b;\n}\n",
        ValuationEngine(),
    )
    stored = license_.registry.get(contribution_id)
    assert [e.kind for e in stored.ordered_evaluations()] == list(MetricKind)
    with pytest.raises(OverlapConflict):
        license_.register_contribution(Contribution("bob", "main.cpp", 2, 4))
    assert len(license_.contributions()) == 1


def test_payment_amount_is_value_times_lines_times_rate() -> None:
    license_ = _license()
    contribution_id = _valued_contribution(license_)
    assert license_.payment_amount(contribution_id, 0.00001) == pytest.approx(0.5 * 100 * 0.00001)
    with pytest.raises(InvalidAmount):
        license_.payment_amount(contribution_id, 0)
    with pytest.raises(UnknownContribution):
        license_.payment_amount("missing", 0.00001)


def test_settle_contribution_records_ledger_after_verification() -> None:
    license_ = _license()
    contribution_id = _valued_contribution(license_)
    with SettlementEngine("key", confirmation_delay_seconds=0.0) as engine:
        pending = license_.settle_contribution(engine, contribution_id, SOURCE_WALLET, DEST_WALLET, 0.00001)
        assert pending.transaction.contribution_id == contribution_id
        pending.future.result(timeout=TIMEOUT)

    assert license_.ledger.total_for("alice") == pytest.approx(0.0005)
    assert "alice: 0.00050000 BTC" in license_.payment_report()
    assert "Total Payments: 0.00050000 BTC" in license_.payment_report()


def test_settle_unvalued_contribution_is_rejected(engine: SettlementEngine) -> None:
    license_ = _license()
    contribution_id = license_.register_contribution(Contribution("alice", "main.cpp", 0, 9))
    with pytest.raises(InvalidAmount):
        license_.settle_contribution(engine, contribution_id, SOURCE_WALLET, DEST_WALLET, 0.00001)
    assert engine.get_transactions() == []


def test_unverified_settlement_is_not_recorded() -> None:
    license_ = _license()
    contribution_id = _valued_contribution(license_)
    with SettlementEngine("key", confirmation_delay_seconds=0.0, verifier=lambda tx: False) as engine:
        pending = license_.settle_contribution(engine, contribution_id, SOURCE_WALLET, DEST_WALLET, 0.00001)
        pending.future.exception(timeout=TIMEOUT)
    assert license_.ledger.total_for("alice") == 0.0


def test_license_info_lists_contributions() -> None:
    license_ = _license()
    _valued_contribution(license_)
    info = license_.license_info()
    assert "Project: Credit Ledger" in info
    assert "Validation Status: Valid" in info
    assert "Contributor: alice" in info
    assert "Lines: 0-99" in info
    assert "Value: 0.5000" in info
