from __future__ import annotations

import pytest

from credit_ledger.config import LedgerSettings

REQUIRED = {
    "LEDGER_PROJECT_NAME": "Credit Ledger",
    "LEDGER_LICENSE_KEY": "LICENSE-KEY-1234",
    "LEDGER_PROJECT_WALLET": "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa",
    "SETTLEMENT_API_KEY": "api-key",
}


def test_from_env_reads_required_and_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in REQUIRED.items():
        monkeypatch.setenv(name, value)
    monkeypatch.delenv("SETTLEMENT_CONFIRMATION_DELAY_SECONDS", raising=False)
    monkeypatch.setenv("SETTLEMENT_MAX_WORKERS", "3")

    settings = LedgerSettings.from_env()
    assert settings.project_wallet == REQUIRED["LEDGER_PROJECT_WALLET"]
    assert settings.confirmation_delay_seconds == 2.0
    assert settings.max_workers == 3
    assert settings.base_rate_per_line == pytest.approx(0.00001)


def test_from_env_reports_missing_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in REQUIRED.items():
        monkeypatch.setenv(name, value)
    monkeypatch.delenv("LEDGER_PROJECT_WALLET")
    monkeypatch.setenv("SETTLEMENT_API_KEY", "  ")

    with pytest.raises(ValueError, match="missing_required_env:LEDGER_PROJECT_WALLET,SETTLEMENT_API_KEY"):
        LedgerSettings.from_env()
