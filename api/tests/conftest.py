"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from credit_ledger.config import LedgerSettings  # noqa: E402
from credit_ledger.services.settlement_engine import SettlementEngine  # noqa: E402

PROJECT_WALLET = "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"
SOURCE_WALLET = "3J98t1WpEZ73CNmQviecrnyiWrnqRhWNLy"
DEST_WALLET = "1BvBMSEYstWetqTFn5Au4m4GFg7xJaNVN2"
T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


class MutableClock:
    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def settings() -> LedgerSettings:
    return LedgerSettings(
        project_name="Credit Ledger",
        license_key="LICENSE-KEY-1234",
        project_wallet=PROJECT_WALLET,
        settlement_api_key="test-api-key",
        confirmation_delay_seconds=0.0,
        max_workers=2,
    )


@pytest.fixture
def engine():
    with SettlementEngine("test-api-key", confirmation_delay_seconds=0.0, max_workers=2) as eng:
        yield eng


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()
