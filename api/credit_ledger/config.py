from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_CONFIRMATION_DELAY_SECONDS = 2.0
DEFAULT_MAX_WORKERS = 8
DEFAULT_BASE_RATE_PER_LINE = 0.00001
DEFAULT_SUBSCRIPTION_AMOUNT = 0.001


def _env(name: str) -> str:
    return (os.getenv(name) or "").strip()


@dataclass(frozen=True)
class LedgerSettings:
    project_name: str
    license_key: str
    project_wallet: str
    settlement_api_key: str
    confirmation_delay_seconds: float = DEFAULT_CONFIRMATION_DELAY_SECONDS
    max_workers: int = DEFAULT_MAX_WORKERS
    base_rate_per_line: float = DEFAULT_BASE_RATE_PER_LINE
    subscription_amount: float = DEFAULT_SUBSCRIPTION_AMOUNT

    @classmethod
    def from_env(cls) -> LedgerSettings:
        required = {
            "LEDGER_PROJECT_NAME": _env("LEDGER_PROJECT_NAME"),
            "LEDGER_LICENSE_KEY": _env("LEDGER_LICENSE_KEY"),
            "LEDGER_PROJECT_WALLET": _env("LEDGER_PROJECT_WALLET"),
            "SETTLEMENT_API_KEY": _env("SETTLEMENT_API_KEY"),
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            joined = ",".join(sorted(missing))
            raise ValueError(f"missing_required_env:{joined}")

        return cls(
            project_name=required["LEDGER_PROJECT_NAME"],
            license_key=required["LEDGER_LICENSE_KEY"],
            project_wallet=required["LEDGER_PROJECT_WALLET"],
            settlement_api_key=required["SETTLEMENT_API_KEY"],
            confirmation_delay_seconds=max(
                0.0,
                float(_env("SETTLEMENT_CONFIRMATION_DELAY_SECONDS") or DEFAULT_CONFIRMATION_DELAY_SECONDS),
            ),
            max_workers=max(1, int(_env("SETTLEMENT_MAX_WORKERS") or DEFAULT_MAX_WORKERS)),
            base_rate_per_line=float(_env("LEDGER_BASE_RATE_PER_LINE") or DEFAULT_BASE_RATE_PER_LINE),
            subscription_amount=float(_env("SUBSCRIPTION_AMOUNT_PER_PAYMENT") or DEFAULT_SUBSCRIPTION_AMOUNT),
        )
