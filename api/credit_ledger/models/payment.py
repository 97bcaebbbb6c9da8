from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentTransaction(BaseModel):
    """Settlement record; replaced as a whole when ``verified`` flips."""

    id: str
    source_wallet: str
    destination_wallet: str
    amount: float = Field(gt=0.0)
    timestamp: datetime
    contribution_id: str
    verified: bool = False

    model_config = ConfigDict(frozen=True)


class PaymentCreate(BaseModel):
    source_wallet: str
    destination_wallet: str
    amount: float
    contribution_id: str


class SettlementCreate(BaseModel):
    source_wallet: str
    destination_wallet: str
    base_rate_per_line: Optional[float] = Field(default=None, gt=0.0)


class VerificationStatus(BaseModel):
    transaction_id: str
    verified: bool


class LedgerEntry(BaseModel):
    contributor: str
    total_paid: float


class LedgerSummary(BaseModel):
    project_wallet: str
    entries: list[LedgerEntry]
    total_paid: float
