from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MetricKind(str, Enum):
    """Closed set of metrics; declaration order is the display order."""

    IMPACT = "impact"
    SIMPLICITY = "simplicity"
    CLEANNESS = "cleanness"
    COMMENT = "comment"
    CREDITABILITY = "creditability"
    NOVELTY = "novelty"


class MetricEvaluation(BaseModel):
    kind: MetricKind
    value: float = Field(ge=0.0, le=1.0)
    rationale: str = Field(min_length=1)

    model_config = ConfigDict(frozen=True)


class MetricDescriptor(BaseModel):
    kind: MetricKind
    description: str


class ValuationRequest(BaseModel):
    code: str


class ValuationResult(BaseModel):
    evaluations: list[MetricEvaluation]
    score: float = Field(ge=0.0, le=1.0)
