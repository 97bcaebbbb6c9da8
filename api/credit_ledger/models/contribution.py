from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from credit_ledger.errors import InvalidContribution
from credit_ledger.models.metric import MetricEvaluation, MetricKind


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Contribution:
    """A claimed span of lines ``[line_start, line_end]`` in one file."""

    contributor: str
    file_id: str
    line_start: int
    line_end: int
    evaluations: dict[MetricKind, MetricEvaluation] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_now)
    # assigned by the registry on registration
    id: str = field(default="", init=False)

    def __post_init__(self) -> None:
        if not self.contributor or not self.contributor.strip():
            raise InvalidContribution("Contributor name cannot be empty")
        if not self.file_id or not self.file_id.strip():
            raise InvalidContribution("File ID cannot be empty")
        if self.line_start < 0:
            raise InvalidContribution("Start line cannot be negative")
        if self.line_start > self.line_end:
            raise InvalidContribution("Start line must be less than or equal to end line")

    @property
    def line_range(self) -> tuple[int, int]:
        return (self.line_start, self.line_end)

    @property
    def line_count(self) -> int:
        return self.line_end - self.line_start + 1

    def overlaps(self, other: Contribution) -> bool:
        """Closed-interval intersection on the same file, containment included."""
        if self.file_id != other.file_id:
            return False
        return self.line_start <= other.line_end and other.line_start <= self.line_end

    def add_evaluation(self, evaluation: MetricEvaluation) -> None:
        # one evaluation per kind; a later one replaces the earlier
        self.evaluations[evaluation.kind] = evaluation

    def ordered_evaluations(self) -> list[MetricEvaluation]:
        return [self.evaluations[kind] for kind in MetricKind if kind in self.evaluations]

    def value(self) -> float:
        if not self.evaluations:
            return 0.0
        return sum(e.value for e in self.evaluations.values()) / len(self.evaluations)


class ContributionCreate(BaseModel):
    contributor: str
    file_id: str
    line_start: int
    line_end: int
    code: Optional[str] = Field(default=None, description="Fragment to evaluate and attach on registration")


class EvaluationAttach(BaseModel):
    kind: MetricKind
    value: float = Field(ge=0.0, le=1.0)
    rationale: str = Field(min_length=1)


class ContributionView(BaseModel):
    id: str
    contributor: str
    file_id: str
    line_start: int
    line_end: int
    evaluations: list[MetricEvaluation]
    value: float
    created_at: datetime

    @classmethod
    def from_contribution(cls, contribution: Contribution) -> ContributionView:
        return cls(
            id=contribution.id,
            contributor=contribution.contributor,
            file_id=contribution.file_id,
            line_start=contribution.line_start,
            line_end=contribution.line_end,
            evaluations=contribution.ordered_evaluations(),
            value=contribution.value(),
            created_at=contribution.created_at,
        )
