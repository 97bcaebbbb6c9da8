"""Registry of attributed line ranges; no two ranges on one file may overlap."""

from __future__ import annotations

import copy
import logging
import threading
from typing import Optional

from credit_ledger.errors import OverlapConflict, UnknownContribution
from credit_ledger.models.contribution import Contribution
from credit_ledger.models.metric import MetricEvaluation
from credit_ledger.services.wallet_service import generate_id

logger = logging.getLogger(__name__)


class ContributionRegistry:
    def __init__(self) -> None:
        self._contributions: dict[str, Contribution] = {}
        self._lock = threading.Lock()

    def register(self, contribution: Contribution) -> str:
        """Store a private copy of ``contribution`` under a freshly minted id and return that id.

        Raises OverlapConflict when an existing contribution on the same
        file intersects the new range (closed intervals).
        """
        owned = copy.deepcopy(contribution)
        owned.id = generate_id()
        with self._lock:
            conflict = self._find_overlap(owned)
            if conflict is not None:
                logger.warning(
                    "contribution_overlap_rejected file=%s range=%s-%s existing=%s",
                    owned.file_id,
                    owned.line_start,
                    owned.line_end,
                    conflict.id,
                )
                raise OverlapConflict(owned.file_id, conflict.id, conflict.line_range)
            self._contributions[owned.id] = owned
        logger.info(
            "contribution_registered id=%s contributor=%s file=%s range=%s-%s",
            owned.id,
            owned.contributor,
            owned.file_id,
            owned.line_start,
            owned.line_end,
        )
        return owned.id

    def _find_overlap(self, candidate: Contribution) -> Optional[Contribution]:
        for existing in self._contributions.values():
            if existing.overlaps(candidate):
                return existing
        return None

    def attach_evaluation(self, contribution_id: str, evaluation: MetricEvaluation) -> None:
        with self._lock:
            self._require(contribution_id).add_evaluation(evaluation)

    def attach_evaluations(self, contribution_id: str, evaluations: list[MetricEvaluation]) -> None:
        with self._lock:
            contribution = self._require(contribution_id)
            for evaluation in evaluations:
                contribution.add_evaluation(evaluation)

    def value(self, contribution_id: str) -> float:
        with self._lock:
            return self._require(contribution_id).value()

    def get(self, contribution_id: str) -> Optional[Contribution]:
        with self._lock:
            contribution = self._contributions.get(contribution_id)
            return copy.deepcopy(contribution) if contribution is not None else None

    def list(self) -> list[Contribution]:
        """Copies of all contributions in registration order."""
        with self._lock:
            return [copy.deepcopy(c) for c in self._contributions.values()]

    def for_file(self, file_id: str) -> list[Contribution]:
        with self._lock:
            return [copy.deepcopy(c) for c in self._contributions.values() if c.file_id == file_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._contributions)

    def _require(self, contribution_id: str) -> Contribution:
        contribution = self._contributions.get(contribution_id)
        if contribution is None:
            raise UnknownContribution(contribution_id)
        return contribution
