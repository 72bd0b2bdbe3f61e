"""Merge per-branch selections into the request's result.

Applies the partial-failure policy: any number of successful perspectives
from one to three is a result, zero is :class:`NoResultsFound`.  The
result keeps ``requested_perspectives`` alongside the successes so callers
can see when fewer came back than were asked for.
"""

from __future__ import annotations

from collections.abc import Sequence

from gifpicker.models.generation import GenerationResult
from gifpicker.models.strategy import REQUESTED_PERSPECTIVES, Selection, perspective_rank
from gifpicker.utils.errors import NoResultsFound
from gifpicker.utils.logging import get_logger


class Aggregator:
    """Orders, partitions and validates the selections of one request."""

    def __init__(self, requested_perspectives: int = REQUESTED_PERSPECTIVES) -> None:
        self._requested = requested_perspectives
        self._logger = get_logger(__name__)

    def aggregate(self, selections: Sequence[Selection]) -> GenerationResult:
        """Build the result, or raise :class:`NoResultsFound` when nothing succeeded."""
        ordered = sorted(selections, key=lambda s: perspective_rank(s.strategy.perspective))
        succeeded = [s for s in ordered if s.succeeded]
        failed = [s.strategy.perspective for s in ordered if not s.succeeded]

        if not succeeded:
            self._logger.warning(
                "no_results_any_perspective",
                failed=[p.value for p in failed],
            )
            raise NoResultsFound()

        result = GenerationResult(
            selections=succeeded,
            failed_perspectives=failed,
            requested_perspectives=self._requested,
        )
        self._logger.info(
            "generation_aggregated",
            total_found=result.total_found,
            requested=result.requested_perspectives,
            degraded=[s.strategy.perspective.value for s in succeeded if s.degraded],
        )
        return result
