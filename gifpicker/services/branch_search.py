"""Concurrent per-strategy media search.

Each of the three strategies becomes one branch.  Branches run
concurrently through :func:`isolated_gather`, each under its own timeout,
and every failure is turned into a :class:`BranchOutcome` carrying a
``search_error`` instead of an exception.  A slow or failing branch never
cancels its siblings, and the fan-in always yields one outcome per
strategy in perspective-rank order.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from gifpicker.interfaces.media_search_provider import IMediaSearchProvider
from gifpicker.models.strategy import BranchOutcome, SearchErrorKind, Strategy, perspective_rank
from gifpicker.utils.concurrency import isolated_gather
from gifpicker.utils.errors import BranchSearchError, ProviderUnavailableError
from gifpicker.utils.logging import get_logger


class BranchSearcher:
    """Runs one media search per strategy and captures per-branch errors."""

    def __init__(
        self,
        search_provider: IMediaSearchProvider,
        result_limit: int = 5,
        rating: str = "pg-13",
        timeout: float | None = 10.0,
    ) -> None:
        self._search = search_provider
        self._result_limit = result_limit
        self._rating = rating
        self._timeout = timeout
        self._logger = get_logger(__name__)

    def ensure_available(self) -> None:
        """Raise :class:`ProviderUnavailableError` when the search service has no credentials."""
        if not self._search.is_available():
            raise ProviderUnavailableError(
                message="No media search service is configured",
                provider_name=self._search.get_provider_name(),
            )

    async def search_all(self, strategies: Sequence[Strategy]) -> list[BranchOutcome]:
        """Search every strategy concurrently; never raises for a branch failure."""
        ordered = sorted(strategies, key=lambda s: perspective_rank(s.perspective))
        results = await isolated_gather(
            [self._query(s) for s in ordered],
            timeout=self._timeout,
        )

        outcomes: list[BranchOutcome] = []
        for strategy, result in zip(ordered, results):
            if isinstance(result, BranchOutcome):
                outcomes.append(result)
                continue
            if not isinstance(result, Exception):
                # CancelledError and friends are not branch failures.
                raise result
            outcomes.append(self._failed(strategy, result))

        self._logger.info(
            "branch_search_complete",
            found={o.strategy.perspective.value: len(o.candidates) for o in outcomes},
            errors=[o.strategy.perspective.value for o in outcomes if o.search_error],
        )
        return outcomes

    async def _query(self, strategy: Strategy) -> BranchOutcome:
        query = strategy.search_query()
        self._logger.debug(
            "branch_search_started",
            perspective=strategy.perspective.value,
            query=query,
        )
        candidates = await self._search.search(
            query,
            limit=self._result_limit,
            rating=self._rating,
        )
        return BranchOutcome(strategy=strategy, candidates=candidates[: self._result_limit])

    def _failed(self, strategy: Strategy, exc: Exception) -> BranchOutcome:
        if isinstance(exc, BranchSearchError):
            kind = SearchErrorKind(exc.kind)
        elif isinstance(exc, asyncio.TimeoutError):
            kind = SearchErrorKind.TIMEOUT
        else:
            kind = SearchErrorKind.SEARCH_FAILED

        self._logger.warning(
            "branch_search_failed",
            perspective=strategy.perspective.value,
            kind=kind.value,
            error=str(exc) or type(exc).__name__,
        )
        return BranchOutcome(strategy=strategy, search_error=kind)
