"""Central orchestrator for the reaction GIF generation pipeline.

Stages run in a fixed order:

    validate text
    ensure the reasoning and search services are configured
      → QuotaGate          (may raise QuotaExceeded; nothing else runs)
      → StrategyDeriver    (may raise StrategyDerivationFailed; nothing else runs)
      → BranchSearcher     (3 branches, concurrent, failures captured per branch)
      → BranchSelector     (branches with candidates, concurrent, fallback per branch)
      → Aggregator         (may raise NoResultsFound; nothing persisted)
      → SessionPersister   (authenticated callers only, failures logged)

Every collaborator is injected at construction time; the pipeline never
builds clients or reaches for module-level state.
"""

from __future__ import annotations

import structlog

from gifpicker.models.generation import GenerationOutcome
from gifpicker.models.identity import Identity
from gifpicker.pipeline.quota_gate import QuotaGate
from gifpicker.services.aggregator import Aggregator
from gifpicker.services.branch_search import BranchSearcher
from gifpicker.services.branch_selector import BranchSelector
from gifpicker.services.session_persister import SessionPersister
from gifpicker.services.strategy_deriver import StrategyDeriver
from gifpicker.utils.logging import get_logger


class GenerationPipeline:
    """Turns one text + identity into up to three reaction GIFs."""

    def __init__(
        self,
        quota_gate: QuotaGate,
        strategy_deriver: StrategyDeriver,
        branch_searcher: BranchSearcher,
        branch_selector: BranchSelector,
        aggregator: Aggregator,
        session_persister: SessionPersister,
    ) -> None:
        self._quota_gate = quota_gate
        self._strategy_deriver = strategy_deriver
        self._branch_searcher = branch_searcher
        self._branch_selector = branch_selector
        self._aggregator = aggregator
        self._session_persister = session_persister
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def generate(self, text: str, identity: Identity) -> GenerationOutcome:
        """Run every stage for one request.

        Raises
        ------
        InvalidInput
            Empty text; raised before the quota is touched.
        ProviderUnavailableError
            The reasoning or search service is not configured; also raised
            before the quota.
        QuotaExceeded
            The caller's window is full.
        StrategyDerivationFailed
            The reasoning service produced no usable strategies.
        NoResultsFound
            Every branch came back empty.
        """
        text = StrategyDeriver.validate_text(text)
        self._strategy_deriver.ensure_available()
        self._branch_searcher.ensure_available()
        admission = await self._quota_gate.admit(identity)

        strategy_set = await self._strategy_deriver.derive(text)
        outcomes = await self._branch_searcher.search_all(strategy_set.strategies)
        selections = await self._branch_selector.select_all(text, outcomes)
        result = self._aggregator.aggregate(selections)

        group_id = None
        if admission.user_id is not None:
            group_id = await self._session_persister.persist(admission.user_id, text, result)

        self._logger.info(
            "generation_complete",
            total_found=result.total_found,
            requested=result.requested_perspectives,
            authenticated=admission.user_id is not None,
            group_id=group_id,
        )
        return GenerationOutcome(result=result, admission=admission, group_id=group_id)
