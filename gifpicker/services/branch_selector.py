"""Concurrent per-branch candidate selection.

For every branch that found candidates, the reasoning service is shown a
compact numbered listing (title and alt text only, never media) and asked
for ``{"selectedIndex": n, "reasoning": "..."}``.

Fallback policy, applied per branch and never escalated:

- valid in-range index  → that candidate, ``degraded=False``
- provider failure, timeout, unparseable reply or out-of-range index
  → ``candidates[0]``, ``degraded=True``, fixed degraded reasoning
- no candidates         → no call at all; ``chosen=None``, ``degraded=True``
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from pydantic import ValidationError

from gifpicker.interfaces.llm_provider import ILLMProvider
from gifpicker.models.strategy import (
    DEGRADED_SELECTION_REASONING,
    NO_RESULTS_REASONING,
    SEARCH_ERROR_DESCRIPTIONS,
    BranchOutcome,
    Candidate,
    Selection,
    SelectionChoice,
    perspective_rank,
)
from gifpicker.utils.concurrency import isolated_gather
from gifpicker.utils.errors import BranchSelectionError
from gifpicker.utils.llm_json import extract_json_object
from gifpicker.utils.logging import get_logger

_SYSTEM_PROMPT = (
    "You pick the best reaction GIF from a numbered list. Respond with a "
    'single JSON object of the form {"selectedIndex": <integer>, '
    '"reasoning": "<one short sentence>"} and nothing else.'
)

_USER_PROMPT_TEMPLATE = """\
You are selecting the perfect {perspective_upper} reaction GIF for someone's message.

Original message: "{text}"
Perspective: {perspective}
Search keywords used: {keywords}

Here are the available GIFs:
{listing}

Select the GIF that:
1. Best captures the {perspective} perspective
2. Matches the emotional tone and context of the original message
3. Would be the most relatable and engaging reaction
4. Has clear, expressive content

Return the zero-based index of the best GIF as "selectedIndex".
"""


def format_candidate_listing(candidates: Sequence[Candidate]) -> str:
    """Number candidates from 0 as ``i. "title" - alt text``."""
    lines = []
    for index, candidate in enumerate(candidates):
        desc = f" - {candidate.alt_text}" if candidate.alt_text else ""
        lines.append(f'{index}. "{candidate.title}"{desc}')
    return "\n".join(lines)


class BranchSelector:
    """Chooses one candidate per branch via the reasoning service."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        temperature: float = 0.2,
        max_tokens: int = 300,
        timeout: float | None = 20.0,
    ) -> None:
        self._llm = llm_provider
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._timeout = timeout
        self._logger = get_logger(__name__)

    async def select_all(self, text: str, outcomes: Sequence[BranchOutcome]) -> list[Selection]:
        """Return one :class:`Selection` per outcome, in perspective-rank order."""
        ordered = sorted(outcomes, key=lambda o: perspective_rank(o.strategy.perspective))
        searchable = [o for o in ordered if o.has_candidates]

        results = await isolated_gather(
            [self._choose(text, o) for o in searchable],
            timeout=self._timeout,
        )
        chosen: dict[str, Selection] = {}
        for outcome, result in zip(searchable, results):
            if isinstance(result, Selection):
                chosen[outcome.strategy.perspective.value] = result
                continue
            if not isinstance(result, Exception):
                raise result
            chosen[outcome.strategy.perspective.value] = self._fallback(outcome, result)

        return [
            chosen.get(o.strategy.perspective.value) or self._empty(o)
            for o in ordered
        ]

    async def select_one(self, text: str, outcome: BranchOutcome) -> Selection:
        """Select for a single branch, applying the same fallback policy."""
        return (await self.select_all(text, [outcome]))[0]

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _choose(self, text: str, outcome: BranchOutcome) -> Selection:
        strategy = outcome.strategy
        perspective = strategy.perspective.value
        user_prompt = _USER_PROMPT_TEMPLATE.format(
            perspective_upper=perspective.upper(),
            perspective=perspective,
            text=text,
            keywords=", ".join(strategy.keywords),
            listing=format_candidate_listing(outcome.candidates),
        )
        response = await self._llm.complete(
            system_prompt=_SYSTEM_PROMPT,
            user_prompt=user_prompt,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            json_object=True,
        )

        try:
            choice = SelectionChoice.model_validate(extract_json_object(response))
        except ValidationError as exc:
            raise BranchSelectionError(
                message="Selection reply did not match the contract",
                provider_name=self._llm.get_provider_name(),
            ) from exc

        if choice.selected_index >= len(outcome.candidates):
            raise BranchSelectionError(
                message=(
                    f"selectedIndex {choice.selected_index} out of range "
                    f"for {len(outcome.candidates)} candidates"
                ),
                provider_name=self._llm.get_provider_name(),
            )

        self._logger.debug(
            "selection_chosen",
            perspective=perspective,
            index=choice.selected_index,
        )
        return Selection(
            strategy=strategy,
            chosen=outcome.candidates[choice.selected_index],
            reasoning=choice.reasoning,
        )

    def _fallback(self, outcome: BranchOutcome, exc: Exception) -> Selection:
        self._logger.warning(
            "selection_degraded",
            perspective=outcome.strategy.perspective.value,
            timeout=isinstance(exc, asyncio.TimeoutError),
            error=str(exc) or type(exc).__name__,
        )
        return Selection(
            strategy=outcome.strategy,
            chosen=outcome.candidates[0],
            reasoning=DEGRADED_SELECTION_REASONING,
            degraded=True,
        )

    @staticmethod
    def _empty(outcome: BranchOutcome) -> Selection:
        if outcome.search_error is not None:
            reasoning = SEARCH_ERROR_DESCRIPTIONS[outcome.search_error]
        else:
            reasoning = NO_RESULTS_REASONING
        return Selection(
            strategy=outcome.strategy,
            chosen=None,
            reasoning=reasoning,
            degraded=True,
        )
