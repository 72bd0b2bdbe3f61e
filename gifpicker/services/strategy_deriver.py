"""LLM-based strategy derivation for reaction GIF search.

Sends the caller's text to the reasoning service once, asking for three
perspective-tagged search strategies (emotional, literal, sarcastic) as a
JSON object.  The JSON schema of :class:`StrategySet` is embedded in the
prompt, and the reply is validated against the same model: anything that
is not exactly one strategy per perspective is rejected.

This is the only pipeline stage without a fallback.  With no strategies
there is nothing to search, so every failure here (bad JSON, schema
violation, provider error, timeout) surfaces as
:class:`StrategyDerivationFailed` and ends the request.
"""

from __future__ import annotations

import asyncio
import json

from pydantic import ValidationError

from gifpicker.interfaces.llm_provider import ILLMProvider
from gifpicker.models.strategy import StrategySet
from gifpicker.utils.concurrency import bounded
from gifpicker.utils.errors import (
    InvalidInput,
    LLMError,
    ProviderUnavailableError,
    StrategyDerivationFailed,
)
from gifpicker.utils.llm_json import extract_json_object
from gifpicker.utils.logging import get_logger

_SYSTEM_PROMPT = (
    "You are a reaction GIF expert. You analyze short messages and plan "
    "searches for reaction GIFs. Respond with a single JSON object and "
    "nothing else."
)

_USER_PROMPT_TEMPLATE = """\
Analyze the following text and create THREE different search strategies for \
finding the perfect reaction GIF, each with a distinct perspective.

Text to analyze: "{text}"

Generate exactly 3 strategies with these perspectives:

1. EMOTIONAL perspective: Focus on feelings, emotions, and mood. Keywords that \
capture the emotional reaction (e.g., "excited", "frustrated", "relieved", "nervous")

2. LITERAL perspective: Focus on actual actions, situations, or physical \
reactions. Keywords that describe what's happening literally (e.g., "typing \
fast", "head desk", "dancing", "facepalm")

3. SARCASTIC/HUMOROUS perspective: Focus on irony, exaggeration, or unexpected \
humor. Keywords that capture a witty or sarcastic reaction (e.g., "sure jan", \
"shocked pikachu", "this is fine", "eye roll")

For each strategy:
- Extract 1-3 keywords matching that perspective
- Optionally include a topic keyword ONLY if it would genuinely improve the \
search (specific, searchable, commonly used in GIFs); otherwise use null
- Provide reasoning for your choices

Make each strategy genuinely distinct - they should find different types of \
GIFs that complement each other.

Return a JSON object matching this JSON schema:
{schema}
"""

_SCHEMA_JSON = json.dumps(StrategySet.model_json_schema(), indent=2)


class StrategyDeriver:
    """Turns free text into a validated :class:`StrategySet`.

    Parameters
    ----------
    llm_provider:
        The reasoning service.
    temperature:
        Sampling temperature; some creativity helps the sarcastic branch.
    timeout:
        Upper bound in seconds for the single reasoning call, on top of
        whatever the provider's client enforces.
    """

    def __init__(
        self,
        llm_provider: ILLMProvider,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout: float | None = None,
    ) -> None:
        self._llm = llm_provider
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._timeout = timeout
        self._logger = get_logger(__name__)

    @staticmethod
    def validate_text(text: object) -> str:
        """Return *text* stripped, or raise :class:`InvalidInput`."""
        if not isinstance(text, str) or not text.strip():
            raise InvalidInput()
        return text.strip()

    def ensure_available(self) -> None:
        """Raise :class:`ProviderUnavailableError` when no reasoning service is configured."""
        if not self._llm.is_available():
            raise ProviderUnavailableError(
                message="No reasoning service is configured",
                provider_name=self._llm.get_provider_name(),
            )

    async def derive(self, text: str) -> StrategySet:
        """Derive exactly three strategies for *text*.

        Raises
        ------
        InvalidInput
            If *text* is empty after trimming.  No call is made.
        StrategyDerivationFailed
            On any provider error, timeout or contract violation.
        """
        text = self.validate_text(text)
        provider = self._llm.get_provider_name()
        user_prompt = _USER_PROMPT_TEMPLATE.format(text=text, schema=_SCHEMA_JSON)

        try:
            response = await bounded(
                self._llm.complete(
                    system_prompt=_SYSTEM_PROMPT,
                    user_prompt=user_prompt,
                    temperature=self._temperature,
                    max_tokens=self._max_tokens,
                    json_object=True,
                ),
                self._timeout,
            )
        except asyncio.TimeoutError as exc:
            self._logger.error("strategy_derivation_timeout", provider=provider)
            raise StrategyDerivationFailed(
                message="Strategy derivation timed out",
                provider_name=provider,
            ) from exc
        except LLMError as exc:
            self._logger.error("strategy_derivation_llm_error", provider=provider, error=str(exc))
            raise StrategyDerivationFailed(
                message=f"Strategy derivation failed: {exc.message}",
                provider_name=provider,
            ) from exc

        payload = extract_json_object(response)
        try:
            strategy_set = StrategySet.model_validate(payload)
        except ValidationError as exc:
            self._logger.error(
                "strategy_contract_violation",
                provider=provider,
                errors=exc.error_count(),
                response_preview=response[:200],
            )
            raise StrategyDerivationFailed(
                message="Reasoning service returned strategies that do not match the contract",
                provider_name=provider,
            ) from exc

        self._logger.info(
            "strategies_derived",
            provider=provider,
            queries={s.perspective.value: s.search_query() for s in strategy_set.strategies},
        )
        return strategy_set
