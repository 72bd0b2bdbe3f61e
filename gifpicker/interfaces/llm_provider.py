"""Reasoning-service contract.

The pipeline talks to a language model twice per branch family: once to
turn the input text into three search strategies, once per branch to pick
a candidate.  Both exchanges are JSON objects, so adapters accept a
``json_object`` hint and use whatever native JSON mode their API offers.
Parsing and schema validation stay with the caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ILLMProvider(ABC):
    """Text-in, text-out completion used by the strategy and selection stages.

    Implementations: ``OpenAILLMProvider`` and ``AnthropicLLMProvider`` in
    :mod:`gifpicker.providers.llm`.
    """

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1000,
        json_object: bool = False,
    ) -> str:
        """Return the model's reply to *user_prompt*.

        ``json_object=True`` asks the backend to constrain the reply to a
        single JSON object where it can.

        Raises
        ------
        gifpicker.utils.errors.LLMError
            Transport failure, API error, timeout or an empty reply.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Short backend label used in logs and ``/health``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether credentials are configured.  Makes no network call."""
