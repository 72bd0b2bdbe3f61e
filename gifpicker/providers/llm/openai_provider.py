"""Chat-completions reasoning adapter.

Talks to OpenAI, or to any host that speaks the same API (Gemini's
compatibility endpoint, Groq, TogetherAI) when ``OPENAI_BASE_URL`` is set.
JSON requests use ``response_format={"type": "json_object"}``.
"""

from __future__ import annotations

from typing import Any

import openai
import structlog

from gifpicker.config.settings import Settings
from gifpicker.interfaces.llm_provider import ILLMProvider
from gifpicker.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "gpt-4o-mini"
_CONNECT_TIMEOUT = 5.0


class OpenAILLMProvider(ILLMProvider):
    """Reasoning service over ``chat.completions``.

    Parameters
    ----------
    settings:
        Supplies the key, optional base URL, model override and timeout.
    client:
        Pre-built ``AsyncOpenAI``; one is created from *settings* when omitted.
    """

    def __init__(self, settings: Settings, client: openai.AsyncOpenAI | None = None) -> None:
        self._configured = bool(settings.openai_api_key)
        self._timeout = settings.llm_timeout_seconds
        self._model = settings.openai_text_model or _DEFAULT_MODEL
        self._name = "openai-compatible" if settings.openai_base_url else "openai"
        self._client = client
        # The SDK refuses an empty key, so an unconfigured adapter has no client.
        if self._client is None and self._configured:
            self._client = openai.AsyncOpenAI(
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url or None,
                timeout=openai.Timeout(self._timeout, connect=_CONNECT_TIMEOUT),
            )

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1000,
        json_object: bool = False,
    ) -> str:
        if self._client is None:
            raise self._error("no API key configured")
        request: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_object:
            request["response_format"] = {"type": "json_object"}

        try:
            completion = await self._client.chat.completions.create(**request)
        except openai.APITimeoutError as exc:
            raise self._error(f"no reply within {self._timeout:g}s") from exc
        except openai.APIError as exc:
            raise self._error(f"request failed: {exc}") from exc

        choice = completion.choices[0] if completion.choices else None
        text = choice.message.content if choice is not None else None
        if not text:
            raise self._error("empty completion")

        logger.debug(
            "llm_completion",
            provider=self._name,
            model=self._model,
            finish_reason=choice.finish_reason,
            total_tokens=getattr(completion.usage, "total_tokens", None),
        )
        return text

    def is_available(self) -> bool:
        return self._configured

    def get_provider_name(self) -> str:
        """``"openai"``, or ``"openai-compatible"`` behind a custom base URL."""
        return self._name

    def _error(self, detail: str) -> LLMError:
        return LLMError(message=f"{self._model}: {detail}", provider_name=self._name)
