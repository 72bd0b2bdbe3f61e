"""Anthropic Messages reasoning adapter.

The system prompt is a top-level parameter and replies arrive as content
blocks; only text blocks are kept.  The Messages API has no JSON mode, so
JSON requests prefill the assistant turn with ``{`` and the brace is put
back on the returned text.
"""

from __future__ import annotations

from typing import Any

import anthropic
import structlog

from gifpicker.config.settings import Settings
from gifpicker.interfaces.llm_provider import ILLMProvider
from gifpicker.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "claude-sonnet-4-20250514"
_JSON_PREFILL = "{"


class AnthropicLLMProvider(ILLMProvider):
    """Reasoning service over ``messages.create``."""

    def __init__(self, settings: Settings, client: anthropic.AsyncAnthropic | None = None) -> None:
        self._configured = bool(settings.anthropic_api_key)
        self._model = settings.anthropic_model or _DEFAULT_MODEL
        self._client = client
        if self._client is None and self._configured:
            self._client = anthropic.AsyncAnthropic(
                api_key=settings.anthropic_api_key,
                timeout=settings.llm_timeout_seconds,
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
            raise LLMError(message=f"{self._model}: no API key configured", provider_name="anthropic")
        messages: list[dict[str, Any]] = [{"role": "user", "content": user_prompt}]
        if json_object:
            messages.append({"role": "assistant", "content": _JSON_PREFILL})

        try:
            reply = await self._client.messages.create(
                model=self._model,
                system=system_prompt,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except anthropic.APIError as exc:
            raise LLMError(
                message=f"{self._model}: request failed: {exc}",
                provider_name="anthropic",
            ) from exc

        text = "".join(block.text for block in reply.content if block.type == "text")
        if not text.strip():
            raise LLMError(message=f"{self._model}: empty completion", provider_name="anthropic")

        logger.debug(
            "llm_completion",
            provider="anthropic",
            model=self._model,
            stop_reason=getattr(reply, "stop_reason", None),
            output_tokens=getattr(reply.usage, "output_tokens", None),
        )
        return _JSON_PREFILL + text if json_object else text

    def is_available(self) -> bool:
        return self._configured

    def get_provider_name(self) -> str:
        return "anthropic"
