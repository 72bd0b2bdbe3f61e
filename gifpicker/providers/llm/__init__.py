"""LLM provider adapters.

Two concrete implementations of ILLMProvider (gifpicker/interfaces/llm_provider.py):
    - OpenAILLMProvider: gpt-4o-mini, or any OpenAI-compatible endpoint
    - AnthropicLLMProvider: Claude Sonnet

At startup, main.py picks the provider matching the configured API key and
hands it to the strategy deriver and branch selector.
"""

from gifpicker.providers.llm.anthropic_provider import AnthropicLLMProvider
from gifpicker.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "OpenAILLMProvider"]
