"""Public interface definitions for all external service providers.

Every external API or service is accessed exclusively through the abstract
base classes defined in this package.  Concrete adapters implement these
interfaces and are injected at startup (``gifpicker/main.py``), so the
pipeline never imports an SDK directly and tests can hand in mocks.

CONCRETE PROVIDER MAP:
    Interface              →  Concrete implementations (in gifpicker/providers/)
    ─────────────────────────────────────────────────────────────────────
    ILLMProvider           →  OpenAILLMProvider, AnthropicLLMProvider
    IMediaSearchProvider   →  GiphySearchProvider
    IQuotaProvider         →  SQLiteQuotaProvider
    IGenerationStore       →  SQLiteGenerationStore
"""

from gifpicker.interfaces.generation_store import IGenerationStore
from gifpicker.interfaces.llm_provider import ILLMProvider
from gifpicker.interfaces.media_search_provider import IMediaSearchProvider
from gifpicker.interfaces.quota_provider import IQuotaProvider

__all__ = [
    "IGenerationStore",
    "ILLMProvider",
    "IMediaSearchProvider",
    "IQuotaProvider",
]
