"""Application settings loaded from environment variables via pydantic-settings.

Settings are read from two sources, in priority order:

  1. Environment variables, e.g. ``GIPHY_API_KEY=abc123`` (always wins)
  2. A ``.env`` file in the working directory (local development)

Field ``giphy_api_key`` maps to env var ``GIPHY_API_KEY``.  Defaults apply
when neither source sets a value.  Secrets, paths and feature flags live
here; tuning knobs that are safe to commit live in ``config/config.yaml``
(see :mod:`gifpicker.config.loader`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """gifpicker application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Reasoning service (LLM) ===
    # Empty string = "not configured"; provider selection in main.py skips
    # providers whose key is empty.
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoints (Gemini, TogetherAI, ...)
    openai_text_model: str = ""
    anthropic_api_key: str = ""
    anthropic_model: str = ""
    llm_timeout_seconds: float = 25.0

    # === Media search ===
    giphy_api_key: str = ""
    giphy_base_url: str = "https://api.giphy.com/v1"

    # === Persistence ===
    database_path: str = "data/gifpicker.db"
    # Write each generation group in one transaction instead of independent
    # concurrent inserts.
    atomic_group_writes: bool = False

    # === Quota ===
    quota_limit: int = 10
    quota_window_seconds: int = 24 * 60 * 60
    # Gate anonymous callers by client host with the same window.
    anonymous_quota_enabled: bool = False

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: str = "*"

    def get_available_llm_providers(self) -> list[str]:
        """Return the LLM provider names that have non-empty API keys configured."""
        providers: list[str] = []
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.openai_api_key:
            providers.append("openai")
        return providers

    def get_cors_origins(self) -> list[str]:
        """Split the comma-separated ``CORS_ORIGINS`` value."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
