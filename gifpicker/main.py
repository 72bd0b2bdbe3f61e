"""gifpicker application entry point.

Builds every provider and service once inside the FastAPI lifespan,
stores them on ``app.state`` and exposes the API router.  Nothing is
created per request and nothing is reached through module globals other
than the settings object.

Run locally with::

    python -m gifpicker.main
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from gifpicker import __version__
from gifpicker.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from gifpicker.api.routes import router as api_router
from gifpicker.config.loader import load_config
from gifpicker.config.settings import Settings
from gifpicker.interfaces.llm_provider import ILLMProvider
from gifpicker.pipeline.orchestrator import GenerationPipeline
from gifpicker.pipeline.quota_gate import QuotaGate
from gifpicker.providers.llm.anthropic_provider import AnthropicLLMProvider
from gifpicker.providers.llm.openai_provider import OpenAILLMProvider
from gifpicker.providers.quota.sqlite_quota_provider import SQLiteQuotaProvider
from gifpicker.providers.search.giphy_provider import GiphySearchProvider
from gifpicker.providers.store.sqlite_generation_store import SQLiteGenerationStore
from gifpicker.services.aggregator import Aggregator
from gifpicker.services.branch_search import BranchSearcher
from gifpicker.services.branch_selector import BranchSelector
from gifpicker.services.history_service import HistoryService
from gifpicker.services.session_persister import SessionPersister
from gifpicker.services.strategy_deriver import StrategyDeriver
from gifpicker.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# LLM provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings) -> ILLMProvider:
    """Select the LLM provider based on configured API keys.

    Priority order: Anthropic -> OpenAI (or OpenAI-compatible).  With no key
    at all the OpenAI adapter is built without an SDK client, so the app
    starts, health reports it unavailable and generation answers 503.
    """
    if app_settings.anthropic_api_key:
        return AnthropicLLMProvider(settings=app_settings)
    return OpenAILLMProvider(settings=app_settings)


# ---------------------------------------------------------------------------
# Full DI assembly for the FastAPI application
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    search_cfg = config.get("search", {})
    llm_cfg = config.get("llm", {})
    pipeline_cfg = config.get("pipeline", {})
    history_cfg = config.get("history", {})

    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=30.0)

    # -- Providers --
    llm = _build_llm_provider(app_settings)
    search = GiphySearchProvider(
        http_client=http_client,
        settings=app_settings,
        lang=search_cfg.get("lang", "en"),
        timeout=search_cfg.get("timeout_seconds", 8.0),
    )
    quota = SQLiteQuotaProvider(
        db_path=app_settings.database_path,
        limit=app_settings.quota_limit,
        window_seconds=app_settings.quota_window_seconds,
    )
    store = SQLiteGenerationStore(db_path=app_settings.database_path)

    # -- Services --
    pipeline = GenerationPipeline(
        quota_gate=QuotaGate(
            quota_provider=quota,
            store=store,
            anonymous_enabled=app_settings.anonymous_quota_enabled,
            timeout=pipeline_cfg.get("store_timeout_seconds", 5.0),
        ),
        strategy_deriver=StrategyDeriver(
            llm_provider=llm,
            temperature=llm_cfg.get("strategy_temperature", 0.7),
            timeout=app_settings.llm_timeout_seconds,
        ),
        branch_searcher=BranchSearcher(
            search_provider=search,
            result_limit=search_cfg.get("result_limit", 5),
            rating=search_cfg.get("rating", "pg-13"),
            timeout=pipeline_cfg.get("branch_timeout_seconds", 10.0),
        ),
        branch_selector=BranchSelector(
            llm_provider=llm,
            temperature=llm_cfg.get("selection_temperature", 0.2),
            timeout=pipeline_cfg.get("selection_timeout_seconds", 20.0),
        ),
        aggregator=Aggregator(),
        session_persister=SessionPersister(
            store=store,
            atomic=app_settings.atomic_group_writes,
            timeout=pipeline_cfg.get("store_timeout_seconds", 5.0),
        ),
    )
    history_service = HistoryService(
        store=store,
        default_page_size=history_cfg.get("default_page_size", 12),
        max_page_size=history_cfg.get("max_page_size", 100),
    )

    provider_registry = {
        "llm": llm.is_available(),
        "llm_provider": llm.get_provider_name(),
        "search": search.is_available(),
        "search_provider": search.get_provider_name(),
        "quota_provider": quota.get_provider_name(),
        "store_provider": store.get_provider_name(),
    }

    return {
        "http_client": http_client,
        "quota_provider": quota,
        "generation_store": store,
        "pipeline": pipeline,
        "history_service": history_service,
        "provider_registry": provider_registry,
        "version": config.get("app", {}).get("version", __version__),
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


def _make_lifespan(app_settings: Settings):  # noqa: ANN202
    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        """Initialise all providers and services on startup, clean up on shutdown."""
        components = _build_all(app_settings, load_config(settings=app_settings))

        for key, value in components.items():
            setattr(application.state, key, value)

        await components["generation_store"].initialize()
        await components["quota_provider"].initialize()

        _logger.info(
            "app_startup",
            version=components["version"],
            environment=app_settings.app_env,
            providers=components["provider_registry"],
        )

        yield

        http_client: httpx.AsyncClient = components["http_client"]
        await http_client.aclose()
        _logger.info("app_shutdown", message="HTTP client closed")

    return _lifespan


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    app_settings = app_settings or settings
    application = FastAPI(
        title="gifpicker API",
        version=__version__,
        description=(
            "Turn a short message into up to three reaction GIFs, one each "
            "from an emotional, a literal and a sarcastic perspective."
        ),
        lifespan=_make_lifespan(app_settings),
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=app_settings.get_cors_origins())

    application.include_router(api_router)
    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def run() -> None:
    uvicorn.run(
        "gifpicker.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )


if __name__ == "__main__":
    run()
