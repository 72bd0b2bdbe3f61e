"""FastAPI routes for the gifpicker service.

Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.

# Endpoint              Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/generate      POST    Text → up to 3 reaction GIFs
# /api/v1/history       GET     Paged generation groups (auth required)
# /api/v1/stats         GET     Usage counters (auth required)
# /api/v1/health        GET     Health check + provider status

Identity is asserted by an upstream auth proxy through ``X-User-*``
headers; a request without ``X-User-Id`` is anonymous.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Header, Query, Request, Response
from fastapi.responses import JSONResponse

from gifpicker.api.schemas import (
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    HealthResponse,
    HistoryResponse,
    QuotaExceededResponse,
    StatsResponse,
    build_generate_response,
    build_history_response,
    rate_limit_headers,
)
from gifpicker.models.identity import Anonymous, Authenticated, Identity, UserProfile
from gifpicker.pipeline.orchestrator import GenerationPipeline
from gifpicker.services.history_service import HistoryService
from gifpicker.utils.errors import AuthenticationRequired, QuotaExceeded
from gifpicker.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")


# ---------------------------------------------------------------------------
# Dependency injection helpers: resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_pipeline(request: Request) -> GenerationPipeline:
    """Return the generation pipeline from application state."""
    return request.app.state.pipeline


def _get_history_service(request: Request) -> HistoryService:
    """Return the history service from application state."""
    return request.app.state.history_service


def _get_identity(
    request: Request,
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_email: Annotated[str | None, Header()] = None,
    x_user_first_name: Annotated[str | None, Header()] = None,
    x_user_last_name: Annotated[str | None, Header()] = None,
    x_user_image_url: Annotated[str | None, Header()] = None,
) -> Identity:
    """Build the caller's identity from the auth proxy headers."""
    if x_user_id and x_user_id.strip():
        return Authenticated(
            external_id=x_user_id.strip(),
            profile=UserProfile(
                email=x_user_email,
                first_name=x_user_first_name,
                last_name=x_user_last_name,
                image_url=x_user_image_url,
            ),
        )
    client_host = request.client.host if request.client else None
    return Anonymous(client_host=client_host)


def _require_authenticated(identity: Annotated[Identity, Depends(_get_identity)]) -> Authenticated:
    if not isinstance(identity, Authenticated):
        raise AuthenticationRequired()
    return identity


PipelineDep = Annotated[GenerationPipeline, Depends(_get_pipeline)]
HistoryDep = Annotated[HistoryService, Depends(_get_history_service)]
IdentityDep = Annotated[Identity, Depends(_get_identity)]
AuthenticatedDep = Annotated[Authenticated, Depends(_require_authenticated)]


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


@router.post(
    "/generate",
    response_model=GenerateResponse,
    response_model_exclude_unset=True,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        429: {"model": QuotaExceededResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Generate reaction GIFs from three perspectives",
)
async def generate(
    body: GenerateRequest,
    response: Response,
    identity: IdentityDep,
    pipeline: PipelineDep,
) -> Any:
    """Run the full pipeline for one text.

    Quota rejections are rendered here so the 429 carries rate-limit
    headers; every other domain error is left to the error middleware.
    """
    try:
        outcome = await pipeline.generate(body.text, identity)
    except QuotaExceeded as exc:
        rejection = QuotaExceededResponse(
            error=exc.message,
            limit=exc.limit,
            remaining=0,
            reset=exc.reset_at,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=rejection.model_dump(mode="json", by_alias=True),
            headers=rate_limit_headers(exc.limit, 0, exc.reset_at),
        )

    decision = outcome.admission.decision
    if decision is not None:
        response.headers.update(
            rate_limit_headers(decision.limit, decision.remaining, decision.reset_at)
        )
    return build_generate_response(outcome.result, decision)


# ---------------------------------------------------------------------------
# History & stats
# ---------------------------------------------------------------------------


@router.get(
    "/history",
    response_model=HistoryResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Paged generation history, grouped per request",
)
async def get_history(
    identity: AuthenticatedDep,
    history: HistoryDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> HistoryResponse:
    """Return the caller's generation groups, newest first."""
    result = await history.get_history(identity.external_id, page=page, limit=limit)
    return build_history_response(result)


@router.get(
    "/stats",
    response_model=StatsResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Usage counters for the caller",
)
async def get_stats(identity: AuthenticatedDep, history: HistoryDep) -> StatsResponse:
    stats = await history.get_usage_stats(identity.external_id)
    return StatsResponse.from_stats(stats)


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability."""
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    critical_ok = providers.get("llm", False) and providers.get("search", False)
    return HealthResponse(
        status="healthy" if critical_ok else "degraded",
        version=getattr(request.app.state, "version", "0.1.0"),
        providers=providers,
    )
