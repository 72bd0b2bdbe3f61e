"""Pydantic request/response schemas for the gifpicker API.

Defines the public contract for the generation, history, stats and health
endpoints.  Wire names are camelCase (``totalFound``, ``groupId``) to match
what browser clients expect; Python attributes stay snake_case through an
alias generator, and FastAPI serialises responses by alias.

Convention: request schemas end with "Request", response schemas end with
"Response".  Builders that map domain models onto these schemas live next
to the schemas so routes stay thin.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from gifpicker.models.generation import (
    GenerationGroup,
    GenerationRecord,
    GenerationResult,
    HistoryPage,
    QuotaDecision,
    UsageStats,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class GenerateRequest(BaseModel):
    """Body of ``POST /generate``.

    ``text`` is validated by the pipeline rather than here so that a
    missing or blank value answers 400 ``Text input is required``.
    """

    text: Any = None


class GeneratedGif(_CamelModel):
    """One successful perspective in a generation response."""

    url: str
    keywords: list[str]
    topic: str | None = None
    reasoning: str
    title: str
    perspective: str
    degraded: bool = False


class RateLimitInfo(_CamelModel):
    remaining: int
    limit: int
    reset: datetime


class GenerateResponse(_CamelModel):
    """Successful generation: only perspectives that found a GIF are listed."""

    results: list[GeneratedGif]
    total_found: int
    requested_perspectives: int
    rate_limit: RateLimitInfo | None = None


class QuotaExceededResponse(_CamelModel):
    """429 body: carries the window figures so clients can show a reset time."""

    error: str
    limit: int
    remaining: int = 0
    reset: datetime


def build_generate_response(
    result: GenerationResult,
    decision: QuotaDecision | None,
) -> GenerateResponse:
    """Map a pipeline result (and optional quota decision) to the wire shape."""
    results = [
        GeneratedGif(
            url=s.chosen.media_url,
            keywords=list(s.strategy.keywords),
            topic=s.strategy.topic,
            reasoning=s.reasoning,
            title=s.chosen.title,
            perspective=s.strategy.perspective.value,
            degraded=s.degraded,
        )
        for s in result.selections
        if s.chosen is not None
    ]
    fields: dict[str, Any] = {
        "results": results,
        "total_found": result.total_found,
        "requested_perspectives": result.requested_perspectives,
    }
    # Anonymous callers leave rate_limit unset; the route drops unset keys.
    if decision is not None:
        fields["rate_limit"] = RateLimitInfo(
            remaining=decision.remaining,
            limit=decision.limit,
            reset=decision.reset_at,
        )
    return GenerateResponse(**fields)


def rate_limit_headers(limit: int, remaining: int, reset_at: datetime) -> dict[str, str]:
    """``X-RateLimit-*`` headers; reset is a UNIX timestamp in seconds."""
    return {
        "X-RateLimit-Limit": str(limit),
        "X-RateLimit-Remaining": str(remaining),
        "X-RateLimit-Reset": str(int(reset_at.timestamp())),
    }


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


class HistoryGif(_CamelModel):
    id: str
    url: str
    title: str
    keywords: list[str]
    topic: str | None = None
    reasoning: str
    perspective: str | None = None
    created_at: datetime


class HistoryGroup(_CamelModel):
    group_id: str
    input_text: str
    created_at: datetime
    gifs: list[HistoryGif]


class Pagination(_CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class HistoryResponse(_CamelModel):
    generations: list[HistoryGroup]
    pagination: Pagination


def _history_gif(record: GenerationRecord) -> HistoryGif:
    return HistoryGif(
        id=record.id,
        url=record.media_url,
        title=record.title,
        keywords=list(record.keywords),
        topic=record.topic,
        reasoning=record.reasoning,
        perspective=record.perspective,
        created_at=record.created_at,
    )


def _history_group(group: GenerationGroup) -> HistoryGroup:
    return HistoryGroup(
        group_id=group.group_id,
        input_text=group.input_text,
        created_at=group.created_at,
        gifs=[_history_gif(r) for r in group.records],
    )


def build_history_response(page: HistoryPage) -> HistoryResponse:
    return HistoryResponse(
        generations=[_history_group(g) for g in page.groups],
        pagination=Pagination(
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
        ),
    )


# ---------------------------------------------------------------------------
# Stats / system
# ---------------------------------------------------------------------------


class StatsResponse(_CamelModel):
    total_generations: int
    today_generations: int
    days_active: int

    @classmethod
    def from_stats(cls, stats: UsageStats) -> StatsResponse:
        return cls(
            total_generations=stats.total_generations,
            today_generations=stats.today_generations,
            days_active=stats.days_active,
        )


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body.  ``code`` is the exception class name."""

    error: str
    code: str | None = None
