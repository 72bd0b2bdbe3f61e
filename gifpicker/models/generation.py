"""Generation result, persistence and history models.

Three families live here:

- **Pipeline output** -- :class:`GenerationResult` is what the aggregator
  hands back to the API layer; :class:`QuotaDecision` and
  :class:`GenerationOutcome` carry the quota figures alongside it.
- **Persistence** -- :class:`GenerationRecord` (one row per successful
  perspective) and :class:`UserRecord` (the identity store row).
- **History** -- :class:`GenerationGroup`, derived from records sharing a
  group id, and :class:`HistoryPage` / :class:`UsageStats` built from them.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from gifpicker.models.strategy import REQUESTED_PERSPECTIVES, Perspective, Selection


def new_record_id() -> str:
    return uuid4().hex


def new_group_id() -> str:
    """Return a fresh opaque group id; never reused across requests."""
    return f"group_{uuid4().hex}"


# ---------------------------------------------------------------------------
# Quota
# ---------------------------------------------------------------------------
class QuotaDecision(BaseModel):
    """Answer from the quota capability for one identity key."""

    model_config = ConfigDict(frozen=True)

    admitted: bool
    limit: int
    remaining: int = Field(ge=0)
    reset_at: datetime


class Admission(BaseModel):
    """What the quota gate hands the pipeline for an admitted request.

    ``decision`` is ``None`` when the caller bypassed server-side gating;
    ``user_id`` is the internal identity-store id for authenticated callers.
    """

    model_config = ConfigDict(frozen=True)

    decision: QuotaDecision | None = None
    user_id: str | None = None


# ---------------------------------------------------------------------------
# Pipeline output
# ---------------------------------------------------------------------------
class GenerationResult(BaseModel):
    """Successful perspectives of one request, in perspective-rank order.

    ``total_found < requested_perspectives`` is the only partial-failure
    signal callers see.
    """

    model_config = ConfigDict(frozen=True)

    selections: list[Selection]
    failed_perspectives: list[Perspective] = Field(default_factory=list)
    requested_perspectives: int = REQUESTED_PERSPECTIVES

    @property
    def total_found(self) -> int:
        return len(self.selections)


class GenerationOutcome(BaseModel):
    """A completed request: the result plus the caller's admission."""

    model_config = ConfigDict(frozen=True)

    result: GenerationResult
    admission: Admission
    group_id: str | None = None


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------
class UserRecord(BaseModel):
    """Identity-store row, unique by ``external_id``."""

    model_config = ConfigDict(frozen=True)

    id: str
    external_id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None
    created_at: datetime
    updated_at: datetime


class GenerationRecord(BaseModel):
    """One persisted perspective of one request.

    ``group_id`` and ``perspective`` are ``None`` on legacy rows written
    before grouping existed.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_record_id)
    owner_id: str
    group_id: str | None = None
    input_text: str
    perspective: str | None = None
    keywords: list[str] = Field(default_factory=list)
    topic: str | None = None
    reasoning: str
    media_url: str
    title: str
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )

    @property
    def group_key(self) -> str:
        """The group this record belongs to; legacy rows are their own group."""
        return self.group_id or self.id


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------
class GenerationGroup(BaseModel):
    """All records written from one request, in perspective-rank order."""

    model_config = ConfigDict(frozen=True)

    group_id: str
    input_text: str
    created_at: datetime
    records: list[GenerationRecord] = Field(min_length=1)


class HistoryPage(BaseModel):
    """One page of groups plus pagination metadata."""

    model_config = ConfigDict(frozen=True)

    groups: list[GenerationGroup]
    total: int
    page: int
    limit: int
    total_pages: int


class UsageStats(BaseModel):
    """Per-user counters, counted in groups rather than records."""

    model_config = ConfigDict(frozen=True)

    total_generations: int = 0
    today_generations: int = 0
    days_active: int = 0
