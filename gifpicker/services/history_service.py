"""Rebuild generation groups from flat records for history and stats.

The store only knows records.  Groups are derived on every read:

1. bucket records by ``group_id`` (legacy rows with none are their own
   group, keyed by record id)
2. order each group's records by perspective rank
3. order groups by their newest record, newest group first
4. paginate over groups, never over raw records

Usage stats are counted the same way, in groups.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timezone

from gifpicker.interfaces.generation_store import IGenerationStore
from gifpicker.models.generation import (
    GenerationGroup,
    GenerationRecord,
    HistoryPage,
    UsageStats,
)
from gifpicker.models.strategy import perspective_rank
from gifpicker.utils.logging import get_logger


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


def reconstruct_groups(records: Iterable[GenerationRecord]) -> list[GenerationGroup]:
    """Group flat records and order groups newest first."""
    buckets: dict[str, list[GenerationRecord]] = {}
    for record in records:
        buckets.setdefault(record.group_key, []).append(record)

    groups = []
    for key, members in buckets.items():
        members.sort(key=lambda r: perspective_rank(r.perspective))
        groups.append(
            GenerationGroup(
                group_id=key,
                input_text=members[0].input_text,
                created_at=max(r.created_at for r in members),
                records=members,
            )
        )

    groups.sort(key=lambda g: g.created_at, reverse=True)
    return groups


def paginate(groups: Sequence[GenerationGroup], page: int, limit: int) -> HistoryPage:
    """Slice *groups* into 1-based page *page* of size *limit*.

    A page past the end is empty; ``total_pages`` is 0 when there are no groups.
    """
    page = max(1, page)
    limit = max(1, limit)
    start = (page - 1) * limit
    return HistoryPage(
        groups=list(groups[start : start + limit]),
        total=len(groups),
        page=page,
        limit=limit,
        total_pages=math.ceil(len(groups) / limit),
    )


def compute_usage_stats(
    groups: Sequence[GenerationGroup],
    user_created_at: datetime,
    now: datetime,
) -> UsageStats:
    """Count groups overall and since UTC midnight; days active is at least 1."""
    midnight = now.astimezone(timezone.utc).replace(  # noqa: UP017
        hour=0, minute=0, second=0, microsecond=0
    )
    today = sum(1 for g in groups if g.created_at >= midnight)
    days = math.floor((now - user_created_at).total_seconds() / 86400)
    return UsageStats(
        total_generations=len(groups),
        today_generations=today,
        days_active=max(1, days),
    )


class HistoryService:
    """Reads a user's records and serves grouped history pages and stats."""

    def __init__(
        self,
        store: IGenerationStore,
        default_page_size: int = 12,
        max_page_size: int = 100,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size
        self._clock = clock
        self._logger = get_logger(__name__)

    async def get_history(
        self,
        external_id: str,
        page: int = 1,
        limit: int | None = None,
    ) -> HistoryPage:
        limit = min(limit or self._default_page_size, self._max_page_size)
        user = await self._store.get_user(external_id)
        if user is None:
            return paginate([], page, limit)

        groups = reconstruct_groups(await self._store.list_generations(user.id))
        history = paginate(groups, page, limit)
        self._logger.debug(
            "history_page_built",
            external_id=external_id,
            page=history.page,
            groups=len(history.groups),
            total=history.total,
        )
        return history

    async def get_usage_stats(self, external_id: str) -> UsageStats:
        user = await self._store.get_user(external_id)
        if user is None:
            return UsageStats()
        groups = reconstruct_groups(await self._store.list_generations(user.id))
        return compute_usage_stats(groups, user.created_at, self._clock())
