"""Unit tests for history reconstruction, pagination and usage stats."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from gifpicker.interfaces.generation_store import IGenerationStore
from gifpicker.models.generation import GenerationGroup, GenerationRecord
from gifpicker.services.history_service import (
    HistoryService,
    compute_usage_stats,
    paginate,
    reconstruct_groups,
)

T0 = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _record(
    record_id: str,
    group_id: str | None,
    perspective: str | None = "emotional",
    created_at: datetime = T0,
    input_text: str = "text",
) -> GenerationRecord:
    return GenerationRecord(
        id=record_id,
        owner_id="internal-1",
        group_id=group_id,
        input_text=input_text,
        perspective=perspective,
        keywords=["k"],
        reasoning="r",
        media_url=f"https://m/{record_id}.gif",
        title=record_id,
        created_at=created_at,
    )


def _groups(count: int) -> list[GenerationGroup]:
    records = [
        _record(f"r{i}", f"group_{i}", created_at=T0 - timedelta(minutes=i))
        for i in range(count)
    ]
    return reconstruct_groups(records)


# ======================================================================
# Grouping
# ======================================================================


class TestReconstructGroups:
    def test_groups_by_id_with_legacy_singleton(self) -> None:
        records = [
            _record("a", "g", perspective="literal"),
            _record("b", "g", perspective="emotional"),
            _record("c", None, perspective=None, created_at=T0 - timedelta(hours=1)),
        ]
        groups = reconstruct_groups(records)

        assert [g.group_id for g in groups] == ["g", "c"]
        assert [r.id for r in groups[0].records] == ["b", "a"]
        assert [r.id for r in groups[1].records] == ["c"]

    def test_unknown_perspective_sorts_last(self) -> None:
        records = [
            _record("x", "g", perspective=None),
            _record("s", "g", perspective="sarcastic"),
            _record("e", "g", perspective="emotional"),
        ]
        group = reconstruct_groups(records)[0]
        assert [r.id for r in group.records] == ["e", "s", "x"]

    def test_groups_sorted_newest_first_by_latest_record(self) -> None:
        records = [
            _record("old1", "g_old", created_at=T0 - timedelta(days=2)),
            _record("new1", "g_new", created_at=T0 - timedelta(days=1)),
            _record("old2", "g_old", created_at=T0),
        ]
        groups = reconstruct_groups(records)
        assert [g.group_id for g in groups] == ["g_old", "g_new"]
        assert groups[0].created_at == T0

    def test_no_records_no_groups(self) -> None:
        assert reconstruct_groups([]) == []

    def test_group_carries_input_text(self) -> None:
        groups = reconstruct_groups([_record("a", "g", input_text="hello there")])
        assert groups[0].input_text == "hello there"


# ======================================================================
# Pagination
# ======================================================================


class TestPaginate:
    def test_twenty_five_groups_page_size_twelve(self) -> None:
        groups = _groups(25)

        first = paginate(groups, page=1, limit=12)
        third = paginate(groups, page=3, limit=12)

        assert first.total_pages == 3
        assert first.total == 25
        assert [g.group_id for g in first.groups] == [f"group_{i}" for i in range(12)]
        assert [g.group_id for g in third.groups] == ["group_24"]

    def test_page_beyond_range_is_empty(self) -> None:
        page = paginate(_groups(5), page=4, limit=12)
        assert page.groups == []
        assert page.total_pages == 1

    def test_empty_history(self) -> None:
        page = paginate([], page=1, limit=12)
        assert page.total == 0
        assert page.total_pages == 0

    def test_counts_groups_not_records(self) -> None:
        records = [
            _record(f"{g}-{p}", g, perspective=p)
            for g in ("g1", "g2")
            for p in ("emotional", "literal", "sarcastic")
        ]
        page = paginate(reconstruct_groups(records), page=1, limit=1)
        assert page.total == 2
        assert page.total_pages == 2
        assert len(page.groups[0].records) == 3


# ======================================================================
# Usage stats
# ======================================================================


class TestUsageStats:
    def test_counts_groups_today_and_days_active(self) -> None:
        now = datetime(2025, 3, 10, 15, 0, tzinfo=timezone.utc)
        records = [
            _record("a", "g1", perspective="emotional", created_at=now - timedelta(hours=1)),
            _record("b", "g1", perspective="literal", created_at=now - timedelta(hours=1)),
            _record("c", "g2", created_at=now - timedelta(days=2)),
            _record("d", None, created_at=now - timedelta(hours=20)),
        ]
        stats = compute_usage_stats(
            reconstruct_groups(records),
            user_created_at=now - timedelta(days=5, hours=3),
            now=now,
        )
        assert stats.total_generations == 3
        assert stats.today_generations == 1
        assert stats.days_active == 5

    def test_days_active_at_least_one(self) -> None:
        now = datetime(2025, 3, 10, 15, 0, tzinfo=timezone.utc)
        stats = compute_usage_stats([], user_created_at=now - timedelta(minutes=5), now=now)
        assert stats.days_active == 1


# ======================================================================
# Service
# ======================================================================


class TestHistoryService:
    @pytest.mark.asyncio
    async def test_unknown_user_gets_empty_page(self, mock_generation_store: IGenerationStore) -> None:
        mock_generation_store.get_user.return_value = None
        page = await HistoryService(mock_generation_store).get_history("nobody")

        assert page.groups == []
        assert page.limit == 12
        mock_generation_store.list_generations.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reads_owner_records(self, mock_generation_store: IGenerationStore) -> None:
        mock_generation_store.list_generations.return_value = [
            _record("a", "g", perspective="literal"),
            _record("b", "g", perspective="emotional"),
        ]
        page = await HistoryService(mock_generation_store).get_history("user_123", page=1, limit=5)

        mock_generation_store.list_generations.assert_awaited_once_with("internal-1")
        assert page.total == 1
        assert [r.id for r in page.groups[0].records] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_limit_capped(self, mock_generation_store: IGenerationStore) -> None:
        page = await HistoryService(mock_generation_store, max_page_size=50).get_history(
            "user_123", limit=500
        )
        assert page.limit == 50

    @pytest.mark.asyncio
    async def test_stats_unknown_user_zeros(self, mock_generation_store: IGenerationStore) -> None:
        mock_generation_store.get_user.return_value = None
        stats = await HistoryService(mock_generation_store).get_usage_stats("nobody")
        assert (stats.total_generations, stats.today_generations, stats.days_active) == (0, 0, 0)

    @pytest.mark.asyncio
    async def test_stats_use_injected_clock(self, mock_generation_store: IGenerationStore) -> None:
        user = await mock_generation_store.get_user("user_123")
        now = user.created_at + timedelta(days=4, hours=1)
        mock_generation_store.list_generations.return_value = [
            _record("a", "g1", created_at=now - timedelta(minutes=10)),
        ]
        service = HistoryService(mock_generation_store, clock=lambda: now)

        stats = await service.get_usage_stats("user_123")

        assert stats.total_generations == 1
        assert stats.today_generations == 1
        assert stats.days_active == 4
