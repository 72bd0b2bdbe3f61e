"""Unit tests for the sliding-window SQLiteQuotaProvider."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio

from gifpicker.providers.quota.sqlite_quota_provider import SQLiteQuotaProvider

DAY = 24 * 60 * 60
START = 1_735_732_800.0  # 2025-01-01T12:00:00Z


class FakeClock:
    """Manually advanced UNIX clock."""

    def __init__(self, now: float = START) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def quota(tmp_path: Path, clock: FakeClock) -> SQLiteQuotaProvider:
    provider = SQLiteQuotaProvider(db_path=tmp_path / "quota.db", limit=10, window_seconds=DAY, clock=clock)
    await provider.initialize()
    return provider


class TestWindow:
    @pytest.mark.asyncio
    async def test_limit_admits_then_rejects(self, quota: SQLiteQuotaProvider, clock: FakeClock) -> None:
        remaining = []
        for _ in range(10):
            decision = await quota.check("user_123")
            assert decision.admitted
            remaining.append(decision.remaining)
            clock.advance(60)

        rejected = await quota.check("user_123")

        assert remaining == list(range(9, -1, -1))
        assert not rejected.admitted
        assert rejected.remaining == 0
        assert rejected.limit == 10

    @pytest.mark.asyncio
    async def test_reset_is_oldest_hit_plus_window(self, quota: SQLiteQuotaProvider, clock: FakeClock) -> None:
        first = await quota.check("user_123")
        clock.advance(3600)
        second = await quota.check("user_123")

        expected = datetime.fromtimestamp(START + DAY, tz=timezone.utc)
        assert first.reset_at == expected
        assert second.reset_at == expected

    @pytest.mark.asyncio
    async def test_window_slides(self, quota: SQLiteQuotaProvider, clock: FakeClock) -> None:
        for _ in range(10):
            await quota.check("user_123")
        clock.advance(3600)
        for _ in range(5):
            await quota.check("user_123")
        assert not (await quota.check("user_123")).admitted

        # The first ten hits age out; the later five attempts were rejected
        # and never recorded.
        clock.advance(DAY - 3600 + 1)
        decision = await quota.check("user_123")
        assert decision.admitted
        assert decision.remaining == 9

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, quota: SQLiteQuotaProvider) -> None:
        for _ in range(10):
            await quota.check("alice")
        assert not (await quota.check("alice")).admitted
        assert (await quota.check("bob")).admitted


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_checks_never_over_admit(self, quota: SQLiteQuotaProvider) -> None:
        decisions = await asyncio.gather(*(quota.check("user_123") for _ in range(15)))

        admitted = [d for d in decisions if d.admitted]
        assert len(admitted) == 10
        assert sorted(d.remaining for d in admitted) == list(range(10))


def test_provider_name() -> None:
    assert SQLiteQuotaProvider().get_provider_name() == "sqlite_quota"
