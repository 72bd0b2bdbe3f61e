"""Unit tests for QuotaGate admission and identity upsert."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from gifpicker.interfaces.generation_store import IGenerationStore
from gifpicker.interfaces.quota_provider import IQuotaProvider
from gifpicker.models.generation import QuotaDecision
from gifpicker.models.identity import Anonymous, Authenticated
from gifpicker.pipeline.quota_gate import QuotaGate
from gifpicker.utils.errors import ProviderUnavailableError, QuotaExceeded

RESET_AT = datetime(2025, 1, 2, 12, 0, tzinfo=timezone.utc)


class TestAuthenticated:
    @pytest.mark.asyncio
    async def test_admits_and_upserts_profile(
        self,
        mock_quota_provider: IQuotaProvider,
        mock_generation_store: IGenerationStore,
        authenticated: Authenticated,
    ) -> None:
        gate = QuotaGate(mock_quota_provider, mock_generation_store)
        admission = await gate.admit(authenticated)

        mock_quota_provider.check.assert_awaited_once_with("user_123")
        mock_generation_store.upsert_user.assert_awaited_once_with("user_123", authenticated.profile)
        assert admission.user_id == "internal-1"
        assert admission.decision is not None
        assert admission.decision.remaining == 9

    @pytest.mark.asyncio
    async def test_rejection_raises_before_upsert(
        self,
        mock_quota_provider: IQuotaProvider,
        mock_generation_store: IGenerationStore,
        authenticated: Authenticated,
    ) -> None:
        mock_quota_provider.check.return_value = QuotaDecision(
            admitted=False, limit=10, remaining=0, reset_at=RESET_AT
        )
        gate = QuotaGate(mock_quota_provider, mock_generation_store)

        with pytest.raises(QuotaExceeded) as exc_info:
            await gate.admit(authenticated)

        assert exc_info.value.status_code == 429
        assert exc_info.value.limit == 10
        assert exc_info.value.reset_at == RESET_AT
        mock_generation_store.upsert_user.assert_not_awaited()


class TestAnonymous:
    @pytest.mark.asyncio
    async def test_bypassed_by_default(
        self,
        mock_quota_provider: IQuotaProvider,
        mock_generation_store: IGenerationStore,
        anonymous: Anonymous,
    ) -> None:
        admission = await QuotaGate(mock_quota_provider, mock_generation_store).admit(anonymous)

        assert admission.decision is None
        assert admission.user_id is None
        mock_quota_provider.check.assert_not_awaited()
        mock_generation_store.upsert_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_gated_by_host_when_enabled(
        self,
        mock_quota_provider: IQuotaProvider,
        mock_generation_store: IGenerationStore,
        anonymous: Anonymous,
    ) -> None:
        gate = QuotaGate(mock_quota_provider, mock_generation_store, anonymous_enabled=True)
        admission = await gate.admit(anonymous)

        mock_quota_provider.check.assert_awaited_once_with("anon:203.0.113.7")
        assert admission.decision is not None
        assert admission.user_id is None
        mock_generation_store.upsert_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_host_is_bypassed_even_when_enabled(
        self,
        mock_quota_provider: IQuotaProvider,
        mock_generation_store: IGenerationStore,
    ) -> None:
        gate = QuotaGate(mock_quota_provider, mock_generation_store, anonymous_enabled=True)
        admission = await gate.admit(Anonymous())
        assert admission.decision is None
        mock_quota_provider.check.assert_not_awaited()


async def _stall(*_args: object) -> None:
    await asyncio.sleep(1)


class TestTimeouts:
    @pytest.mark.asyncio
    async def test_slow_quota_check_is_unavailable(
        self,
        mock_quota_provider: IQuotaProvider,
        mock_generation_store: IGenerationStore,
        authenticated: Authenticated,
    ) -> None:
        mock_quota_provider.check.side_effect = _stall
        gate = QuotaGate(mock_quota_provider, mock_generation_store, timeout=0.01)

        with pytest.raises(ProviderUnavailableError) as exc_info:
            await gate.admit(authenticated)

        assert exc_info.value.status_code == 503
        assert exc_info.value.provider_name == "mock-quota"
        mock_generation_store.upsert_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_slow_upsert_is_unavailable(
        self,
        mock_quota_provider: IQuotaProvider,
        mock_generation_store: IGenerationStore,
        authenticated: Authenticated,
    ) -> None:
        mock_generation_store.upsert_user.side_effect = _stall
        gate = QuotaGate(mock_quota_provider, mock_generation_store, timeout=0.01)

        with pytest.raises(ProviderUnavailableError, match="Identity store"):
            await gate.admit(authenticated)
