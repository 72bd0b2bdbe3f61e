"""Quota gate: admit or reject a caller before any expensive work runs.

Dispatches on the :data:`~gifpicker.models.identity.Identity` union:

    Authenticated ──→ quota.check(external_id) ──→ reject → QuotaExceeded
                                                  └→ admit  → upsert profile → Admission(user_id)
    Anonymous     ──→ bypass (client holds a one-shot trial flag)
                      or, with anonymous gating on, quota.check("anon:<host>")

Checking happens before strategy derivation so a rejected caller costs
no reasoning-service or search-service budget.
"""

from __future__ import annotations

import asyncio

import structlog

from gifpicker.interfaces.generation_store import IGenerationStore
from gifpicker.interfaces.quota_provider import IQuotaProvider
from gifpicker.models.generation import Admission, QuotaDecision
from gifpicker.models.identity import Anonymous, Authenticated, Identity
from gifpicker.utils.concurrency import bounded
from gifpicker.utils.errors import ProviderUnavailableError, QuotaExceeded
from gifpicker.utils.logging import get_logger

ANONYMOUS_KEY_PREFIX = "anon:"


class QuotaGate:
    """Per-identity admission control plus identity-store upsert."""

    def __init__(
        self,
        quota_provider: IQuotaProvider,
        store: IGenerationStore,
        anonymous_enabled: bool = False,
        timeout: float | None = 5.0,
    ) -> None:
        self._quota = quota_provider
        self._store = store
        self._anonymous_enabled = anonymous_enabled
        self._timeout = timeout
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def admit(self, identity: Identity) -> Admission:
        """Return an :class:`Admission` or raise :class:`QuotaExceeded`."""
        if isinstance(identity, Authenticated):
            return await self._admit_authenticated(identity)
        if isinstance(identity, Anonymous):
            return await self._admit_anonymous(identity)
        raise TypeError(f"Unsupported identity type: {type(identity).__name__}")

    async def _admit_authenticated(self, identity: Authenticated) -> Admission:
        decision = await self._check(identity.external_id)
        try:
            user = await bounded(
                self._store.upsert_user(identity.external_id, identity.profile),
                self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise self._unavailable("Identity store did not answer in time", self._store) from exc
        return Admission(decision=decision, user_id=user.id)

    async def _admit_anonymous(self, identity: Anonymous) -> Admission:
        if not self._anonymous_enabled or not identity.client_host:
            self._logger.debug("quota_bypassed_anonymous")
            return Admission()
        decision = await self._check(f"{ANONYMOUS_KEY_PREFIX}{identity.client_host}")
        return Admission(decision=decision)

    async def _check(self, key: str) -> QuotaDecision:
        try:
            decision = await bounded(self._quota.check(key), self._timeout)
        except asyncio.TimeoutError as exc:
            raise self._unavailable("Quota check did not answer in time", self._quota) from exc
        if not decision.admitted:
            self._logger.info(
                "quota_rejected",
                key=key,
                limit=decision.limit,
                reset_at=decision.reset_at.isoformat(),
            )
            raise QuotaExceeded(
                limit=decision.limit,
                reset_at=decision.reset_at,
                provider_name=self._quota.get_provider_name(),
            )
        return decision

    def _unavailable(self, message: str, provider: IQuotaProvider | IGenerationStore) -> ProviderUnavailableError:
        self._logger.error("quota_gate_timeout", provider=provider.get_provider_name(), timeout=self._timeout)
        return ProviderUnavailableError(message=message, provider_name=provider.get_provider_name())
