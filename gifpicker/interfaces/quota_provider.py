"""Abstract base class for quota (rate-limit) providers.

The quota capability owns the per-key sliding window.  Implementations
must make :meth:`IQuotaProvider.check` an atomic check-and-increment:
two concurrent checks for the same key may never both consume the last
slot.  The windowing algorithm itself is the provider's business.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from gifpicker.models.generation import QuotaDecision


# Concrete implementation: SQLiteQuotaProvider (gifpicker/providers/quota/)
class IQuotaProvider(ABC):
    """Contract for per-key request quotas."""

    @abstractmethod
    async def check(self, key: str) -> QuotaDecision:
        """Consume one slot for *key* if available.

        Returns
        -------
        QuotaDecision
            ``admitted=True`` with the slots left after this request, or
            ``admitted=False, remaining=0``.  ``reset_at`` is when the
            oldest counted request leaves the window.
        """

    @abstractmethod
    async def initialize(self) -> None:
        """Create backing tables if they don't exist.  Called at startup."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
