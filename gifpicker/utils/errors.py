"""Custom exception hierarchy for gifpicker.

All application exceptions inherit from :class:`GifPickerError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "giphy", "sqlite") caused the failure.

The hierarchy is organized by pipeline stage:

    GifPickerError  (base -- catch-all for any gifpicker error)
    +-- InvalidInput              (empty / malformed text, rejected up front)
    +-- AuthenticationRequired    (history / stats called without an identity)
    +-- StrategyDerivationFailed  (fatal: no strategies, nothing to search)
    +-- BranchSearchError         (recovered inside the branch)
    +-- BranchSelectionError      (recovered via fallback to first candidate)
    +-- QuotaExceeded             (caller over the 24h window, no work done)
    +-- NoResultsFound            (every branch came back empty)
    +-- PersistenceFailure        (logged only, never reaches the caller)
    +-- LLMError                  (any reasoning-service call failure)
    +-- ProviderUnavailableError  (external service down / unreachable)
    +-- ConfigurationError        (startup / missing config)

Each class declares the HTTP ``status_code`` the API layer answers with
when the error escapes a route.  Branch-local errors never escape, so
their status is informational only.
"""

from __future__ import annotations

from datetime import datetime


class GifPickerError(Exception):
    """Base exception for all gifpicker errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[giphy] Search failed``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Request gating errors
# ---------------------------------------------------------------------------

class InvalidInput(GifPickerError):
    """Raised when the request text is empty or not a string."""

    status_code = 400

    def __init__(
        self,
        message: str = "Text input is required",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class AuthenticationRequired(GifPickerError):
    """Raised when an endpoint that needs an identity is called anonymously."""

    status_code = 401

    def __init__(
        self,
        message: str = "Unauthorized",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class QuotaExceeded(GifPickerError):
    """Raised when an identified caller has used up the daily window.

    Carries the quota figures so the API layer can render the
    ``{error, limit, remaining, reset}`` body and rate-limit headers.
    """

    status_code = 429

    def __init__(
        self,
        limit: int,
        reset_at: datetime,
        message: str | None = None,
        provider_name: str | None = None,
    ) -> None:
        self.limit = limit
        self.remaining = 0
        self.reset_at = reset_at
        super().__init__(
            message=message
            or f"Rate limit exceeded. You've used all {limit} generations for today.",
            provider_name=provider_name,
        )


# ---------------------------------------------------------------------------
# Pipeline stage errors
# ---------------------------------------------------------------------------

class StrategyDerivationFailed(GifPickerError):
    """Raised when the reasoning service cannot produce a valid strategy set.

    This is the only stage whose failure is not isolated: without
    strategies there is nothing to search.
    """

    status_code = 502

    def __init__(
        self,
        message: str = "Failed to derive search strategies",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class BranchSearchError(GifPickerError):
    """Raised by a media-search provider; captured on the branch outcome.

    ``kind`` is a :class:`~gifpicker.models.strategy.SearchErrorKind`
    value describing what went wrong.
    """

    def __init__(
        self,
        kind: str,
        message: str = "Media search failed",
        provider_name: str | None = None,
    ) -> None:
        self.kind = kind
        super().__init__(message=message, provider_name=provider_name)


class BranchSelectionError(GifPickerError):
    """Raised when the reasoning service returns an unusable selection."""

    def __init__(
        self,
        message: str = "Candidate selection failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NoResultsFound(GifPickerError):
    """Raised when no branch produced a chosen candidate."""

    status_code = 404

    def __init__(
        self,
        message: str = "No GIFs found for any perspective. Please try a different description.",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PersistenceFailure(GifPickerError):
    """Raised by a store when a write fails.  Logged, never surfaced."""

    def __init__(
        self,
        message: str = "Failed to persist generation",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class LLMError(GifPickerError):
    """Raised when an LLM API call fails or returns an unparseable response."""

    status_code = 502

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderUnavailableError(GifPickerError):
    """Raised when an external service or provider is unreachable."""

    status_code = 503

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(GifPickerError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
