"""Utility modules for gifpicker.

- **errors** -- Domain exception hierarchy rooted at GifPickerError; each
  pipeline stage raises its own subclass so callers can handle failures
  granularly.
- **concurrency** -- timeout-bounded, failure-isolated fan-out helpers used
  by the branch search and branch selection stages.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **llm_json** -- tolerant extraction of a JSON object from model replies.
"""

# -- Async concurrency helpers ---------------------------------------------
from gifpicker.utils.concurrency import bounded, isolated_gather

# -- Domain exception hierarchy --------------------------------------------
from gifpicker.utils.errors import (
    AuthenticationRequired,
    BranchSearchError,
    BranchSelectionError,
    ConfigurationError,
    GifPickerError,
    InvalidInput,
    LLMError,
    NoResultsFound,
    PersistenceFailure,
    ProviderUnavailableError,
    QuotaExceeded,
    StrategyDerivationFailed,
)

# -- Structured logging setup ----------------------------------------------
from gifpicker.utils.logging import configure_logging, get_logger, request_context

__all__ = [
    "AuthenticationRequired",
    "BranchSearchError",
    "BranchSelectionError",
    "ConfigurationError",
    "GifPickerError",
    "InvalidInput",
    "LLMError",
    "NoResultsFound",
    "PersistenceFailure",
    "ProviderUnavailableError",
    "QuotaExceeded",
    "StrategyDerivationFailed",
    "bounded",
    "configure_logging",
    "get_logger",
    "isolated_gather",
    "request_context",
]
