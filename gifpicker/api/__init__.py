"""gifpicker API layer: routes, schemas and middleware."""

from gifpicker.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from gifpicker.api.routes import router
from gifpicker.api.schemas import (
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    HealthResponse,
    HistoryResponse,
    QuotaExceededResponse,
    StatsResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "ErrorResponse",
    "GenerateRequest",
    "GenerateResponse",
    "HealthResponse",
    "HistoryResponse",
    "QuotaExceededResponse",
    "StatsResponse",
]
