"""
Unified exception hierarchy for the study artifact backend.

All domain exceptions inherit from StudyPlanError and carry:
- error_code: machine-readable string (e.g. "FILE_NOT_FOUND")
- status_code: HTTP status code
- message: human-readable description
- context: optional structured metadata dict
"""

from typing import Optional, Dict, Any


class StudyPlanError(Exception):
    """Base exception for all study-plan domain errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.context = context or {}
        super().__init__(message)


class ConfigurationError(StudyPlanError):
    """Missing credentials or endpoints. Raised before any network call."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="CONFIGURATION_ERROR", status_code=500, context=context)


class ValidationError(StudyPlanError):
    """400-level validation / bad-request errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INVALID_REQUEST",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=400, context=context)


class NotFoundError(StudyPlanError):
    """404 resource-not-found errors (also used when the caller does not own the row)."""

    def __init__(
        self,
        message: str,
        error_code: str = "FILE_NOT_FOUND",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=404, context=context)


class UpstreamError(StudyPlanError):
    """Non-2xx or malformed response from storage or a generation endpoint."""

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        upstream_body: Optional[str] = None,
        error_code: str = "UPSTREAM_ERROR",
        status_code: int = 502,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body
        ctx = {"upstream_status": upstream_status}
        if context:
            ctx.update(context)
        super().__init__(message, error_code=error_code, status_code=status_code, context=ctx)


class RateLimitError(UpstreamError):
    """HTTP 429 from the streaming chat endpoint."""

    def __init__(self, message: str = "Rate limit exceeded. Please try again later.", upstream_body: Optional[str] = None):
        super().__init__(
            message,
            upstream_status=429,
            upstream_body=upstream_body,
            error_code="RATE_LIMITED",
            status_code=429,
        )


class PaymentRequiredError(UpstreamError):
    """HTTP 402 from the streaming chat endpoint."""

    def __init__(self, message: str = "Payment required. Please add credits.", upstream_body: Optional[str] = None):
        super().__init__(
            message,
            upstream_status=402,
            upstream_body=upstream_body,
            error_code="PAYMENT_REQUIRED",
            status_code=402,
        )


class ParseError(StudyPlanError):
    """Model output could not be reduced to the expected structure."""

    def __init__(self, message: str = "Unparseable model output", context: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="UNPARSEABLE_MODEL_OUTPUT", status_code=502, context=context)


class PersistenceError(StudyPlanError):
    """500-level batch write rejections from the data store."""

    def __init__(
        self,
        message: str,
        error_code: str = "PERSISTENCE_ERROR",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=500, context=context)
