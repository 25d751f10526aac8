"""
Structured error handling and response formatting.
Provides consistent error responses with error codes and context.
"""

from typing import Optional, Dict, Any

from shared_utils.constants import ErrorCode, LogScope
from shared_utils.logging_utils import get_scoped_logger


class AppException(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        error_code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        http_status: int = 500
    ):
        self.error_code = error_code
        self.message = message
        self.context = context or {}
        self.http_status = http_status
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to response dictionary."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "context": self.context
            }
        }


class ValidationError(AppException):
    """Validation/input error."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.INVALID_INPUT.value,
            message=message,
            context=context,
            http_status=400
        )


class AuthenticationError(AppException):
    """Caller identity missing from the request."""

    def __init__(self, message: str = "Unauthorized", context: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.UNAUTHENTICATED.value,
            message=message,
            context=context,
            http_status=401
        )


class NotFoundError(AppException):
    """Resource missing or not owned by the caller."""

    def __init__(self, resource: str, resource_id: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.NOT_FOUND.value,
            message=f"{resource} not found",
            context={**(context or {}), "resource": resource, "id": resource_id},
            http_status=404
        )


class ConfigurationError(AppException):
    """Configuration error."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.INVALID_CONFIG.value,
            message=message,
            context=context,
            http_status=500
        )


class ProviderError(AppException):
    """Embedding or LLM provider call failed or returned malformed output."""

    def __init__(
        self,
        provider: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        error_code: str = ErrorCode.PROVIDER_ERROR.value,
        http_status: int = 502,
    ):
        super().__init__(
            error_code=error_code,
            message=f"{provider}: {message}",
            context={**(context or {}), "provider": provider},
            http_status=http_status
        )


class NoProviderAvailableError(ProviderError):
    """No provider is configured, or every configured provider failed."""

    def __init__(self, provider: str, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            provider=provider,
            message=message,
            context=context,
            error_code=ErrorCode.PROVIDER_UNAVAILABLE.value,
            http_status=503
        )


class QuotaExceededError(AppException):
    """Usage quota or rate limit hit; surfaced to the caller as-is."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.QUOTA_EXCEEDED.value,
            message=message,
            context=context,
            http_status=429
        )


class ExternalServiceError(AppException):
    """External service unavailable error."""

    def __init__(self, service: str, message: str, context: Optional[Dict[str, Any]] = None):
        full_message = f"{service} unavailable: {message}"
        super().__init__(
            error_code=ErrorCode.EXTERNAL_SERVICE_ERROR.value,
            message=full_message,
            context={**(context or {}), "service": service},
            http_status=503
        )


class IndexingError(AppException):
    """Re-index pipeline error."""

    def __init__(
        self,
        message: str,
        meeting_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = {**(context or {})}
        if meeting_id:
            ctx["meeting_id"] = meeting_id
        super().__init__(
            error_code=ErrorCode.INDEXING_FAILED.value,
            message=message,
            context=ctx,
            http_status=500,
        )


def log_exception(
    exc: Exception,
    scope: str = LogScope.ERROR_HANDLER,
    logger=None
) -> None:
    """Log exception with structured context.

    Args:
        exc: Exception to log
        scope: Log scope identifier
        logger: Optional custom logger (uses structlog if not provided)
    """
    if logger is None:
        logger = get_scoped_logger(scope)

    if isinstance(exc, AppException):
        logger.error(
            "app_exception",
            error_code=exc.error_code,
            message=exc.message,
            http_status=exc.http_status,
            context=exc.context
        )
    else:
        logger.error(
            "unexpected_exception",
            error_type=type(exc).__name__,
            message=str(exc),
            exc_info=True
        )


def handle_error(
    exc: Exception,
    scope: str = LogScope.ERROR_HANDLER,
    default_error_code: str = ErrorCode.INTERNAL_ERROR.value
) -> Dict[str, Any]:
    """Handle exception and return structured error response.

    Args:
        exc: Exception to handle
        scope: Log scope
        default_error_code: Default error code for non-AppException errors

    Returns:
        Structured error response dictionary
    """
    log_exception(exc, scope)

    if isinstance(exc, AppException):
        return exc.to_dict()
    return {
        "error": {
            "code": default_error_code,
            "message": "An unexpected error occurred",
            "context": {"error_type": type(exc).__name__}
        }
    }
