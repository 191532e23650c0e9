"""Specific error types for memory retrieval."""

from .base import (
    ApplicationError,
    ConfigurationErrorDetails,
    DatabaseErrorDetails,
    ErrorCode,
    ErrorLevel,
    ValidationErrorDetails,
)


class ConfigurationError(ApplicationError):
    """Required configuration is missing or unusable. Never retried."""

    def __init__(
        self,
        message: str,
        details: ConfigurationErrorDetails | dict | None = None,
        code: ErrorCode = ErrorCode.CONFIG_MISSING,
    ):
        super().__init__(
            message=message,
            code=code,
            level=ErrorLevel.CRITICAL,
            details=details,
        )


class InvalidQueryError(ApplicationError):
    """The caller supplied a malformed query."""

    def __init__(self, message: str, details: ValidationErrorDetails | dict | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_INPUT,
            level=ErrorLevel.WARNING,
            details=details,
        )


class RetrievalError(ApplicationError):
    """The storage backend was unreachable or failed the query."""

    def __init__(
        self,
        message: str,
        details: DatabaseErrorDetails | None = None,
        code: ErrorCode = ErrorCode.DB_QUERY,
    ):
        super().__init__(
            message=message,
            code=code,
            level=ErrorLevel.ERROR,
            details=details
            or DatabaseErrorDetails(
                source="retrieval",
                operation="query",
                service_name="postgres",
            ),
        )
