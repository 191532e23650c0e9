"""Error handlers that turn application errors into HTTP responses"""

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

from memory_recall.core.logging import get_logger

from .base import ApplicationError, ErrorCode, ErrorLevel
from .error_context import ErrorContext, ErrorContextManager
from .errors import ConfigurationError, InvalidQueryError, RetrievalError

logger = get_logger(__name__)

STATUS_BY_ERROR: dict[type[ApplicationError], int] = {
    InvalidQueryError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ConfigurationError: status.HTTP_503_SERVICE_UNAVAILABLE,
    RetrievalError: status.HTTP_502_BAD_GATEWAY,
}


class ErrorHandler:
    """Formats an error into the structured response body"""

    def __init__(self, context_manager: ErrorContextManager | None = None):
        self.context_manager = context_manager or ErrorContextManager()

    def _format_response(self, error_context: ErrorContext, level: ErrorLevel) -> dict[str, Any]:
        response: dict[str, Any] = {
            "error": str(error_context.error),
            "error_code": ErrorCode.PROCESSING_FAILED.value,
            "level": level.value,
            "trace_id": error_context.trace_id,
            "timestamp": error_context.timestamp.isoformat(),
        }

        if isinstance(error_context.error, ApplicationError):
            response["error_code"] = error_context.error.code.value
            response["details"] = error_context.error.details.model_dump(mode="json")

        return response

    async def handle_async(self, error: Exception, level: ErrorLevel, **context: Any) -> dict[str, Any]:
        error_context = await self.context_manager.capture_context(error, **context)
        return self._format_response(error_context, level)


class GlobalErrorHandler(ErrorHandler):
    """Global error handler for the FastAPI application"""

    @staticmethod
    def status_code_for(error: ApplicationError) -> int:
        for error_type, status_code in STATUS_BY_ERROR.items():
            if isinstance(error, error_type):
                return status_code
        return status.HTTP_500_INTERNAL_SERVER_ERROR

    async def handle_application_error(self, request: Request, error: ApplicationError) -> JSONResponse:
        status_code = self.status_code_for(error)
        body = await self.handle_async(error, error.level, path=request.url.path)
        logger.log(
            error.level.to_logging_level(),
            f"Request failed: {error.message}",
            extra={"path": request.url.path, "status_code": status_code, "trace_id": body["trace_id"]},
        )
        return JSONResponse(status_code=status_code, content=body)
