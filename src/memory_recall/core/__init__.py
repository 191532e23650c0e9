from .base import (
    ApplicationError,
    ErrorCode,
    ErrorLevel,
)
from .errors import ConfigurationError, InvalidQueryError, RetrievalError

__all__ = [
    "ApplicationError",
    "ConfigurationError",
    "ErrorCode",
    "ErrorLevel",
    "InvalidQueryError",
    "RetrievalError",
]
