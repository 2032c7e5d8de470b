from enum import Enum
from typing import Any, Optional

from .models import AdapterError


class ErrorCode(str, Enum):
    """Standardized error codes raised by dialect adapters."""
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    EXECUTION_ERROR = "EXECUTION_ERROR"
    UNKNOWN_DIALECT = "UNKNOWN_DIALECT"


class ConnectionErrorHint(str, Enum):
    """Coarse classification of a driver connection failure."""
    DATABASE_NAME_INCORRECT = "database-name-incorrect"


SAFE_ERROR_MESSAGES = {
    ErrorCode.CONNECTION_ERROR: "Could not connect to the lakehouse. Check the connection details.",
    ErrorCode.EXECUTION_ERROR: "An internal database error occurred while executing the query.",
}


class DialectAdapterError(Exception):
    """Base class for every error raised by a dialect adapter.

    Attributes:
        code (ErrorCode): The standardized error code.
        retriable (bool): Whether the caller may retry the operation.
        raw (Optional[Any]): The underlying driver error, if any.
    """

    code: ErrorCode = ErrorCode.EXECUTION_ERROR
    retriable: bool = False

    def __init__(self, message: str, *, raw: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.raw = raw

    def get_safe_message(self) -> str:
        """Returns a sanitized message safe for end users."""
        return SAFE_ERROR_MESSAGES.get(self.code, self.message)

    def to_envelope(self) -> AdapterError:
        """Converts the exception into the serializable error envelope."""
        return AdapterError(
            code=self.code.value,
            message=self.message,
            retriable=self.retriable,
            raw=str(self.raw) if self.raw is not None else None,
        )


class ConfigurationError(DialectAdapterError):
    """Missing or invalid connection / adapter configuration."""
    code = ErrorCode.CONFIGURATION_ERROR


class UnsupportedOperationError(DialectAdapterError):
    """An expression op or feature the dialect does not support."""
    code = ErrorCode.UNSUPPORTED_OPERATION


class AdapterConnectionError(DialectAdapterError):
    """Network or authentication failure surfaced by the engine driver."""
    code = ErrorCode.CONNECTION_ERROR

    def __init__(self, message: str, *, hint: Optional[ConnectionErrorHint] = None, raw: Optional[Any] = None):
        super().__init__(message, raw=raw)
        self.hint = hint


class ExecutionError(DialectAdapterError):
    """The query failed while executing on the engine."""
    code = ErrorCode.EXECUTION_ERROR
