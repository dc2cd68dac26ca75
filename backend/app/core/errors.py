"""Error Hierarchy - typed, categorized exceptions for all record store failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client errors (400-level) are safe to reveal; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - "Record not found" is NOT an exception inside the engine (modelled as None/False);
      ResourceNotFoundError exists only for the transport layer

Design Decisions:
    - Single hierarchy with a RecordStoreError base, caught by one FastAPI handler
    - ErrorContext as dataclass: model/operation context without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    model_name: str | None = None
    operation: str | None = None
    record_id: str | None = None


class RecordStoreError(Exception):
    """Base exception for all record store errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    @property
    def is_client_error(self) -> bool:
        """True for expected outcomes whose message is safe to reveal."""
        return self.http_status < 500

    def to_response(self, message: str | None = None) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "model_name": self.context.model_name,
                    "operation": self.context.operation,
                    "record_id": self.context.record_id,
                },
            }
        }


# ─── Client Errors (400-level) ──────────────────────────────────

class FilterValueError(RecordStoreError):
    """A filter value cannot be resolved against the target column's kind."""
    def __init__(
        self, field: str, value: Any, reason: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Invalid filter value {value!r} for '{field}': {reason}",
            "INVALID_FILTER_VALUE", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field
        self.value = value


class FieldValueError(RecordStoreError):
    """A written value cannot be stored in the target column."""
    def __init__(
        self, field: str, value: Any, reason: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Invalid value {value!r} for field '{field}': {reason}",
            "INVALID_FIELD_VALUE", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class ModelNotFoundError(RecordStoreError):
    """No engine is registered under the requested model name."""
    def __init__(
        self, model_name: str, available: list[str],
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Model '{model_name}' not found",
            "MODEL_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )
        self.available = available

    def to_response(self, message: str | None = None) -> dict:
        response = super().to_response(message)
        response["error"]["available_models"] = self.available
        return response


class ResourceNotFoundError(RecordStoreError):
    """Requested record does not exist (or is not visible to the operation)."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class TableRegistrationError(RecordStoreError):
    """A table cannot be registered with the engine registry."""
    def __init__(self, table_name: str, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot register table '{table_name}': {reason}",
            "TABLE_REGISTRATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.table_name = table_name


class DatabaseError(RecordStoreError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class StorageTimeoutError(RecordStoreError):
    """A storage call exceeded its deadline."""
    def __init__(self, timeout: float, context: ErrorContext | None = None):
        super().__init__(
            f"Storage call exceeded {timeout:g}s deadline",
            "STORAGE_TIMEOUT", ErrorCategory.TIMEOUT,
            ErrorSeverity.CRITICAL, context, 504,
        )
        self.timeout = timeout
