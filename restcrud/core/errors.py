"""Error Hierarchy — typed, categorized exceptions for every CRUD failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - code is always a machine-readable token (never free text) — clients branch on it
    - Client errors are 400-level; storage and lookup faults are 500-level
    - to_response() produces the failure envelope {"ok": 0, "err": code}

Design Decisions:
    - Single hierarchy with CrudError base: dispatcher and FastAPI global handler
      catch all of it (ADR: uniform error shape)
    - StorageError carries invalid_filters so the dispatcher can tell a rejected
      filter (client fault) from a broken database (server fault)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    PERMISSION = "permission"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    REGISTRATION = "registration"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    shape: str | None = None
    operation: str | None = None
    record_id: str | None = None
    debug_info: dict[str, Any] | None = None


class CrudError(Exception):
    """Base exception for all restcrud errors."""

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

    def to_response(self) -> dict:
        """Convert to the failure envelope."""
        return {"ok": 0, "err": self.code}


# ─── Client Errors (400-level) ──────────────────────────────────

class ClientError(CrudError):
    """Request is malformed — the client must change it before retrying."""
    def __init__(
        self, message: str, code: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


class InvalidIdError(ClientError):
    """Path id is missing or not a non-negative decimal integer."""
    def __init__(self, raw_id: str = "", context: ErrorContext | None = None):
        super().__init__(f"Invalid id '{raw_id}'", "invalid_id", context)
        self.raw_id = raw_id


class InvalidJsonError(ClientError):
    """Request body is not a JSON object matching the shape."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message, "invalid_json", context)


class RecordValidationError(ClientError):
    """Record failed tag-driven validation. Carries every violation."""
    def __init__(
        self, field_errors: dict[str, list[str]],
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Validation failed for fields: {', '.join(sorted(field_errors))}",
            "validation_failed", context,
        )
        self.field_errors = field_errors

    def to_response(self) -> dict:
        response = super().to_response()
        response["data"] = {"fields": self.field_errors}
        return response


class InvalidFilterValueError(ClientError):
    """Filter value cannot be coerced to the type of a known column."""
    def __init__(
        self, column: str, value: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Invalid value '{value}' for filter '{column}'",
            "invalid_filter", context,
        )
        self.column = column
        self.value = value


class InvalidFiltersError(ClientError):
    """Store rejected the filters or ordering of a list query."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message, "invalid_filter_value", context)


class ForbiddenError(CrudError):
    """Permission set does not allow this operation on this shape."""
    def __init__(
        self, shape: str, operation: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Operation '{operation}' not allowed on '{shape}'",
            "forbidden", ErrorCategory.PERMISSION,
            ErrorSeverity.WARNING, context, 403,
        )
        self.shape = shape
        self.operation = operation


class MethodNotAllowedError(CrudError):
    """HTTP method (or the operation it maps to) is not enabled on the route."""
    def __init__(self, method: str, context: ErrorContext | None = None):
        super().__init__(
            f"Method '{method}' not allowed",
            "method_not_allowed", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 405,
        )
        self.method = method


class NotFoundError(CrudError):
    """Load succeeded but returned a zero identity."""
    def __init__(
        self, shape: str, record_id: int | str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{shape} '{record_id}' not found",
            "not_found_in_db", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class InternalError(CrudError):
    """Storage or collaborator fault while serving a request."""
    def __init__(
        self, message: str, code: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


class FilterLookupError(InternalError):
    """Column-to-field lookup itself failed (not merely an unknown column)."""
    def __init__(self, column: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot resolve filter column '{column}'",
            "filter_lookup_failed", context,
        )
        self.column = column


class StorageError(CrudError):
    """Store operation failed. Raised by RecordStore implementations."""
    def __init__(
        self, message: str, operation: str, invalid_filters: bool = False,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Storage {operation} failed: {message}",
            "storage_error", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation
        self.invalid_filters = invalid_filters


class RegistrationError(CrudError):
    """Shape registration rejected at startup. Fatal to bootstrap."""
    def __init__(self, message: str, shape: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot register '{shape}': {message}",
            "registration_failed", ErrorCategory.REGISTRATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.shape = shape
