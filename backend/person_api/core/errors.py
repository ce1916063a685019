"""Error Hierarchy: typed, categorized exceptions for all Person API failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - Configuration errors are raised at startup, never per request
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with PersonApiError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - External call outcomes are NOT exceptions (see core/external_result.py);
      ExternalServiceError exists only to carry a Failure across the HTTP boundary
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
    CONFIGURATION = "configuration"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    client_name: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class PersonApiError(Exception):
    """Base exception for all Person API errors."""

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
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "client_name": self.context.client_name,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Configuration Errors (fatal at startup) ────────────────────

class DuplicateClientNameError(PersonApiError):
    """A named client with the same name is already registered."""
    def __init__(self, name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Named client '{name}' is already registered",
            "DUPLICATE_NAME", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.name = name


class InvalidClientConfigError(PersonApiError):
    """Named client configuration is unusable."""
    def __init__(self, name: str, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid configuration for client '{name}': {reason}",
            "INVALID_CONFIG", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.name = name
        self.reason = reason


class UnknownClientNameError(PersonApiError):
    """No named client registered under this name."""
    def __init__(self, name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Named client '{name}' is not registered",
            "UNKNOWN_NAME", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.name = name


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidParamsError(PersonApiError):
    """Route template parameters are missing, empty, or the operation is unknown."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = operation
        super().__init__(
            message, "INVALID_PARAMS", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )


class ExternalServiceError(PersonApiError):
    """External call ended in a Failure; carries only the generic message."""
    def __init__(
        self, message: str, failure_reason: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "EXTERNAL_SERVICE_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 400,
        )
        self.failure_reason = failure_reason

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["reason"] = self.failure_reason
        return response


class ResourceNotFoundError(PersonApiError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(PersonApiError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
