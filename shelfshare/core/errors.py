"""Error Hierarchy — typed, categorized exceptions for all ShelfShare failure modes.

Invariants:
    - Every error class fixes its code, category, severity and http_status as class
      attributes; instances only add a message and context
    - 4xx errors are client-recoverable; 5xx errors are CRITICAL
    - to_response() produces the REST envelope; messages never carry internals

Design Decisions:
    - Single ShelfShareError base: one FastAPI handler covers the whole hierarchy
    - Conflict-category errors answer 400, not 409: clients of the lending API
      treat duplicates like any other rejected input
    - ErrorContext is a plain dataclass so core stays independent of logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Who and what the failure concerned, for logs and the response envelope."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: int | None = None
    loan_id: int | None = None
    action: str | None = None
    debug_info: dict[str, Any] | None = None


class ShelfShareError(Exception):
    code: str = "INTERNAL_ERROR"
    category: ErrorCategory = ErrorCategory.INTERNAL
    severity: ErrorSeverity = ErrorSeverity.ERROR
    http_status: int = 500

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()

    def to_response(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "loan_id": self.context.loan_id,
                    "action": self.context.action,
                },
            }
        }


# ─── Identity (401/403) ─────────────────────────────────────────

class AuthenticationError(ShelfShareError):
    """Missing, malformed, invalid or expired credential."""
    code = "UNAUTHENTICATED"
    category = ErrorCategory.AUTHENTICATION
    severity = ErrorSeverity.WARNING
    http_status = 401


class PermissionDeniedError(ShelfShareError):
    """Authenticated, but not allowed to act on this resource."""
    code = "FORBIDDEN"
    category = ErrorCategory.AUTHORIZATION
    severity = ErrorSeverity.WARNING
    http_status = 403


# ─── Domain (400/404) ───────────────────────────────────────────

class InputValidationError(ShelfShareError):
    """Well-formed input that violates a domain bound."""
    code = "VALIDATION_ERROR"
    category = ErrorCategory.VALIDATION
    http_status = 400

    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(message, context)
        self.field = field


class SelfLoanError(ShelfShareError):
    code = "SELF_LOAN"
    category = ErrorCategory.BUSINESS_RULE
    http_status = 400

    def __init__(self, context: ErrorContext | None = None):
        super().__init__("Cannot borrow your own book", context)


class InvalidTransitionError(ShelfShareError):
    """Loan status does not allow the requested action."""
    code = "INVALID_TRANSITION"
    category = ErrorCategory.BUSINESS_RULE
    http_status = 400

    def __init__(
        self, action: str, current_status: str, context: ErrorContext | None = None,
    ):
        super().__init__(f"Cannot {action} loan with status: {current_status}", context)
        self.action = action
        self.current_status = current_status


class LoanNotCompletedError(ShelfShareError):
    code = "LOAN_NOT_COMPLETED"
    category = ErrorCategory.BUSINESS_RULE
    http_status = 400

    def __init__(self, current_status: str, context: ErrorContext | None = None):
        super().__init__(
            f"Can only review completed loans (status: {current_status})", context,
        )
        self.current_status = current_status


class ReviewConflictError(ShelfShareError):
    """A review already exists for this loan."""
    code = "REVIEW_EXISTS"
    category = ErrorCategory.CONFLICT
    http_status = 400

    def __init__(self, loan_id: int, context: ErrorContext | None = None):
        context = context or ErrorContext()
        context.loan_id = loan_id
        super().__init__("A review already exists for this loan", context)


class DuplicateAccountError(ShelfShareError):
    code = "ACCOUNT_EXISTS"
    category = ErrorCategory.CONFLICT
    http_status = 400

    def __init__(self, field: str, context: ErrorContext | None = None):
        super().__init__(f"An account with this {field} already exists", context)
        self.field = field


class ResourceNotFoundError(ShelfShareError):
    code = "RESOURCE_NOT_FOUND"
    category = ErrorCategory.RESOURCE_NOT_FOUND
    http_status = 404

    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(f"{resource_type} '{resource_id}' not found", context)
        self.resource_type = resource_type


# ─── Infrastructure (500) ───────────────────────────────────────

class DatabaseError(ShelfShareError):
    code = "DATABASE_ERROR"
    category = ErrorCategory.DATABASE
    severity = ErrorSeverity.CRITICAL

    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(f"Database {operation} failed: {message}", context)
        self.operation = operation


class ConfigurationError(ShelfShareError):
    """Server misconfiguration, e.g. a signing secret below the minimum length."""
    code = "CONFIGURATION_ERROR"
    category = ErrorCategory.CONFIGURATION
    severity = ErrorSeverity.CRITICAL
