"""Structured exception hierarchy for consistent error handling.

Key components:
- **ErrorCode enum**: Standardized error identifiers for programmatic handling
- **Severity enum**: Error classification for logging and alerting
- **CatalogError**: Base exception with context, cause and fingerprinting
- **Specialized exceptions**: Validation rejection, missing resources,
  infrastructure failures and failed batch commits

Validation rejections are expected outcomes (LOW severity) and are logged at
warning level; infrastructure failures are HIGH severity and never expose
their underlying exception text to API clients.
"""

import hashlib
import traceback
from enum import Enum
from typing import Any

from src.core.types import FieldErrors


class ErrorCode(Enum):
    """Standardized error codes for the order catalog."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred in the system."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Submitted data violated one or more validation rules."""

    NOT_FOUND = "NOT_FOUND"
    """The requested resource could not be found."""

    INFRASTRUCTURE_ERROR = "INFRASTRUCTURE_ERROR"
    """A lookup or persistence operation could not be completed."""

    BATCH_COMMIT_FAILED = "BATCH_COMMIT_FAILED"
    """The atomic write of a batch's accepted orders failed and was rolled back."""

    HTTP_ERROR = "HTTP_ERROR"
    """The request was refused by routing, e.g. an unsupported method."""


class Severity(Enum):
    """Severity levels for catalog errors."""

    LOW = "LOW"
    """Expected errors caused by client input."""

    MEDIUM = "MEDIUM"
    """Errors that affect a single operation but not the service."""

    HIGH = "HIGH"
    """Errors caused by unavailable dependencies or data integrity problems."""

    CRITICAL = "CRITICAL"
    """Errors requiring immediate attention."""


class CatalogError(Exception):
    """Base exception class for all order catalog exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message, safe to return to clients
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional structured information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        self.stack_trace = traceback.format_stack()[:-1]
        self.fingerprint = self._generate_fingerprint()

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def _generate_fingerprint(self) -> str:
        """Generate a fingerprint for error grouping.

        Returns:
            str: A hash of the error type and the raising location.
        """
        max_frames = 5
        relevant_frames = self.stack_trace[-max_frames:]

        fingerprint_data = f"{self.__class__.__name__}:{self.error_code}"
        for frame in relevant_frames:
            if "site-packages" not in frame and "src/" in frame:
                lines = frame.strip().split("\n")
                if lines:
                    fingerprint_data += f":{lines[0]}"

        return hashlib.sha256(fingerprint_data.encode()).hexdigest()[:16]

    @property
    def is_expected(self) -> bool:
        """Whether this error is part of normal operation (LOW or MEDIUM)."""
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    def __str__(self) -> str:
        """Return the error code and message."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return a detailed representation of the exception."""
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ValidationError(CatalogError):
    """Exception raised when input does not satisfy validation rules."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.VALIDATION_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class OrderValidationError(ValidationError):
    """An order submission was rejected by the validation rules.

    Carries every violated rule grouped by field so clients can correct all
    problems in one round trip.

    Args:
        field_errors: Field name to list of violated-rule messages.
        message: Summary message for the response body.
    """

    def __init__(
        self,
        field_errors: FieldErrors,
        message: str = "Order validation failed",
    ) -> None:
        self.field_errors = field_errors
        super().__init__(message, context={"validation_errors": field_errors})


class NotFoundError(CatalogError):
    """Exception raised when a requested resource cannot be found."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.NOT_FOUND,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class InfrastructureError(CatalogError):
    """A store lookup or write could not be completed.

    The message is returned to clients as-is, so it must stay generic; the
    underlying exception is kept as ``cause`` for logs only.
    """

    def __init__(
        self,
        message: str = "The order could not be processed due to an internal error.",
        error_code: str | ErrorCode = ErrorCode.INFRASTRUCTURE_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.HIGH, context, cause)


class BatchCommitError(InfrastructureError):
    """The atomic write of a batch failed and every accepted order was rolled back.

    Args:
        summary: JSON-ready batch summary with the per-item outcomes.
        cause: The exception raised by the store.
    """

    def __init__(self, summary: dict[str, Any], cause: Exception | None = None) -> None:
        self.summary = summary
        super().__init__(
            "Batch processing failed due to an internal error.",
            error_code=ErrorCode.BATCH_COMMIT_FAILED,
            context={"batch": summary},
            cause=cause,
        )
