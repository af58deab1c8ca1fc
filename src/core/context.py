"""Request context management for correlation and operation identifiers."""

import uuid
from contextvars import ContextVar

from src.core.constants import REQUEST_ID_PREFIX

OPERATION_ID_LENGTH = 8

# Correlation ID for the current request, propagated across awaits
_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


class RequestContext:
    """Async-safe storage for request-scoped data backed by contextvars."""

    @staticmethod
    def set_correlation_id(correlation_id: str) -> None:
        """Set the correlation ID for the current context.

        Args:
            correlation_id: The correlation ID to store in the context.
        """
        _correlation_id_var.set(correlation_id)

    @staticmethod
    def get_correlation_id() -> str | None:
        """Get the correlation ID from the current context.

        Returns:
            str | None: The correlation ID if set, None otherwise.
        """
        return _correlation_id_var.get()

    @staticmethod
    def clear() -> None:
        """Clear all context variables."""
        _correlation_id_var.set(None)


def generate_correlation_id() -> str:
    """Generate a UUID4 correlation ID for request tracking.

    Returns:
        str: A string representation of a UUID4.
    """
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Generate a unique request ID in the format ``req-<uuid4>``.

    Returns:
        str: The prefixed request ID.
    """
    return f"{REQUEST_ID_PREFIX}{uuid.uuid4()}"


def generate_operation_id() -> str:
    """Generate a short identifier for one order-creation attempt.

    Returns:
        str: The first eight hex characters of a UUID4.

    Examples:
        >>> len(generate_operation_id())
        8
    """
    return uuid.uuid4().hex[:OPERATION_ID_LENGTH]
