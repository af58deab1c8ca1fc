"""API-related constants."""

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"
ACCEPT_LANGUAGE_HEADER = "Accept-Language"

# Pagination
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Request logging
MAX_USER_AGENT_LENGTH = 200

# Client-facing message for unexpected failures
INTERNAL_ERROR_MESSAGE = "An internal server error occurred"
