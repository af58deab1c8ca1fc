"""Core application constants."""

# Time constants
MILLISECONDS_PER_SECOND = 1000
SECONDS_PER_DAY = 86_400

# Security and redaction
REDACTED = "[REDACTED]"

# Identifier prefixes
REQUEST_ID_PREFIX = "req-"
BATCH_OPERATION_PREFIX = "BATCH-"
