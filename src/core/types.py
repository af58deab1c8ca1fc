"""Type aliases for dynamic data structures throughout the application.

All types defined here should be JSON-serializable so they can travel through
logging, API responses and exception context unchanged.
"""

from typing import Any

# JSON-compatible type that represents any valid JSON value
type JsonValue = (
    dict[str, "JsonValue"] | list["JsonValue"] | str | int | float | bool | None
)

# Context dictionary for error details and debugging information
type ErrorContext = dict[str, Any]

# Field name -> human-readable messages produced by request validation
type FieldErrors = dict[str, list[str]]
