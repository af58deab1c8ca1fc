"""FastAPI middleware for cross-cutting request/response concerns.

- **RequestContextMiddleware**: Manages correlation IDs and request context
- **RequestLoggingMiddleware**: Structured logging with performance tracking
- **error_handler**: Centralized exception handling with consistent responses

Middleware run in reverse order of registration: the request context is
established first so every later log line carries the correlation ID.
"""
