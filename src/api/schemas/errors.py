"""Standardized error response schema.

Every error the API returns, whether a rejected order, an unknown id or an
internal failure, is an ``ErrorResponse``. ``details`` carries structured
data clients can act on (per-field validation messages, the batch summary of
a failed commit); it never carries internal exception text.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class ServiceInfo(BaseModel):
    """Identification of the service that produced the error."""

    name: str = Field(..., description="Name of the service", examples=["Order Catalog"])

    version: str = Field(..., description="Version of the service", examples=["0.1.0"])

    environment: str = Field(
        ...,
        description="Environment where the service is running",
        examples=["development", "staging", "production"],
    )


class ErrorResponse(BaseModel):
    """Standardized error response model for API errors."""

    error_code: str = Field(
        ...,
        description="Unique error code identifying the error type",
        examples=["VALIDATION_ERROR", "NOT_FOUND", "INFRASTRUCTURE_ERROR"],
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Order validation failed", "Order not found"],
    )

    details: dict[str, Any] | None = Field(
        default=None,
        description="Structured error details (field errors, batch summary)",
        examples=[{"validation_errors": {"isbn": ["ISBN must not be empty."]}}],
    )

    correlation_id: str | None = Field(
        default=None,
        description="Request correlation ID for tracing and debugging",
        examples=["550e8400-e29b-41d4-a716-446655440000"],
    )

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Timestamp when the error occurred (with timezone)",
        examples=["2025-03-14T12:00:00+00:00"],
    )

    severity: str | None = Field(
        default=None,
        description="Error severity level (LOW, MEDIUM, HIGH, CRITICAL)",
        examples=["LOW", "HIGH"],
    )

    service_info: ServiceInfo | None = Field(
        default=None,
        description="Information about the service that generated the error",
    )

    request_id: str | None = Field(
        default=None,
        description="Unique identifier of this request",
        examples=["req-660e8400-e29b-41d4-a716-446655440000"],
    )

    debug_info: dict[str, Any] | None = Field(
        default=None,
        description="Debug information (only populated in development environments)",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error_code": "VALIDATION_ERROR",
                    "message": "Order validation failed",
                    "details": {
                        "validation_errors": {
                            "price": [
                                "Technical orders must have a minimum price of $20.00."
                            ],
                            "isbn": ["An order with this ISBN already exists."],
                        }
                    },
                    "correlation_id": "550e8400-e29b-41d4-a716-446655440000",
                    "request_id": "req-660e8400-e29b-41d4-a716-446655440000",
                    "timestamp": "2025-03-14T12:00:00+00:00",
                    "severity": "LOW",
                    "service_info": {
                        "name": "Order Catalog",
                        "version": "0.1.0",
                        "environment": "production",
                    },
                },
                {
                    "error_code": "INFRASTRUCTURE_ERROR",
                    "message": "The order could not be processed due to an internal error.",
                    "details": {"operation_id": "3f2a9c1b"},
                    "timestamp": "2025-03-14T12:00:03+00:00",
                    "severity": "HIGH",
                },
            ]
        }
    }
