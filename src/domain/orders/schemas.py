"""Pydantic models for order submissions, views, batch summaries and metrics.

Field types are enforced here; every business constraint (including
category membership) belongs to the validation rules so that all violations
are reported together.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class OrderCategory(StrEnum):
    """Catalog categories an order may belong to."""

    FICTION = "Fiction"
    NON_FICTION = "NonFiction"
    TECHNICAL = "Technical"
    CHILDREN = "Children"


class CreateOrderRequest(BaseModel):
    """A client's submission for a new catalog entry."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Order title", examples=["Clean Architecture"])
    author: str = Field(..., description="Author name", examples=["Robert C. Martin"])
    isbn: str = Field(
        ...,
        description="ISBN-10 or ISBN-13, hyphens and spaces allowed",
        examples=["978-0-13-449416-6"],
    )
    category: str = Field(
        ...,
        description="One of Fiction, NonFiction, Technical, Children",
        examples=["Technical"],
    )
    price: Decimal = Field(..., description="Price in USD", examples=["34.99"])
    published_date: datetime = Field(
        ..., description="Publication date", examples=["2022-09-01T00:00:00Z"]
    )
    cover_image_url: str | None = Field(
        default=None,
        description="Absolute http(s) URL of a jpg, jpeg, png, gif or webp image",
    )
    stock_quantity: int = Field(default=1, description="Copies in stock")


class OrderProfile(BaseModel):
    """Presentation view of a catalog entry, built fresh for every response."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    title: str
    author: str
    isbn: str
    category: OrderCategory
    category_display_name: str = Field(
        ..., examples=["Technical & Professional"]
    )
    price: Decimal = Field(
        ..., description="Effective price after category discounts"
    )
    formatted_price: str = Field(..., examples=["$34.99"])
    published_date: datetime
    created_at: datetime
    cover_image_url: str | None
    is_available: bool
    stock_quantity: int
    published_age: str = Field(..., examples=["New Release", "3 years old"])
    author_initials: str = Field(..., examples=["RM"])
    availability_status: str = Field(..., examples=["In Stock", "Last Copy"])


class OrderPage(BaseModel):
    """One page of order views."""

    items: list[OrderProfile]
    page: int
    page_size: int
    total: int


class BatchItemResult(BaseModel):
    """Outcome of one submission within a batch."""

    title: str
    success: bool
    order_id: uuid.UUID | None = None
    message: str | None = None


class BatchOrderResponse(BaseModel):
    """Summary of a batch submission, results in input order."""

    batch_id: uuid.UUID
    total_requested: int
    success_count: int = 0
    failed_count: int = 0
    message: str | None = None
    results: list[BatchItemResult] = Field(default_factory=list)


class MetricsDashboard(BaseModel):
    """Summary statistics over the retained order creation samples."""

    model_config = ConfigDict(frozen=True)

    total_orders_processed: int = 0
    success_rate: float = Field(default=0.0, description="Percentage of successes")
    average_total_duration_ms: float = 0.0
    average_validation_duration_ms: float = 0.0
    average_database_duration_ms: float = 0.0
    last_errors: list[str] = Field(
        default_factory=list,
        description="Most recent failures as 'title: reason', newest first",
    )
