"""Shared fixtures for unit tests.

The order pipelines are exercised against ``InMemoryOrderStore`` and a
``FixedClock`` so every test controls persistence outcomes and "now".
"""

from datetime import timedelta
from decimal import Decimal
from typing import Any

import pytest

from src.core.config import CatalogRulesConfig
from src.domain.orders.localization import Localizer
from src.domain.orders.metrics import OrderMetricsStore
from src.domain.orders.rules import OrderValidator
from src.domain.orders.schemas import CreateOrderRequest
from tests.unit.doubles import (
    FIXED_NOW,
    FixedClock,
    InMemoryOrderStore,
    RequestFactory,
)


@pytest.fixture
def clock() -> FixedClock:
    """Clock pinned to 2025-06-15 12:00 UTC."""
    return FixedClock()


@pytest.fixture
def store() -> InMemoryOrderStore:
    """Empty in-memory order store."""
    return InMemoryOrderStore()


@pytest.fixture
def rules_config() -> CatalogRulesConfig:
    """Default catalog rule data."""
    return CatalogRulesConfig()


@pytest.fixture
def validator(
    store: InMemoryOrderStore, rules_config: CatalogRulesConfig, clock: FixedClock
) -> OrderValidator:
    """Validator reading from the in-memory store."""
    return OrderValidator(store, rules_config, clock)


@pytest.fixture
def localizer() -> Localizer:
    """Localizer with the bundled en-US and es-ES resources."""
    return Localizer()


@pytest.fixture
def metrics_store() -> OrderMetricsStore:
    """Fresh metrics store."""
    return OrderMetricsStore()


@pytest.fixture
def make_request() -> RequestFactory:
    """Factory for valid Fiction submissions; keyword arguments override fields.

    Returns:
        RequestFactory: Callable building ``CreateOrderRequest`` instances.
    """

    def _make(**overrides: Any) -> CreateOrderRequest:
        values: dict[str, Any] = {
            "title": "The Silent Harbor",
            "author": "Jane Porter",
            "isbn": "978-0-13-449416-6",
            "category": "Fiction",
            "price": Decimal("19.99"),
            "published_date": FIXED_NOW - timedelta(days=2 * 365),
            "cover_image_url": None,
            "stock_quantity": 10,
        }
        values.update(overrides)
        return CreateOrderRequest(**values)

    return _make
