"""Order catalog domain: validation rules, derived fields, pipelines, metrics.

Core components:
- **rules**: ordered validation rules with uniqueness and cap lookups
- **projection**: pure functions deriving entries and presentation views
- **service**: the single-order creation pipeline and read operations
- **batch**: batch creation with one atomic commit
- **metrics**: bounded, thread-safe collector of creation samples
"""

from src.domain.orders.batch import BatchOrderService
from src.domain.orders.entity import Order
from src.domain.orders.localization import Localizer
from src.domain.orders.metrics import OrderCreationMetrics, OrderMetricsStore
from src.domain.orders.rules import OrderValidator
from src.domain.orders.schemas import (
    BatchItemResult,
    BatchOrderResponse,
    CreateOrderRequest,
    MetricsDashboard,
    OrderCategory,
    OrderPage,
    OrderProfile,
)
from src.domain.orders.service import OrderCreationResult, OrderService
from src.domain.orders.store import OrderRepository, OrderStore

__all__ = [
    "BatchItemResult",
    "BatchOrderResponse",
    "BatchOrderService",
    "CreateOrderRequest",
    "Localizer",
    "MetricsDashboard",
    "Order",
    "OrderCategory",
    "OrderCreationMetrics",
    "OrderCreationResult",
    "OrderMetricsStore",
    "OrderPage",
    "OrderProfile",
    "OrderRepository",
    "OrderService",
    "OrderStore",
    "OrderValidator",
]
