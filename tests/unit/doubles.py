"""Test doubles for the order pipelines.

``InMemoryOrderStore`` stands in for ``OrderRepository`` and ``FixedClock``
pins "now", so unit tests control persistence outcomes and time.
"""

import uuid
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any

from src.domain.orders.entity import Order
from src.domain.orders.schemas import CreateOrderRequest

FIXED_NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)

type RequestFactory = Callable[..., CreateOrderRequest]


class FixedClock:
    """Clock pinned to a configurable instant."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.current = now

    def now(self) -> datetime:
        """Return the pinned instant."""
        return self.current


class InMemoryOrderStore:
    """``OrderStore`` double keeping committed orders in a dict.

    Writes are staged until ``commit``; ``rollback`` discards them. Set
    ``fail_on_commit`` or ``fail_on_lookup`` to an exception to simulate
    database failures.
    """

    def __init__(self) -> None:
        self.orders: dict[uuid.UUID, Order] = {}
        self.pending: list[Order] = []
        self.fail_on_commit: Exception | None = None
        self.fail_on_lookup: Exception | None = None
        self.commits = 0
        self.rollbacks = 0

    def _lookup(self) -> None:
        if self.fail_on_lookup is not None:
            raise self.fail_on_lookup

    @staticmethod
    def _matches(order: Order, filters: dict[str, Any]) -> bool:
        return all(getattr(order, key) == value for key, value in filters.items())

    async def exists_by(self, **filters: Any) -> bool:
        self._lookup()
        return any(self._matches(order, filters) for order in self.orders.values())

    async def count_created_between(self, start: datetime, end: datetime) -> int:
        self._lookup()
        return sum(start <= order.created_at < end for order in self.orders.values())

    async def add(self, obj: Order) -> None:
        self.pending.append(obj)

    async def add_many(self, objs: Iterable[Order]) -> None:
        self.pending.extend(objs)

    async def commit(self) -> None:
        if self.fail_on_commit is not None:
            raise self.fail_on_commit
        for order in self.pending:
            self.orders[order.id] = order
        self.pending.clear()
        self.commits += 1

    async def rollback(self) -> None:
        self.pending.clear()
        self.rollbacks += 1

    async def get_by_id(self, entity_id: uuid.UUID) -> Order | None:
        return self.orders.get(entity_id)

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[Order]:
        ordered = sorted(
            self.orders.values(), key=lambda order: (order.created_at, str(order.id))
        )
        return ordered[skip : skip + limit]

    async def filter_by(self, **filters: Any) -> list[Order]:
        return [order for order in self.orders.values() if self._matches(order, filters)]

    async def count(self) -> int:
        return len(self.orders)

    def seed(self, order: Order) -> Order:
        """Store ``order`` as already committed."""
        self.orders[order.id] = order
        return order


def make_order(**overrides: Any) -> Order:
    """Build a stored order with sensible defaults."""
    values: dict[str, Any] = {
        "id": uuid.uuid4(),
        "title": "The Silent Harbor",
        "author": "Jane Porter",
        "isbn": "9780134494166",
        "category": "Fiction",
        "price": Decimal("19.99"),
        "published_date": FIXED_NOW - timedelta(days=2 * 365 + 10),
        "cover_image_url": "https://images.example.com/harbor.jpg",
        "stock_quantity": 10,
        "is_available": True,
        "created_at": FIXED_NOW - timedelta(days=1),
        "updated_at": None,
    }
    values.update(overrides)
    return Order(**values)

