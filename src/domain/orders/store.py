"""Persistence boundary of the order pipelines.

The pipelines only see ``OrderStore``. ``OrderRepository`` implements it on
top of an ``AsyncSession``; tests substitute an in-memory double.
"""

import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.orders.entity import Order
from src.infrastructure.database.repository import BaseRepository


class OrderStore(Protocol):
    """Lookups and staged writes the order pipelines depend on."""

    async def exists_by(self, **filters: object) -> bool:
        """Whether an order matches every equality filter."""
        ...

    async def count_created_between(self, start: datetime, end: datetime) -> int:
        """Count orders with ``start <= created_at < end``."""
        ...

    async def add(self, obj: Order) -> None:
        """Stage one order for insertion."""
        ...

    async def add_many(self, objs: Iterable[Order]) -> None:
        """Stage several orders for insertion."""
        ...

    async def commit(self) -> None:
        """Make staged writes durable."""
        ...

    async def rollback(self) -> None:
        """Discard staged writes."""
        ...

    async def get_by_id(self, entity_id: uuid.UUID) -> Order | None:
        """Fetch one order by id."""
        ...

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[Order]:
        """Fetch a page of orders in creation order."""
        ...

    async def filter_by(self, **filters: object) -> list[Order]:
        """Fetch every order matching all equality filters."""
        ...

    async def count(self) -> int:
        """Count all orders."""
        ...


class OrderRepository(BaseRepository[Order]):
    """SQLAlchemy-backed ``OrderStore``."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Order)

    async def count_created_between(self, start: datetime, end: datetime) -> int:
        """Count orders created in the half-open interval ``[start, end)``.

        Args:
            start: Inclusive lower bound.
            end: Exclusive upper bound.

        Returns:
            int: Number of matching orders.
        """
        return await self.count_where(Order.created_at >= start, Order.created_at < end)
