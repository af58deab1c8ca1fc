"""Base repository pattern implementation for database operations.

This module provides a generic repository base class that implements
common read and write operations for SQLAlchemy models using async patterns.
Writes are staged on the session; committing is the caller's decision.
"""

import uuid
from collections.abc import Iterable
from typing import Any

from loguru import logger
from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.base import BaseModel

DEFAULT_PAGINATION_LIMIT = 100


class BaseRepository[T: BaseModel]:
    """Base repository class providing common data access operations.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class OrderRepository(BaseRepository[Order]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, Order)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    def _filter_conditions(self, filters: dict[str, Any]) -> list[ColumnElement[bool]]:
        """Translate keyword filters into equality conditions.

        Raises:
            ValueError: If a filter names a column the model does not have.
        """
        conditions: list[ColumnElement[bool]] = []
        for field, value in filters.items():
            if not hasattr(self.model_class, field):
                msg = f"{self.model_class.__name__} has no field '{field}'"
                raise ValueError(msg)
            conditions.append(getattr(self.model_class, field) == value)
        return conditions

    def _select(self, *conditions: ColumnElement[bool]) -> Select[tuple[T]]:
        return select(self.model_class).where(*conditions)

    async def get_by_id(self, entity_id: uuid.UUID) -> T | None:
        """Retrieve a model instance by its ID.

        Args:
            entity_id: The primary key of the model to retrieve.

        Returns:
            T | None: The model instance if found, None otherwise.
        """
        logger.debug("Fetching {} by ID: {}", self.model_class.__name__, entity_id)
        return await self.session.get(self.model_class, entity_id)

    async def get_all(
        self, skip: int = 0, limit: int = DEFAULT_PAGINATION_LIMIT
    ) -> list[T]:
        """Retrieve model instances ordered by creation time with pagination.

        Args:
            skip: Number of records to skip.
            limit: Maximum number of records to return.

        Returns:
            list[T]: List of model instances.
        """
        stmt = (
            self._select()
            .order_by(self.model_class.created_at, self.model_class.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def filter_by(self, **filters: object) -> list[T]:
        """Return every instance matching all equality filters.

        Args:
            **filters: Field-value pairs to filter by.

        Returns:
            list[T]: Matching instances ordered by creation time.
        """
        stmt = self._select(*self._filter_conditions(filters)).order_by(
            self.model_class.created_at, self.model_class.id
        )
        result = await self.session.execute(stmt)
        instances = list(result.scalars().all())
        logger.debug(
            "Filtered {} - found {} instances with filters: {}",
            self.model_class.__name__,
            len(instances),
            filters,
        )
        return instances

    async def exists_by(self, **filters: object) -> bool:
        """Check whether at least one instance matches all equality filters.

        Args:
            **filters: Field-value pairs to filter by.

        Returns:
            bool: True if a matching instance exists.
        """
        stmt = select(
            self._select(*self._filter_conditions(filters)).exists()
        )
        result = await self.session.execute(stmt)
        return bool(result.scalar())

    async def count_where(self, *conditions: ColumnElement[bool]) -> int:
        """Count instances satisfying the given SQL conditions."""
        stmt = select(func.count()).select_from(self.model_class).where(*conditions)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def count(self) -> int:
        """Count all instances of the model."""
        return await self.count_where()

    async def add(self, obj: T) -> None:
        """Stage a new instance for insertion."""
        self.session.add(obj)

    async def add_many(self, objs: Iterable[T]) -> None:
        """Stage several new instances for insertion."""
        self.session.add_all(list(objs))

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Roll back the current transaction."""
        await self.session.rollback()
