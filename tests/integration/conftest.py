"""Shared fixtures for integration tests.

Every test gets a fresh in-memory SQLite database (the engine uses a
``StaticPool`` so all sessions share one connection) and a fresh application
instance, so metrics and stored orders never leak between tests.
"""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.main import create_app
from src.infrastructure.database.session import (
    close_database,
    create_schema,
    get_async_session,
)

type PayloadFactory = Callable[..., dict[str, Any]]


@pytest.fixture
async def database() -> AsyncGenerator[None]:
    """Create the schema on a fresh in-memory database and dispose it afterwards."""
    await close_database()
    await create_schema()
    yield
    await close_database()


@pytest.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession]:
    """Session on the fresh database."""
    _ = database
    async with get_async_session() as session:
        yield session


@pytest.fixture
def app(database: None) -> FastAPI:
    """Fresh application instance."""
    _ = database
    return create_app()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTP client calling the application in-process.

    Unhandled exceptions are turned into responses by the generic handler,
    so the transport does not re-raise them.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture
def order_payload() -> PayloadFactory:
    """Factory for valid JSON order submissions; keyword arguments override fields.

    Returns:
        PayloadFactory: Callable building request bodies.
    """

    def _make(**overrides: Any) -> dict[str, Any]:
        published = datetime.now(UTC) - timedelta(days=365)
        payload: dict[str, Any] = {
            "title": "The Silent Harbor",
            "author": "Jane Porter",
            "isbn": "978-0-13-449416-6",
            "category": "Fiction",
            "price": "19.99",
            "published_date": published.isoformat(),
            "cover_image_url": "https://images.example.com/harbor.jpg",
            "stock_quantity": 10,
        }
        payload.update(overrides)
        return payload

    return _make
