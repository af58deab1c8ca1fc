"""FastAPI dependency injection for database session management.

Each request gets its own ``AsyncSession``. The order pipelines commit and
roll back explicitly; the dependency only guarantees the session is closed
once the response has been produced.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.session import get_async_session


async def get_db() -> AsyncGenerator[AsyncSession]:
    """Provide a database session for FastAPI dependency injection.

    Yields:
        AsyncGenerator[AsyncSession]: A session closed after the request.
    """
    async with get_async_session() as session:
        logger.debug("Providing database session for request")
        yield session


DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
