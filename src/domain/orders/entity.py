"""ORM entity for catalog orders."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.base import BaseModel

TITLE_MAX_LENGTH = 200
AUTHOR_MAX_LENGTH = 100
ISBN_MAX_LENGTH = 13
CATEGORY_MAX_LENGTH = 20
URL_MAX_LENGTH = 2048


class Order(BaseModel):
    """A persisted catalog entry.

    ``isbn`` holds the normalized digits-only form and ``category`` the
    ``OrderCategory`` value. ``is_available`` is derived from the stock at
    creation time.
    """

    __tablename__ = "orders"

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    author: Mapped[str] = mapped_column(String(AUTHOR_MAX_LENGTH), nullable=False)
    isbn: Mapped[str] = mapped_column(
        String(ISBN_MAX_LENGTH), nullable=False, unique=True, index=True
    )
    category: Mapped[str] = mapped_column(
        String(CATEGORY_MAX_LENGTH), nullable=False, index=True
    )
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    published_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    cover_image_url: Mapped[str | None] = mapped_column(
        String(URL_MAX_LENGTH), nullable=True
    )
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False)

    def __repr__(self) -> str:
        """Return the id, ISBN and title of the order."""
        return f"<Order(id={self.id}, isbn={self.isbn!r}, title={self.title!r})>"
