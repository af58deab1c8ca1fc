"""Derived fields of catalog entries.

Every business formula that turns a submission into an entry, or an entry
into its presentation view, lives here as a pure function. The pipelines
and the read endpoints all project through ``to_order_profile`` so the
Children discount and cover suppression are applied identically everywhere.
"""

import uuid
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Final

from src.core.clock import ensure_utc
from src.core.constants import SECONDS_PER_DAY
from src.domain.orders.entity import Order
from src.domain.orders.localization import Localizer
from src.domain.orders.schemas import CreateOrderRequest, OrderCategory, OrderProfile

CHILDREN_DISCOUNT: Final[Decimal] = Decimal("0.9")
CENTS: Final[Decimal] = Decimal("0.01")

NEW_RELEASE_DAYS: Final[int] = 30
DAYS_PER_MONTH: Final[int] = 30
DAYS_PER_YEAR: Final[int] = 365
CLASSIC_AFTER_DAYS: Final[int] = 1825

LAST_COPY_STOCK: Final[int] = 1
LIMITED_STOCK_MAX: Final[int] = 5

UNKNOWN_INITIALS: Final[str] = "?"


def normalize_isbn(isbn: str) -> str:
    """Strip hyphens and whitespace from an ISBN.

    Examples:
        >>> normalize_isbn("978-0 13-449416-6")
        '9780134494166'
    """
    return "".join(ch for ch in isbn if ch != "-" and not ch.isspace())


def effective_price(price: Decimal, category: str) -> Decimal:
    """Price shown to clients: Children orders get 10% off, rounded to cents.

    Args:
        price: Stored list price.
        category: Order category value.

    Returns:
        Decimal: The price after category discounts, quantized to 0.01.
    """
    if category == OrderCategory.CHILDREN:
        price = price * CHILDREN_DISCOUNT
    return price.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_price(price: Decimal) -> str:
    """Format a price as US currency, e.g. ``$1,234.50``."""
    return f"${price:,.2f}"


def published_age(published_date: datetime, now: datetime) -> str:
    """Describe how long ago an order was published.

    Args:
        published_date: Publication timestamp.
        now: Reference time.

    Returns:
        str: "New Release", "<n> months old", "<n> years old" or "Classic".
    """
    days = (now - ensure_utc(published_date)).total_seconds() / SECONDS_PER_DAY

    if days < NEW_RELEASE_DAYS:
        return "New Release"
    if days < DAYS_PER_YEAR:
        return f"{int(days / DAYS_PER_MONTH)} months old"
    if days < CLASSIC_AFTER_DAYS:
        return f"{int(days / DAYS_PER_YEAR)} years old"
    return "Classic"


def author_initials(author: str) -> str:
    """Initials of the first and last name tokens, upper-cased.

    Examples:
        >>> author_initials("John Doe")
        'JD'
        >>> author_initials("Madonna")
        'M'
        >>> author_initials("  ")
        '?'
    """
    names = author.split()
    if len(names) > 1:
        return f"{names[0][0]}{names[-1][0]}".upper()
    if names:
        return names[0][0].upper()
    return UNKNOWN_INITIALS


def availability_status_key(is_available: bool, stock_quantity: int) -> str:
    """Resource key of the availability tier for a stock level."""
    if not is_available or stock_quantity <= 0:
        return "Status_OutOfStock"
    if stock_quantity == LAST_COPY_STOCK:
        return "Status_LastCopy"
    if stock_quantity <= LIMITED_STOCK_MAX:
        return "Status_Limited"
    return "Status_InStock"


def category_label_key(category: str) -> str:
    """Resource key of a category's display name."""
    return f"Cat_{category}"


def visible_cover_image(cover_image_url: str | None, category: str) -> str | None:
    """Cover image shown to clients; never shown for Children orders."""
    if category == OrderCategory.CHILDREN:
        return None
    return cover_image_url


def create_order_entry(
    request: CreateOrderRequest, *, now: datetime, order_id: uuid.UUID
) -> Order:
    """Build a new catalog entry from an accepted submission.

    Args:
        request: The validated submission.
        now: Creation timestamp.
        order_id: Identifier for the new entry.

    Returns:
        Order: A transient entity ready to be staged in the store.
    """
    return Order(
        id=order_id,
        title=request.title,
        author=request.author,
        isbn=normalize_isbn(request.isbn),
        category=OrderCategory(request.category).value,
        price=request.price,
        published_date=ensure_utc(request.published_date),
        cover_image_url=request.cover_image_url,
        stock_quantity=request.stock_quantity,
        is_available=request.stock_quantity > 0,
        created_at=now,
        updated_at=None,
    )


def to_order_profile(
    order: Order, *, localizer: Localizer, locale: str, now: datetime
) -> OrderProfile:
    """Project a catalog entry into its presentation view.

    Args:
        order: The stored entry.
        localizer: Source of localized labels.
        locale: Locale for the labels.
        now: Reference time for the published age.

    Returns:
        OrderProfile: The view returned to clients.
    """
    price = effective_price(Decimal(order.price), order.category)

    return OrderProfile(
        id=order.id,
        title=order.title,
        author=order.author,
        isbn=order.isbn,
        category=OrderCategory(order.category),
        category_display_name=localizer.translate(
            category_label_key(order.category), locale
        ),
        price=price,
        formatted_price=format_price(price),
        published_date=ensure_utc(order.published_date),
        created_at=ensure_utc(order.created_at),
        cover_image_url=visible_cover_image(order.cover_image_url, order.category),
        is_available=order.is_available,
        stock_quantity=order.stock_quantity,
        published_age=published_age(order.published_date, now),
        author_initials=author_initials(order.author),
        availability_status=localizer.translate(
            availability_status_key(order.is_available, order.stock_quantity), locale
        ),
    )
