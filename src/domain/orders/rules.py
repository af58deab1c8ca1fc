"""Validation rules for order submissions.

Rules are declared in order as ``Rule`` entries. Every rule whose ``when``
gate holds is evaluated, even after an earlier rule on the same field has
failed, and each failure contributes its message under the rule's field:

    >>> errors = await OrderValidator(store, rules_config, clock).validate(request)
    >>> errors
    {'price': ['Technical orders must have a minimum price of $20.00.']}

Uniqueness and the daily creation cap consult the ``OrderStore``. A failing
lookup propagates to the caller; a rejected submission never raises.
"""

import inspect
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime, time, timedelta
from decimal import Decimal
from typing import Final
from urllib.parse import urlsplit

from loguru import logger

from src.core.clock import Clock, ensure_utc, years_before
from src.core.config import CatalogRulesConfig
from src.core.types import FieldErrors
from src.domain.orders.projection import normalize_isbn
from src.domain.orders.schemas import CreateOrderRequest, OrderCategory
from src.domain.orders.store import OrderStore

TITLE_MIN_LENGTH: Final[int] = 1
TITLE_MAX_LENGTH: Final[int] = 200
AUTHOR_MIN_LENGTH: Final[int] = 2
AUTHOR_MAX_LENGTH: Final[int] = 100
ISBN_LENGTHS: Final[frozenset[int]] = frozenset({10, 13})
PRICE_MIN_EXCLUSIVE: Final[Decimal] = Decimal(0)
PRICE_MAX_EXCLUSIVE: Final[Decimal] = Decimal(10_000)
PRICE_MAX_DECIMAL_PLACES: Final[int] = 2
EARLIEST_PUBLISHED_DATE: Final[datetime] = datetime(1400, 1, 1, tzinfo=UTC)
STOCK_MAX: Final[int] = 100_000
IMAGE_EXTENSIONS: Final[tuple[str, ...]] = (".jpg", ".jpeg", ".png", ".gif", ".webp")
ALLOWED_URL_SCHEMES: Final[frozenset[str]] = frozenset({"http", "https"})

HIGH_VALUE_PRICE: Final[Decimal] = Decimal(500)
HIGH_VALUE_STOCK_MAX: Final[int] = 10
TECHNICAL_MIN_PRICE: Final[Decimal] = Decimal(20)
TECHNICAL_MAX_AGE_YEARS: Final[int] = 5
CHILDREN_MAX_PRICE: Final[Decimal] = Decimal(50)
EXPENSIVE_PRICE: Final[Decimal] = Decimal(100)
EXPENSIVE_STOCK_MAX: Final[int] = 20

# Letters of any script plus whitespace, hyphen, apostrophe and period
AUTHOR_NAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(?:[^\W\d_]|[\s\-'.])+$")

ORDER_FIELD: Final[str] = "order"
CATEGORY_VALUES: Final[frozenset[str]] = frozenset(category.value for category in OrderCategory)


@dataclass(frozen=True)
class RuleInput:
    """What a rule check sees.

    ``pending_creations`` counts orders accepted alongside the submission
    that are not stored yet.
    """

    request: CreateOrderRequest
    now: datetime
    pending_creations: int = 0

    @property
    def published_date(self) -> datetime:
        """Publication date as an aware UTC datetime."""
        return ensure_utc(self.request.published_date)


type RuleCheck = Callable[[RuleInput], bool | Awaitable[bool]]
type RuleGate = Callable[[CreateOrderRequest], bool]


@dataclass(frozen=True)
class Rule:
    """One validation rule.

    Attributes:
        field: Error key the message is reported under.
        message: Message reported when ``check`` returns False.
        check: Predicate that returns True when the submission passes.
        when: Optional gate; the rule is skipped when it returns False.
    """

    field: str
    message: str
    check: RuleCheck
    when: RuleGate | None = None

    def applies_to(self, request: CreateOrderRequest) -> bool:
        """Whether the rule's gate admits ``request``."""
        return self.when is None or self.when(request)


def _is_category(category: OrderCategory) -> RuleGate:
    return lambda request: request.category == category


def _contains_any(text: str, words: list[str]) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in words)


def is_valid_isbn(isbn: str) -> bool:
    """Whether ``isbn`` normalizes to exactly 10 or 13 ASCII digits."""
    normalized = normalize_isbn(isbn)
    return len(normalized) in ISBN_LENGTHS and normalized.isascii() and normalized.isdigit()


def has_cent_precision(price: Decimal) -> bool:
    """Whether ``price`` has no more than two significant decimal places."""
    exponent = price.normalize().as_tuple().exponent
    return isinstance(exponent, int) and exponent >= -PRICE_MAX_DECIMAL_PLACES


def is_valid_author_name(author: str) -> bool:
    """Whether ``author`` only holds letters, whitespace, ``-``, ``'`` and ``.``."""
    return AUTHOR_NAME_PATTERN.fullmatch(author) is not None


def is_valid_image_url(url: str) -> bool:
    """Whether ``url`` is an absolute http(s) URL to a common image format."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return (
        parts.scheme.lower() in ALLOWED_URL_SCHEMES
        and bool(parts.netloc)
        and parts.path.lower().endswith(IMAGE_EXTENSIONS)
    )


def utc_day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Start and exclusive end of the UTC calendar day containing ``now``."""
    start = datetime.combine(ensure_utc(now).date(), time.min, tzinfo=UTC)
    return start, start + timedelta(days=1)


class OrderValidator:
    """Evaluate the ordered rule set against a submission.

    Args:
        store: Read access to persisted orders for uniqueness and cap checks.
        rules_config: Word lists and the daily creation cap.
        clock: Source of "now"; read once per validation.
    """

    def __init__(
        self, store: OrderStore, rules_config: CatalogRulesConfig, clock: Clock
    ) -> None:
        self.store = store
        self.rules_config = rules_config
        self.clock = clock
        self.rules = self._build_rules()

    def _build_rules(self) -> list[Rule]:
        config = self.rules_config
        technical = _is_category(OrderCategory.TECHNICAL)
        children = _is_category(OrderCategory.CHILDREN)

        return [
            Rule("title", "Title must not be empty.", lambda r: bool(r.request.title.strip())),
            Rule(
                "title",
                f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters.",
                lambda r: TITLE_MIN_LENGTH <= len(r.request.title) <= TITLE_MAX_LENGTH,
            ),
            Rule(
                "title",
                "Title contains inappropriate content.",
                lambda r: not _contains_any(r.request.title, config.title_denylist),
            ),
            Rule(
                "title",
                "This title already exists for this author.",
                self._is_unique_title_for_author,
            ),
            Rule("author", "Author must not be empty.", lambda r: bool(r.request.author.strip())),
            Rule(
                "author",
                f"Author must be between {AUTHOR_MIN_LENGTH} and {AUTHOR_MAX_LENGTH} characters.",
                lambda r: AUTHOR_MIN_LENGTH <= len(r.request.author) <= AUTHOR_MAX_LENGTH,
            ),
            Rule(
                "author",
                "Author name contains invalid characters.",
                lambda r: is_valid_author_name(r.request.author),
            ),
            Rule("isbn", "ISBN must not be empty.", lambda r: bool(r.request.isbn.strip())),
            Rule(
                "isbn",
                "ISBN format is invalid. It must be 10 or 13 digits, optionally with hyphens.",
                lambda r: is_valid_isbn(r.request.isbn),
            ),
            Rule("isbn", "An order with this ISBN already exists.", self._is_unique_isbn),
            Rule(
                "category",
                "A valid category is required.",
                lambda r: r.request.category in CATEGORY_VALUES,
            ),
            Rule(
                "price",
                "Price must be greater than 0.",
                lambda r: r.request.price > PRICE_MIN_EXCLUSIVE,
            ),
            Rule(
                "price",
                "Price must be less than 10000.",
                lambda r: r.request.price < PRICE_MAX_EXCLUSIVE,
            ),
            Rule(
                "price",
                f"Price must have at most {PRICE_MAX_DECIMAL_PLACES} decimal places.",
                lambda r: has_cent_precision(r.request.price),
            ),
            Rule(
                "published_date",
                "Published date cannot be in the future.",
                lambda r: r.published_date < r.now,
            ),
            Rule(
                "published_date",
                "Published date cannot be before the year 1400.",
                lambda r: r.published_date > EARLIEST_PUBLISHED_DATE,
            ),
            Rule(
                "stock_quantity",
                "Stock quantity cannot be negative.",
                lambda r: r.request.stock_quantity >= 0,
            ),
            Rule(
                "stock_quantity",
                "Stock quantity is unreasonably high.",
                lambda r: r.request.stock_quantity <= STOCK_MAX,
            ),
            Rule(
                "cover_image_url",
                "CoverImageUrl must be a valid HTTP/HTTPS URL pointing to a common image format.",
                lambda r: is_valid_image_url(r.request.cover_image_url or ""),
                when=lambda request: bool(request.cover_image_url),
            ),
            Rule(
                ORDER_FIELD,
                "The order violates one or more business rules.",
                self._passes_business_rules,
            ),
            Rule(
                "price",
                "Technical orders must have a minimum price of $20.00.",
                lambda r: r.request.price >= TECHNICAL_MIN_PRICE,
                when=technical,
            ),
            Rule(
                "published_date",
                "Technical orders must be published within the last 5 years.",
                lambda r: r.published_date > years_before(r.now, TECHNICAL_MAX_AGE_YEARS),
                when=technical,
            ),
            Rule(
                "title",
                "Technical orders must mention a technical subject in the title.",
                lambda r: _contains_any(r.request.title, config.technical_keywords),
                when=technical,
            ),
            Rule(
                "price",
                "Children's orders cannot exceed $50.00.",
                lambda r: r.request.price <= CHILDREN_MAX_PRICE,
                when=children,
            ),
            Rule(
                "title",
                "Title is not appropriate for children.",
                lambda r: not _contains_any(r.request.title, config.children_denylist),
                when=children,
            ),
            Rule(
                "stock_quantity",
                "Expensive orders (>$100) must have a stock of 20 or less.",
                lambda r: r.request.stock_quantity <= EXPENSIVE_STOCK_MAX,
                when=lambda request: request.price > EXPENSIVE_PRICE,
            ),
        ]

    async def _is_unique_title_for_author(self, rule_input: RuleInput) -> bool:
        request = rule_input.request
        return not await self.store.exists_by(title=request.title, author=request.author)

    async def _is_unique_isbn(self, rule_input: RuleInput) -> bool:
        return not await self.store.exists_by(isbn=normalize_isbn(rule_input.request.isbn))

    async def _passes_business_rules(self, rule_input: RuleInput) -> bool:
        start, end = utc_day_bounds(rule_input.now)
        created_today = (
            await self.store.count_created_between(start, end)
            + rule_input.pending_creations
        )
        if created_today >= self.rules_config.daily_creation_limit:
            logger.warning(
                "Daily order creation limit reached",
                created_today=created_today,
                limit=self.rules_config.daily_creation_limit,
            )
            return False

        request = rule_input.request
        return not (
            request.price > HIGH_VALUE_PRICE
            and request.stock_quantity > HIGH_VALUE_STOCK_MAX
        )

    async def validate(
        self, request: CreateOrderRequest, *, pending_creations: int = 0
    ) -> FieldErrors:
        """Evaluate every applicable rule against ``request``.

        Args:
            request: The submission to validate.
            pending_creations: Orders accepted earlier in the same unit of work
                but not yet stored; they count toward the daily cap.

        Returns:
            FieldErrors: Field name to violated-rule messages; empty when the
                submission is accepted.

        Raises:
            Exception: Whatever the store raises when a lookup cannot complete.
        """
        rule_input = RuleInput(
            request=request,
            now=ensure_utc(self.clock.now()),
            pending_creations=pending_creations,
        )
        errors: FieldErrors = {}

        for rule in self.rules:
            if not rule.applies_to(request):
                continue
            outcome = rule.check(rule_input)
            passed = await outcome if inspect.isawaitable(outcome) else outcome
            if not passed:
                errors.setdefault(rule.field, []).append(rule.message)

        if errors:
            logger.debug(
                "Order submission rejected",
                failed_fields=list(errors),
                violations=sum(len(messages) for messages in errors.values()),
            )
        return errors
