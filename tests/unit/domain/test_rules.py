"""Unit tests for the order validation rules."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
import pytest_check

from src.core.config import CatalogRulesConfig
from src.domain.orders.rules import (
    OrderValidator,
    has_cent_precision,
    is_valid_author_name,
    is_valid_image_url,
    is_valid_isbn,
    utc_day_bounds,
)
from tests.unit.doubles import (
    FIXED_NOW,
    FixedClock,
    InMemoryOrderStore,
    RequestFactory,
    make_order,
)

BUSINESS_RULES_MESSAGE = "The order violates one or more business rules."


@pytest.mark.unit
class TestRuleHelpers:
    """Test the standalone predicates used by the rules."""

    @pytest.mark.parametrize(
        ("isbn", "expected"),
        [
            ("9780134494166", True),
            ("978-0-13-449416-6", True),
            ("0-306-40615-2", True),
            ("0 306 40615 2", True),
            ("12345", False),
            ("978013449416X", False),
            ("97801344941661", False),
            ("", False),
        ],
    )
    def test_is_valid_isbn(self, isbn: str, expected: bool) -> None:
        """ISBNs must normalize to exactly 10 or 13 digits."""
        assert is_valid_isbn(isbn) is expected

    @pytest.mark.parametrize(
        ("author", "expected"),
        [
            ("Jane Porter", True),
            ("J. R. R. Tolkien", True),
            ("Mary-Anne O'Neil", True),
            ("Gabriel García Márquez", True),
            ("R2-D2", False),
            ("Jane_Porter", False),
            ("Jane@Porter", False),
        ],
    )
    def test_is_valid_author_name(self, author: str, expected: bool) -> None:
        """Author names allow letters, whitespace, hyphens, apostrophes and periods."""
        assert is_valid_author_name(author) is expected

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://images.example.com/cover.jpg", True),
            ("http://images.example.com/covers/a.WEBP", True),
            ("https://images.example.com/cover.png?size=large", True),
            ("ftp://images.example.com/cover.jpg", False),
            ("https://images.example.com/cover.pdf", False),
            ("/relative/cover.jpg", False),
            ("not a url", False),
        ],
    )
    def test_is_valid_image_url(self, url: str, expected: bool) -> None:
        """Cover URLs must be absolute http(s) links to a common image format."""
        assert is_valid_image_url(url) is expected

    @pytest.mark.parametrize(
        ("price", "expected"),
        [
            ("19.99", True),
            ("19.990", True),
            ("20", True),
            ("1E+3", True),
            ("9999.999", False),
            ("0.004", False),
        ],
    )
    def test_has_cent_precision(self, price: str, expected: bool) -> None:
        """Prices may carry trailing zeros but no fraction of a cent."""
        assert has_cent_precision(Decimal(price)) is expected

    def test_utc_day_bounds(self) -> None:
        """Day bounds span the UTC calendar day containing the instant."""
        start, end = utc_day_bounds(datetime(2025, 6, 15, 23, 59, tzinfo=UTC))

        assert start == datetime(2025, 6, 15, tzinfo=UTC)
        assert end == datetime(2025, 6, 16, tzinfo=UTC)


@pytest.mark.unit
class TestOrderValidator:
    """Test rule evaluation against submissions."""

    async def test_valid_submission_has_no_errors(
        self, validator: OrderValidator, make_request: RequestFactory
    ) -> None:
        """A well-formed Fiction submission is accepted."""
        assert await validator.validate(make_request()) == {}

    async def test_duplicate_title_for_author_is_rejected(
        self,
        validator: OrderValidator,
        store: InMemoryOrderStore,
        make_request: RequestFactory,
    ) -> None:
        """An existing order with the same title and author rejects the submission."""
        store.seed(make_order(isbn="0306406152"))

        errors = await validator.validate(make_request())

        assert errors == {"title": ["This title already exists for this author."]}

    async def test_same_title_by_other_author_is_accepted(
        self,
        validator: OrderValidator,
        store: InMemoryOrderStore,
        make_request: RequestFactory,
    ) -> None:
        """Title uniqueness is scoped to the author."""
        store.seed(make_order(author="Someone Else", isbn="0306406152"))

        assert await validator.validate(make_request()) == {}

    async def test_duplicate_isbn_is_rejected(
        self,
        validator: OrderValidator,
        store: InMemoryOrderStore,
        make_request: RequestFactory,
    ) -> None:
        """The normalized ISBN is compared against stored orders."""
        store.seed(make_order(title="Another Title", isbn="9780134494166"))

        errors = await validator.validate(make_request(isbn="978 0 13 449416 6"))

        assert errors == {"isbn": ["An order with this ISBN already exists."]}

    async def test_every_violation_is_reported(
        self, validator: OrderValidator, make_request: RequestFactory
    ) -> None:
        """Rules keep running after a failure and group messages by field."""
        errors = await validator.validate(
            make_request(title="", author="", price=Decimal(0))
        )

        assert list(errors) == ["title", "author", "price"]
        with pytest_check.check:
            assert errors["title"] == [
                "Title must not be empty.",
                "Title must be between 1 and 200 characters.",
            ]
        with pytest_check.check:
            assert errors["author"] == [
                "Author must not be empty.",
                "Author must be between 2 and 100 characters.",
                "Author name contains invalid characters.",
            ]
        with pytest_check.check:
            assert errors["price"] == ["Price must be greater than 0."]

    @pytest.mark.parametrize(
        ("overrides", "field", "message"),
        [
            (
                {"title": "x" * 201},
                "title",
                "Title must be between 1 and 200 characters.",
            ),
            (
                {"title": "A Badword Story"},
                "title",
                "Title contains inappropriate content.",
            ),
            (
                {"author": "R2-D2"},
                "author",
                "Author name contains invalid characters.",
            ),
            (
                {"isbn": "12345"},
                "isbn",
                "ISBN format is invalid. It must be 10 or 13 digits, optionally with hyphens.",
            ),
            (
                {"category": "Poetry"},
                "category",
                "A valid category is required.",
            ),
            (
                {"price": Decimal(10_000)},
                "price",
                "Price must be less than 10000.",
            ),
            (
                {"price": Decimal("9999.999")},
                "price",
                "Price must have at most 2 decimal places.",
            ),
            (
                {"price": Decimal("0.004")},
                "price",
                "Price must have at most 2 decimal places.",
            ),
            (
                {"published_date": FIXED_NOW + timedelta(days=1)},
                "published_date",
                "Published date cannot be in the future.",
            ),
            (
                {"published_date": datetime(1399, 12, 31, tzinfo=UTC)},
                "published_date",
                "Published date cannot be before the year 1400.",
            ),
            (
                {"stock_quantity": -1},
                "stock_quantity",
                "Stock quantity cannot be negative.",
            ),
            (
                {"stock_quantity": 100_001, "price": Decimal("9.99")},
                "stock_quantity",
                "Stock quantity is unreasonably high.",
            ),
            (
                {"cover_image_url": "https://images.example.com/cover.pdf"},
                "cover_image_url",
                "CoverImageUrl must be a valid HTTP/HTTPS URL pointing to a common "
                "image format.",
            ),
        ],
    )
    async def test_single_field_rules(
        self,
        validator: OrderValidator,
        make_request: RequestFactory,
        overrides: dict[str, object],
        field: str,
        message: str,
    ) -> None:
        """Each field rule reports its message under its field."""
        errors = await validator.validate(make_request(**overrides))

        assert errors == {field: [message]}

    async def test_missing_cover_image_is_not_validated(
        self, validator: OrderValidator, make_request: RequestFactory
    ) -> None:
        """The cover URL rule only applies when a URL is supplied."""
        assert await validator.validate(make_request(cover_image_url="")) == {}

    async def test_technical_minimum_price(
        self, validator: OrderValidator, make_request: RequestFactory
    ) -> None:
        """Technical orders below $20.00 are rejected on price."""
        request = make_request(
            title="Python Programming Essentials",
            category="Technical",
            price=Decimal("15.00"),
            published_date=FIXED_NOW - timedelta(days=365),
        )

        errors = await validator.validate(request)

        assert errors == {"price": ["Technical orders must have a minimum price of $20.00."]}

    async def test_technical_publication_window(
        self, validator: OrderValidator, make_request: RequestFactory
    ) -> None:
        """Technical orders older than five years are rejected."""
        request = make_request(
            title="Python Programming Essentials",
            category="Technical",
            price=Decimal("45.00"),
            published_date=FIXED_NOW - timedelta(days=6 * 365),
        )

        errors = await validator.validate(request)

        assert errors == {
            "published_date": [
                "Technical orders must be published within the last 5 years."
            ]
        }

    async def test_technical_title_needs_subject(
        self, validator: OrderValidator, make_request: RequestFactory
    ) -> None:
        """Technical titles must mention a technical keyword."""
        request = make_request(
            category="Technical",
            price=Decimal("45.00"),
            published_date=FIXED_NOW - timedelta(days=365),
        )

        errors = await validator.validate(request)

        assert errors == {
            "title": ["Technical orders must mention a technical subject in the title."]
        }

    async def test_children_price_cap(
        self, validator: OrderValidator, make_request: RequestFactory
    ) -> None:
        """Children orders cannot exceed $50.00."""
        request = make_request(
            title="The Happy Dragon", category="Children", price=Decimal("50.01")
        )

        errors = await validator.validate(request)

        assert errors == {"price": ["Children's orders cannot exceed $50.00."]}

    async def test_children_title_word_list(
        self, validator: OrderValidator, make_request: RequestFactory
    ) -> None:
        """Children titles may not contain words from the Children denylist."""
        request = make_request(
            title="Horror at Bedtime", category="Children", price=Decimal("12.00")
        )

        errors = await validator.validate(request)

        assert errors == {"title": ["Title is not appropriate for children."]}

    async def test_expensive_order_stock_limit(
        self, validator: OrderValidator, make_request: RequestFactory
    ) -> None:
        """Orders above $100 may not stock more than 20 copies."""
        errors = await validator.validate(
            make_request(price=Decimal("150.00"), stock_quantity=25)
        )

        assert errors == {
            "stock_quantity": ["Expensive orders (>$100) must have a stock of 20 or less."]
        }

    async def test_high_value_high_stock_violates_business_rules(
        self, validator: OrderValidator, make_request: RequestFactory
    ) -> None:
        """Orders above $500 with more than 10 copies fail the business rules."""
        errors = await validator.validate(
            make_request(price=Decimal("600.00"), stock_quantity=15)
        )

        assert errors == {"order": [BUSINESS_RULES_MESSAGE]}

    async def test_daily_creation_cap(
        self,
        store: InMemoryOrderStore,
        clock: FixedClock,
        make_request: RequestFactory,
    ) -> None:
        """Reaching the daily cap rejects further submissions that day."""
        validator = OrderValidator(
            store, CatalogRulesConfig(daily_creation_limit=1), clock
        )
        store.seed(
            make_order(
                title="Earlier Today",
                isbn="0306406152",
                created_at=FIXED_NOW - timedelta(hours=1),
            )
        )

        errors = await validator.validate(make_request())

        assert errors == {"order": [BUSINESS_RULES_MESSAGE]}

    async def test_daily_cap_counts_pending_creations(
        self,
        store: InMemoryOrderStore,
        clock: FixedClock,
        make_request: RequestFactory,
    ) -> None:
        """Orders accepted but not yet stored count toward the cap."""
        validator = OrderValidator(
            store, CatalogRulesConfig(daily_creation_limit=2), clock
        )

        with pytest_check.check:
            assert await validator.validate(make_request(), pending_creations=1) == {}
        with pytest_check.check:
            assert await validator.validate(make_request(), pending_creations=2) == {
                "order": [BUSINESS_RULES_MESSAGE]
            }

    async def test_daily_cap_counts_only_today(
        self,
        store: InMemoryOrderStore,
        clock: FixedClock,
        make_request: RequestFactory,
    ) -> None:
        """Orders created on previous days do not count toward the cap."""
        validator = OrderValidator(
            store, CatalogRulesConfig(daily_creation_limit=1), clock
        )
        store.seed(
            make_order(
                title="Yesterday",
                isbn="0306406152",
                created_at=FIXED_NOW - timedelta(days=1),
            )
        )

        assert await validator.validate(make_request()) == {}

    async def test_configured_word_lists_are_used(
        self,
        store: InMemoryOrderStore,
        clock: FixedClock,
        make_request: RequestFactory,
    ) -> None:
        """The title denylist comes from configuration."""
        validator = OrderValidator(
            store, CatalogRulesConfig(title_denylist=["  Harbor "]), clock
        )

        errors = await validator.validate(make_request())

        assert errors == {"title": ["Title contains inappropriate content."]}

    async def test_lookup_failure_propagates(
        self,
        validator: OrderValidator,
        store: InMemoryOrderStore,
        make_request: RequestFactory,
    ) -> None:
        """A store that cannot answer aborts validation with its exception."""
        store.fail_on_lookup = ConnectionError("database unavailable")

        with pytest.raises(ConnectionError, match="database unavailable"):
            await validator.validate(make_request())
