"""Single-order creation pipeline and order read operations.

``OrderService.create_order`` drives one submission through validation,
persistence and projection, timing each stage and recording exactly one
metrics sample per attempt:

- rejected submissions raise ``OrderValidationError`` with every violation
- store failures raise ``InfrastructureError``; the exception text is kept
  for logs and metrics only
- accepted submissions return the new order's view and location
"""

import time
import uuid
from dataclasses import dataclass

from loguru import logger

from src.core.clock import Clock, IdFactory, SystemClock, new_order_id
from src.core.constants import MILLISECONDS_PER_SECOND
from src.core.context import generate_operation_id
from src.core.exceptions import (
    InfrastructureError,
    NotFoundError,
    OrderValidationError,
)
from src.core.observability import trace_operation
from src.domain.orders.entity import Order
from src.domain.orders.localization import Localizer
from src.domain.orders.metrics import OrderCreationMetrics, OrderMetricsStore
from src.domain.orders.projection import (
    create_order_entry,
    normalize_isbn,
    to_order_profile,
)
from src.domain.orders.rules import OrderValidator
from src.domain.orders.schemas import (
    CreateOrderRequest,
    OrderCategory,
    OrderPage,
    OrderProfile,
)
from src.domain.orders.store import OrderStore

VALIDATION_FAILED_REASON = "Validation failed"


class Stopwatch:
    """Accumulating timer over ``time.perf_counter``."""

    def __init__(self) -> None:
        self._elapsed = 0.0
        self._started_at: float | None = None

    @classmethod
    def started(cls) -> "Stopwatch":
        """Create a stopwatch that is already running."""
        stopwatch = cls()
        stopwatch.start()
        return stopwatch

    def start(self) -> None:
        """Start timing if not already running."""
        if self._started_at is None:
            self._started_at = time.perf_counter()

    def stop(self) -> None:
        """Stop timing and keep the elapsed time."""
        if self._started_at is not None:
            self._elapsed += time.perf_counter() - self._started_at
            self._started_at = None

    @property
    def elapsed_ms(self) -> float:
        """Elapsed milliseconds, including a running interval."""
        running = 0.0
        if self._started_at is not None:
            running = time.perf_counter() - self._started_at
        return (self._elapsed + running) * MILLISECONDS_PER_SECOND


@dataclass(frozen=True)
class OrderCreationResult:
    """A created order's view and the path it can be fetched from."""

    profile: OrderProfile
    location: str


def order_location(order_id: uuid.UUID) -> str:
    """Path of an order resource."""
    return f"/orders/{order_id}"


async def discard_pending_writes(store: OrderStore) -> None:
    """Roll back the store after a failure, logging if that fails too."""
    try:
        await store.rollback()
    except Exception as rollback_error:  # noqa: BLE001 - the original failure is re-raised by the caller
        logger.opt(exception=rollback_error).warning("Rollback after failure did not complete")


class OrderService:
    """Create and read catalog orders.

    Args:
        store: Order persistence.
        metrics: Collector for creation samples.
        localizer: Source of localized labels.
        validator: Rule evaluator reading from the same store.
        clock: Source of "now".
        id_factory: Source of new order identifiers.
    """

    def __init__(
        self,
        store: OrderStore,
        metrics: OrderMetricsStore,
        localizer: Localizer,
        validator: OrderValidator,
        clock: Clock | None = None,
        id_factory: IdFactory = new_order_id,
    ) -> None:
        self.store = store
        self.metrics = metrics
        self.localizer = localizer
        self.validator = validator
        self.clock = clock or SystemClock()
        self.id_factory = id_factory

    def _record(
        self,
        operation_id: str,
        request: CreateOrderRequest,
        *,
        validation: Stopwatch,
        database: Stopwatch,
        total: Stopwatch,
        error_reason: str | None = None,
    ) -> None:
        self.metrics.record(
            OrderCreationMetrics(
                operation_id=operation_id,
                title=request.title,
                isbn=normalize_isbn(request.isbn),
                category=request.category,
                validation_duration_ms=validation.elapsed_ms,
                database_duration_ms=database.elapsed_ms,
                total_duration_ms=total.elapsed_ms,
                success=error_reason is None,
                recorded_at=self.clock.now(),
                error_reason=error_reason,
            )
        )

    def _profile(self, order: Order, locale: str) -> OrderProfile:
        return to_order_profile(
            order, localizer=self.localizer, locale=locale, now=self.clock.now()
        )

    async def create_order(
        self, request: CreateOrderRequest, locale: str
    ) -> OrderCreationResult:
        """Validate, persist and project one submission.

        Args:
            request: The client's submission.
            locale: Locale for the labels of the returned view.

        Returns:
            OrderCreationResult: The created order's view and location.

        Raises:
            OrderValidationError: If any rule is violated. Nothing is persisted.
            InfrastructureError: If a lookup, write or commit fails.
        """
        operation_id = generate_operation_id()
        total = Stopwatch.started()
        validation = Stopwatch()
        database = Stopwatch()

        with logger.contextualize(operation_id=operation_id):
            logger.info(
                "Starting order creation",
                order_title=request.title,
                author=request.author,
                isbn=request.isbn,
            )
            try:
                with trace_operation("order.validate", operation_id=operation_id):
                    validation.start()
                    errors = await self.validator.validate(request)
                    validation.stop()

                if errors:
                    total.stop()
                    logger.warning(
                        "Order validation failed: {}",
                        "; ".join(m for messages in errors.values() for m in messages),
                    )
                    self._record(
                        operation_id,
                        request,
                        validation=validation,
                        database=database,
                        total=total,
                        error_reason=VALIDATION_FAILED_REASON,
                    )
                    raise OrderValidationError(errors)

                order = create_order_entry(
                    request, now=self.clock.now(), order_id=self.id_factory()
                )

                with trace_operation(
                    "order.persist", operation_id=operation_id, order_id=str(order.id)
                ):
                    database.start()
                    await self.store.add(order)
                    await self.store.commit()
                    database.stop()
                logger.info("Order persisted", order_id=str(order.id))

                profile = self._profile(order, locale)
            except OrderValidationError:
                raise
            except Exception as exc:
                validation.stop()
                database.stop()
                total.stop()
                logger.opt(exception=exc).error(
                    "Order creation failed during processing",
                    validation_duration_ms=round(validation.elapsed_ms, 2),
                    database_duration_ms=round(database.elapsed_ms, 2),
                    total_duration_ms=round(total.elapsed_ms, 2),
                )
                await discard_pending_writes(self.store)
                self._record(
                    operation_id,
                    request,
                    validation=validation,
                    database=database,
                    total=total,
                    error_reason=str(exc),
                )
                raise InfrastructureError(
                    context={"operation_id": operation_id}, cause=exc
                ) from exc

            total.stop()
            self._record(
                operation_id,
                request,
                validation=validation,
                database=database,
                total=total,
            )
            return OrderCreationResult(
                profile=profile, location=order_location(profile.id)
            )

    async def get_order(self, order_id: uuid.UUID, locale: str) -> OrderProfile:
        """Fetch one order's view.

        Raises:
            NotFoundError: If no order has ``order_id``.
        """
        order = await self.store.get_by_id(order_id)
        if order is None:
            raise NotFoundError(
                f"Order {order_id} not found", context={"order_id": str(order_id)}
            )
        return self._profile(order, locale)

    async def list_orders(self, page: int, page_size: int, locale: str) -> OrderPage:
        """Fetch one page of order views in creation order.

        Args:
            page: One-based page number.
            page_size: Orders per page.
            locale: Locale for the labels.

        Returns:
            OrderPage: The requested page and the total number of orders.
        """
        orders = await self.store.get_all(skip=(page - 1) * page_size, limit=page_size)
        return OrderPage(
            items=[self._profile(order, locale) for order in orders],
            page=page,
            page_size=page_size,
            total=await self.store.count(),
        )

    async def list_by_category(
        self, category: OrderCategory, locale: str
    ) -> list[OrderProfile]:
        """Fetch the views of every order in ``category``."""
        orders = await self.store.filter_by(category=category.value)
        return [self._profile(order, locale) for order in orders]
