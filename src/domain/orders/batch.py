"""Batch order creation with one atomic commit.

Items are validated in input order against the same rules as single
submissions. An item whose normalized ISBN repeats an already accepted item
is rejected as well. Rejections are reported per item, each with a failure
metrics sample, and never abort the batch. Orders accepted earlier in the
batch count toward the daily creation cap.

The accepted items are staged together and committed once: either all of
them are persisted, or, when the commit fails, none are and
``BatchCommitError`` carries the summary computed so far. A validation
lookup that cannot complete aborts the batch with ``InfrastructureError``.
"""

import uuid

from loguru import logger

from src.core.clock import Clock, IdFactory, SystemClock, new_order_id
from src.core.constants import BATCH_OPERATION_PREFIX
from src.core.exceptions import BatchCommitError, InfrastructureError
from src.core.observability import trace_operation
from src.domain.orders.entity import Order
from src.domain.orders.metrics import OrderCreationMetrics, OrderMetricsStore
from src.domain.orders.projection import create_order_entry, normalize_isbn
from src.domain.orders.rules import OrderValidator
from src.domain.orders.schemas import (
    BatchItemResult,
    BatchOrderResponse,
    CreateOrderRequest,
)
from src.domain.orders.service import (
    VALIDATION_FAILED_REASON,
    Stopwatch,
    discard_pending_writes,
)
from src.domain.orders.store import OrderStore

DUPLICATE_ISBN_MESSAGE = "Duplicate ISBN within batch"
NOTHING_TO_PROCESS_MESSAGE = "No valid orders to process."
NOT_PERSISTED_MESSAGE = "Not persisted: batch commit failed"


class BatchOrderService:
    """Create several orders in one transaction.

    Args:
        store: Order persistence.
        metrics: Collector for creation samples.
        validator: Rule evaluator reading from the same store.
        clock: Source of "now".
        id_factory: Source of new order and batch identifiers.
    """

    def __init__(
        self,
        store: OrderStore,
        metrics: OrderMetricsStore,
        validator: OrderValidator,
        clock: Clock | None = None,
        id_factory: IdFactory = new_order_id,
    ) -> None:
        self.store = store
        self.metrics = metrics
        self.validator = validator
        self.clock = clock or SystemClock()
        self.id_factory = id_factory

    async def create_batch(
        self, requests: list[CreateOrderRequest]
    ) -> BatchOrderResponse:
        """Validate every submission and persist the accepted ones atomically.

        Args:
            requests: Submissions in the order they should be reported.

        Returns:
            BatchOrderResponse: Counts and per-item results in input order.

        Raises:
            InfrastructureError: If a validation lookup cannot complete.
                Nothing from the batch is persisted.
            BatchCommitError: If staging or committing the accepted orders
                fails. Nothing from the batch is persisted.
        """
        batch_id = self.id_factory()
        response = BatchOrderResponse(batch_id=batch_id, total_requested=len(requests))

        with logger.contextualize(batch_id=str(batch_id)):
            logger.info("Starting batch processing for {} orders", len(requests))

            accepted = await self._classify(batch_id, requests, response)
            if not accepted:
                response.message = NOTHING_TO_PROCESS_MESSAGE
                logger.info("Batch contained no valid orders")
                return response

            commit_timer = Stopwatch()
            try:
                with trace_operation(
                    "order.batch.commit",
                    batch_id=str(batch_id),
                    order_count=len(accepted),
                ):
                    commit_timer.start()
                    await self.store.add_many(order for order, _ in accepted)
                    await self.store.commit()
                    commit_timer.stop()
            except Exception as exc:
                commit_timer.stop()
                logger.opt(exception=exc).error("Batch transaction failed")
                await discard_pending_writes(self.store)
                self._record_accepted(
                    batch_id, accepted, commit_timer, error_reason=str(exc)
                )
                raise BatchCommitError(
                    self._failed_summary(response, accepted), cause=exc
                ) from exc

            response.success_count = len(accepted)
            logger.info(
                "Batch committed. Success: {}, Failed: {}",
                response.success_count,
                response.failed_count,
            )
            self._record_accepted(batch_id, accepted, commit_timer)
            return response

    async def _classify(
        self,
        batch_id: uuid.UUID,
        requests: list[CreateOrderRequest],
        response: BatchOrderResponse,
    ) -> list[tuple[Order, Stopwatch]]:
        """Validate items in order, filling ``response`` with per-item results.

        Rejected items record their failure sample here; accepted items are
        recorded once the commit outcome is known.
        """
        accepted: list[tuple[Order, Stopwatch]] = []
        accepted_isbns: set[str] = set()

        for request in requests:
            isbn = normalize_isbn(request.isbn)
            validation = Stopwatch.started()
            try:
                errors = await self.validator.validate(
                    request, pending_creations=len(accepted)
                )
            except Exception as exc:
                validation.stop()
                logger.opt(exception=exc).error(
                    "Batch validation failed during processing",
                    processed_items=len(response.results),
                    validation_duration_ms=round(validation.elapsed_ms, 2),
                )
                await discard_pending_writes(self.store)
                self._record(
                    batch_id,
                    title=request.title,
                    isbn=isbn,
                    category=request.category,
                    validation=validation,
                    error_reason=str(exc),
                )
                raise InfrastructureError(
                    context={"batch_id": str(batch_id)}, cause=exc
                ) from exc
            validation.stop()

            if errors:
                self._reject(
                    batch_id,
                    request,
                    response,
                    validation,
                    message="Validation failed: "
                    + ", ".join(m for messages in errors.values() for m in messages),
                    reason=VALIDATION_FAILED_REASON,
                )
                continue

            if isbn in accepted_isbns:
                self._reject(
                    batch_id,
                    request,
                    response,
                    validation,
                    message=DUPLICATE_ISBN_MESSAGE,
                    reason=DUPLICATE_ISBN_MESSAGE,
                )
                continue

            order = create_order_entry(
                request, now=self.clock.now(), order_id=self.id_factory()
            )
            accepted_isbns.add(isbn)
            accepted.append((order, validation))
            response.results.append(
                BatchItemResult(title=request.title, success=True, order_id=order.id)
            )

        return accepted

    def _reject(
        self,
        batch_id: uuid.UUID,
        request: CreateOrderRequest,
        response: BatchOrderResponse,
        validation: Stopwatch,
        *,
        message: str,
        reason: str,
    ) -> None:
        response.failed_count += 1
        response.results.append(
            BatchItemResult(title=request.title, success=False, message=message)
        )
        self._record(
            batch_id,
            title=request.title,
            isbn=normalize_isbn(request.isbn),
            category=request.category,
            validation=validation,
            error_reason=reason,
        )

    def _failed_summary(
        self, response: BatchOrderResponse, accepted: list[tuple[Order, Stopwatch]]
    ) -> dict[str, object]:
        """Summary of a batch whose commit failed, accepted items marked unpersisted."""
        staged_ids = {order.id for order, _ in accepted}
        results = [
            result.model_copy(
                update={"success": False, "message": NOT_PERSISTED_MESSAGE}
            )
            if result.order_id in staged_ids
            else result
            for result in response.results
        ]
        failed = response.model_copy(
            update={
                "success_count": 0,
                "failed_count": response.total_requested,
                "results": results,
            }
        )
        return failed.model_dump(mode="json")

    def _record(
        self,
        batch_id: uuid.UUID,
        *,
        title: str,
        isbn: str,
        category: str,
        validation: Stopwatch,
        database: Stopwatch | None = None,
        error_reason: str | None = None,
    ) -> None:
        database_ms = database.elapsed_ms if database is not None else 0.0
        self.metrics.record(
            OrderCreationMetrics(
                operation_id=f"{BATCH_OPERATION_PREFIX}{batch_id}",
                title=title,
                isbn=isbn,
                category=category,
                validation_duration_ms=validation.elapsed_ms,
                database_duration_ms=database_ms,
                total_duration_ms=validation.elapsed_ms + database_ms,
                success=error_reason is None,
                recorded_at=self.clock.now(),
                error_reason=error_reason,
            )
        )

    def _record_accepted(
        self,
        batch_id: uuid.UUID,
        accepted: list[tuple[Order, Stopwatch]],
        commit_timer: Stopwatch,
        error_reason: str | None = None,
    ) -> None:
        for order, validation in accepted:
            self._record(
                batch_id,
                title=order.title,
                isbn=order.isbn,
                category=order.category,
                validation=validation,
                database=commit_timer,
                error_reason=error_reason,
            )
