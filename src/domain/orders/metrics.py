"""In-memory order creation metrics.

Each pipeline run records one ``OrderCreationMetrics`` sample into the
application's ``OrderMetricsStore``. Samples live in a bounded ring buffer;
once ``max_samples`` is reached the oldest sample is evicted. Appends and
snapshots are serialized by a lock so concurrent requests never lose or
corrupt samples, and ``summarize`` computes over a copied snapshot.
"""

import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from statistics import fmean

from loguru import logger

from src.domain.orders.schemas import MetricsDashboard

PERCENT = 100.0


@dataclass(frozen=True)
class OrderCreationMetrics:
    """Timing and outcome of one order creation attempt."""

    operation_id: str
    title: str
    isbn: str
    category: str
    validation_duration_ms: float
    database_duration_ms: float
    total_duration_ms: float
    success: bool
    recorded_at: datetime
    error_reason: str | None = None


def log_order_creation_metrics(sample: OrderCreationMetrics) -> None:
    """Emit one structured log line for a sample.

    Successes are logged at info level, failures at warning level.
    """
    bound = logger.bind(
        metric_type="order.creation",
        operation_id=sample.operation_id,
        order_title=sample.title,
        isbn=sample.isbn,
        category=sample.category,
        validation_duration_ms=round(sample.validation_duration_ms, 2),
        database_duration_ms=round(sample.database_duration_ms, 2),
        total_duration_ms=round(sample.total_duration_ms, 2),
        success=sample.success,
        error_reason=sample.error_reason,
    )
    if sample.success:
        bound.info("Order creation metrics recorded")
    else:
        bound.warning("Order creation failed: {}", sample.error_reason)


class OrderMetricsStore:
    """Thread-safe bounded collector of order creation samples.

    Args:
        max_samples: Samples retained; older ones are evicted first.
        last_errors_count: Failures listed on the dashboard.
    """

    def __init__(self, max_samples: int = 10_000, last_errors_count: int = 5) -> None:
        self._samples: deque[OrderCreationMetrics] = deque(maxlen=max_samples)
        self._lock = threading.Lock()
        self.last_errors_count = last_errors_count

    def record(self, sample: OrderCreationMetrics) -> None:
        """Append a sample and log it."""
        with self._lock:
            self._samples.append(sample)
        log_order_creation_metrics(sample)

    def snapshot(self) -> list[OrderCreationMetrics]:
        """Copy of the retained samples, oldest first."""
        with self._lock:
            return list(self._samples)

    def __len__(self) -> int:
        """Number of retained samples."""
        with self._lock:
            return len(self._samples)

    def summarize(self) -> MetricsDashboard:
        """Compute the dashboard over the current snapshot.

        Returns:
            MetricsDashboard: All zeros with no failures when nothing was
                recorded yet.
        """
        samples = self.snapshot()
        if not samples:
            return MetricsDashboard()

        failures = sorted(
            (sample for sample in samples if not sample.success),
            key=lambda sample: sample.recorded_at,
            reverse=True,
        )

        return MetricsDashboard(
            total_orders_processed=len(samples),
            success_rate=sum(sample.success for sample in samples)
            / len(samples)
            * PERCENT,
            average_total_duration_ms=fmean(s.total_duration_ms for s in samples),
            average_validation_duration_ms=fmean(
                s.validation_duration_ms for s in samples
            ),
            average_database_duration_ms=fmean(s.database_duration_ms for s in samples),
            last_errors=[
                f"{sample.title}: {sample.error_reason}"
                for sample in failures[: self.last_errors_count]
            ],
        )
