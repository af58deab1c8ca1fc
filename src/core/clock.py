"""Injectable time and identifier sources.

Domain code never calls ``datetime.now`` or ``uuid.uuid4`` directly; it asks
a ``Clock`` and an ``IdFactory`` so tests can pin both.
"""

import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol

type IdFactory = Callable[[], uuid.UUID]


class Clock(Protocol):
    """Source of the current UTC time."""

    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Clock backed by the system wall clock."""

    def now(self) -> datetime:
        """Return the current UTC time."""
        return datetime.now(UTC)


def new_order_id() -> uuid.UUID:
    """Generate a new random order identifier."""
    return uuid.uuid4()


def ensure_utc(moment: datetime) -> datetime:
    """Return ``moment`` as an aware UTC datetime.

    Naive values (e.g. read back from SQLite) are assumed to already be UTC.

    Args:
        moment: The datetime to normalize.

    Returns:
        datetime: The equivalent aware UTC datetime.
    """
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def years_before(moment: datetime, years: int) -> datetime:
    """Return the same calendar instant ``years`` years earlier.

    February 29th maps to February 28th when the target year is not a leap year.
    """
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        return moment.replace(year=moment.year - years, day=28)
