"""FastAPI dependencies wiring the order services for each request.

The metrics store and localizer are owned by the application
(``app.state``); sessions, repositories and services are built per request.
"""

from typing import Annotated

from fastapi import Depends, Header, Request

from src.api.constants import ACCEPT_LANGUAGE_HEADER
from src.core.clock import Clock, SystemClock
from src.core.config import Settings, get_settings
from src.domain.orders.batch import BatchOrderService
from src.domain.orders.localization import Localizer
from src.domain.orders.metrics import OrderMetricsStore
from src.domain.orders.rules import OrderValidator
from src.domain.orders.service import OrderService
from src.domain.orders.store import OrderRepository
from src.infrastructure.database.dependencies import DatabaseSession


def get_metrics_store(request: Request) -> OrderMetricsStore:
    """The application's order metrics store."""
    return request.app.state.metrics_store


def get_localizer(request: Request) -> Localizer:
    """The application's localizer."""
    return request.app.state.localizer


def get_clock() -> Clock:
    """Clock used by the order pipelines."""
    return SystemClock()


MetricsStoreDep = Annotated[OrderMetricsStore, Depends(get_metrics_store)]
LocalizerDep = Annotated[Localizer, Depends(get_localizer)]
ClockDep = Annotated[Clock, Depends(get_clock)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_locale(
    localizer: LocalizerDep,
    accept_language: Annotated[
        str | None, Header(alias=ACCEPT_LANGUAGE_HEADER)
    ] = None,
) -> str:
    """Locale negotiated from the ``Accept-Language`` header."""
    return localizer.resolve_locale(accept_language)


LocaleDep = Annotated[str, Depends(get_locale)]


def get_order_repository(session: DatabaseSession) -> OrderRepository:
    """Order repository bound to the request's session."""
    return OrderRepository(session)


OrderRepositoryDep = Annotated[OrderRepository, Depends(get_order_repository)]


def get_order_validator(
    repository: OrderRepositoryDep, settings: SettingsDep, clock: ClockDep
) -> OrderValidator:
    """Validator reading from the request's repository."""
    return OrderValidator(repository, settings.catalog_rules, clock)


OrderValidatorDep = Annotated[OrderValidator, Depends(get_order_validator)]


def get_order_service(
    repository: OrderRepositoryDep,
    validator: OrderValidatorDep,
    metrics: MetricsStoreDep,
    localizer: LocalizerDep,
    clock: ClockDep,
) -> OrderService:
    """Single-order pipeline for the request."""
    return OrderService(repository, metrics, localizer, validator, clock)


def get_batch_order_service(
    repository: OrderRepositoryDep,
    validator: OrderValidatorDep,
    metrics: MetricsStoreDep,
    clock: ClockDep,
) -> BatchOrderService:
    """Batch pipeline for the request."""
    return BatchOrderService(repository, metrics, validator, clock)


OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
BatchOrderServiceDep = Annotated[BatchOrderService, Depends(get_batch_order_service)]
