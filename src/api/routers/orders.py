"""Order and metrics endpoints."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from src.api.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from src.api.dependencies import (
    BatchOrderServiceDep,
    LocaleDep,
    MetricsStoreDep,
    OrderServiceDep,
)
from src.api.schemas.errors import ErrorResponse
from src.domain.orders.schemas import (
    BatchOrderResponse,
    CreateOrderRequest,
    MetricsDashboard,
    OrderCategory,
    OrderPage,
    OrderProfile,
)

router = APIRouter(tags=["orders"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/orders",
    status_code=status.HTTP_201_CREATED,
    summary="Creates a new order.",
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def create_order(
    request: CreateOrderRequest,
    response: Response,
    service: OrderServiceDep,
    locale: LocaleDep,
) -> OrderProfile:
    """Validate and store a new order, returning its view."""
    result = await service.create_order(request, locale)
    response.headers["Location"] = result.location
    return result.profile


@router.post(
    "/orders/batch",
    summary="Batch create orders (transactional).",
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}},
)
async def create_orders_batch(
    requests: list[CreateOrderRequest], service: BatchOrderServiceDep
) -> BatchOrderResponse:
    """Validate every order and store the valid ones in one transaction."""
    return await service.create_batch(requests)


@router.get("/orders", summary="Gets a page of orders.")
async def list_orders(
    service: OrderServiceDep,
    locale: LocaleDep,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
) -> OrderPage:
    """List orders in creation order."""
    return await service.list_orders(page, page_size, locale)


@router.get(
    "/orders/category/{category}",
    summary="Gets orders by category.",
)
async def list_orders_by_category(
    category: OrderCategory, service: OrderServiceDep, locale: LocaleDep
) -> list[OrderProfile]:
    """List every order in a category."""
    return await service.list_by_category(category, locale)


@router.get(
    "/orders/{order_id}",
    summary="Gets an order by its unique ID.",
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
async def get_order(
    order_id: uuid.UUID, service: OrderServiceDep, locale: LocaleDep
) -> OrderProfile:
    """Fetch one order."""
    return await service.get_order(order_id, locale)


@admin_router.get("/metrics", summary="Gets real-time order metrics.")
async def get_order_metrics(metrics: MetricsStoreDep) -> MetricsDashboard:
    """Aggregated duration and success metrics of order creation."""
    return metrics.summarize()
