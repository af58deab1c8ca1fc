"""Unit tests for the exception handler helpers."""

import pytest
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pytest_mock import MockerFixture

from src.api.middleware.error_handler import (
    catalog_error_handler,
    collect_field_errors,
    get_service_info,
    status_code_for,
)
from src.core.config import get_settings
from src.core.exceptions import (
    BatchCommitError,
    CatalogError,
    InfrastructureError,
    NotFoundError,
    OrderValidationError,
    ValidationError,
)


@pytest.mark.unit
class TestStatusMapping:
    """Test the exception to status code mapping."""

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (OrderValidationError({"price": ["Price must be greater than 0."]}), 400),
            (ValidationError("bad input"), 400),
            (NotFoundError("Order 1 not found"), 404),
            (InfrastructureError(), 500),
            (BatchCommitError({"success_count": 0}), 500),
            (CatalogError("CUSTOM", "custom"), 500),
        ],
    )
    def test_status_code_for(self, error: CatalogError, expected: int) -> None:
        """Rejections are 400, unknown ids 404 and failures 500."""
        assert status_code_for(error) == expected


@pytest.mark.unit
class TestHandlerHelpers:
    """Test helpers used by the handlers."""

    def test_collect_field_errors(self) -> None:
        """Schema errors are grouped by field path without the location prefix."""
        exc = RequestValidationError(
            [
                {"loc": ("body", "price"), "msg": "Input should be a valid decimal"},
                {"loc": ("body", 1, "title"), "msg": "Field required"},
                {"loc": ("body",), "msg": "Field required"},
            ]
        )

        assert collect_field_errors(exc) == {
            "price": ["Input should be a valid decimal"],
            "1.title": ["Field required"],
            "root": ["Field required"],
        }

    def test_get_service_info(self) -> None:
        """Service info mirrors the settings."""
        info = get_service_info(get_settings())

        assert info.name == "Order Catalog"
        assert info.environment == "development"

    async def test_catalog_handler_rejects_other_exceptions(
        self, mocker: MockerFixture
    ) -> None:
        """Handlers are only registered for their exception types."""
        request = mocker.Mock(spec=Request)

        with pytest.raises(TypeError, match="Expected CatalogError"):
            await catalog_error_handler(request, ValueError("wrong type"))
