"""Unit tests for Loguru configuration and formatters."""

from collections.abc import Generator
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any

import orjson
import pytest
from pytest_mock import MockerFixture

from src.core.config import LogConfig, Settings
from src.core.logging import (
    _state,
    make_console_formatter,
    serialize_for_json,
    setup_logging,
)


@pytest.fixture
def unconfigured_logging() -> Generator[None]:
    """Let ``setup_logging`` run again, restoring the flag afterwards."""
    previous = _state.configured
    _state.configured = False
    yield
    _state.configured = previous


def make_record(**extra: Any) -> dict[str, Any]:
    """Minimal Loguru-like record."""
    return {
        "time": datetime(2025, 6, 15, 12, 0, tzinfo=UTC),
        "level": SimpleNamespace(name="INFO"),
        "message": "Order persisted",
        "name": "src.domain.orders.service",
        "function": "create_order",
        "line": 42,
        "extra": extra,
        "exception": None,
    }


@pytest.mark.unit
class TestConsoleFormatter:
    """Test the development console format."""

    def test_context_fields_are_inlined(self) -> None:
        """Bound fields appear with priority fields first."""
        formatter = make_console_formatter(["password"])

        line = formatter(
            make_record(
                order_title="The Silent Harbor",
                correlation_id="1234567890abcdef",
                password="hunter2",
            )
        )

        assert line.index("correlation_id=12345678</yellow>") < line.index("order_title=")
        assert "password=[REDACTED]" in line
        assert "hunter2" not in line
        assert line.endswith("{message}\n")

    def test_braces_are_escaped(self) -> None:
        """Values containing braces cannot break the format string."""
        line = make_console_formatter([])(make_record(detail="{oops}"))

        assert "detail={{oops}}" in line

    def test_no_context(self) -> None:
        """Records without bound fields have no context section."""
        line = make_console_formatter([])(make_record())

        assert "[<yellow>" not in line


@pytest.mark.unit
class TestJsonFormatter:
    """Test the JSON line format."""

    def test_serialize_for_json(self) -> None:
        """Records become one JSON document with the bound fields merged."""
        line = serialize_for_json(
            make_record(operation_id="a1b2c3d4", _internal="hidden")
        )

        assert line.endswith("\n")
        entry = orjson.loads(line)
        assert entry["level"] == "INFO"
        assert entry["message"] == "Order persisted"
        assert entry["operation_id"] == "a1b2c3d4"
        assert "_internal" not in entry


@pytest.mark.unit
@pytest.mark.usefixtures("unconfigured_logging")
class TestSetupLogging:
    """Test sink configuration."""

    def test_console_sink(self, mocker: MockerFixture) -> None:
        """The console formatter is installed for development."""
        mock_logger = mocker.patch("src.core.logging.logger")
        mocker.patch("src.core.logging.logging.basicConfig")
        settings = Settings(log_config=LogConfig(log_formatter_type="console"))

        setup_logging(settings)

        mock_logger.remove.assert_called_once()
        assert mock_logger.add.call_args.kwargs["colorize"] is True
        assert _state.configured is True

    def test_json_sink(self, mocker: MockerFixture) -> None:
        """Non-development formats write JSON lines."""
        mock_logger = mocker.patch("src.core.logging.logger")
        mocker.patch("src.core.logging.logging.basicConfig")
        settings = Settings(log_config=LogConfig(log_formatter_type="json"))

        setup_logging(settings)

        sink = mock_logger.add.call_args.args[0]
        assert callable(sink)
        assert "colorize" not in mock_logger.add.call_args.kwargs

    def test_configures_once(self, mocker: MockerFixture) -> None:
        """A second call is a no-op."""
        mock_logger = mocker.patch("src.core.logging.logger")
        mocker.patch("src.core.logging.logging.basicConfig")
        settings = Settings()

        setup_logging(settings)
        setup_logging(settings)

        mock_logger.remove.assert_called_once()
