"""Tests for the exception hierarchy and error handling helpers."""

import logging

import pytest
from pydantic import BaseModel, ValidationError

from matrixsync.exceptions import (
    ConfigFileInvalidError,
    ConfigurationError,
    ErrorContext,
    InvalidBrightnessError,
    InvalidCoordinateError,
    InvalidIndexError,
    MatrixSyncError,
    NotConnectedError,
    PatternValidationError,
    PayloadParseError,
    PublishError,
    ReconnectExhaustedError,
    TransportError,
    wrap_pydantic_error,
)
from matrixsync.models import ErrorStatus
from matrixsync.protocols import ErrorCode


@pytest.mark.unit
class TestHierarchy:
    @pytest.mark.parametrize("error", [
        InvalidCoordinateError(8, 0, 8, 20),
        InvalidIndexError(160, 160),
        InvalidBrightnessError(256),
    ])
    def test_contract_errors_are_value_errors(self, error):
        assert isinstance(error, MatrixSyncError)
        assert isinstance(error, ValueError)
        assert not error.recoverable

    def test_not_connected_is_transport_error(self):
        error = NotConnectedError("toggle")
        assert isinstance(error, TransportError)
        assert error.recoverable
        assert str(error) == "Cannot send 'toggle': not connected to the broker"

    def test_transport_error_technical_message(self):
        error = TransportError("Subscribe failed", broker_url="ws://b/mqtt", original_error="no connection")
        assert error.user_message == "Subscribe failed"
        assert error.technical_message == "Subscribe failed (broker: ws://b/mqtt): no connection"

    def test_payload_preview_is_truncated(self):
        error = PayloadParseError("not JSON", b"x" * 500)
        assert error.reason == "not JSON"
        assert len(error.technical_message) < 200

    def test_pattern_error_message(self):
        error = PatternValidationError("rows[3].columns", "List should have at least 20 items", "heart.json")
        assert error.user_message == "Invalid pattern at rows[3].columns: List should have at least 20 items"
        assert "File: heart.json" in error.recovery_hint

    def test_pattern_error_without_location(self):
        error = PatternValidationError("", "file not found")
        assert error.user_message == "Invalid pattern at document: file not found"


@pytest.mark.unit
class TestDisplay:
    def test_describe_indents_hint(self):
        error = InvalidCoordinateError(9, 3, 8, 20)
        assert error.describe() == (
            "Coordinate (9, 3) is outside the 20x8 matrix\n  Rows run 0-7 and columns run 0-19"
        )

    def test_describe_without_hint(self):
        error = PayloadParseError("not JSON")
        assert error.describe() == "Malformed status message: not JSON"

    def test_log_level_follows_recoverable(self, caplog):
        target = logging.getLogger("matrixsync.test")
        with caplog.at_level(logging.WARNING):
            NotConnectedError("toggle").log(target)
            InvalidIndexError(999, 160).log(target)

        assert [r.levelno for r in caplog.records] == [logging.WARNING, logging.ERROR]
        assert "Invalid LED index 999" in caplog.records[1].getMessage()

    def test_trailing_comma_hint(self):
        error = ConfigFileInvalidError("/tmp/c.json", "Trailing comma at line 3")
        assert error.user_message == "Configuration file has a trailing comma"


class _Sample(BaseModel):
    count: int


@pytest.mark.unit
class TestWrapPydanticError:
    def test_single_error(self):
        with pytest.raises(ValidationError) as exc_info:
            _Sample.model_validate({"count": "many"})

        error = wrap_pydantic_error(exc_info.value, "config.json")

        assert error.field == "count"
        assert error.value == "many"
        assert error.file_path == "config.json"

    def test_unknown_error(self):
        error = wrap_pydantic_error(RuntimeError("odd"), "config.json")
        assert type(error) is ConfigurationError
        assert "config.json" in error.technical_message


@pytest.mark.unit
class TestErrorContext:
    def test_re_raises_by_default(self):
        with pytest.raises(InvalidIndexError):
            with ErrorContext("toggle LED"):
                raise InvalidIndexError(999, 160)

    def test_suppress_and_capture(self, caplog):
        with caplog.at_level(logging.ERROR):
            with ErrorContext("save pattern", re_raise=False) as ctx:
                raise OSError("disk full")

        assert isinstance(ctx.error, OSError)
        assert "Failed to save pattern" in caplog.text

    def test_success_leaves_no_error(self):
        with ErrorContext("noop") as ctx:
            pass
        assert ctx.error is None


@pytest.mark.unit
class TestStatusReporting:
    @pytest.mark.parametrize("error, code", [
        (NotConnectedError("clear"), ErrorCode.NOT_CONNECTED),
        (PublishError("toggle", "led_matrix/commands"), ErrorCode.PUBLISH_FAILED),
        (ReconnectExhaustedError(3), ErrorCode.RECONNECT_EXHAUSTED),
    ])
    def test_error_codes(self, error, code):
        status = ErrorStatus.from_error(error)
        assert status.code == code
        assert status.message == error.user_message

    def test_error_without_code_reports_device(self):
        status = ErrorStatus.from_error(PayloadParseError("not JSON"))
        assert status.code == ErrorCode.DEVICE

    def test_reconnect_exhausted_messages(self):
        assert ReconnectExhaustedError(3).user_message == "Connection lost; gave up after 3 reconnect attempt(s)"
        error = ReconnectExhaustedError(0, reason="Unsupported broker URL")
        assert error.user_message == "Could not connect to the broker: Unsupported broker URL"
        assert not error.recoverable

    def test_transport_error_can_be_fatal(self):
        assert TransportError("Broker unreachable").recoverable
        assert not TransportError("Unsupported broker URL", recoverable=False).recoverable
