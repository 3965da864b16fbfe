"""Transport exceptions.

- TransportError: broker connection failure; ``recoverable`` decides
  whether the client schedules another attempt
- NotConnectedError: a command was issued while no connection was live
- PublishError: the broker client refused a publish
- ReconnectExhaustedError: the client stopped trying to connect
- PayloadParseError: an inbound status payload could not be understood
"""

from typing import Optional

from matrixsync.protocols.events import ErrorCode

from .base import MatrixSyncError


class TransportError(MatrixSyncError):
    """The broker connection failed."""

    def __init__(
        self,
        message: str,
        broker_url: Optional[str] = None,
        original_error: Optional[str] = None,
        recoverable: bool = True,
    ):
        technical = message
        if broker_url:
            technical += f" (broker: {broker_url})"
        if original_error:
            technical += f": {original_error}"

        super().__init__(
            user_message=message,
            technical_message=technical,
            recoverable=recoverable,
            recovery_hint="Check the broker URL and credentials, then reconnect",
        )
        self.broker_url = broker_url
        self.original_error = original_error


class NotConnectedError(TransportError):
    """A command was issued while the broker connection was down."""

    error_code = ErrorCode.NOT_CONNECTED

    def __init__(self, action: Optional[str] = None):
        message = "Not connected to the broker"
        if action:
            message = f"Cannot send '{action}': not connected to the broker"
        super().__init__(message)
        self.action = action


class PublishError(TransportError):
    """The broker client did not accept a command."""

    error_code = ErrorCode.PUBLISH_FAILED

    def __init__(self, action: str, topic: str, reason: Optional[str] = None):
        super().__init__(f"Failed to publish '{action}'", original_error=reason or f"topic {topic}")
        self.action = action
        self.topic = topic


class ReconnectExhaustedError(TransportError):
    """The client gave up; nothing happens until connect() is called again."""

    error_code = ErrorCode.RECONNECT_EXHAUSTED

    def __init__(self, attempts: int, broker_url: Optional[str] = None, reason: Optional[str] = None):
        if reason:
            message = f"Could not connect to the broker: {reason}"
        else:
            message = f"Connection lost; gave up after {attempts} reconnect attempt(s)"
        super().__init__(message, broker_url=broker_url, recoverable=False)
        self.attempts = attempts
        self.reason = reason


class PayloadParseError(MatrixSyncError):
    """An inbound status payload was malformed."""

    def __init__(self, reason: str, payload: object = None):
        preview = repr(payload)
        if len(preview) > 120:
            preview = preview[:117] + "..."
        super().__init__(
            user_message=f"Malformed status message: {reason}",
            technical_message=f"Could not parse status payload {preview}: {reason}",
            recoverable=True,
        )
        self.reason = reason
        self.payload = payload
