"""Domain enums shared by the transport and the store.

- EventSource: where a status event originated
- ErrorCode: why an ErrorStatus event was raised
- ConnectionState: lifecycle of the transport connection
"""

from enum import Enum


class EventSource(Enum):
    """Origin of a status event."""

    BROKER = "broker"    # Our own broker connection (connect/lose/reconnect)
    DEVICE = "device"    # Reported by the matrix over the status topic


class ErrorCode(Enum):
    """Reason attached to an ErrorStatus event."""

    NOT_CONNECTED = "not_connected"              # Command issued while offline
    PUBLISH_FAILED = "publish_failed"            # Broker rejected a publish
    RECONNECT_EXHAUSTED = "reconnect_exhausted"  # Attempt budget used up, terminal
    DEVICE = "device"                            # Device reported an error


class ConnectionState(Enum):
    """Lifecycle of the transport connection."""

    IDLE = "idle"                  # Never started
    CONNECTING = "connecting"      # Attempt in flight
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"  # Waiting for the retry timer
    FAILED = "failed"              # Attempt budget exhausted
    CLOSED = "closed"              # Explicitly disconnected
