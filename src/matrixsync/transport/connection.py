"""Broker connection seam.

TransportClient never touches an MQTT library directly; it asks a
ConnectionFactory for a BrokerConnection per attempt and receives callbacks
through a ConnectionListener. PahoConnection is the production
implementation, tests substitute a fake.
"""

from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from matrixsync.models import AppConfig


@runtime_checkable
class ConnectionListener(Protocol):
    """
    Receives callbacks from one BrokerConnection.

    Callbacks may arrive on the connection's network thread.
    """

    def on_connected(self) -> None:
        """The broker accepted the connection."""
        ...

    def on_connection_lost(self, reason: str) -> None:
        """An established connection dropped."""
        ...

    def on_connect_failed(self, reason: str) -> None:
        """The connection attempt failed before it was established."""
        ...

    def on_message(self, topic: str, payload: bytes) -> None:
        """A message arrived on a subscribed topic."""
        ...


@runtime_checkable
class BrokerConnection(Protocol):
    """One connection attempt and, if it succeeds, the live session."""

    def start(self) -> None:
        """Begin connecting in the background; returns immediately."""
        ...

    def subscribe(self, topic: str, qos: int) -> None:
        """Subscribe to a topic; raises TransportError if the request fails."""
        ...

    def publish(self, topic: str, payload: bytes, qos: int) -> bool:
        """Queue a message for delivery; False if the broker client refused it."""
        ...

    def close(self) -> None:
        """Tear the connection down. No callbacks fire afterwards."""
        ...


ConnectionFactory = Callable[[str, "AppConfig", ConnectionListener], BrokerConnection]
