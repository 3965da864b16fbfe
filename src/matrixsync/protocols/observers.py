"""Observer protocol definitions.

- StatusObserver: receives every StatusEvent from the transport
- MatrixObserver: receives store snapshots after each change
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from matrixsync.models import StatusEvent, StoreSnapshot


@runtime_checkable
class StatusObserver(Protocol):
    """
    Observer that receives status events from the transport client.

    Events are delivered in receipt order from the dispatcher thread, so
    implementations should be thread-safe and return quickly.
    """

    def on_status_event(self, event: "StatusEvent") -> None:
        """
        Handle one status event.

        Args:
            event: Lifecycle transition or device report
        """
        ...


@runtime_checkable
class MatrixObserver(Protocol):
    """Observer that receives LED state store snapshots."""

    def on_matrix_changed(self, snapshot: "StoreSnapshot") -> None:
        """
        Handle a store change.

        Args:
            snapshot: Immutable view of confirmed state, draft and last error
        """
        ...
