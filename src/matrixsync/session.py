"""
Session wiring for matrixsync.

MatrixSession is the composition root: it owns the config, the single
TransportClient and the LedStateStore for a process, and is the place where
tests swap in a fake connection factory or scheduler.
"""

import logging
from typing import Optional

from matrixsync.models import AppConfig
from matrixsync.store import LedStateStore
from matrixsync.transport import ConnectionFactory, Scheduler, TransportClient

logger = logging.getLogger(__name__)


class MatrixSession:
    """
    Owns one transport and one store.

    Architecture:
        MatrixSession
        ├── config: AppConfig
        ├── transport: TransportClient (one broker connection)
        └── store: LedStateStore (observes transport)

    Example:
        ```python
        with MatrixSession(AppConfig.load_or_default()) as session:
            session.transport.wait_until_connected(10)
            session.store.toggle(42)
        ```
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        connection_factory: Optional[ConnectionFactory] = None,
        scheduler: Optional[Scheduler] = None,
        threaded_delivery: bool = True,
    ):
        """
        Initialize the session. Nothing connects until first use.

        Args:
            config: Application configuration (defaults to AppConfig.load_or_default())
            connection_factory: Override the broker connection (tests)
            scheduler: Override reconnect timers (tests)
            threaded_delivery: Deliver events on a worker thread
        """
        self.config = config if config is not None else AppConfig.load_or_default()
        self.transport = TransportClient(
            self.config,
            connection_factory=connection_factory,
            scheduler=scheduler,
            threaded_delivery=threaded_delivery,
        )
        self.store = LedStateStore(self.transport)
        self._closed = False
        logger.debug(f"Session created for {self.config.broker.url}")

    def close(self) -> None:
        """Detach the store and shut the transport down."""
        if self._closed:
            return
        self._closed = True
        self.store.close()
        self.transport.close()
        logger.info("Session closed")

    def __enter__(self) -> "MatrixSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
