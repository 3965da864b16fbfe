"""Pytest fixtures for tests."""

import json
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from matrixsync.models import AppConfig, ReconnectConfig
from matrixsync.store import LedStateStore
from matrixsync.transport import TransportClient

STATUS_TOPIC = "led_matrix/status"
COMMAND_TOPIC = "led_matrix/commands"


class FakeConnection:
    """In-memory BrokerConnection driven by the test."""

    def __init__(self, client_id, config, listener, auto_accept=True):
        self.client_id = client_id
        self.config = config
        self.listener = listener
        self.auto_accept = auto_accept
        self.started = False
        self.closed = False
        self.subscriptions = []
        self.published = []
        self.publish_result = True

    # BrokerConnection protocol

    def start(self):
        self.started = True
        if self.auto_accept:
            self.accept()

    def subscribe(self, topic, qos):
        self.subscriptions.append((topic, qos))

    def publish(self, topic, payload, qos):
        self.published.append((topic, json.loads(payload), qos))
        return self.publish_result

    def close(self):
        self.closed = True

    # Test controls

    def accept(self):
        self.listener.on_connected()

    def refuse(self, reason="connection refused"):
        self.listener.on_connect_failed(reason)

    def drop(self, reason="network unreachable"):
        self.listener.on_connection_lost(reason)

    def deliver(self, payload, topic=STATUS_TOPIC):
        if isinstance(payload, (dict, list)):
            payload = json.dumps(payload)
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        self.listener.on_message(topic, payload)


class FakeBroker:
    """ConnectionFactory that records every connection it hands out."""

    def __init__(self, auto_accept=True):
        self.auto_accept = auto_accept
        self.connections: list[FakeConnection] = []

    def __call__(self, client_id, config, listener):
        connection = FakeConnection(client_id, config, listener, auto_accept=self.auto_accept)
        self.connections.append(connection)
        return connection

    @property
    def latest(self) -> FakeConnection:
        return self.connections[-1]


class ManualTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose timers only fire when the test says so."""

    def __init__(self):
        self.timers: list[ManualTimer] = []

    def schedule(self, delay, callback):
        timer = ManualTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def fire_next(self):
        timer = self.pending[0]
        timer.fired = True
        timer.callback()


@pytest.fixture
def temp_dir():
    """Create a temporary directory that gets cleaned up."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config():
    """Default config with a short reconnect budget."""
    return AppConfig(reconnect=ReconnectConfig(delay=3.0, max_attempts=3))


@pytest.fixture
def broker():
    return FakeBroker()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def transport(config, broker, scheduler):
    """Transport client wired to the fake broker, delivering on drain()."""
    client = TransportClient(
        config,
        connection_factory=broker,
        scheduler=scheduler,
        threaded_delivery=False,
    )
    yield client
    client.close()


@pytest.fixture
def events(transport):
    """List that collects every status event (call transport.drain() first)."""
    received = []
    transport.subscribe(received.append)
    return received


@pytest.fixture
def store(transport):
    led_store = LedStateStore(transport)
    yield led_store
    led_store.close()
