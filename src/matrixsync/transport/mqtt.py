"""paho-mqtt implementation of BrokerConnection."""

import json
import logging
import threading
from urllib.parse import urlparse

import paho.mqtt.client as mqtt
from paho.mqtt.enums import CallbackAPIVersion

from matrixsync.exceptions import TransportError
from matrixsync.models import AppConfig
from matrixsync.transport.connection import ConnectionListener

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {
    "ws": 80,
    "wss": 443,
    "mqtt": 1883,
    "tcp": 1883,
    "mqtts": 8883,
    "ssl": 8883,
}
WEBSOCKET_SCHEMES = ("ws", "wss")
TLS_SCHEMES = ("wss", "mqtts", "ssl")

PRESENCE_OFFLINE = {"status": "offline", "type": "web"}


class PahoConnection:
    """
    One paho-mqtt client per connection attempt.

    paho's own reconnect logic is disabled: when the attempt fails or the
    session drops, the network loop is stopped and the listener is told, so
    the retry policy lives entirely in TransportClient.
    """

    def __init__(self, client_id: str, config: AppConfig, listener: ConnectionListener):
        """
        Initialize the connection (does not connect yet).

        Args:
            client_id: MQTT client id for this attempt
            config: Application config (broker, topics)
            listener: Receives lifecycle and message callbacks

        Raises:
            TransportError: If the broker URL cannot be used
        """
        self.client_id = client_id
        self._config = config
        self._listener = listener
        self._closed = False
        self._lock = threading.Lock()

        url = urlparse(config.broker.url)
        if url.scheme not in DEFAULT_PORTS or not url.hostname:
            raise TransportError("Unsupported broker URL", broker_url=config.broker.url, recoverable=False)

        self.host = url.hostname
        self.port = url.port or DEFAULT_PORTS[url.scheme]
        transport = "websockets" if url.scheme in WEBSOCKET_SCHEMES else "tcp"

        self._client = mqtt.Client(
            CallbackAPIVersion.VERSION2,
            client_id=client_id,
            clean_session=config.broker.clean_session,
            transport=transport,
            reconnect_on_failure=False,
        )
        self._client.connect_timeout = config.broker.connect_timeout

        if transport == "websockets":
            self._client.ws_set_options(path=url.path or "/mqtt")
        if url.scheme in TLS_SCHEMES:
            self._client.tls_set()
            if config.broker.tls_insecure:
                self._client.tls_insecure_set(True)
        if config.broker.username:
            self._client.username_pw_set(config.broker.username, config.broker.password)
        if config.announce_presence:
            self._client.will_set(config.topics.status, json.dumps(PRESENCE_OFFLINE), qos=0, retain=False)

        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect
        self._client.on_connect_fail = self._on_connect_fail
        self._client.on_message = self._on_message

    def start(self) -> None:
        """Begin connecting on paho's network thread."""
        logger.info(f"Connecting to {self.host}:{self.port} as {self.client_id}")
        try:
            self._client.connect_async(self.host, self.port, keepalive=self._config.broker.keepalive)
        except ValueError as e:
            raise TransportError(
                "Invalid broker connection settings", self._config.broker.url, str(e), recoverable=False
            ) from e
        self._client.loop_start()

    def subscribe(self, topic: str, qos: int) -> None:
        result, _mid = self._client.subscribe(topic, qos=qos)
        if result != mqtt.MQTT_ERR_SUCCESS:
            raise TransportError(
                f"Subscribe to {topic} failed",
                broker_url=self._config.broker.url,
                original_error=mqtt.error_string(result),
            )
        logger.debug(f"Subscribed to {topic} (qos {qos})")

    def publish(self, topic: str, payload: bytes, qos: int) -> bool:
        info = self._client.publish(topic, payload, qos=qos)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.warning(f"Publish to {topic} failed: {mqtt.error_string(info.rc)}")
            return False
        logger.debug(f"Published to {topic}: {payload!r}")
        return True

    def close(self) -> None:
        """Disconnect and stop the network thread."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._client.disconnect()
        self._client.loop_stop()
        logger.debug(f"Closed connection {self.client_id}")

    def _is_closed(self) -> bool:
        with self._lock:
            return self._closed

    def _stop_loop(self) -> None:
        # Called on paho's own thread; loop_stop does not join in that case
        with self._lock:
            self._closed = True
        self._client.loop_stop()

    def _on_connect(self, client, userdata, flags, reason_code, properties) -> None:
        if self._is_closed():
            return
        if reason_code.is_failure:
            logger.warning(f"Broker refused connection: {reason_code}")
            self._stop_loop()
            self._listener.on_connect_failed(str(reason_code))
            return
        logger.info(f"Connected to {self.host}:{self.port}")
        self._listener.on_connected()

    def _on_connect_fail(self, client, userdata) -> None:
        if self._is_closed():
            return
        logger.warning(f"Could not reach broker at {self.host}:{self.port}")
        self._stop_loop()
        self._listener.on_connect_failed("broker unreachable")

    def _on_disconnect(self, client, userdata, disconnect_flags, reason_code, properties) -> None:
        if self._is_closed():
            return
        logger.warning(f"Connection to {self.host}:{self.port} lost: {reason_code}")
        self._stop_loop()
        self._listener.on_connection_lost(str(reason_code))

    def _on_message(self, client, userdata, message) -> None:
        if self._is_closed():
            return
        self._listener.on_message(message.topic, message.payload)
