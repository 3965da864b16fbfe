"""Tests for the paho-mqtt connection adapter (paho client mocked)."""

import json
from unittest.mock import Mock, patch

import paho.mqtt.client as mqtt
import pytest
from paho.mqtt.enums import CallbackAPIVersion

from matrixsync.exceptions import TransportError
from matrixsync.models import AppConfig, BrokerConfig
from matrixsync.transport import ConnectionListener
from matrixsync.transport.mqtt import PahoConnection


class ReasonCode:
    """Stand-in for paho's ReasonCode in connect callbacks."""

    def __init__(self, name, failure=False):
        self.name = name
        self.is_failure = failure

    def __str__(self):
        return self.name


@pytest.fixture
def paho_client():
    with patch("matrixsync.transport.mqtt.mqtt.Client") as client_class:
        client = client_class.return_value
        client.subscribe.return_value = (mqtt.MQTT_ERR_SUCCESS, 1)
        client.publish.return_value = Mock(rc=mqtt.MQTT_ERR_SUCCESS)
        yield client_class


@pytest.fixture
def listener():
    return Mock(spec=ConnectionListener)


def make_connection(listener, **broker):
    config = AppConfig(broker=BrokerConfig(**broker)) if broker else AppConfig()
    return PahoConnection("web-client-test", config, listener)


@pytest.mark.unit
class TestSetup:
    def test_websocket_defaults(self, paho_client, listener):
        connection = make_connection(listener)
        client = paho_client.return_value

        paho_client.assert_called_once_with(
            CallbackAPIVersion.VERSION2,
            client_id="web-client-test",
            clean_session=True,
            transport="websockets",
            reconnect_on_failure=False,
        )
        assert (connection.host, connection.port) == ("broker.hivemq.com", 8000)
        client.ws_set_options.assert_called_once_with(path="/mqtt")
        client.tls_set.assert_not_called()
        client.username_pw_set.assert_not_called()

    def test_last_will_announces_offline(self, paho_client, listener):
        make_connection(listener)
        topic, payload = paho_client.return_value.will_set.call_args[0]
        assert topic == "led_matrix/status"
        assert json.loads(payload) == {"status": "offline", "type": "web"}
        assert paho_client.return_value.will_set.call_args[1] == {"qos": 0, "retain": False}

    def test_no_will_when_presence_disabled(self, paho_client, listener):
        PahoConnection("id", AppConfig(announce_presence=False), listener)
        paho_client.return_value.will_set.assert_not_called()

    def test_tls_and_credentials(self, paho_client, listener):
        connection = make_connection(
            listener, url="mqtts://secure.example.com", username="u", password="p", tls_insecure=True
        )
        client = paho_client.return_value

        assert connection.port == 8883
        assert paho_client.call_args[1]["transport"] == "tcp"
        client.tls_set.assert_called_once_with()
        client.tls_insecure_set.assert_called_once_with(True)
        client.username_pw_set.assert_called_once_with("u", "p")
        client.ws_set_options.assert_not_called()

    def test_start_connects_asynchronously(self, paho_client, listener):
        connection = make_connection(listener, url="mqtt://localhost:1884", keepalive=15)
        connection.start()

        client = paho_client.return_value
        client.connect_async.assert_called_once_with("localhost", 1884, keepalive=15)
        client.loop_start.assert_called_once()

    def test_start_rejects_bad_settings(self, paho_client, listener):
        paho_client.return_value.connect_async.side_effect = ValueError("bad port")
        connection = make_connection(listener)
        with pytest.raises(TransportError):
            connection.start()


@pytest.mark.unit
class TestTraffic:
    def test_subscribe(self, paho_client, listener):
        connection = make_connection(listener)
        connection.subscribe("led_matrix/status", 0)
        paho_client.return_value.subscribe.assert_called_once_with("led_matrix/status", qos=0)

    def test_subscribe_failure_raises(self, paho_client, listener):
        paho_client.return_value.subscribe.return_value = (mqtt.MQTT_ERR_NO_CONN, None)
        connection = make_connection(listener)
        with pytest.raises(TransportError):
            connection.subscribe("led_matrix/status", 0)

    def test_publish(self, paho_client, listener):
        connection = make_connection(listener)
        assert connection.publish("led_matrix/commands", b'{"action": "clear"}', 1)
        paho_client.return_value.publish.assert_called_once_with(
            "led_matrix/commands", b'{"action": "clear"}', qos=1
        )

    def test_publish_failure_returns_false(self, paho_client, listener):
        paho_client.return_value.publish.return_value = Mock(rc=mqtt.MQTT_ERR_NO_CONN)
        connection = make_connection(listener)
        assert not connection.publish("led_matrix/commands", b"{}", 1)


@pytest.mark.unit
class TestCallbacks:
    def test_connect_success(self, paho_client, listener):
        make_connection(listener)
        client = paho_client.return_value

        client.on_connect(client, None, {}, ReasonCode("Success"), None)

        listener.on_connected.assert_called_once()
        client.loop_stop.assert_not_called()

    def test_connect_refused_stops_loop(self, paho_client, listener):
        make_connection(listener)
        client = paho_client.return_value

        client.on_connect(client, None, {}, ReasonCode("Not authorized", failure=True), None)

        client.loop_stop.assert_called_once()
        listener.on_connect_failed.assert_called_once_with("Not authorized")

    def test_unreachable_broker(self, paho_client, listener):
        make_connection(listener)
        client = paho_client.return_value

        client.on_connect_fail(client, None)

        client.loop_stop.assert_called_once()
        listener.on_connect_failed.assert_called_once_with("broker unreachable")

    def test_connection_lost(self, paho_client, listener):
        make_connection(listener)
        client = paho_client.return_value

        client.on_disconnect(client, None, {}, "Keep alive timeout", None)

        client.loop_stop.assert_called_once()
        listener.on_connection_lost.assert_called_once_with("Keep alive timeout")

    def test_message_forwarded(self, paho_client, listener):
        make_connection(listener)
        client = paho_client.return_value

        client.on_message(client, None, Mock(topic="led_matrix/status", payload=b"{}"))

        listener.on_message.assert_called_once_with("led_matrix/status", b"{}")

    def test_close_is_idempotent_and_silences_callbacks(self, paho_client, listener):
        connection = make_connection(listener)
        client = paho_client.return_value

        connection.close()
        connection.close()
        client.on_disconnect(client, None, {}, "Normal disconnection", None)
        client.on_message(client, None, Mock(topic="led_matrix/status", payload=b"{}"))

        client.disconnect.assert_called_once()
        client.loop_stop.assert_called_once()
        listener.on_connection_lost.assert_not_called()
        listener.on_message.assert_not_called()

    def test_callbacks_after_loss_are_ignored(self, paho_client, listener):
        make_connection(listener)
        client = paho_client.return_value

        client.on_disconnect(client, None, {}, "lost", None)
        client.on_disconnect(client, None, {}, "lost again", None)

        listener.on_connection_lost.assert_called_once()
