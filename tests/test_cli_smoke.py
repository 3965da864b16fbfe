"""Smoke tests for the matrixsync CLI (fake broker, no network)."""

import json

import pytest
from click.testing import CliRunner

from matrixsync.cli.main import cli
from matrixsync.codec import from_state, save_pattern_file
from matrixsync.models import AppConfig, BrokerConfig
from matrixsync.session import MatrixSession

from conftest import COMMAND_TOPIC, FakeBroker, ManualScheduler


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def broker():
    return FakeBroker()


@pytest.fixture
def invoke(runner, broker, temp_dir):
    """Run the CLI against the fake broker with logs in a temp dir."""

    def run(*args, config=None):
        obj = {
            "config": config or AppConfig(),
            "session_factory": lambda cfg: MatrixSession(
                cfg,
                connection_factory=broker,
                scheduler=ManualScheduler(),
                threaded_delivery=False,
            ),
        }
        return runner.invoke(cli, ["--log-file", str(temp_dir / "cli.log"), *args], obj=obj)

    return run


def sent_commands(broker):
    return [payload for topic, payload, qos in broker.latest.published if topic == COMMAND_TOPIC]


@pytest.mark.integration
class TestDeviceCommands:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "8x20 LED matrix" in result.output

    def test_status(self, invoke):
        result = invoke("status", "--settle", "0")
        assert result.exit_code == 0, result.output
        assert "(connected)" in result.output
        assert "Device:     unknown" in result.output
        assert "LEDs on:    0" in result.output

    def test_toggle_by_index(self, invoke, broker):
        result = invoke("toggle", "42")
        assert result.exit_code == 0, result.output
        assert "Sent toggle for LED 42" in result.output
        assert sent_commands(broker) == [{"action": "toggle", "index": 42}]

    def test_toggle_by_position(self, invoke, broker):
        result = invoke("toggle", "--row", "1", "--col", "0")
        assert result.exit_code == 0, result.output
        assert sent_commands(broker) == [{"action": "toggle", "index": 20}]

    def test_toggle_needs_target(self, invoke):
        result = invoke("toggle")
        assert result.exit_code == 2
        assert "INDEX" in result.output

    def test_toggle_out_of_range(self, invoke, broker):
        result = invoke("toggle", "500")
        assert result.exit_code == 1
        assert "Error: LED index 500 is out of range" in result.output
        assert "\n  LED indices run 0-159" in result.output
        assert sent_commands(broker) == []

    def test_brightness(self, invoke, broker):
        result = invoke("brightness", "128")
        assert result.exit_code == 0, result.output
        assert sent_commands(broker) == [{"action": "brightness", "brightness": 128}]

    def test_brightness_out_of_range(self, invoke):
        result = invoke("brightness", "300")
        assert result.exit_code == 1
        assert "Brightness 300 is out of range" in result.output

    def test_clear(self, invoke, broker):
        result = invoke("clear")
        assert result.exit_code == 0, result.output
        assert sent_commands(broker) == [{"action": "clear"}]

    def test_unreachable_broker(self, invoke, broker):
        broker.auto_accept = False
        result = invoke("clear", "--timeout", "0.05")
        assert result.exit_code == 1
        assert "could not connect" in result.output
        assert broker.latest.published == []

    def test_monitor(self, invoke):
        result = invoke("monitor", "--duration", "0.2")
        assert result.exit_code == 0, result.output
        assert "Monitoring led_matrix/status" in result.output
        assert "broker connected" in result.output


@pytest.mark.integration
class TestPatternCommands:
    @pytest.fixture
    def pattern_path(self, temp_dir):
        path = temp_dir / "heart.json"
        save_pattern_file(from_state({19, 20}, name="heart"), path)
        return path

    def test_validate(self, invoke, pattern_path):
        result = invoke("pattern", "validate", str(pattern_path))
        assert result.exit_code == 0, result.output
        assert "OK: 'heart' (2 LED(s) on" in result.output

    def test_validate_rejects_bad_file(self, invoke, temp_dir):
        path = temp_dir / "broken.json"
        path.write_text(json.dumps({"name": "broken", "timestamp": "2024-01-01T00:00:00Z", "rows": []}))
        result = invoke("pattern", "validate", str(path))
        assert result.exit_code == 1
        assert "Invalid pattern at rows" in result.output

    def test_show(self, invoke, pattern_path):
        result = invoke("pattern", "show", str(pattern_path))
        assert result.exit_code == 0, result.output
        assert "#" + "." * 19 in result.output

    def test_apply(self, invoke, broker, pattern_path):
        result = invoke("pattern", "apply", str(pattern_path))
        assert result.exit_code == 0, result.output
        assert "Applied 'heart': 3 command(s) sent" in result.output
        assert sent_commands(broker) == [
            {"action": "clear"},
            {"action": "toggle", "index": 19},
            {"action": "toggle", "index": 20},
        ]

    def test_export(self, invoke, temp_dir):
        path = temp_dir / "out" / "saved.json"
        result = invoke("pattern", "export", str(path), "--name", "saved", "--settle", "0")
        assert result.exit_code == 0, result.output
        document = json.loads(path.read_text())
        assert document["name"] == "saved"
        assert len(document["rows"]) == 8

    def test_export_defaults_to_patterns_dir(self, invoke, temp_dir):
        config = AppConfig(patterns_dir=temp_dir / "patterns")
        result = invoke("pattern", "export", "--name", "My Heart", "--settle", "0", config=config)
        assert result.exit_code == 0, result.output
        saved = temp_dir / "patterns" / "my-heart.json"
        assert json.loads(saved.read_text())["name"] == "My Heart"

    def test_bare_name_found_in_patterns_dir(self, invoke, temp_dir, pattern_path):
        config = AppConfig(patterns_dir=temp_dir)
        result = invoke("pattern", "validate", "heart", config=config)
        assert result.exit_code == 0, result.output
        assert "OK: 'heart'" in result.output

    def test_list(self, invoke, temp_dir, pattern_path):
        result = invoke("pattern", "list", config=AppConfig(patterns_dir=temp_dir))
        assert result.exit_code == 0, result.output
        assert "  heart" in result.output

    def test_list_empty(self, invoke, temp_dir):
        result = invoke("pattern", "list", config=AppConfig(patterns_dir=temp_dir / "none"))
        assert "No patterns in" in result.output


@pytest.mark.integration
class TestConfigCommands:
    def test_show_masks_password(self, invoke):
        config = AppConfig(broker=BrokerConfig(username="matrix", password="secret"))
        result = invoke("config", "show", config=config)
        assert result.exit_code == 0, result.output
        assert "********" in result.output
        assert "secret" not in result.output

    def test_show_secrets(self, invoke):
        config = AppConfig(broker=BrokerConfig(username="matrix", password="secret"))
        result = invoke("config", "show", "--show-secrets", config=config)
        assert "secret" in result.output

    def test_path(self, runner, temp_dir):
        path = temp_dir / "custom.json"
        result = runner.invoke(cli, ["--log-file", str(temp_dir / "cli.log"), "-c", str(path), "config", "path"])
        assert result.exit_code == 0, result.output
        assert str(path) in result.output

    def test_invalid_config_file(self, runner, temp_dir):
        path = temp_dir / "bad.json"
        path.write_text("{not json")
        result = runner.invoke(cli, ["--log-file", str(temp_dir / "cli.log"), "-c", str(path), "config", "show"])
        assert result.exit_code == 1
        assert "invalid syntax" in result.output
