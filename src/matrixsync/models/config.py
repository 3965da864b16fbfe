"""Application configuration model."""

import json
import logging
import os
from pathlib import Path
from urllib.parse import urlparse

from pydantic import BaseModel, Field, ValidationError, field_serializer, field_validator

from matrixsync.exceptions import ConfigFileInvalidError, wrap_pydantic_error
from matrixsync.utils import PydanticPersistence

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".matrixsync"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.json"
CONFIG_FILE_ENV = "MATRIXSYNC_CONFIG_FILE"

SUPPORTED_SCHEMES = ("ws", "wss", "mqtt", "mqtts", "tcp", "ssl")

# env var → (section, field); values are left as strings for pydantic to coerce
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "MATRIXSYNC_BROKER_URL": ("broker", "url"),
    "MATRIXSYNC_BROKER_USERNAME": ("broker", "username"),
    "MATRIXSYNC_BROKER_PASSWORD": ("broker", "password"),
    "MATRIXSYNC_KEEPALIVE": ("broker", "keepalive"),
    "MATRIXSYNC_RECONNECT_DELAY": ("reconnect", "delay"),
    "MATRIXSYNC_RECONNECT_MAX_ATTEMPTS": ("reconnect", "max_attempts"),
    "MATRIXSYNC_COMMAND_TOPIC": ("topics", "commands"),
    "MATRIXSYNC_STATUS_TOPIC": ("topics", "status"),
}


class BrokerConfig(BaseModel):
    """Broker connection settings."""

    url: str = Field(
        default="ws://broker.hivemq.com:8000/mqtt",
        description="Broker URL (ws://, wss://, mqtt:// or mqtts://)",
    )
    username: str | None = Field(default=None, description="Broker username")
    password: str | None = Field(default=None, description="Broker password")
    keepalive: int = Field(default=30, gt=0, description="Keepalive interval (seconds)")
    connect_timeout: float = Field(
        default=30.0, gt=0, description="How long a single connect attempt may take (seconds)"
    )
    clean_session: bool = Field(default=True, description="Start each session without stored state")
    client_id_prefix: str = Field(default="web-client", description="Prefix for the random client id")
    tls_insecure: bool = Field(
        default=False, description="Skip certificate verification on wss:// and mqtts:// (testing only)"
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if parsed.scheme not in SUPPORTED_SCHEMES:
            raise ValueError(f"scheme must be one of {', '.join(SUPPORTED_SCHEMES)}")
        if not parsed.hostname:
            raise ValueError("URL has no host")
        return v


class TopicConfig(BaseModel):
    """Topic names shared with the device firmware."""

    commands: str = Field(default="led_matrix/commands", min_length=1, description="Commands to the device")
    status: str = Field(default="led_matrix/status", min_length=1, description="Reports from the device")


class ReconnectConfig(BaseModel):
    """Bounded fixed-delay reconnect policy."""

    delay: float = Field(default=3.0, gt=0, description="Seconds between attempts")
    max_attempts: int = Field(
        default=5, ge=0, description="Attempts after a connection loss before giving up"
    )


class AppConfig(BaseModel):
    """Application configuration and settings."""

    broker: BrokerConfig = Field(default_factory=BrokerConfig)
    topics: TopicConfig = Field(default_factory=TopicConfig)
    reconnect: ReconnectConfig = Field(default_factory=ReconnectConfig)

    announce_presence: bool = Field(
        default=True,
        description="Register a last-will 'offline' message on the status topic",
    )
    patterns_dir: Path = Field(
        default_factory=lambda: CONFIG_DIR / "patterns",
        description="Default directory for pattern files",
    )

    @field_serializer("patterns_dir")
    def serialize_path(self, path: Path) -> str:
        """Serialize Path to string."""
        return str(path)

    @staticmethod
    def default_path() -> Path:
        """Config file location, honouring MATRIXSYNC_CONFIG_FILE."""
        env = os.environ.get(CONFIG_FILE_ENV)
        return Path(env) if env else DEFAULT_CONFIG_PATH

    @classmethod
    def load_or_default(cls, path: Path | None = None, environ: dict[str, str] | None = None) -> "AppConfig":
        """
        Load config from file (if present) and apply environment overrides.

        Args:
            path: Path to config file. If None, uses default_path().
            environ: Environment mapping (defaults to os.environ)

        Raises:
            ConfigFileInvalidError: If config file has invalid JSON syntax
            ConfigValidationError: If config values fail validation
        """
        if path is None:
            path = cls.default_path()
        if environ is None:
            environ = dict(os.environ)

        raw: dict = {}
        if path.exists():
            try:
                raw = PydanticPersistence.read_json(path)
            except json.JSONDecodeError as e:
                raise ConfigFileInvalidError(str(path), str(e)) from e
            except ValueError:
                logger.warning(f"Config file {path} is empty, using defaults")
                raw = {}
            if not isinstance(raw, dict):
                raise ConfigFileInvalidError(str(path), "top-level value must be an object")
        else:
            logger.info(f"No config file at {path}, using defaults")

        source = str(path)
        for env_key, (section, field) in _ENV_OVERRIDES.items():
            env_val = environ.get(env_key)
            if env_val is not None:
                section_raw = raw.setdefault(section, {})
                if not isinstance(section_raw, dict):
                    raise ConfigFileInvalidError(str(path), f"'{section}' must be an object")
                section_raw[field] = env_val
                source = f"{path} + environment"
                logger.debug(f"Env override: {env_key} -> {section}.{field}")

        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise wrap_pydantic_error(e, source) from e

    def save(self, path: Path | None = None) -> None:
        """Save config to file."""
        if path is None:
            path = self.default_path()
        PydanticPersistence.save_json(self, path)
