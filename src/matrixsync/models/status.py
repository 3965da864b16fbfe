"""Status events and the inbound status wire message.

StatusEvent is the tagged union the transport hands to listeners. Each
variant carries a ``kind`` discriminator and the ``source`` it came from.
StatusMessage is the raw shape published by the device on the status topic;
see ``matrixsync.codec.wire`` for how one message becomes events.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, field_validator

from matrixsync.addressing import LED_COUNT
from matrixsync.exceptions import MatrixSyncError
from matrixsync.protocols import ErrorCode, EventSource


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: EventSource = EventSource.BROKER


class Connected(_Event):
    """Connection established (broker) or device came online (device)."""

    kind: Literal["connected"] = "connected"


class Disconnected(_Event):
    """Connection lost (broker) or device went offline (device)."""

    kind: Literal["disconnected"] = "disconnected"
    reason: Optional[str] = None


class ErrorStatus(_Event):
    """Something went wrong; informational only."""

    kind: Literal["error"] = "error"
    message: str
    code: ErrorCode = ErrorCode.DEVICE

    @classmethod
    def from_error(cls, error: MatrixSyncError) -> "ErrorStatus":
        """Report a local error; errors without an error_code are reported as DEVICE."""
        return cls(message=error.user_message, code=error.error_code or ErrorCode.DEVICE)


class LedChanged(_Event):
    """Device confirmed a single LED's new state."""

    kind: Literal["led_changed"] = "led_changed"
    source: EventSource = EventSource.DEVICE
    index: int = Field(ge=0, lt=LED_COUNT)
    on: bool


class BulkState(_Event):
    """Device reported the full on/off state; replaces everything."""

    kind: Literal["bulk_state"] = "bulk_state"
    source: EventSource = EventSource.DEVICE
    states: dict[int, bool]

    @field_validator("states")
    @classmethod
    def validate_indices(cls, v: dict[int, bool]) -> dict[int, bool]:
        for index in v:
            if not 0 <= index < LED_COUNT:
                raise ValueError(f"LED index {index} out of range")
        return v

    @property
    def active_leds(self) -> frozenset[int]:
        """Indices reported as on."""
        return frozenset(i for i, on in self.states.items() if on)


class BrightnessChanged(_Event):
    """Device confirmed a brightness change."""

    kind: Literal["brightness_changed"] = "brightness_changed"
    source: EventSource = EventSource.DEVICE
    value: int = Field(ge=0, le=255)


StatusEvent = Annotated[
    Union[Connected, Disconnected, ErrorStatus, LedChanged, BulkState, BrightnessChanged],
    Field(discriminator="kind"),
]


class StatusMessage(BaseModel):
    """
    Raw JSON object published on the status topic.

    Every field is optional; unknown keys are ignored. Types are strict so a
    string where a number belongs is rejected rather than coerced.
    """

    model_config = ConfigDict(extra="ignore")

    status: Optional[StrictStr] = None
    action: Optional[StrictStr] = None
    index: Optional[StrictInt] = Field(default=None, ge=0, lt=LED_COUNT)
    state: Optional[StrictBool] = None
    states: Optional[dict[str, StrictBool]] = None
    error: Optional[StrictStr] = None
    type: Optional[StrictStr] = None
    brightness: Optional[StrictInt] = Field(default=None, ge=0, le=255)

    @field_validator("states")
    @classmethod
    def validate_state_keys(cls, v: Optional[dict[str, bool]]) -> Optional[dict[str, bool]]:
        if v is None:
            return v
        for key in v:
            if not (key.isascii() and key.isdigit()) or int(key) >= LED_COUNT:
                raise ValueError(f"state key {key!r} is not an LED index")
        return v
