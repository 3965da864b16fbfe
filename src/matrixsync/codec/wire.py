"""Wire codec for the command and status topics."""

import json
import logging

from pydantic import ValidationError

from matrixsync.exceptions import PayloadParseError
from matrixsync.models import (
    BrightnessChanged,
    BulkState,
    Command,
    Connected,
    Disconnected,
    ErrorStatus,
    LedChanged,
    StatusEvent,
    StatusMessage,
)
from matrixsync.protocols import ErrorCode, EventSource

logger = logging.getLogger(__name__)

ONLINE_STATUSES = ("connected", "online")
OFFLINE_STATUSES = ("disconnected", "offline")


def encode_command(command: Command) -> bytes:
    """Serialize a command to its JSON wire form."""
    return command.model_dump_json().encode("utf-8")


def decode_status(payload: bytes | str) -> list[StatusEvent]:
    """
    Turn one status-topic payload into zero or more status events.

    Presence messages from other dashboards (``type: "web"``) produce no
    events. A single message may carry several facts, e.g. a toggle echo
    that also reports brightness; events come out in a fixed order:
    presence, error, single LED, bulk state, brightness.

    Raises:
        PayloadParseError: If the payload is not a JSON object of the
            expected shape
    """
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PayloadParseError(f"not valid JSON: {e}", payload) from e

    if not isinstance(data, dict):
        raise PayloadParseError("expected a JSON object", payload)

    try:
        message = StatusMessage.model_validate(data)
    except ValidationError as e:
        first = e.errors(include_url=False)[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "message"
        raise PayloadParseError(f"{field}: {first.get('msg')}", payload) from e

    if message.type == "web":
        logger.debug(f"Ignoring dashboard presence message: {message.status}")
        return []

    events: list[StatusEvent] = []

    if message.status in ONLINE_STATUSES:
        events.append(Connected(source=EventSource.DEVICE))
    elif message.status in OFFLINE_STATUSES:
        events.append(Disconnected(source=EventSource.DEVICE, reason=message.error))
    elif message.status == "error" or message.error:
        events.append(
            ErrorStatus(
                message=message.error or "Device reported an error",
                code=ErrorCode.DEVICE,
                source=EventSource.DEVICE,
            )
        )

    if message.action == "toggle":
        if message.index is None:
            raise PayloadParseError("toggle report without index", payload)
        events.append(LedChanged(index=message.index, on=bool(message.state)))

    if message.states is not None:
        events.append(BulkState(states={int(k): v for k, v in message.states.items()}))
    elif message.action == "clear":
        events.append(BulkState(states={}))

    if message.brightness is not None:
        events.append(BrightnessChanged(value=message.brightness))

    if not events:
        logger.debug(f"Status message carried nothing actionable: {data}")
    return events
