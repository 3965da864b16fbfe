"""Outbound command models.

Each command serializes to the JSON object the device firmware expects on
the command topic, e.g. ``{"action": "toggle", "index": 42}``.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from matrixsync.addressing import LED_COUNT


class ToggleCommand(BaseModel):
    """Flip a single LED."""

    model_config = ConfigDict(frozen=True)

    action: Literal["toggle"] = "toggle"
    index: int = Field(ge=0, lt=LED_COUNT, description="Strip index")


class BrightnessCommand(BaseModel):
    """Set global brightness."""

    model_config = ConfigDict(frozen=True)

    action: Literal["brightness"] = "brightness"
    brightness: int = Field(ge=0, le=255, description="Brightness (0-255)")


class ClearCommand(BaseModel):
    """Turn every LED off."""

    model_config = ConfigDict(frozen=True)

    action: Literal["clear"] = "clear"


Command = Annotated[
    Union[ToggleCommand, BrightnessCommand, ClearCommand],
    Field(discriminator="action"),
]
