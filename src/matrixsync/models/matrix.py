"""Matrix state models owned by the LED state store."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from matrixsync.models.status import ErrorStatus


class MatrixState(BaseModel):
    """Confirmed state of the physical matrix, as last reported."""

    model_config = ConfigDict(frozen=True)

    active_leds: frozenset[int] = Field(default_factory=frozenset, description="Indices that are on")
    brightness: int = Field(default=255, ge=0, le=255, description="Global brightness")
    connected: bool = Field(default=False, description="Broker connection is live")
    device_online: Optional[bool] = Field(
        default=None, description="Last presence reported by the device (None = unknown)"
    )
    synced: bool = Field(
        default=False,
        description="A full state report arrived since the broker connection last changed",
    )

    def is_on(self, index: int) -> bool:
        """Check whether an LED is on."""
        return index in self.active_leds


class StoreSnapshot(BaseModel):
    """
    Everything an observer needs to render the matrix.

    ``confirmed`` only ever changes in response to device reports; ``draft``
    is the locally loaded pattern that has not been applied yet.
    """

    model_config = ConfigDict(frozen=True)

    confirmed: MatrixState = Field(default_factory=MatrixState)
    draft: Optional[frozenset[int]] = None
    last_error: Optional[ErrorStatus] = None

    @property
    def has_draft(self) -> bool:
        return self.draft is not None

    @property
    def display_leds(self) -> frozenset[int]:
        """LEDs a view should light: the draft if one is loaded, else confirmed."""
        return self.draft if self.draft is not None else self.confirmed.active_leds
