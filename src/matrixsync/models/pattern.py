"""Pattern interchange models.

A pattern is stored in logical (row, col) order, never in wire order, so a
file stays valid regardless of how the strip is wired. JSON keys use the
camelCase names of the file format (``rowId``, ``columnId``, ``isOn``).
"""

import logging
import re
from datetime import datetime
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_serializer,
    field_validator,
)

from matrixsync.addressing import MATRIX_HEIGHT, MATRIX_WIDTH

logger = logging.getLogger(__name__)

PATTERN_FORMAT_VERSION = 1

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


class PatternColumn(BaseModel):
    """One cell of a pattern row."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    column_id: StrictInt = Field(alias="columnId", ge=0, lt=MATRIX_WIDTH)
    is_on: StrictBool = Field(alias="isOn")
    color: Optional[str] = Field(default=None, description="Display color as #rrggbb, metadata only")

    @field_validator("color", mode="before")
    @classmethod
    def drop_unusable_color(cls, v):
        """Colors never make a document invalid; anything but #rrggbb is dropped."""
        if v is None or (isinstance(v, str) and _HEX_COLOR.match(v)):
            return v
        logger.warning(f"Ignoring unsupported pattern color {v!r}")
        return None


class PatternRow(BaseModel):
    """One row of a pattern, exactly MATRIX_WIDTH columns."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    row_id: StrictInt = Field(alias="rowId", ge=0, lt=MATRIX_HEIGHT)
    columns: tuple[PatternColumn, ...] = Field(min_length=MATRIX_WIDTH, max_length=MATRIX_WIDTH)

    @field_validator("columns")
    @classmethod
    def validate_unique_columns(cls, v: tuple[PatternColumn, ...]) -> tuple[PatternColumn, ...]:
        seen = set()
        for column in v:
            if column.column_id in seen:
                raise ValueError(f"duplicate columnId {column.column_id}")
            seen.add(column.column_id)
        return v


class Pattern(BaseModel):
    """Immutable snapshot of a matrix layout, suitable for saving and sharing."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: StrictStr
    created_at: datetime = Field(alias="timestamp")
    rows: tuple[PatternRow, ...] = Field(min_length=MATRIX_HEIGHT, max_length=MATRIX_HEIGHT)
    version: StrictInt = PATTERN_FORMAT_VERSION

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_timestamp(cls, v):
        """Require an ISO-8601 string (datetime accepted when building in code)."""
        if isinstance(v, datetime):
            return v
        if not isinstance(v, str):
            raise ValueError("timestamp must be an ISO-8601 string")
        try:
            return datetime.fromisoformat(v)
        except ValueError as e:
            raise ValueError(f"timestamp is not ISO-8601: {v!r}") from e

    @field_validator("rows")
    @classmethod
    def validate_unique_rows(cls, v: tuple[PatternRow, ...]) -> tuple[PatternRow, ...]:
        seen = set()
        for row in v:
            if row.row_id in seen:
                raise ValueError(f"duplicate rowId {row.row_id}")
            seen.add(row.row_id)
        return v

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> str:
        return dt.isoformat()

    @property
    def lit_count(self) -> int:
        """Number of cells that are on."""
        return sum(1 for row in self.rows for column in row.columns if column.is_on)
