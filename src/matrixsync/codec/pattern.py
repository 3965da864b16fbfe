"""Pattern codec: convert between LED state and the pattern file format."""

import json
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from matrixsync.addressing import SerpentineMapper
from matrixsync.exceptions import PatternValidationError, pattern_error_from_pydantic
from matrixsync.models import Pattern, PatternColumn, PatternRow
from matrixsync.utils import PydanticPersistence

logger = logging.getLogger(__name__)

_mapper = SerpentineMapper()


def from_state(
    active_leds: Iterable[int],
    colors: Optional[Mapping[int, str]] = None,
    *,
    name: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Pattern:
    """
    Build a pattern from a set of lit strip indices.

    Cells are emitted in logical order (row 0..7, column 0..19). A cell gets
    a color only when its index is in ``colors``.

    Args:
        active_leds: Strip indices that are on
        colors: Optional index → "#rrggbb" map
        name: Pattern name (defaults to a timestamped name)
        created_at: Creation time (defaults to now, UTC)

    Raises:
        InvalidIndexError: If any index is out of range
    """
    active = frozenset(_mapper.check_index(i) for i in active_leds)
    colors = colors or {}
    for index in colors:
        _mapper.check_index(index)

    created_at = created_at or datetime.now(timezone.utc)
    name = name if name is not None else f"Pattern {created_at:%Y-%m-%d %H:%M:%S}"

    rows = []
    for row in range(_mapper.height):
        columns = []
        for col in range(_mapper.width):
            index = _mapper.to_index(row, col)
            columns.append(PatternColumn(column_id=col, is_on=index in active, color=colors.get(index)))
        rows.append(PatternRow(row_id=row, columns=tuple(columns)))

    return Pattern(name=name, created_at=created_at, rows=tuple(rows))


def to_state(pattern: Pattern) -> tuple[frozenset[int], dict[int, str]]:
    """
    Convert a pattern to strip indices.

    Returns:
        (lit indices, index → color for every cell that carries a color)
    """
    active = set()
    colors: dict[int, str] = {}
    for row in pattern.rows:
        for column in row.columns:
            index = _mapper.to_index(row.row_id, column.column_id)
            if column.is_on:
                active.add(index)
            if column.color is not None:
                colors[index] = column.color
    return frozenset(active), colors


def validate(raw: Any, file_path: Optional[str] = None) -> Pattern:
    """
    Validate an untrusted pattern document.

    Args:
        raw: Decoded JSON (dict) or JSON text
        file_path: Used in error messages only

    Returns:
        The validated Pattern

    Raises:
        PatternValidationError: Naming the first violation
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PatternValidationError("", f"not valid JSON ({e.msg} at line {e.lineno})", file_path) from e

    if not isinstance(raw, dict):
        raise PatternValidationError("", "document must be a JSON object", file_path)

    try:
        return Pattern.model_validate(raw)
    except ValidationError as e:
        error = pattern_error_from_pydantic(e, file_path)
        logger.debug(f"Rejected pattern document: {error.technical_message}")
        raise error from e


def load_pattern_file(path: Path) -> Pattern:
    """
    Read and validate a pattern file.

    Raises:
        PatternValidationError: If the file is missing, empty, not JSON or invalid
    """
    try:
        raw = PydanticPersistence.read_json(path)
    except FileNotFoundError as e:
        raise PatternValidationError("", "file not found", str(path)) from e
    except json.JSONDecodeError as e:
        raise PatternValidationError("", f"not valid JSON ({e.msg} at line {e.lineno})", str(path)) from e
    except ValueError as e:
        raise PatternValidationError("", str(e), str(path)) from e

    pattern = validate(raw, str(path))
    logger.info(f"Loaded pattern '{pattern.name}' from {path} ({pattern.lit_count} LEDs on)")
    return pattern


def save_pattern_file(pattern: Pattern, path: Path) -> Path:
    """Write a pattern in file format and return the path written."""
    PydanticPersistence.save_json(pattern, path, by_alias=True, exclude_none=True)
    logger.info(f"Saved pattern '{pattern.name}' to {path}")
    return path


def render_grid(active_leds: Iterable[int], on: str = "#", off: str = ".") -> str:
    """Render lit indices as a text grid in logical orientation."""
    active = frozenset(active_leds)
    lines = []
    for row in range(_mapper.height):
        lines.append(
            "".join(on if _mapper.to_index(row, col) in active else off for col in range(_mapper.width))
        )
    return "\n".join(lines)
