"""Matrix contract exceptions.

These are raised for caller mistakes and are never retried:
- InvalidCoordinateError: (row, col) outside the grid
- InvalidIndexError: strip index outside [0, LED_COUNT)
- InvalidBrightnessError: brightness outside [0, 255]

Each also derives from ValueError so plain ``except ValueError`` works.
"""

from .base import MatrixSyncError


class InvalidCoordinateError(MatrixSyncError, ValueError):
    """Row or column is outside the matrix."""

    def __init__(self, row: object, col: object, height: int, width: int):
        super().__init__(
            user_message=f"Coordinate ({row}, {col}) is outside the {width}x{height} matrix",
            technical_message=(
                f"Invalid coordinate row={row!r} col={col!r}; "
                f"expected integers 0 <= row < {height}, 0 <= col < {width}"
            ),
            recoverable=False,
            recovery_hint=f"Rows run 0-{height - 1} and columns run 0-{width - 1}",
        )
        self.row = row
        self.col = col


class InvalidIndexError(MatrixSyncError, ValueError):
    """Strip index is outside the matrix."""

    def __init__(self, index: object, led_count: int):
        super().__init__(
            user_message=f"LED index {index} is out of range",
            technical_message=f"Invalid LED index {index!r}; expected integer 0 <= index < {led_count}",
            recoverable=False,
            recovery_hint=f"LED indices run 0-{led_count - 1}",
        )
        self.index = index


class InvalidBrightnessError(MatrixSyncError, ValueError):
    """Brightness is outside the 0-255 range."""

    def __init__(self, value: object):
        super().__init__(
            user_message=f"Brightness {value} is out of range",
            technical_message=f"Invalid brightness {value!r}; expected integer 0 <= value <= 255",
            recoverable=False,
            recovery_hint="Brightness runs from 0 (off) to 255 (full)",
        )
        self.value = value
