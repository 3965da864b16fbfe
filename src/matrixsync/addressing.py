"""Serpentine addressing for the LED matrix.

The strip is wired in a zigzag: even rows run right-to-left, odd rows run
left-to-right. Everything above the wire uses logical (row, col) with
(0, 0) at the top-left; this module is the only place that knows about the
wiring.
"""

from matrixsync.exceptions import InvalidCoordinateError, InvalidIndexError

MATRIX_WIDTH = 20
MATRIX_HEIGHT = 8
LED_COUNT = MATRIX_WIDTH * MATRIX_HEIGHT


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class SerpentineMapper:
    """
    Bidirectional mapping between logical coordinates and strip indices.

    This class provides:
    - to_index(): (row, col) → strip index
    - to_coord(): strip index → (row, col)
    - iter_coords(): every (row, col) in logical row-major order

    Example (20 x 8):
        (0, 0)  → 19   (row 0 runs right-to-left)
        (0, 19) → 0
        (1, 0)  → 20   (row 1 runs left-to-right)
        (7, 19) → 159
    """

    def __init__(self, width: int = MATRIX_WIDTH, height: int = MATRIX_HEIGHT):
        """
        Initialize mapper for a matrix of the given size.

        Args:
            width: Number of columns
            height: Number of rows
        """
        self.width = width
        self.height = height

    @property
    def led_count(self) -> int:
        """Total number of addressable LEDs."""
        return self.width * self.height

    def to_index(self, row: int, col: int) -> int:
        """
        Convert logical coordinates to a strip index.

        Args:
            row: Row (0 = top)
            col: Column (0 = left)

        Returns:
            Strip index in [0, led_count)

        Raises:
            InvalidCoordinateError: If row or col is out of range
        """
        if not (_is_int(row) and _is_int(col)) or not (
            0 <= row < self.height and 0 <= col < self.width
        ):
            raise InvalidCoordinateError(row, col, self.height, self.width)

        base = row * self.width
        if row % 2 == 0:
            return base + (self.width - 1 - col)
        return base + col

    def to_coord(self, index: int) -> tuple[int, int]:
        """
        Convert a strip index to logical coordinates.

        Args:
            index: Strip index

        Returns:
            (row, col) tuple

        Raises:
            InvalidIndexError: If index is out of range
        """
        self.check_index(index)

        row, offset = divmod(index, self.width)
        if row % 2 == 0:
            return row, self.width - 1 - offset
        return row, offset

    def check_index(self, index: int) -> int:
        """Return index unchanged, or raise InvalidIndexError."""
        if not _is_int(index) or not 0 <= index < self.led_count:
            raise InvalidIndexError(index, self.led_count)
        return index

    def iter_coords(self):
        """Yield every (row, col) in logical row-major order."""
        for row in range(self.height):
            for col in range(self.width):
                yield row, col


_default_mapper = SerpentineMapper()


def to_index(row: int, col: int) -> int:
    """Convert (row, col) to a strip index on the standard 20 x 8 matrix."""
    return _default_mapper.to_index(row, col)


def to_coord(index: int) -> tuple[int, int]:
    """Convert a strip index to (row, col) on the standard 20 x 8 matrix."""
    return _default_mapper.to_coord(index)


def check_index(index: int) -> int:
    """Validate a strip index on the standard 20 x 8 matrix."""
    return _default_mapper.check_index(index)
