"""Tests for serpentine addressing."""

import pytest

from matrixsync.addressing import (
    LED_COUNT,
    MATRIX_HEIGHT,
    MATRIX_WIDTH,
    SerpentineMapper,
    to_coord,
    to_index,
)
from matrixsync.exceptions import InvalidCoordinateError, InvalidIndexError


@pytest.mark.unit
class TestSerpentineMapping:
    """Known positions on the 20 x 8 matrix."""

    def test_dimensions(self):
        assert (MATRIX_WIDTH, MATRIX_HEIGHT, LED_COUNT) == (20, 8, 160)

    def test_even_row_runs_right_to_left(self):
        assert to_index(0, 0) == 19
        assert to_index(0, 19) == 0
        assert to_index(2, 0) == 59
        assert to_index(2, 19) == 40

    def test_odd_row_runs_left_to_right(self):
        assert to_index(1, 0) == 20
        assert to_index(1, 19) == 39
        assert to_index(7, 19) == 159

    def test_to_coord_known_values(self):
        assert to_coord(0) == (0, 19)
        assert to_coord(19) == (0, 0)
        assert to_coord(20) == (1, 0)
        assert to_coord(159) == (7, 19)

    def test_every_coordinate_round_trips(self):
        seen = set()
        for row in range(MATRIX_HEIGHT):
            for col in range(MATRIX_WIDTH):
                index = to_index(row, col)
                assert 0 <= index < LED_COUNT
                assert to_coord(index) == (row, col)
                seen.add(index)
        assert seen == set(range(LED_COUNT))

    def test_every_index_round_trips(self):
        for index in range(LED_COUNT):
            assert to_index(*to_coord(index)) == index

    def test_iter_coords_is_row_major(self):
        coords = list(SerpentineMapper().iter_coords())
        assert coords[0] == (0, 0)
        assert coords[1] == (0, 1)
        assert coords[20] == (1, 0)
        assert len(coords) == LED_COUNT

    def test_custom_size(self):
        mapper = SerpentineMapper(width=4, height=2)
        assert mapper.led_count == 8
        assert mapper.to_index(0, 0) == 3
        assert mapper.to_index(1, 0) == 4


@pytest.mark.unit
class TestAddressingErrors:
    """Out-of-range input fails instead of clamping."""

    @pytest.mark.parametrize("row,col", [(-1, 0), (8, 0), (0, -1), (0, 20), (100, 100)])
    def test_invalid_coordinate(self, row, col):
        with pytest.raises(InvalidCoordinateError):
            to_index(row, col)

    @pytest.mark.parametrize("index", [-1, 160, 1000])
    def test_invalid_index(self, index):
        with pytest.raises(InvalidIndexError):
            to_coord(index)

    def test_non_integers_rejected(self):
        with pytest.raises(InvalidCoordinateError):
            to_index(True, 0)
        with pytest.raises(InvalidCoordinateError):
            to_index(1.0, 0)
        with pytest.raises(InvalidIndexError):
            to_coord("5")

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            to_index(9, 0)
        with pytest.raises(ValueError):
            to_coord(160)

    def test_error_message_names_bounds(self):
        with pytest.raises(InvalidCoordinateError) as exc_info:
            to_index(8, 3)
        assert "(8, 3)" in exc_info.value.user_message
        assert "0-7" in exc_info.value.recovery_hint
