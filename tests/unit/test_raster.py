# tests/unit/test_raster.py

import numpy as np
import pytest

from helpers import assert_cells
from rasterkey.exceptions import RasterValidationError
from rasterkey.numeric import NumericKind
from rasterkey.raster.grid import Grid
from rasterkey.raster.layer import Raster

@pytest.fixture
def coarse_raster():
    """4x4 raster at the origin with 10 unit cells."""
    return Raster(4, 4, 0.0, 0.0, 10.0, kind=NumericKind.INT)

def test_point_to_cell_mapping(coarse_raster):
    assert coarse_raster.column_of(15) == 1
    assert coarse_raster.inverse_row_of(25) == 2
    assert coarse_raster.column_at(15) == 1
    # inverse row 2 of 4 is row 1 counted from the top
    assert coarse_raster.row_at(25) == 1

def test_points_outside_hold_no_data(coarse_raster):
    coarse_raster.set_value_at(5, 5, 7)
    assert coarse_raster.value_at(5, 5) == 7
    assert coarse_raster.is_no_data_at(-1, 5)
    assert coarse_raster.is_no_data_at(5, -0.5)
    assert coarse_raster.is_no_data_at(40, 5)
    assert coarse_raster.value_at(-1, -1) is None
    assert not coarse_raster.contains_point(-1, -1)

def test_cell_centres(coarse_raster):
    assert coarse_raster.x_of_column(1) == 15.0
    assert coarse_raster.y_of_inverse_row(2) == 25.0
    assert coarse_raster.y_of_row(0) == 35.0

def test_bounds_and_transform():
    raster = Raster(2, 3, 100.0, 200.0, 5.0)
    assert raster.bounds == (100.0, 200.0, 115.0, 210.0)
    assert raster.cell_area == 25.0
    transform = raster.transform
    assert transform.a == 5.0
    assert transform.e == -5.0
    assert transform.c == 100.0
    assert transform.f == 210.0

@pytest.mark.parametrize("cell_size", [0, -1.0, float("nan")])
def test_cell_size_must_be_positive(cell_size):
    with pytest.raises(RasterValidationError):
        Raster(1, 1, 0.0, 0.0, cell_size)

def test_writing_no_data_value_reads_back_as_no_data():
    raster = Raster(2, 2, 0.0, 0.0, 1.0, no_data_value=-9999, kind=NumericKind.INT)
    raster.set(0, 0, 5)
    raster.set(0, 0, -9999)

    assert raster.is_no_data(0, 0)
    assert raster.get(0, 0) == -9999
    assert (0, 1) in raster.no_data_mask

def test_writing_data_clears_a_mark():
    raster = Raster(2, 2, 0.0, 0.0, 1.0, kind=NumericKind.INT)
    raster.mark_no_data(1, 1)
    assert raster.is_no_data(1, 1)
    assert raster.no_data_mask == {(1, 0)}

    raster.set(1, 1, 3)
    assert not raster.is_no_data(1, 1)
    assert raster.no_data_mask == set()

def test_empty_cells_hold_no_data():
    raster = Raster(1, 2, 0.0, 0.0, 1.0, kind=NumericKind.INT)
    raster.set(0, 0, 1)
    assert not raster.is_no_data(0, 0)
    assert raster.is_no_data(0, 1)
    assert raster.get(0, 1) is None

def test_mark_no_data_xy_and_at():
    raster = Raster(2, 2, 0.0, 0.0, 1.0, kind=NumericKind.INT)
    for row in range(2):
        for col in range(2):
            raster.set(row, col, 1)

    raster.mark_no_data_xy(0, 0)
    assert raster.is_no_data(1, 0)

    raster.mark_no_data_at(1.5, 1.5)
    assert raster.is_no_data(0, 1)

    # outside: ignored
    raster.mark_no_data_at(5.0, 5.0)
    assert not raster.is_no_data(0, 0)

def test_set_value_at_outside():
    raster = Raster(2, 2, 0.0, 0.0, 1.0, no_data_value=-1, kind=NumericKind.INT)
    raster.set_value_at(-5.0, 0.5, -1)
    raster.set_value_at(-5.0, 0.5, None)
    with pytest.raises(IndexError):
        raster.set_value_at(-5.0, 0.5, 3)

def test_from_array_registers_no_data():
    array = np.array([[1.0, np.nan], [-9999.0, 4.0]])
    raster = Raster.from_array(array, 10.0, 20.0, 2.0, no_data_value=-9999.0)

    assert raster.kind is NumericKind.DOUBLE
    assert_cells(raster, [[1.0, None], [None, 4.0]])
    assert raster.bounds == (10.0, 20.0, 14.0, 24.0)

def test_from_array_masked_and_invalid():
    masked = np.ma.masked_array(np.array([[1, 2]], dtype=np.int32), mask=[[False, True]])
    raster = Raster.from_array(masked)
    assert raster.kind is NumericKind.INT
    assert raster.is_no_data(0, 1)

    with pytest.raises(RasterValidationError):
        Raster.from_array(np.zeros(3))
    with pytest.raises(RasterValidationError):
        Raster.from_array(np.zeros((2, 2), dtype=np.uint16))

def test_from_grid_registers_no_data_value():
    grid = Grid.from_rows([[1, 0], [0, 2]], NumericKind.INT)
    raster = Raster.from_grid(grid, 0.0, 0.0, 1.0, no_data_value=0)
    assert_cells(raster, [[1, None], [None, 2]])

def test_to_array_and_data_mask():
    raster = Raster(2, 2, 0.0, 0.0, 1.0, no_data_value=-1, kind=NumericKind.INT)
    raster.set(0, 0, 1)
    raster.set(0, 1, 2)
    raster.set(1, 0, -1)
    raster.mark_no_data(1, 1)

    np.testing.assert_array_equal(raster.data_mask(), [[True, True], [False, False]])
    np.testing.assert_array_equal(raster.to_array(), [[1, 2], [-1, -1]])
    np.testing.assert_array_equal(raster.to_array(fill=0), [[1, 2], [0, 0]])

def test_iter_xyz_skips_no_data():
    raster = Raster(2, 2, 0.0, 0.0, 2.0, kind=NumericKind.INT)
    raster.set(0, 1, 7)
    raster.set(1, 0, 3)
    assert list(raster.iter_xyz()) == [(3.0, 3.0, 7), (1.0, 1.0, 3)]

def test_coerce_keeps_no_data():
    text = Raster.from_grid(Grid.from_rows([["1", "-9"], ["3", "4"]]), 0.0, 0.0, 1.0, no_data_value="-9")
    text.mark_no_data(1, 1)
    ints = text.coerce(NumericKind.INT)

    assert ints.kind is NumericKind.INT
    assert ints.no_data_value == -9
    assert_cells(ints, [[1, None], [3, None]])

def test_copy_and_equality():
    raster = Raster(2, 2, 0.0, 0.0, 1.0, no_data_value=-1, kind=NumericKind.INT)
    raster.set(0, 0, 5)
    twin = raster.copy()
    assert twin == raster

    twin.set(0, 0, 6)
    assert twin != raster
    assert raster.get(0, 0) == 5
