# tests/helpers.py

import pytest

from rasterkey.key.colour import Colour
from rasterkey.raster.layer import Raster

def assert_colour_close(actual: Colour, expected: Colour, abs_tol: float = 1e-9):
    """Compare two colours channel by channel."""
    assert actual is not None, f"Expected {expected}, got no colour"
    got = (actual.red, actual.green, actual.blue, actual.alpha)
    want = (expected.red, expected.green, expected.blue, expected.alpha)
    assert got == pytest.approx(want, abs=abs_tol), f"Colour mismatch: {actual} != {expected}"

def assert_cells(raster: Raster, rows):
    """
    Verify every cell against nested rows, top row first.
    None in ``rows`` means the cell must hold no data.
    """
    assert raster.shape == (len(rows), len(rows[0])), \
        f"Shape mismatch: {raster.shape} != {(len(rows), len(rows[0]))}"
    for r, row in enumerate(rows):
        for c, expected in enumerate(row):
            if expected is None:
                assert raster.is_no_data(r, c), f"Cell ({r}, {c}) should hold no data"
            else:
                assert not raster.is_no_data(r, c), f"Cell ({r}, {c}) unexpectedly holds no data"
                assert raster.get(r, c) == expected, \
                    f"Cell ({r}, {c}): {raster.get(r, c)!r} != {expected!r}"

def assert_georef(raster: Raster, origin_x: float, origin_y: float, cell_size: float):
    assert raster.origin_x == pytest.approx(origin_x)
    assert raster.origin_y == pytest.approx(origin_y)
    assert raster.cell_size == pytest.approx(cell_size)
