# tests/unit/test_arc_grid.py

import io

import pytest

from helpers import assert_cells, assert_georef
from rasterkey.config import ReadOptions
from rasterkey.exceptions import FormatError
from rasterkey.numeric import NumericKind
from rasterkey.readers import read
from rasterkey.readers.arc_grid import read_arc_grid

def _arc(nrows=2, ncols=3, x="xllcorner 100", y="yllcorner 200", cellsize="cellsize 10",
         nodata="NODATA_value -9999", body="1 2 3\n4 5 6\n"):
    lines = [f"nrows {nrows}", f"ncols {ncols}", x, y, cellsize]
    if nodata:
        lines.append(nodata)
    return io.StringIO("\n".join(lines) + "\n" + body)

def test_reads_sample_grid(arc_grid_path):
    raster = read_arc_grid(arc_grid_path)

    assert raster.kind is NumericKind.INT
    assert raster.no_data_value == -9999
    assert_georef(raster, 0.0, 0.0, 1.0)
    assert_cells(raster, [[1, 2], [None, 4]])
    assert raster.get(1, 0) == -9999

def test_header_georeferencing():
    raster = read_arc_grid(_arc())
    assert raster.shape == (2, 3)
    assert_georef(raster, 100.0, 200.0, 10.0)
    # row 0 is the northernmost row
    assert raster.value_at(105.0, 215.0) == 1
    assert raster.value_at(125.0, 205.0) == 6

def test_centre_header_shifts_origin():
    raster = read_arc_grid(_arc(x="xllcenter 105", y="YLLCENTER 205"))
    assert_georef(raster, 100.0, 200.0, 10.0)

def test_nodata_is_optional():
    raster = read_arc_grid(_arc(nodata=None, body="1 2 3\n4 5 -9999\n"))
    assert raster.no_data_value is None
    assert raster.get(1, 2) == -9999
    assert not raster.is_no_data(1, 2)

@pytest.mark.parametrize("body, nodata, kind, cell", [
    ("1 2 3\n4 5 6\n", "nodata_value -9999", NumericKind.INT, 6),
    ("1 2 3\n4 5 3000000000\n", "nodata_value -9999", NumericKind.LONG, 3000000000),
    ("1 2 3\n4 5 6.5\n", "nodata_value -9999", NumericKind.DOUBLE, 6.5),
    ("1 2 3\n4 5 6\n", "nodata_value -9999.5", NumericKind.DOUBLE, 6.0),
    ("a b c\nd e f\n", None, None, "f"),
])
def test_narrowest_cell_type(body, nodata, kind, cell):
    raster = read_arc_grid(_arc(body=body, nodata=nodata))
    assert raster.kind is kind
    assert raster.get(1, 2) == cell

def test_text_grid_with_nodata_token():
    raster = read_arc_grid(_arc(body="a b c\nd e none\n", nodata="nodata_value none"))
    assert raster.kind is None
    assert raster.is_no_data(1, 2)
    assert raster.get(0, 0) == "a"

def test_missing_header_key():
    stream = io.StringIO("nrows 2\nxllcorner 0\nyllcorner 0\ncellsize 1\n1 2\n3 4\n")
    with pytest.raises(FormatError) as excinfo:
        read_arc_grid(stream)
    assert excinfo.value.found == "xllcorner"
    assert '"ncols"' in excinfo.value.expecting

@pytest.mark.parametrize("kwargs", [
    {"nrows": 0},
    {"ncols": -2},
    {"cellsize": "cellsize 0"},
    {"cellsize": "cellsize abc"},
    {"nrows": "two"},
])
def test_invalid_header_values(kwargs):
    with pytest.raises(FormatError):
        read_arc_grid(_arc(**kwargs))

def test_short_row():
    with pytest.raises(FormatError) as excinfo:
        read_arc_grid(_arc(body="1 2 3\n4 5\n"))
    assert excinfo.value.line == 8

def test_missing_rows():
    with pytest.raises(FormatError):
        read_arc_grid(_arc(body="1 2 3\n"))

def test_memory_check_can_be_disabled(arc_grid_path):
    raster = read_arc_grid(arc_grid_path, ReadOptions(check_memory=False))
    assert raster.shape == (2, 2)

def test_dispatcher_reads_arc_grid(arc_grid_path):
    raster = read(arc_grid_path)
    assert_cells(raster, [[1, 2], [None, 4]])
