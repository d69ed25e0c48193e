# tests/conftest.py

import pytest

from rasterkey.key.colour import BLACK, WHITE
from rasterkey.key.mapped import MappedKey
from rasterkey.numeric import NumericKind
from rasterkey.raster.keyed import KeyedRaster

ARC_GRID_SAMPLE = (
    "nrows         2\n"
    "ncols         2\n"
    "xllcorner     0\n"
    "yllcorner     0\n"
    "cellsize      1\n"
    "nodata_value  -9999\n"
    "1 2\n"
    "-9999 4\n"
)

XPM_SAMPLE = (
    "/* XPM */\n"
    "static char *sample[] = {\n"
    "/* width height ncolours chars_per_pixel */\n"
    "\"2 2 2 1\",\n"
    "/* colours */\n"
    "\"a c #000000\",\n"
    "\"b c #FFFFFF\",\n"
    "/* pixels */\n"
    "\"ab\",\n"
    "\"ba\"\n"
    "};\n"
)

RGB_TXT_SAMPLE = (
    "! $Xorg: rgb.txt,v 1.3 2000/08/17 19:54:00 cpqbld Exp $\n"
    "255 250 250\t\tsnow\n"
    "  0   0   0\t\tblack\n"
    "255   0   0\t\tred\n"
    "173 216 230\t\tlight blue\n"
    "173 216 230\t\tLightBlue\n"
    "# trailing comment\n"
)

@pytest.fixture
def write_file(tmp_path):
    """
    Fixture: Returns a factory writing text to a file in the temp dir.
    """
    def _write(name: str, text: str):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write

@pytest.fixture
def arc_grid_path(write_file):
    """The 2x2 grid with one 'no data' cell, bottom left."""
    return write_file("sample.asc", ARC_GRID_SAMPLE)

@pytest.fixture
def xpm_path(write_file):
    """A 2x2 two-colour XPM (a <-> black, b <-> white) in a checkerboard."""
    return write_file("sample.xpm", XPM_SAMPLE)

@pytest.fixture
def rgb_txt_path(write_file):
    return write_file("rgb.txt", RGB_TXT_SAMPLE)

@pytest.fixture
def make_xpm(write_file):
    """
    Fixture: Builds an XPM file from a header, colour lines and pixel rows.
    Extra strings (extensions) are appended after the pixels.
    """
    def _make(header, colours, pixels, extensions=(), name="generated.xpm"):
        strings = [header] + list(colours) + list(pixels) + list(extensions)
        body = ",\n".join(f'"{s}"' for s in strings)
        text = f"/* XPM */\nstatic char *generated[] = {{\n{body}\n}};\n"
        return write_file(name, text)
    return _make

@pytest.fixture
def binary_keyed():
    """2x2 integer raster keyed 1 <-> black, 2 <-> white, with one 'no data' cell."""
    keyed = KeyedRaster(
        2, 2, 0.0, 0.0, 1.0, MappedKey({1: BLACK, 2: WHITE}),
        no_data_value=-1, kind=NumericKind.INT
    )
    keyed.set(0, 0, 1)
    keyed.set(0, 1, 2)
    keyed.set(1, 0, 2)
    keyed.set(1, 1, -1)
    return keyed
