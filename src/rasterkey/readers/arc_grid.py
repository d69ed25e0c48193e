# src/rasterkey/readers/arc_grid.py

"""
This module reads ARC/ASCII grid files.

The format is a six line header followed by whitespace-separated rows,
top row first:

    nrows         2
    ncols         2
    xllcorner     0
    yllcorner     0
    cellsize      1
    nodata_value  -9999
    1 2
    -9999 4

``xllcenter``/``yllcenter`` may replace the corner keys and
``nodata_value`` is optional.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, TextIO, Union

from rasterkey.config import ReadOptions
from rasterkey.exceptions import FormatError
from rasterkey.numeric import NumericKind, parse_token
from rasterkey.raster.layer import Raster
from rasterkey.raster.resources import ensure_memory
from rasterkey.raster.utils import detect_kind
from .text import TextReader, open_source

log = logging.getLogger(__name__)

__all__ = [
    "ARC_GRID_FORMAT",
    "ARC_GRID_HEADER",
    "read_arc_grid"
]

ARC_GRID_FORMAT = "ARC ASCII grid"
ARC_GRID_HEADER = (
    "nrows",
    "ncols",
    "xllcorner|xllcenter",
    "yllcorner|yllcenter",
    "cellsize",
    "?nodata_value"
)

def _header_number(
    header: Dict[str, str],
    names: str,
    kind: NumericKind,
    filename: str
) -> Union[int, float]:
    """Parse the value stored under whichever of ``names`` ('a|b') is present."""
    name = next(n for n in names.split("|") if n in header)
    try:
        return kind.parse(header[name])
    except ValueError:
        raise FormatError(filename, ARC_GRID_FORMAT, f"{kind.label} for {name}", header[name]) from None

def read_arc_grid(source: Union[str, Path, TextIO], options: Optional[ReadOptions] = None) -> Raster:
    """
    Read an ARC/ASCII grid into a Raster.

    Cells are typed with the narrowest kind that every cell (and the
    no-data value, if any) parses as: INT, then LONG, then DOUBLE,
    otherwise the raster keeps the text.

    Args:
        source: Path to the file, or an open text stream.
        options: Reader settings; only the memory check applies here.

    Returns:
        Raster: The fully populated raster.

    Raises:
        FormatError: If the header or body does not follow the format.
        MemoryError: If the grid would not fit in memory.
    """
    options = options or ReadOptions()

    with open_source(source) as (stream, filename):
        reader = TextReader(stream, filename, ARC_GRID_FORMAT)
        header = reader.read_ordered_key_values(ARC_GRID_HEADER)

        nrows = _header_number(header, "nrows", NumericKind.INT, filename)
        ncols = _header_number(header, "ncols", NumericKind.INT, filename)
        cell_size = _header_number(header, "cellsize", NumericKind.DOUBLE, filename)
        for name, value in (("nrows", nrows), ("ncols", ncols), ("cellsize", cell_size)):
            if not value > 0:
                raise FormatError(filename, ARC_GRID_FORMAT, f"a positive number for {name}", header[name])

        x = _header_number(header, "xllcorner|xllcenter", NumericKind.DOUBLE, filename)
        if "xllcenter" in header:
            x -= cell_size / 2.0
        y = _header_number(header, "yllcorner|yllcenter", NumericKind.DOUBLE, filename)
        if "yllcenter" in header:
            y -= cell_size / 2.0

        if options.check_memory:
            ensure_memory(nrows, ncols, None, safety_factor=options.safety_factor)

        log.debug(f"Reading {nrows}x{ncols} body of {filename}")
        table = reader.read_table(nrows, ncols)

    no_data = header.get("nodata_value")
    kind = detect_kind(table, extra=() if no_data is None else (no_data,))
    grid = table.coerce(kind)
    no_data_value = None if no_data is None else parse_token(no_data, kind)

    raster = Raster.from_grid(grid, x, y, cell_size, no_data_value)
    log.info(f"Read {raster!r} from {filename}")
    return raster
