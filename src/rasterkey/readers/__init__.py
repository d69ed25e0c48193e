# src/rasterkey/readers/__init__.py
#
# Copyright (c) The rasterkey project contributors
# This software is distributed under the Apache-2.0 license.
# See the NOTICE file for more information

"""
The readers subpackage provides the text tokenizer and the file readers
built on it (ARC/ASCII grids, XPM pixmaps and the X colour table), plus
a single entry point that picks a reader from the file suffix.
"""
import logging
from pathlib import Path
from typing import Optional, Union

# Tokenizer
from .text import (
    Comment,
    TextReader,
    open_source
)

# Formats
from .arc_grid import (
    ARC_GRID_FORMAT,
    read_arc_grid
)

from .xpm import (
    XPM_FORMAT,
    parse_xpm_colour,
    read_xpm
)

from .xcolour import (
    XColourTable,
    default_colour_table
)

from rasterkey.exceptions import RasterValidationError
from rasterkey.raster.io import IMAGE_SUFFIXES, read_image
from rasterkey.raster.layer import Raster
from rasterkey.raster.utils import normalise_path

log = logging.getLogger(__name__)

def read(path: Union[str, Path], key=None, **kwargs) -> Raster:
    """
    Read a raster file, choosing the reader from its suffix.

    '.xpm' files go to read_xpm, image files (PNG, JPEG, ...) to read_image
    when a key is given, and anything else to read_arc_grid.

    Args:
        path: File to read.
        key: Key or value -> Colour mapping. Required for images; for XPM
            files a mapping (or MappedKey) is inverted into the colour -> value legend.
        **kwargs: Passed on to the chosen reader.

    Returns:
        Raster: A Raster, or a KeyedRaster for XPM files with a legend and for images.

    Raises:
        RasterValidationError: If an image is given without a key.
    """
    path = normalise_path(path)
    suffix = path.suffix.lower()

    if suffix == ".xpm":
        if key is not None and "legend" not in kwargs:
            kwargs["legend"] = {colour: value for value, colour in key.items()}
        log.debug(f"Dispatching {path.name} to the XPM reader")
        return read_xpm(path, **kwargs)

    if suffix in IMAGE_SUFFIXES:
        if key is None:
            raise RasterValidationError(f"A key is needed to decode image {path.name}")
        log.debug(f"Dispatching {path.name} to the image reader")
        return read_image(path, key, **kwargs)

    log.debug(f"Dispatching {path.name} to the ARC/ASCII grid reader")
    return read_arc_grid(path, **kwargs)

__all__ = [
    # Tokenizer
    "Comment",
    "TextReader",
    "open_source",

    # Formats
    "ARC_GRID_FORMAT",
    "read_arc_grid",
    "XPM_FORMAT",
    "parse_xpm_colour",
    "read_xpm",
    "XColourTable",
    "default_colour_table",

    # Dispatch
    "read"
]
