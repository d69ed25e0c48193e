# src/rasterkey/__init__.py
#
# Copyright (c) The rasterkey project contributors
# This software is distributed under the Apache-2.0 license.
# See the NOTICE file for more information

"""
rasterkey: georeferenced rasters with colour keys.

Rasters are read from ARC/ASCII grids, XPM pixmaps or images, carry a
'no data' mask and a geotransform, and render to colour through keys
(scaled, multi-scale, mapped or integer).
"""
__version__ = "0.1.0"

from .exceptions import (
    RasterError,
    RasterValidationError,
    RasterIOError,
    ParseError,
    FormatError,
    ColourTableError,
    KeyConversionError,
    ConversionError,
    DecodeAmbiguityError,
    OverlapError,
    MappingError,
    IncomparableError
)

from .config import ReadOptions
from .numeric import NumericKind

from .raster import (
    Grid,
    Raster,
    KeyedRaster,
    save,
    load,
    save_image,
    read_image
)

from .key import (
    Colour,
    ColourSpace,
    PartialOrder,
    ValueScale,
    ScaledKey,
    MultiScaleKey,
    MappedKey,
    IntegerKey,
    rgb_scaled_key,
    hsb_scaled_key,
    rgb_log_scaled_key,
    hsb_log_scaled_key
)

from .readers import (
    read,
    read_arc_grid,
    read_xpm,
    XColourTable
)

__all__ = [
    # Errors
    "RasterError",
    "RasterValidationError",
    "RasterIOError",
    "ParseError",
    "FormatError",
    "ColourTableError",
    "KeyConversionError",
    "ConversionError",
    "DecodeAmbiguityError",
    "OverlapError",
    "MappingError",
    "IncomparableError",

    # Settings and types
    "ReadOptions",
    "NumericKind",

    # Rasters
    "Grid",
    "Raster",
    "KeyedRaster",
    "save",
    "load",
    "save_image",
    "read_image",

    # Keys
    "Colour",
    "ColourSpace",
    "PartialOrder",
    "ValueScale",
    "ScaledKey",
    "MultiScaleKey",
    "MappedKey",
    "IntegerKey",
    "rgb_scaled_key",
    "hsb_scaled_key",
    "rgb_log_scaled_key",
    "hsb_log_scaled_key",

    # Readers
    "read",
    "read_arc_grid",
    "read_xpm",
    "XColourTable"
]
