# src/rasterkey/raster/__init__.py
#
# Copyright (c) The rasterkey project contributors
# This software is distributed under the Apache-2.0 license.
# See the NOTICE file for more information

"""
The raster subpackage provides the core data structures for georeferenced
grids, including 'no data' tracking, colour-keyed rasters, resource
checks and rasterio-backed I/O.
"""
# Core data structures
from .grid import (
    Grid
)

from .layer import (
    Raster
)

from .keyed import (
    KeyedRaster
)

# I/O operations
from .io import (
    IMAGE_SUFFIXES,
    save,
    load,
    save_image,
    read_image,
    read_info
)

# Resource management
from .resources import (
    MemoryEstimate,
    estimate_grid_memory,
    ensure_memory
)

# Shared utilities
from .utils import (
    TYPE_LADDER,
    detect_kind
)

__all__ = [
    # Structures
    "Grid",
    "Raster",
    "KeyedRaster",

    # I/O
    "IMAGE_SUFFIXES",
    "save",
    "load",
    "save_image",
    "read_image",
    "read_info",

    # Resources
    "MemoryEstimate",
    "estimate_grid_memory",
    "ensure_memory",

    # Utils
    "TYPE_LADDER",
    "detect_kind"
]
