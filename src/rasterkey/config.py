# src/rasterkey/config.py

"""
Defaults and environment lookups used across rasterkey.

Module constants hold the values the readers and keys fall back on;
``ReadOptions`` bundles the per-call settings a reader accepts.
"""

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

__all__ = [
    "DEFAULT_TOLERANCE",
    "DEFAULT_SAFETY_FACTOR",
    "MIN_FREE_GB",
    "XPM_XLLCORNER",
    "XPM_YLLCORNER",
    "XPM_CELLSIZE",
    "RGB_TXT_NAME",
    "RGB_TXT_ENV_VAR",
    "RGB_TXT_LOCATIONS",
    "X_HOME_ENV_VARS",
    "X_HOME_SUBDIRS",
    "ReadOptions",
    "rgb_txt_candidates"
]

# Tolerance for deciding whether a colour lies on a scale's line
DEFAULT_TOLERANCE = 16.0 * math.ulp(1.0)

DEFAULT_SAFETY_FACTOR = 2.0
MIN_FREE_GB = 0.5

# Extension keys carrying georeferencing inside XPM files
XPM_XLLCORNER = "xllcorner"
XPM_YLLCORNER = "yllcorner"
XPM_CELLSIZE = "cellsize"

RGB_TXT_NAME = "rgb.txt"
RGB_TXT_ENV_VAR = "RASTERKEY_RGB_TXT"
RGB_TXT_LOCATIONS: Tuple[str, ...] = (
    "/usr/share/X11",
    "/usr/X11/share/X11",
    "/usr/lib/X11",
    "/usr/X11R6/lib/X11",
    "/usr/X11R6/share/X11",
    "/etc/X11"
)
X_HOME_ENV_VARS: Tuple[str, ...] = ("X_HOME", "XHOME", "X")
X_HOME_SUBDIRS: Tuple[str, ...] = ("lib", "share", "lib/X11", "share/X11")

@dataclass(frozen=True)
class ReadOptions:
    """
    Settings shared by the file readers.

    Args:
        check_memory: Estimate RAM for the grid before allocating it.
        safety_factor: Overhead multiplier applied to the raw grid size.
        colour_table: Path to an rgb.txt style file for XPM colour names.
            If None, the standard locations are searched on first use.
        origin_x: Easting used by XPM files lacking an xllcorner extension.
        origin_y: Northing used by XPM files lacking a yllcorner extension.
        cell_size: Cell size used by XPM files lacking a cellsize extension.
    """
    check_memory: bool = True
    safety_factor: float = DEFAULT_SAFETY_FACTOR
    colour_table: Optional[Union[str, Path]] = None
    origin_x: float = 0.0
    origin_y: float = 0.0
    cell_size: float = 1.0

def rgb_txt_candidates() -> Tuple[Path, ...]:
    """
    List the places an rgb.txt may live, most specific first.

    The explicit environment variable wins, then the usual X11 install
    directories, then subdirectories of any X home variable that is set.
    """
    candidates = []

    explicit = os.getenv(RGB_TXT_ENV_VAR)
    if explicit:
        candidates.append(Path(explicit))

    for location in RGB_TXT_LOCATIONS:
        candidates.append(Path(location) / RGB_TXT_NAME)

    for var in X_HOME_ENV_VARS:
        home = os.getenv(var)
        if not home:
            continue
        for subdir in X_HOME_SUBDIRS:
            candidates.append(Path(home) / subdir / RGB_TXT_NAME)

    return tuple(candidates)
