# src/rasterkey/raster/utils.py

"""
This module provides shared utility functions for grids and rasters.

Functions include narrowest-type detection for text grids read from
files and path helpers shared by the readers and exporters.
"""
import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from rasterkey.numeric import NumericKind
from .grid import Grid

log = logging.getLogger(__name__)

__all__ = [
    "TYPE_LADDER",
    "detect_kind",
    "normalise_path"
]

# Kinds tried, narrowest first, when a text grid is typed
TYPE_LADDER = (NumericKind.INT, NumericKind.LONG, NumericKind.DOUBLE)

def detect_kind(
    grid: Grid,
    candidates: Sequence[NumericKind] = TYPE_LADDER,
    extra: Iterable[str] = ()
) -> Optional[NumericKind]:
    """
    Find the narrowest kind every non-empty cell parses as.

    Args:
        grid: A text grid.
        candidates: Kinds to try, narrowest first.
        extra: Additional tokens (e.g. a 'no data' value) that must parse too.

    Returns:
        NumericKind: The first candidate that fits, or None if the grid must stay text.
    """
    extra = [str(token) for token in extra]
    for kind in candidates:
        if all(kind.accepts(token) for token in extra) and grid.are_all_parseable(kind):
            log.debug(f"Grid {grid.shape} parses as {kind.name}")
            return kind
    log.debug(f"Grid {grid.shape} kept as text")
    return None

def normalise_path(path: Union[str, Path]) -> Path:
    """Expand ``~`` and return a Path."""
    return Path(path).expanduser()
