# src/rasterkey/raster/resources.py

"""
This module checks system memory before a grid is allocated.

Readers learn the grid shape from the file header; the estimate here
decides whether pre-sizing storage of that shape is safe.
"""

import logging
import psutil
from dataclasses import dataclass
from typing import Union

import numpy as np

from rasterkey.config import DEFAULT_SAFETY_FACTOR, MIN_FREE_GB

log = logging.getLogger(__name__)

__all__ = [
    "MemoryEstimate",
    "estimate_grid_memory",
    "ensure_memory"
]

# Bytes per cell of the boolean 'filled' mask kept next to the values
_MASK_BYTES = np.dtype(bool).itemsize

# Object arrays hold pointers; the strings they point at cost roughly this much more
_TEXT_CELL_BYTES = 56

@dataclass(frozen=True)
class MemoryEstimate:
    """
    Estimation of memory requirements and safety for allocating a grid.

    Args:
        total_required_bytes: Total bytes required for the grid (with overhead)
        available_system_bytes: Currently available system memory in bytes
        is_safe: Boolean indicating if allocating is considered safe
        reason: Explanation for the safety assessment (e.g. "Req: 0.10GB, Avail: 8.00GB")
    """
    total_required_bytes: int
    available_system_bytes: int
    is_safe: bool
    reason: str

def _bytes_per_cell(dtype: Union[np.dtype, str, None]) -> int:
    if dtype is None:
        return np.dtype(object).itemsize + _TEXT_CELL_BYTES + _MASK_BYTES
    dtype = np.dtype(dtype)
    if dtype == np.dtype(object):
        return dtype.itemsize + _TEXT_CELL_BYTES + _MASK_BYTES
    return dtype.itemsize + _MASK_BYTES

def estimate_grid_memory(
    nrows: int,
    ncols: int,
    dtype: Union[np.dtype, str, None] = None,
    safety_factor: float = DEFAULT_SAFETY_FACTOR,
    min_free_gb: float = MIN_FREE_GB
) -> MemoryEstimate:
    """
    Checks if a grid of the given shape fits in RAM safely.

    Args:
        nrows: Number of rows.
        ncols: Number of columns.
        dtype: Cell dtype, or None for a text grid.
        safety_factor: Multiplier to account for overhead (default 2.0)
        min_free_gb: Minimum free GB to leave available after allocating (default 0.5)

    Returns:
        MemoryEstimate: Contains total required bytes, available bytes, safety boolean, and reason.
    """
    raw_bytes = nrows * ncols * _bytes_per_cell(dtype)
    overhead_bytes = int(raw_bytes * (safety_factor - 1.0))
    total_required = raw_bytes + overhead_bytes

    mem = psutil.virtual_memory()
    min_free_bytes = int(min_free_gb * (1024**3))
    is_safe = (total_required + min_free_bytes) <= mem.available

    reason = f"Req: {total_required/1e9:.2f}GB, Avail: {mem.available/1e9:.2f}GB"

    return MemoryEstimate(total_required, mem.available, is_safe, reason)

def ensure_memory(
    nrows: int,
    ncols: int,
    dtype: Union[np.dtype, str, None] = None,
    safety_factor: float = DEFAULT_SAFETY_FACTOR
) -> MemoryEstimate:
    """
    Raise if a grid of the given shape would not fit in RAM.

    Raises:
        MemoryError: If the estimate is unsafe.
    """
    estimate = estimate_grid_memory(nrows, ncols, dtype, safety_factor=safety_factor)
    if not estimate.is_safe:
        raise MemoryError(
            f"Grid of {nrows}x{ncols} cells is too large to allocate. {estimate.reason}"
        )
    log.debug(f"Memory check passed for {nrows}x{ncols} grid. {estimate.reason}")
    return estimate
