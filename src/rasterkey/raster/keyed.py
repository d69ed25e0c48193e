# src/rasterkey/raster/keyed.py

"""
This module binds a Raster to a colour key.

A KeyedRaster reads and writes cells by colour and renders itself as an
image grid or an RGBA array, with 'no data' cells fully transparent.
"""

import logging
from typing import Any, Dict, List, Optional, Union

import numpy as np

from rasterkey.exceptions import ConversionError, RasterValidationError
from rasterkey.key.base import Key
from rasterkey.key.colour import Colour, TRANSPARENT
from rasterkey.key.mapped import MappedKey
from rasterkey.numeric import NumericKind
from .grid import Grid
from .layer import Raster

log = logging.getLogger(__name__)

__all__ = ["KeyedRaster"]

KeySpec = Union[Key, Dict[Any, Colour]]

def _as_key(key: KeySpec) -> Key:
    if isinstance(key, Key):
        return key
    if isinstance(key, dict):
        return MappedKey(key)
    raise TypeError(f"Expected a Key or a value -> Colour mapping, got {type(key).__name__}")

class KeyedRaster(Raster):
    """
    A Raster whose cells convert to and from colours through a key.

    Args:
        nrows: Number of rows.
        ncols: Number of columns.
        origin_x: Easting of the bottom-left corner.
        origin_y: Northing of the bottom-left corner.
        cell_size: Side length of the square cells.
        key: A Key, or a value -> Colour mapping wrapped in a MappedKey.
        no_data_value: Optional sentinel meaning 'no data'.
        kind: Numeric cell type, None for text.
    """

    def __init__(
        self,
        nrows: int,
        ncols: int,
        origin_x: float,
        origin_y: float,
        cell_size: float,
        key: KeySpec,
        no_data_value: Any = None,
        kind: Optional[NumericKind] = None
    ):
        super().__init__(nrows, ncols, origin_x, origin_y, cell_size, no_data_value, kind)
        self.key = _as_key(key)

    @classmethod
    def from_raster(cls, raster: Raster, key: KeySpec) -> "KeyedRaster":
        """Copy a raster (values and 'no data' mask) and bind it to a key."""
        keyed = cls.from_grid(raster, raster.origin_x, raster.origin_y, raster.cell_size, raster.no_data_value)
        keyed._no_data = set(raster._no_data)
        keyed.key = _as_key(key)
        return keyed

    @classmethod
    def from_rgba(
        cls,
        array: np.ndarray,
        key: KeySpec,
        origin_x: float = 0.0,
        origin_y: float = 0.0,
        cell_size: float = 1.0,
        kind: Optional[NumericKind] = None
    ) -> "KeyedRaster":
        """
        Build a keyed raster from an image array, decoding every pixel.

        Pixels the key cannot decode, and fully transparent pixels, become
        'no data'.

        Args:
            array: uint8 array of shape (rows, cols, 3) or (rows, cols, 4),
                   row 0 at the top.
            key: Key used to decode pixel colours.
            origin_x: Easting of the bottom-left corner.
            origin_y: Northing of the bottom-left corner.
            cell_size: Side length of a pixel in real-world units.
            kind: Numeric cell type, None for text.

        Raises:
            RasterValidationError: If the array is not an RGB(A) image.
        """
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise RasterValidationError(f"Expected an (rows, cols, 3|4) array, got shape {array.shape}")

        nrows, ncols = array.shape[:2]
        keyed = cls(nrows, ncols, origin_x, origin_y, cell_size, key, kind=kind)
        for row in range(nrows):
            for col in range(ncols):
                pixel = [int(c) for c in array[row, col]]
                keyed.set_colour(row, col, Colour.from_rgb8(*pixel))
        log.debug(f"Decoded {nrows}x{ncols} image through {keyed.key!r}")
        return keyed

    # Conversion

    def colour_of(self, value: Any) -> Optional[Colour]:
        return self.key.encode(value)

    def value_of(self, colour: Colour) -> Any:
        return self.key.decode(colour)

    def _render(self, row: int, col: int) -> Colour:
        if self._is_no_data_rc(row, col):
            return TRANSPARENT
        value = self._read(row, col)
        colour = self.key.encode(value)
        if colour is None:
            if self.key.last_failure is not None:
                raise self.key.last_failure
            raise ConversionError(f"Key {self.key!r} has no colour for {value!r}")
        return colour

    # Colour accessors

    def colour_at(self, row: int, col: int) -> Colour:
        """
        Colour of the cell at (row, col); transparent for 'no data'.

        Raises:
            ConversionError: If the key cannot encode the cell's value.
        """
        self._check_rc(row, col)
        return self._render(row, col)

    def colour_at_xy(self, x: int, y: int) -> Colour:
        self._check_xy(x, y)
        return self._render(self.nrows - y - 1, x)

    def colour_at_point(self, x: float, y: float) -> Colour:
        """Colour under a real-world point; transparent outside the raster."""
        if not self.contains_point(x, y):
            return TRANSPARENT
        return self.colour_at_xy(self.column_of(x), self.inverse_row_of(y))

    def set_colour(self, row: int, col: int, colour: Colour):
        """Decode a colour into the cell. Undecodable or transparent colours mark 'no data'."""
        value = None if colour.is_transparent else self.key.decode(colour)
        self.set(row, col, value)

    def set_colour_xy(self, x: int, y: int, colour: Colour):
        self._check_xy(x, y)
        self.set_colour(self.nrows - y - 1, x, colour)

    def set_colour_at(self, x: float, y: float, colour: Colour):
        """Decode a colour into the cell under a real-world point."""
        value = None if colour.is_transparent else self.key.decode(colour)
        self.set_value_at(x, y, value)

    # Rendering

    def image_grid(self, zoom: int = 1) -> List[List[Colour]]:
        """
        Render the raster as rows of colours, row 0 at the top.

        Args:
            zoom: Each cell is replicated zoom x zoom times.

        Raises:
            ValueError: If zoom is less than 1.
            ConversionError: If the key cannot encode some cell's value.
        """
        if zoom < 1:
            raise ValueError(f"Zoom factor must be at least 1, got {zoom}")
        image = []
        for row in range(self.nrows):
            line = []
            for col in range(self.ncols):
                line.extend([self._render(row, col)] * zoom)
            for _ in range(zoom):
                image.append(list(line))
        return image

    def to_rgba(self, zoom: int = 1) -> np.ndarray:
        """
        Render the raster as a uint8 array of shape (nrows*zoom, ncols*zoom, 4).
        """
        if zoom < 1:
            raise ValueError(f"Zoom factor must be at least 1, got {zoom}")
        rgba = np.zeros((self.nrows, self.ncols, 4), dtype=np.uint8)
        cache: Dict[Colour, tuple] = {}
        for row in range(self.nrows):
            for col in range(self.ncols):
                colour = self._render(row, col)
                if colour not in cache:
                    cache[colour] = colour.to_rgba8()
                rgba[row, col] = cache[colour]
        if zoom > 1:
            rgba = np.repeat(np.repeat(rgba, zoom, axis=0), zoom, axis=1)
        return rgba

    def as_raster(self) -> Raster:
        """Drop the key, returning a plain Raster copy."""
        return Raster.copy(self)

    def copy(self) -> "KeyedRaster":
        return KeyedRaster.from_raster(self, self.key)

    def __repr__(self) -> str:
        return f"{super().__repr__()[:-1]} key={self.key!r}>"
