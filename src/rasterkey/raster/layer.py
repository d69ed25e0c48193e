# src/rasterkey/raster/layer.py

import logging
import math
from typing import Any, Dict, Iterator, Optional, Set, Tuple, Union, TYPE_CHECKING

import numpy as np
from rasterio.transform import Affine

from rasterkey.exceptions import RasterValidationError
from rasterkey.numeric import NumericKind
from .grid import Grid

if TYPE_CHECKING:
    from rasterkey.key.base import Key
    from rasterkey.key.colour import Colour
    from .keyed import KeyedRaster

log = logging.getLogger(__name__)

__all__ = ["Raster"]

class Raster(Grid):
    """
    A Grid with georeferencing and 'no data' tracking.

    The origin is the real-world coordinate of the bottom-left corner of the
    bottom-left cell, and cells are square with side ``cell_size``.

    A cell holds no data if any of the following apply:
    1. It is empty.
    2. It equals ``no_data_value``.
    3. It was explicitly marked via ``mark_no_data`` and not written since.

    Writing ``no_data_value`` (or None) to a cell empties it and marks it, so
    the stored cell and the mask never disagree.

    Attributes:
        origin_x (float): Easting of the origin.
        origin_y (float): Northing of the origin.
        cell_size (float): Length of one side of a cell.
        no_data_value: Value standing for 'no data', or None.
    """

    def __init__(
        self,
        nrows: int,
        ncols: int,
        origin_x: float,
        origin_y: float,
        cell_size: float,
        no_data_value: Any = None,
        kind: Optional[NumericKind] = None
    ):
        """
        Create an empty raster.

        Args:
            nrows: Number of rows.
            ncols: Number of columns.
            origin_x: Easting of the bottom-left corner.
            origin_y: Northing of the bottom-left corner.
            cell_size: Side length of the square cells. Must be positive.
            no_data_value: Optional sentinel meaning 'no data'.
            kind: Numeric cell type, None for text.

        Raises:
            RasterValidationError: If cell_size is not a positive finite number.
        """
        super().__init__(nrows, ncols, kind)
        self._init_georef(origin_x, origin_y, cell_size, no_data_value)

    def _init_georef(self, origin_x: float, origin_y: float, cell_size: float, no_data_value: Any):
        cell_size = float(cell_size)
        if not math.isfinite(cell_size) or cell_size <= 0:
            raise RasterValidationError(f"Cell size must be a positive number, got {cell_size}")
        self.origin_x = float(origin_x)
        self.origin_y = float(origin_y)
        self.cell_size = cell_size
        self.no_data_value = no_data_value
        self._no_data: Set[Tuple[int, int]] = set()

    @classmethod
    def from_grid(
        cls,
        grid: Grid,
        origin_x: float,
        origin_y: float,
        cell_size: float,
        no_data_value: Any = None
    ) -> "Raster":
        """
        Wrap a copy of an existing grid with georeferencing.

        Cells equal to ``no_data_value`` are registered as 'no data' on the way in.
        """
        raster = cls.__new__(cls)
        Grid.__init__(raster, grid.nrows, grid.ncols, grid.kind)
        raster._init_georef(origin_x, origin_y, cell_size, no_data_value)
        for row, col, value in grid._iter_filled():
            raster.set(row, col, value)
        return raster

    @classmethod
    def from_array(
        cls,
        array: np.ndarray,
        origin_x: float = 0.0,
        origin_y: float = 0.0,
        cell_size: float = 1.0,
        no_data_value: Any = None,
        kind: Optional[NumericKind] = None
    ) -> "Raster":
        """
        Build a numeric raster from a 2D array, row 0 at the top.

        Cells equal to ``no_data_value`` (and NaN cells of float arrays, or
        masked cells of masked arrays) hold no data.

        Args:
            array: 2D numeric array or masked array.
            origin_x: Easting of the bottom-left corner.
            origin_y: Northing of the bottom-left corner.
            cell_size: Side length of the square cells.
            no_data_value: Optional sentinel meaning 'no data'.
            kind: Cell type. Inferred from the array dtype if None.

        Raises:
            RasterValidationError: If the array is not 2D or its dtype has no
                matching NumericKind.
        """
        mask = np.ma.getmaskarray(array)
        values = np.ma.getdata(array)
        if values.ndim != 2:
            raise RasterValidationError(f"Expected a 2D array, got {values.ndim}D")
        if kind is None:
            kind = NumericKind.from_dtype(values.dtype)
            if kind is None:
                raise RasterValidationError(f"No numeric cell type matches dtype {values.dtype}")

        filled = ~mask
        if values.dtype.kind == "f":
            filled &= ~np.isnan(values)
        if no_data_value is not None:
            filled &= values != no_data_value

        raster = cls(values.shape[0], values.shape[1], origin_x, origin_y, cell_size, no_data_value, kind)
        raster._data[filled] = values[filled].astype(kind.dtype)
        raster._filled = filled
        return raster

    # Metadata

    @property
    def no_data_mask(self) -> Set[Tuple[int, int]]:
        """Cells explicitly marked 'no data', as (col, inverse_row) pairs."""
        return set(self._no_data)

    @property
    def cell_area(self) -> float:
        return self.cell_size * self.cell_size

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """Returns (left, bottom, right, top) in real-world units."""
        return (
            self.origin_x,
            self.origin_y,
            self.origin_x + self.ncols * self.cell_size,
            self.origin_y + self.nrows * self.cell_size
        )

    @property
    def transform(self) -> Affine:
        """Affine transform from (col, row) pixel space to real-world coordinates."""
        top = self.origin_y + self.nrows * self.cell_size
        return Affine.translation(self.origin_x, top) * Affine.scale(self.cell_size, -self.cell_size)

    # Coordinate conversion

    def column_of(self, x: float) -> int:
        """Convert an easting to a column number (not necessarily inside the raster)."""
        return math.floor((x - self.origin_x) / self.cell_size)

    def inverse_row_of(self, y: float) -> int:
        """Convert a northing to an inverse row number (0 at the bottom)."""
        return math.floor((y - self.origin_y) / self.cell_size)

    def x_of_column(self, col: int) -> float:
        """Easting of the centre of a column."""
        return col * self.cell_size + self.origin_x + self.cell_size / 2.0

    def y_of_inverse_row(self, inverse_row: int) -> float:
        """Northing of the centre of an inverse row."""
        return inverse_row * self.cell_size + self.origin_y + self.cell_size / 2.0

    def y_of_row(self, row: int) -> float:
        """Northing of the centre of a row (row 0 at the top)."""
        return self.y_of_inverse_row(self.nrows - row - 1)

    def contains_x(self, x: float) -> bool:
        return 0 <= self.column_of(x) < self.ncols

    def contains_y(self, y: float) -> bool:
        return 0 <= self.inverse_row_of(y) < self.nrows

    def contains_point(self, x: float, y: float) -> bool:
        return self.contains_x(x) and self.contains_y(y)

    def column_at(self, x: float) -> Optional[int]:
        """Column containing an easting, or None if it lies outside the raster."""
        return self.column_of(x) if self.contains_x(x) else None

    def row_at(self, y: float) -> Optional[int]:
        """Row (0 at the top) containing a northing, or None if outside the raster."""
        if not self.contains_y(y):
            return None
        return self.nrows - self.inverse_row_of(y) - 1

    # 'No data' tracking

    def _is_no_data_value(self, value: Any) -> bool:
        return value is None or (self.no_data_value is not None and value == self.no_data_value)

    def _is_no_data_rc(self, row: int, col: int) -> bool:
        return (col, self.nrows - row - 1) in self._no_data or self._is_no_data_value(self._read(row, col))

    def is_no_data(self, row: int, col: int) -> bool:
        """Check whether a cell holds no data."""
        self._check_rc(row, col)
        return self._is_no_data_rc(row, col)

    def is_no_data_xy(self, x: int, y: int) -> bool:
        self._check_xy(x, y)
        return self._is_no_data_rc(self.nrows - y - 1, x)

    def is_no_data_at(self, x: float, y: float) -> bool:
        """Check a real-world point. Points outside the raster have no data."""
        if not self.contains_point(x, y):
            return True
        return self.is_no_data_xy(self.column_of(x), self.inverse_row_of(y))

    def mark_no_data(self, row: int, col: int):
        """Stipulate that a cell has no data, deleting any entry in it."""
        self._check_rc(row, col)
        self._write(row, col, None)
        self._no_data.add((col, self.nrows - row - 1))

    def mark_no_data_xy(self, x: int, y: int):
        self._check_xy(x, y)
        self.mark_no_data(self.nrows - y - 1, x)

    def mark_no_data_at(self, x: float, y: float):
        """Mark the cell under a real-world point. Points outside are ignored."""
        if not self.contains_point(x, y):
            return
        self.mark_no_data_xy(self.column_of(x), self.inverse_row_of(y))

    # Accessors

    def get(self, row: int, col: int) -> Any:
        """Return the value at (row, col), or ``no_data_value`` if the cell has no data."""
        self._check_rc(row, col)
        if self._is_no_data_rc(row, col):
            return self.no_data_value
        return self._read(row, col)

    def set(self, row: int, col: int, value: Any):
        """
        Set the value at (row, col).

        None or ``no_data_value`` marks the cell as having no data; any other
        value clears a previous mark.
        """
        self._check_rc(row, col)
        if self._is_no_data_value(value):
            self.mark_no_data(row, col)
        else:
            self._no_data.discard((col, self.nrows - row - 1))
            self._write(row, col, value)

    def value_at(self, x: float, y: float) -> Any:
        """
        Return the value under a real-world point.

        Points outside the raster read back as ``no_data_value`` rather than
        raising.
        """
        if not self.contains_point(x, y):
            return self.no_data_value
        return self.get_xy(self.column_of(x), self.inverse_row_of(y))

    def set_value_at(self, x: float, y: float, value: Any):
        """
        Set the value under a real-world point.

        Writing 'no data' outside the raster is a no-op.

        Raises:
            IndexError: If a real value is written outside the raster.
        """
        if not self.contains_point(x, y) and self._is_no_data_value(value):
            return
        self.set_xy(self.column_of(x), self.inverse_row_of(y), value)

    # Export helpers

    def iter_xyz(self) -> Iterator[Tuple[float, float, Any]]:
        """Yield (x, y, value) at cell centres for every cell holding data, top row first."""
        for row in range(self.nrows):
            y = self.y_of_row(row)
            for col in range(self.ncols):
                if not self._is_no_data_rc(row, col):
                    yield self.x_of_column(col), y, self._read(row, col)

    def data_mask(self) -> np.ndarray:
        """Boolean array, True where a cell holds data."""
        mask = self._filled.copy()
        for col, inverse_row in self._no_data:
            mask[self.nrows - inverse_row - 1, col] = False
        if self.no_data_value is not None:
            for row, col in zip(*np.nonzero(mask)):
                if self._read(row, col) == self.no_data_value:
                    mask[row, col] = False
        return mask

    def to_array(self, fill: Any = None) -> np.ndarray:
        """
        Return the cells as a numpy array with 'no data' cells replaced.

        Args:
            fill: Replacement for 'no data' cells. Defaults to
                  ``no_data_value``; if that is None too, numeric rasters come
                  back as a masked array.
        """
        fill = self.no_data_value if fill is None else fill
        empty = ~self.data_mask()
        if fill is None:
            if self.kind is None:
                out = self._data.copy()
                out[empty] = None
                return out
            return np.ma.masked_array(self._data.copy(), mask=empty)
        out = self._data.copy() if self.kind is None else self._data.astype(np.result_type(self._data, fill))
        out[empty] = fill
        return out

    def coerce(self, kind: Optional[NumericKind]) -> "Raster":
        """
        Convert the raster's cells (and its no-data value) to ``kind``.

        Raises:
            ParseError: If a cell or the no-data value does not parse.
        """
        grid = Grid.coerce(self, kind)
        no_data_value = self.no_data_value
        if no_data_value is not None:
            no_data_value = Grid.from_rows([[no_data_value]]).coerce(kind).get(0, 0)
        raster = Raster.from_grid(grid, self.origin_x, self.origin_y, self.cell_size, no_data_value)
        raster._no_data |= self._no_data
        return raster

    def as_keyed(self, key: Union["Key", Dict[Any, "Colour"]]) -> "KeyedRaster":
        """
        Bind this raster to a key, producing a KeyedRaster.

        Args:
            key: A Key, or a mapping from cell values to colours (wrapped in a
                 MappedKey).
        """
        from .keyed import KeyedRaster
        return KeyedRaster.from_raster(self, key)

    def copy(self) -> "Raster":
        twin = Raster.from_grid(self, self.origin_x, self.origin_y, self.cell_size, self.no_data_value)
        twin._no_data = set(self._no_data)
        return twin

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Raster):
            return NotImplemented
        meta_eq = (
            self.origin_x == other.origin_x and
            self.origin_y == other.origin_y and
            self.cell_size == other.cell_size and
            self.no_data_value == other.no_data_value and
            self.shape == other.shape and
            self.kind == other.kind
        )
        if not meta_eq:
            return False
        return all(
            self.get(r, c) == other.get(r, c)
            for r in range(self.nrows) for c in range(self.ncols)
        )

    def __repr__(self) -> str:
        kind = "text" if self.kind is None else self.kind.name
        return (f"<{type(self).__name__} shape={self.shape} kind={kind} "
                f"bounds={self.bounds} nodata={self.no_data_value!r}>")
