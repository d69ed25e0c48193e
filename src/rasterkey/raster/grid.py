# src/rasterkey/raster/grid.py

"""
This module defines the Grid, a fixed-size two dimensional array of
optional typed cells.

Storage is a numpy array pre-sized from the shape, plus a boolean mask
recording which cells hold a value. Text grids use an object array.
"""

import logging
from typing import Any, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from rasterkey.exceptions import ParseError, RasterValidationError
from rasterkey.numeric import NumericKind, parse_token

log = logging.getLogger(__name__)

__all__ = ["Grid"]

class Grid:
    """
    A rectangular table of cells addressed by (row, column).

    Row 0 is the top row and column 0 the leftmost column. The ``*_xy``
    accessors use (x, y) with (0, 0) at the bottom left, and the
    ``*_x_flip_y`` accessors use (x, y) with (0, 0) at the top left. All of
    them are remaps over the same storage.

    Attributes:
        kind (NumericKind | None): Cell type, None for text grids.
    """

    def __init__(self, nrows: int, ncols: int, kind: Optional[NumericKind] = None):
        """
        Create an empty grid.

        Args:
            nrows: Number of rows.
            ncols: Number of columns.
            kind: Numeric cell type. If None, cells hold arbitrary objects
                  (normally strings).

        Raises:
            RasterValidationError: If either dimension is negative.
        """
        if not isinstance(nrows, (int, np.integer)) or not isinstance(ncols, (int, np.integer)):
            raise TypeError(f"Grid dimensions must be integers, got {nrows!r} x {ncols!r}")
        if nrows < 0 or ncols < 0:
            raise RasterValidationError(f"Grid dimensions must be non-negative, got {nrows} x {ncols}")

        self.kind = kind
        if kind is None:
            self._data = np.full((nrows, ncols), None, dtype=object)
        else:
            self._data = np.zeros((nrows, ncols), dtype=kind.dtype)
        self._filled = np.zeros((nrows, ncols), dtype=bool)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Any]], kind: Optional[NumericKind] = None) -> "Grid":
        """
        Build a grid from nested sequences, top row first. None marks an empty cell.

        Raises:
            RasterValidationError: If the rows have different lengths.
        """
        nrows = len(rows)
        ncols = len(rows[0]) if nrows else 0
        grid = cls(nrows, ncols, kind)
        for r, row in enumerate(rows):
            if len(row) != ncols:
                raise RasterValidationError(
                    f"Row {r} has {len(row)} cells, expected {ncols}"
                )
            for c, value in enumerate(row):
                if value is not None:
                    grid.set(r, c, value)
        return grid

    @property
    def nrows(self) -> int:
        return self._data.shape[0]

    @property
    def ncols(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        """Returns (rows, columns)."""
        return self._data.shape

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    # Bounds checks

    def _check_rc(self, row: int, col: int):
        if not (0 <= row < self.nrows and 0 <= col < self.ncols):
            raise IndexError(
                f"Cell (row={row}, col={col}) out of range for {self.nrows}x{self.ncols} grid"
            )

    def _check_xy(self, x: int, y: int):
        if not (0 <= x < self.ncols and 0 <= y < self.nrows):
            raise IndexError(
                f"Cell (x={x}, y={y}) out of range for {self.ncols}x{self.nrows} grid"
            )

    # Raw storage access (no bounds checks, no 'no data' semantics)

    def _read(self, row: int, col: int) -> Any:
        if not self._filled[row, col]:
            return None
        value = self._data[row, col]
        return value.item() if isinstance(value, np.generic) else value

    def _write(self, row: int, col: int, value: Any):
        if value is None:
            self._data[row, col] = None if self.kind is None else 0
            self._filled[row, col] = False
        else:
            self._data[row, col] = value
            self._filled[row, col] = True

    # Row/column access

    def get(self, row: int, col: int) -> Any:
        """Return the value at (row, col), or None if the cell is empty."""
        self._check_rc(row, col)
        return self._read(row, col)

    def set(self, row: int, col: int, value: Any):
        """Set the value at (row, col). None empties the cell."""
        self._check_rc(row, col)
        self._write(row, col, value)

    # Bottom-left origin access

    def get_xy(self, x: int, y: int) -> Any:
        self._check_xy(x, y)
        return self.get(self.nrows - y - 1, x)

    def set_xy(self, x: int, y: int, value: Any):
        self._check_xy(x, y)
        self.set(self.nrows - y - 1, x, value)

    # Top-left origin access

    def get_x_flip_y(self, x: int, y: int) -> Any:
        self._check_xy(x, y)
        return self.get(y, x)

    def set_x_flip_y(self, x: int, y: int, value: Any):
        self._check_xy(x, y)
        self.set(y, x, value)

    # Whole-grid helpers

    def __iter__(self) -> Iterator[Any]:
        """Iterate over cell values row by row."""
        for r in range(self.nrows):
            for c in range(self.ncols):
                yield self.get(r, c)

    def flatten(self) -> List[Any]:
        """Return the cells as a flat list, row by row."""
        return list(self)

    def find_row(self, col: int, value: Any, start_row: int = 0) -> Optional[int]:
        """
        Find the first row at or after ``start_row`` whose entry in ``col`` equals ``value``.

        Returns:
            The row number, or None if no row matches.
        """
        for row in range(start_row, self.nrows):
            if self.get(row, col) == value:
                return row
        return None

    def row_slice(self, row: int, col_start: int, col_end: int) -> List[Any]:
        """Return the cells of ``row`` from ``col_start`` to ``col_end`` inclusive."""
        return [self.get(row, c) for c in range(col_start, col_end + 1)]

    def to_array(self, fill: Any = None) -> np.ndarray:
        """
        Return the cells as a numpy array.

        Args:
            fill: Value written into empty cells. If None, numeric grids come
                  back as a masked array and text grids keep None.
        """
        empty = ~self._filled
        if fill is None:
            if self.kind is None:
                return self._data.copy()
            return np.ma.masked_array(self._data.copy(), mask=empty)
        out = self._data.copy() if self.kind is None else self._data.astype(np.result_type(self._data, fill))
        out[empty] = fill
        return out

    def copy(self) -> "Grid":
        """Returns a deep copy of the grid."""
        twin = Grid(self.nrows, self.ncols, self.kind)
        twin._data = self._data.copy()
        twin._filled = self._filled.copy()
        return twin

    # Type coercion

    def _iter_filled(self) -> Iterator[Tuple[int, int, Any]]:
        for row, col in zip(*np.nonzero(self._filled)):
            yield int(row), int(col), self._read(row, col)

    def are_all_parseable(self, kind: NumericKind) -> bool:
        """Check whether every non-empty cell parses as ``kind``."""
        return all(kind.accepts(str(value)) for _, _, value in self._iter_filled())

    def coerce(self, kind: Optional[NumericKind]) -> "Grid":
        """
        Convert every non-empty cell to ``kind`` (text if None).

        Raises:
            ParseError: Naming the first cell that does not parse.
        """
        grid = Grid(self.nrows, self.ncols, kind)
        label = "text" if kind is None else kind.label
        for row, col, value in self._iter_filled():
            try:
                grid._write(row, col, parse_token(str(value), kind))
            except ValueError as e:
                raise ParseError(value, label, row, col) from e
        return grid

    def as_integer_grid(self) -> "Grid":
        return self.coerce(NumericKind.INT)

    def as_long_grid(self) -> "Grid":
        return self.coerce(NumericKind.LONG)

    def as_float_grid(self) -> "Grid":
        return self.coerce(NumericKind.FLOAT)

    def as_double_grid(self) -> "Grid":
        return self.coerce(NumericKind.DOUBLE)

    def as_string_grid(self) -> "Grid":
        return self.coerce(None)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        if self.shape != other.shape or self.kind != other.kind:
            return False
        if not np.array_equal(self._filled, other._filled):
            return False
        return all(self._read(r, c) == other._read(r, c) for r, c, _ in self._iter_filled())

    def __repr__(self) -> str:
        kind = "text" if self.kind is None else self.kind.name
        return f"<{type(self).__name__} shape={self.shape} kind={kind}>"
