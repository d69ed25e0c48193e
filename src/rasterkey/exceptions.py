# src/rasterkey/exceptions.py

"""
Error hierarchy shared by the raster model, the colour keys and the readers.
"""

from typing import Optional

__all__ = [
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
    "IncomparableError"
]

class RasterError(Exception):
    """Base error for everything raised by rasterkey."""

class RasterValidationError(RasterError, ValueError):
    """Raster arguments (shape, cell size, array) are not acceptable."""

class RasterIOError(RasterError, IOError):
    """A raster could not be read from or written to disk."""

class ParseError(RasterError, ValueError):
    """
    A cell or header token could not be coerced to the requested type.

    Attributes:
        token: The offending text.
        expected: Human-readable name of the target type.
        row: Row of the offending cell, if it came from a grid.
        col: Column of the offending cell, if it came from a grid.
    """

    def __init__(
        self,
        token: object,
        expected: str,
        row: Optional[int] = None,
        col: Optional[int] = None
    ):
        self.token = token
        self.expected = expected
        self.row = row
        self.col = col
        where = "" if row is None else f" at (row={row}, col={col})"
        super().__init__(f"Cannot parse {token!r}{where} as {expected}")

class FormatError(RasterIOError):
    """
    A file does not conform to the grammar of its declared format.

    The message always names the file, the format, what the parser was
    expecting and what it found (``end of file`` when ``found`` is None).
    """

    def __init__(
        self,
        filename: str,
        file_format: str,
        expecting: str,
        found: Optional[str],
        line: Optional[int] = None,
        column: Optional[int] = None
    ):
        self.filename = filename
        self.file_format = file_format
        self.expecting = expecting
        self.found = found
        self.line = line
        self.column = column

        position = ""
        if line is not None:
            position = f" at line {line}"
            if column is not None:
                position += f", character {column}"
        shown = "end of file" if found is None else f'"{found}"'
        super().__init__(
            f"File {filename} does not conform to format {file_format}{position}: "
            f"expecting {expecting}, found {shown}"
        )

class ColourTableError(RasterIOError):
    """The named-colour table (rgb.txt) could not be located or loaded."""

class KeyConversionError(RasterError):
    """Base for problems converting between cell values and colours."""

class ConversionError(KeyConversionError):
    """A value has no colour in a key, or a colour has no value."""

class DecodeAmbiguityError(ConversionError):
    """A colour decodes to different values in different scales of one key."""

class OverlapError(KeyConversionError, ValueError):
    """A scale cannot be added to a multi-scale key because ranges overlap."""

class MappingError(KeyConversionError, ValueError):
    """Adding a pair to a mapped key would break its one-to-one mapping."""

class IncomparableError(RasterError, ValueError):
    """An INCOMPARABLE partial-order result was asked for a total-order comparator."""
