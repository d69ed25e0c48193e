# src/rasterkey/numeric.py

"""
This module defines the closed set of numeric cell types and the token
parsing rules used when a text grid is coerced to one of them.
"""

import logging
import re
from enum import Enum
from typing import Any, Optional, Union

import numpy as np

log = logging.getLogger(__name__)

__all__ = [
    "NumericKind",
    "parse_token"
]

_INTEGER_TOKEN = re.compile(r"^[+-]?[0-9]+$")
_FLOAT_TOKEN = re.compile(
    r"^[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|nan|inf|infinity)$",
    re.IGNORECASE
)

class NumericKind(Enum):
    """
    Supported numeric cell types, each backed by a numpy dtype.

    Options:
        BYTE: 8-bit signed integer.
        SHORT: 16-bit signed integer.
        INT: 32-bit signed integer.
        LONG: 64-bit signed integer.
        FLOAT: Single precision floating point.
        DOUBLE: Double precision floating point.
    """
    BYTE = "int8"
    SHORT = "int16"
    INT = "int32"
    LONG = "int64"
    FLOAT = "float32"
    DOUBLE = "float64"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.value)

    @property
    def is_integer(self) -> bool:
        return self.dtype.kind == "i"

    @property
    def label(self) -> str:
        """Human-readable name, used in error messages."""
        return {
            NumericKind.BYTE: "a byte",
            NumericKind.SHORT: "a short integer",
            NumericKind.INT: "an integer",
            NumericKind.LONG: "a long integer",
            NumericKind.FLOAT: "a single-precision floating point number",
            NumericKind.DOUBLE: "a double-precision floating point number",
        }[self]

    def coerce(self, number: float) -> Union[int, float]:
        """
        Cast a double to this kind.

        Integer kinds round to the nearest integer (ties to even) and then
        wrap to their width, like a narrowing cast. Float kinds cast directly.
        """
        if self.is_integer:
            rounded = int(np.rint(number))
            bits = self.dtype.itemsize * 8
            rounded &= (1 << bits) - 1
            if rounded >= 1 << (bits - 1):
                rounded -= 1 << bits
            return rounded
        return float(self.dtype.type(number))

    def parse(self, token: str) -> Union[int, float]:
        """
        Parse a text token as this kind.

        Raises:
            ValueError: If the token is not a literal of this kind, or an
                integer literal does not fit in the kind's width.
        """
        text = token.strip()
        if self.is_integer:
            if not _INTEGER_TOKEN.match(text):
                raise ValueError(f"{token!r} is not an integer literal")
            number = int(text)
            info = np.iinfo(self.dtype)
            if number < info.min or number > info.max:
                raise ValueError(f"{token!r} does not fit in {self.value}")
            return number

        if not _FLOAT_TOKEN.match(text):
            raise ValueError(f"{token!r} is not a floating point literal")
        return float(self.dtype.type(float(text)))

    def accepts(self, token: str) -> bool:
        try:
            self.parse(token)
        except ValueError:
            return False
        return True

    @classmethod
    def of(cls, value: Any) -> "NumericKind":
        """
        Infer the kind of a scalar.

        Python ints map to LONG and Python floats to DOUBLE; numpy scalars
        map by dtype.

        Raises:
            TypeError: If the value is not a supported number.
        """
        if isinstance(value, (bool, np.bool_)):
            raise TypeError("Booleans are not numeric cell values")
        if isinstance(value, np.generic):
            kind = cls.from_dtype(value.dtype)
            if kind is not None:
                return kind
        elif isinstance(value, int):
            return cls.LONG
        elif isinstance(value, float):
            return cls.DOUBLE
        raise TypeError(f"Unsupported numeric type: {type(value).__name__}")

    @classmethod
    def from_dtype(cls, dtype: Any) -> Optional["NumericKind"]:
        """Map a numpy dtype to a kind, or None if it has no counterpart."""
        dtype = np.dtype(dtype)
        for kind in cls:
            if kind.dtype == dtype:
                return kind
        return None

def parse_token(token: str, kind: Optional[NumericKind]) -> Union[int, float, str]:
    """Parse a token as ``kind``, or return it unchanged when kind is None (text)."""
    if kind is None:
        return token
    return kind.parse(token)
