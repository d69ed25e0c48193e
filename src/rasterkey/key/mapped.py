# src/rasterkey/key/mapped.py

"""
This module defines table-driven keys: an explicit one-to-one mapping
between discrete values and colours, and the identity key between 32-bit
integers and packed ARGB colours.
"""

import logging
import numbers
from typing import Any, Dict, Hashable, Iterator, Mapping, Optional, Tuple

from rasterkey.exceptions import ConversionError, MappingError
from .base import Key
from .colour import Colour

log = logging.getLogger(__name__)

__all__ = [
    "MappedKey",
    "IntegerKey"
]

class MappedKey(Key):
    """
    A bijection between values and colours.

    Args:
        mapping: Optional initial value -> colour pairs.

    Raises:
        MappingError: If the mapping gives two values the same colour.
    """

    def __init__(self, mapping: Optional[Mapping[Hashable, Colour]] = None):
        super().__init__()
        self._colours: Dict[Hashable, Colour] = {}
        self._values: Dict[Colour, Hashable] = {}
        for value, colour in (mapping or {}).items():
            self.add(colour, value)

    def add(self, colour: Colour, value: Hashable):
        """
        Bind a colour to a value.

        Re-adding an existing pair is allowed.

        Raises:
            MappingError: If either side is already bound to a different partner.
        """
        bound_value = self._values.get(colour, value)
        bound_colour = self._colours.get(value, colour)
        if bound_value != value or bound_colour != colour:
            raise MappingError(
                f"Not a one-to-one mapping from colour to key ({colour} <-> {value!r}). "
                f"Already have ({self._colours.get(value)} <-> {value!r}) and "
                f"({colour} <-> {self._values.get(colour)!r})"
            )
        self._values[colour] = value
        self._colours[value] = colour

    def encode(self, value: Hashable) -> Optional[Colour]:
        colour = self._colours.get(value)
        if colour is None:
            return self._fail(ConversionError(f"Key {self} does not contain entry {value!r}"))
        return colour

    def decode(self, colour: Colour) -> Any:
        if colour not in self._values:
            return self._fail(ConversionError(f"Key {self} does not contain colour {colour}"))
        return self._values[colour]

    def items(self) -> Iterator[Tuple[Hashable, Colour]]:
        """Iterate over (value, colour) pairs."""
        return iter(self._colours.items())

    def as_dict(self) -> Dict[Hashable, Colour]:
        return dict(self._colours)

    def __len__(self) -> int:
        return len(self._colours)

    def __contains__(self, value: Hashable) -> bool:
        return value in self._colours

    def __repr__(self) -> str:
        pairs = ", ".join(f"{value!r} <-> {colour}" for value, colour in self._colours.items())
        return f"MappedKey{{{pairs}}}"

class IntegerKey(Key):
    """
    Identity key between signed 32-bit integers and packed ARGB colours.

    Alpha is carried in the top byte, so ``decode(encode(v)) == v`` for
    every 32-bit value.
    """

    def encode(self, value: int) -> Optional[Colour]:
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            return self._fail(ConversionError(f"{value!r} is not an integer"))
        if not -(1 << 31) <= value < (1 << 31):
            return self._fail(ConversionError(f"{value} does not fit in 32 bits"))
        return Colour.from_argb(int(value))

    def decode(self, colour: Colour) -> int:
        return colour.argb

    def __repr__(self) -> str:
        return "IntegerKey"
