# src/rasterkey/key/multi.py

"""
This module combines several scaled keys into one key.

The scales are kept sorted by minimum and must be strictly separated, so
a value belongs to at most one of them.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Union

from rasterkey.exceptions import ConversionError, DecodeAmbiguityError, OverlapError
from .base import Key
from .colour import Colour
from .ordering import PartialOrder
from .scaled import ScaledKey

log = logging.getLogger(__name__)

__all__ = ["MultiScaleKey"]

Number = Union[int, float]

class MultiScaleKey(Key):
    """
    An ordered union of non-overlapping scaled keys.

    Args:
        scales: Optional scales to add, in any order.

    Raises:
        OverlapError: If any two of the scales overlap.
    """

    def __init__(self, scales: Iterable[ScaledKey] = ()):
        super().__init__()
        self._scales: List[ScaledKey] = []
        for scale in scales:
            self.add_scale(scale)

    @property
    def scales(self) -> List[ScaledKey]:
        return list(self._scales)

    def __len__(self) -> int:
        return len(self._scales)

    def __iter__(self) -> Iterator[ScaledKey]:
        return iter(self._scales)

    def add_scale(self, scale: ScaledKey):
        """
        Insert a scale at its sorted position.

        The new scale must be strictly below its right neighbour and
        strictly above its left neighbour.

        Raises:
            OverlapError: If the scale overlaps (or duplicates) a neighbour.
                The key is left unchanged.
        """
        index = 0
        while index < len(self._scales) and not scale < self._scales[index]:
            index += 1

        left = self._scales[index - 1] if index > 0 else None
        right = self._scales[index] if index < len(self._scales) else None

        if right is not None and scale.partial_compare(right) is not PartialOrder.LESS_THAN:
            raise OverlapError(self._overlap_message(scale, left, right))
        if left is not None and scale.partial_compare(left) is not PartialOrder.MORE_THAN:
            raise OverlapError(self._overlap_message(scale, left, right))

        self._scales.insert(index, scale)
        log.debug(f"Added {scale} at position {index}")

    @staticmethod
    def _overlap_message(scale, left, right) -> str:
        if left is None:
            where = f"before {right}"
        elif right is None:
            where = f"after {left}"
        else:
            where = f"between {left} and {right}"
        return f"Scale {scale} cannot be inserted {where}, because there are overlapping minima and maxima"

    def contains(self, value: Number) -> bool:
        return any(scale.contains(value) for scale in self._scales)

    def encode(self, value: Number) -> Optional[Colour]:
        """Colour from the first (lowest) scale containing the value."""
        for scale in self._scales:
            if scale.contains(value):
                return scale.encode(value)
        return self._fail(ConversionError(f"No scale in {self} contains entry {value}"))

    def decode(self, colour: Colour) -> Optional[Number]:
        """
        Value from whichever scale the colour lies on.

        If two scales decode the colour to different values the result is
        None and ``last_failure`` holds a DecodeAmbiguityError.
        """
        found = None
        found_in = None
        for scale in self._scales:
            value = scale.decode(colour)
            if value is None:
                continue
            if found is not None and value != found:
                return self._fail(DecodeAmbiguityError(
                    f"Ambiguous value returned for colour {colour} from scale {scale} "
                    f"({value}) and {found_in} ({found})"
                ))
            found, found_in = value, scale

        if found is None:
            return self._fail(ConversionError(f"Colour {colour} is not contained in this scale"))
        return found

    def __repr__(self) -> str:
        return f"MultiScaleKey[{', '.join(repr(scale) for scale in self._scales)}]"
