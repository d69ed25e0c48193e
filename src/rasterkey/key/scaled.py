# src/rasterkey/key/scaled.py

"""
This module implements scaled keys: a numeric range drawn as a straight
line between two colours in a colour space.

A key is parameterised by two strategies:
- ValueScale: how values are linearised before interpolation (identity or natural log)
- ColourSpace: which three components are interpolated (RGB or HSB)

Only the value axis is linearised; colour components are always
interpolated directly.
"""

import logging
import math
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from rasterkey.config import DEFAULT_TOLERANCE
from rasterkey.exceptions import ConversionError
from rasterkey.numeric import NumericKind
from .base import Key
from .colour import Colour, ColourSpace
from .ordering import PartialOrder

log = logging.getLogger(__name__)

__all__ = [
    "ValueScale",
    "ScaledKey",
    "rgb_scaled_key",
    "hsb_scaled_key",
    "rgb_log_scaled_key",
    "hsb_log_scaled_key"
]

Number = Union[int, float]
ColourSpec = Union[Colour, Sequence[float]]

# A colour taken through rgb_to_hsv and back can move each channel by a few ulps
_ROUND_TRIP_SLACK = 64.0 * math.ulp(1.0)

class ValueScale(Enum):
    """
    How values map onto the position along a scale.

    Options:
        LINEAR: Values are used as they are.
        LOG: Values are replaced by their natural logarithm.
    """
    LINEAR = "linear"
    LOG = "log"

    def to_linear(self, value: float) -> float:
        value = float(value)
        if self is ValueScale.LINEAR:
            return value
        if value != value:
            return value
        # log is undefined here; -inf keeps such values outside every range
        if value <= 0.0:
            return -math.inf
        return math.log(value)

    def from_linear(self, value: float) -> float:
        if self is ValueScale.LINEAR:
            return value
        return math.exp(value)

class ScaledKey(Key):
    """
    Converts numbers in [min, max] to colours on a line and back.

    The minimum value maps to ``min_colour`` and the maximum to
    ``max_colour``. Decoded values are cast to the key's NumericKind, which
    is inferred from ``min_value`` unless given.

    Args:
        min_value: Smallest value on the scale.
        max_value: Largest value on the scale.
        min_colour: Colour (or component triple in ``space``) of the minimum.
        max_colour: Colour (or component triple in ``space``) of the maximum.
        space: Colour space to interpolate through.
        scale: Linear or logarithmic value axis.
        tolerance: Largest difference, per component or RGB channel, that
            still counts as in range and on the line.
        kind: Numeric type of decoded values.

    Raises:
        ValueError: If the linearised range is empty, reversed or not
            finite, or the two colours are identical.
    """

    def __init__(
        self,
        min_value: Number,
        max_value: Number,
        min_colour: ColourSpec,
        max_colour: ColourSpec,
        space: ColourSpace = ColourSpace.RGB,
        scale: ValueScale = ValueScale.LINEAR,
        tolerance: float = DEFAULT_TOLERANCE,
        kind: Optional[NumericKind] = None
    ):
        super().__init__()
        self.space = space
        self.scale = scale
        self.tolerance = float(tolerance)
        self.kind = kind if kind is not None else NumericKind.of(min_value)
        self.min_value = min_value
        self.max_value = max_value

        self.min = scale.to_linear(min_value)
        self.max = scale.to_linear(max_value)
        for original, linear in ((min_value, self.min), (max_value, self.max)):
            if not math.isfinite(linear):
                raise ValueError(
                    f"Cannot convert {type(original).__name__} {original} to a finite "
                    f"{scale.value} scale position"
                )
        if self.max <= self.min:
            raise ValueError(
                f"Maximum {max_value} converts to {self.max}, which is less than or equal "
                f"to {self.min} converted from minimum {min_value}"
            )

        self.min_components = self._components(min_colour)
        self.max_components = self._components(max_colour)
        if self.min_components == self.max_components:
            raise ValueError(
                f"Colours {self.min_components} and {self.max_components} are equal, "
                "and so do not form a scale"
            )

    def _components(self, colour: ColourSpec) -> Tuple[float, float, float]:
        if isinstance(colour, Colour):
            return tuple(self.space.components_of(colour))
        components = tuple(float(c) for c in colour)
        if len(components) != 3:
            raise ValueError(f"Expected three {self.space.name} components, got {len(components)}")
        return components

    # Range

    @property
    def min_colour(self) -> Colour:
        return self.space.colour_of(self.min_components)

    @property
    def max_colour(self) -> Colour:
        return self.space.colour_of(self.max_components)

    def contains(self, value: Number) -> bool:
        """Check whether a value's linearised form lies in [min, max]."""
        linear = self.scale.to_linear(value)
        return self.min <= linear <= self.max

    def in_range(self, colour: Colour) -> bool:
        """Check whether each component lies between the endpoint components."""
        return self._out_of_range(self._unwrap(self.space.components_of(colour))) is None

    def _unwrap(self, components: Sequence[float]) -> List[Optional[float]]:
        """
        Prepare a colour's components for comparison with the endpoints.

        Circular components are moved by a whole turn to lie nearest the
        endpoint range, and components the colour does not determine become None.
        """
        undefined = self.space.undefined_components(components)
        unwrapped = []
        for i, (c, lo, hi) in enumerate(zip(components, self.min_components, self.max_components)):
            if i in undefined:
                unwrapped.append(None)
                continue
            if i in self.space.circular:
                lo, hi = min(lo, hi), max(lo, hi)
                c = min((c, c - 1.0, c + 1.0), key=lambda turn: max(lo - turn, turn - hi, 0.0))
            unwrapped.append(c)
        return unwrapped

    def _out_of_range(self, components: Sequence[Optional[float]]) -> Optional[int]:
        for i, (c, lo, hi) in enumerate(zip(components, self.min_components, self.max_components)):
            if c is None:
                continue
            lo, hi = min(lo, hi), max(lo, hi)
            if c < lo - self.tolerance or c > hi + self.tolerance:
                return i
        return None

    def _colour_at(self, t: float) -> Colour:
        """Colour at fraction ``t`` of the way from the maximum back to the minimum."""
        return self.space.colour_of([
            hi + t * (lo - hi)
            for lo, hi in zip(self.min_components, self.max_components)
        ])

    # Conversion

    def encode(self, value: Number) -> Optional[Colour]:
        """
        Return the colour of a value on this scale.

        Returns:
            Colour: The interpolated colour, or None if the value is outside
            the range (the reason is recorded in ``last_failure``).
        """
        if not self.contains(value):
            return self._fail(ConversionError(f"Scale {self} does not contain entry {value}"))

        t = (self.max - self.scale.to_linear(value)) / (self.max - self.min)
        return self._colour_at(t)

    def decode(self, colour: Colour) -> Optional[Number]:
        """
        Return the value whose colour this is.

        The position along the line is read from the widest-spanning
        component the colour determines. The colour is on the line if the
        colour rebuilt at that position matches it to within ``tolerance``
        in every RGB channel.

        Returns:
            The value cast to the key's kind, or None if the colour is out of
            range or not on the line (the reason is recorded in ``last_failure``).
        """
        raw = self.space.components_of(colour)
        components = self._unwrap(raw)
        if self._out_of_range(components) is not None:
            return self._fail(ConversionError(
                f"Colour {_fmt(raw)} is not within range "
                f"{_fmt(self.min_components)} to {_fmt(self.max_components)}"
            ))

        # Position along the line, 0 at the minimum colour and 1 at the maximum
        position = None
        widest = 0.0
        for c, lo, hi in zip(components, self.min_components, self.max_components):
            if c is None or lo == hi:
                continue
            if abs(hi - lo) > widest:
                widest = abs(hi - lo)
                position = (c - lo) / (hi - lo)
        if position is None:
            return self._fail(ConversionError(
                f"Colour {_fmt(raw)} does not fix a position between "
                f"{_fmt(self.min_components)} and {_fmt(self.max_components)}"
            ))

        position = min(1.0, max(0.0, position))
        rebuilt = self._colour_at(1.0 - position)
        limit = max(self.tolerance, _ROUND_TRIP_SLACK)
        if any(abs(a - b) > limit for a, b in zip(rebuilt.rgb, colour.rgb)):
            return self._fail(ConversionError(
                f"Colour {_fmt(raw)} is not on a line between "
                f"{_fmt(self.min_components)} and {_fmt(self.max_components)}"
            ))

        span = self.max - self.min
        if position > 0.5:
            linear = self.max - (1.0 - position) * span
        else:
            linear = self.min + position * span
        return self.kind.coerce(self.scale.from_linear(linear))

    # Ordering

    def sort_key(self) -> float:
        return self.min_value

    def __lt__(self, other: "ScaledKey") -> bool:
        if not isinstance(other, ScaledKey):
            return NotImplemented
        return self.min_value < other.min_value

    def partial_compare(self, other: "ScaledKey") -> PartialOrder:
        """
        Compare two scales by their real-world ranges.

        Ranges must be strictly separated to be ordered, so scales that
        share only an endpoint are INCOMPARABLE.
        """
        if self.max_value < other.min_value:
            return PartialOrder.LESS_THAN
        if self.min_value > other.max_value:
            return PartialOrder.MORE_THAN
        if self.min_value == other.min_value and self.max_value == other.max_value:
            return PartialOrder.EQUAL_TO
        return PartialOrder.INCOMPARABLE

    def __repr__(self) -> str:
        return (
            f"{self.space.name}{'Log' if self.scale is ValueScale.LOG else ''}ScaledKey<{self.kind.name}>"
            f"[{self.min_value}: {self.min_colour.hex}, {self.max_value}: {self.max_colour.hex}]"
        )

def _fmt(components: Sequence[float]) -> str:
    return "(" + ", ".join(f"{c:.6g}" for c in components) + ")"

def rgb_scaled_key(min_value, max_value, min_colour, max_colour, **kwargs) -> ScaledKey:
    """Linear scale through RGB space."""
    return ScaledKey(min_value, max_value, min_colour, max_colour,
                     space=ColourSpace.RGB, scale=ValueScale.LINEAR, **kwargs)

def hsb_scaled_key(min_value, max_value, min_colour, max_colour, **kwargs) -> ScaledKey:
    """Linear scale through HSB space."""
    return ScaledKey(min_value, max_value, min_colour, max_colour,
                     space=ColourSpace.HSB, scale=ValueScale.LINEAR, **kwargs)

def rgb_log_scaled_key(min_value, max_value, min_colour, max_colour, **kwargs) -> ScaledKey:
    """Logarithmic scale through RGB space."""
    return ScaledKey(min_value, max_value, min_colour, max_colour,
                     space=ColourSpace.RGB, scale=ValueScale.LOG, **kwargs)

def hsb_log_scaled_key(min_value, max_value, min_colour, max_colour, **kwargs) -> ScaledKey:
    """Logarithmic scale through HSB space."""
    return ScaledKey(min_value, max_value, min_colour, max_colour,
                     space=ColourSpace.HSB, scale=ValueScale.LOG, **kwargs)
