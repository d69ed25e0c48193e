# src/rasterkey/key/colour.py

"""
This module defines the Colour value type and the colour spaces scaled
keys interpolate through.

Colours hold RGBA channels as floats in [0, 1] so a colour computed by a
scale can be decoded again without 8-bit quantisation.
"""

import colorsys
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple

log = logging.getLogger(__name__)

__all__ = [
    "Colour",
    "ColourSpace",
    "TRANSPARENT",
    "BLACK",
    "WHITE"
]

# Channel values this far outside [0, 1] are clamped rather than rejected
_CHANNEL_SLACK = 1e-9

def _channel(name: str, value: float) -> float:
    value = float(value)
    if value < -_CHANNEL_SLACK or value > 1.0 + _CHANNEL_SLACK or value != value:
        raise ValueError(f"Colour channel {name} must lie in [0, 1], got {value}")
    return min(1.0, max(0.0, value))

def _byte(value: int) -> int:
    if not 0 <= value <= 255:
        raise ValueError(f"8-bit channel must lie in [0, 255], got {value}")
    return int(value)

@dataclass(frozen=True)
class Colour:
    """
    An RGBA colour with float channels.

    Args:
        red: Red channel in [0, 1].
        green: Green channel in [0, 1].
        blue: Blue channel in [0, 1].
        alpha: Opacity in [0, 1]; 0 is fully transparent.
    """
    red: float
    green: float
    blue: float
    alpha: float = 1.0

    def __post_init__(self):
        for name in ("red", "green", "blue", "alpha"):
            object.__setattr__(self, name, _channel(name, getattr(self, name)))

    @classmethod
    def from_rgb8(cls, red: int, green: int, blue: int, alpha: int = 255) -> "Colour":
        """Build a colour from 8-bit channels."""
        return cls(_byte(red) / 255.0, _byte(green) / 255.0, _byte(blue) / 255.0, _byte(alpha) / 255.0)

    @classmethod
    def from_hsb(cls, hue: float, saturation: float, brightness: float, alpha: float = 1.0) -> "Colour":
        """Build a colour from hue, saturation and brightness, each in [0, 1]."""
        red, green, blue = colorsys.hsv_to_rgb(hue, saturation, brightness)
        return cls(red, green, blue, alpha)

    @classmethod
    def from_argb(cls, packed: int) -> "Colour":
        """Unpack a 32-bit ARGB integer (signed or unsigned)."""
        packed &= 0xFFFFFFFF
        return cls.from_rgb8(
            (packed >> 16) & 0xFF,
            (packed >> 8) & 0xFF,
            packed & 0xFF,
            (packed >> 24) & 0xFF
        )

    @property
    def rgb(self) -> Tuple[float, float, float]:
        return (self.red, self.green, self.blue)

    @property
    def hsb(self) -> Tuple[float, float, float]:
        return colorsys.rgb_to_hsv(self.red, self.green, self.blue)

    @property
    def is_transparent(self) -> bool:
        return self.alpha == 0.0

    def to_rgba8(self) -> Tuple[int, int, int, int]:
        """Quantise to 8-bit channels."""
        return tuple(int(round(c * 255.0)) for c in (self.red, self.green, self.blue, self.alpha))

    @property
    def argb(self) -> int:
        """Packed ARGB as a signed 32-bit integer."""
        red, green, blue, alpha = self.to_rgba8()
        packed = (alpha << 24) | (red << 16) | (green << 8) | blue
        return packed - (1 << 32) if packed >= (1 << 31) else packed

    @property
    def hex(self) -> str:
        """'#RRGGBB' form, ignoring alpha."""
        red, green, blue, _ = self.to_rgba8()
        return f"#{red:02X}{green:02X}{blue:02X}"

    def __str__(self) -> str:
        if self.alpha == 1.0:
            return self.hex
        return f"{self.hex} alpha={self.alpha:.3f}"

TRANSPARENT = Colour(0.0, 0.0, 0.0, 0.0)
BLACK = Colour(0.0, 0.0, 0.0)
WHITE = Colour(1.0, 1.0, 1.0)

class ColourSpace(Enum):
    """
    The component spaces a scaled key can draw its line through.

    Options:
        RGB: Red, green, blue.
        HSB: Hue, saturation, brightness (HSV).
    """
    RGB = "rgb"
    HSB = "hsb"

    def components_of(self, colour: Colour) -> Tuple[float, float, float]:
        """Extract this space's three components from a colour."""
        if self is ColourSpace.RGB:
            return colour.rgb
        return colour.hsb

    @property
    def circular(self) -> Tuple[int, ...]:
        """Indices of components that wrap around, so 1.0 and 0.0 are the same."""
        return (0,) if self is ColourSpace.HSB else ()

    def undefined_components(self, components: Sequence[float]) -> Tuple[int, ...]:
        """
        Indices of components a colour does not determine.

        Greys have no hue, and black has neither hue nor saturation.
        """
        if self is ColourSpace.RGB:
            return ()
        _, saturation, brightness = components
        if brightness == 0.0:
            return (0, 1)
        if saturation == 0.0:
            return (0,)
        return ()

    def colour_of(self, components: Sequence[float]) -> Colour:
        """Build an opaque colour from this space's three components."""
        first, second, third = components
        if self is ColourSpace.RGB:
            return Colour(first, second, third)
        return Colour.from_hsb(first, second, third)
