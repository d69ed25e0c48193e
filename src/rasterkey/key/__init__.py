# src/rasterkey/key/__init__.py
#
# Copyright (c) The rasterkey project contributors
# This software is distributed under the Apache-2.0 license.
# See the NOTICE file for more information

"""
The key subpackage provides the colour keys that convert raster cell
values to colours and back, including scaled, multi-scale, mapped and
integer keys.
"""
# Colour model
from .colour import (
    Colour,
    ColourSpace,
    TRANSPARENT,
    BLACK,
    WHITE
)

# Comparison
from .ordering import (
    PartialOrder
)

# Key interface
from .base import (
    Key
)

# Scaled keys
from .scaled import (
    ValueScale,
    ScaledKey,
    rgb_scaled_key,
    hsb_scaled_key,
    rgb_log_scaled_key,
    hsb_log_scaled_key
)

# Composite keys
from .multi import (
    MultiScaleKey
)

from .mapped import (
    MappedKey,
    IntegerKey
)

__all__ = [
    # Colour
    "Colour",
    "ColourSpace",
    "TRANSPARENT",
    "BLACK",
    "WHITE",

    # Ordering
    "PartialOrder",

    # Base
    "Key",

    # Scaled
    "ValueScale",
    "ScaledKey",
    "rgb_scaled_key",
    "hsb_scaled_key",
    "rgb_log_scaled_key",
    "hsb_log_scaled_key",

    # Composite
    "MultiScaleKey",
    "MappedKey",
    "IntegerKey"
]
