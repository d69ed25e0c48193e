# tests/unit/test_keyed.py

import numpy as np
import pytest

from helpers import assert_cells
from rasterkey.exceptions import ConversionError, RasterValidationError
from rasterkey.key.colour import BLACK, TRANSPARENT, WHITE, Colour
from rasterkey.key.mapped import IntegerKey, MappedKey
from rasterkey.key.scaled import rgb_scaled_key
from rasterkey.numeric import NumericKind
from rasterkey.raster.keyed import KeyedRaster
from rasterkey.raster.layer import Raster

RED = Colour(1.0, 0.0, 0.0)

def test_colour_accessors(binary_keyed):
    assert binary_keyed.colour_at(0, 0) == BLACK
    assert binary_keyed.colour_at(0, 1) == WHITE
    assert binary_keyed.colour_at(1, 1) == TRANSPARENT
    # bottom-left origin
    assert binary_keyed.colour_at_xy(0, 0) == WHITE
    assert binary_keyed.colour_at_point(0.5, 1.5) == BLACK
    assert binary_keyed.colour_at_point(-3.0, 0.5) == TRANSPARENT

def test_set_colour_decodes_through_key(binary_keyed):
    binary_keyed.set_colour(1, 1, BLACK)
    assert binary_keyed.get(1, 1) == 1

    binary_keyed.set_colour(0, 0, RED)
    assert binary_keyed.is_no_data(0, 0)

    binary_keyed.set_colour_xy(0, 1, WHITE)
    assert binary_keyed.get(0, 0) == 2

    binary_keyed.set_colour_at(1.5, 1.5, TRANSPARENT)
    assert binary_keyed.is_no_data(0, 1)

def test_set_colour_at_outside_raster(binary_keyed):
    binary_keyed.set_colour_at(10.0, 10.0, RED)
    with pytest.raises(IndexError):
        binary_keyed.set_colour_at(10.0, 10.0, BLACK)

def test_image_grid_with_zoom(binary_keyed):
    image = binary_keyed.image_grid(zoom=2)
    assert len(image) == 4
    assert all(len(line) == 4 for line in image)
    assert image[0] == [BLACK, BLACK, WHITE, WHITE]
    assert image[1] == image[0]
    assert image[3] == [WHITE, WHITE, TRANSPARENT, TRANSPARENT]

    with pytest.raises(ValueError):
        binary_keyed.image_grid(zoom=0)

def test_to_rgba(binary_keyed):
    rgba = binary_keyed.to_rgba()
    assert rgba.dtype == np.uint8
    assert rgba.shape == (2, 2, 4)
    assert tuple(rgba[0, 0]) == (0, 0, 0, 255)
    assert tuple(rgba[0, 1]) == (255, 255, 255, 255)
    assert tuple(rgba[1, 1]) == (0, 0, 0, 0)

    zoomed = binary_keyed.to_rgba(zoom=3)
    assert zoomed.shape == (6, 6, 4)
    assert tuple(zoomed[5, 0]) == (255, 255, 255, 255)

def test_unencodable_value_raises_on_render():
    keyed = KeyedRaster(1, 2, 0.0, 0.0, 1.0, {1: BLACK}, kind=NumericKind.INT)
    keyed.set(0, 0, 1)
    keyed.set(0, 1, 3)
    with pytest.raises(ConversionError):
        keyed.colour_at(0, 1)
    with pytest.raises(ConversionError):
        keyed.to_rgba()

def test_scaled_key_rendering():
    keyed = KeyedRaster(1, 3, 0.0, 0.0, 1.0, rgb_scaled_key(0.0, 10.0, BLACK, RED), kind=NumericKind.DOUBLE)
    for col, value in enumerate([0.0, 5.0, 10.0]):
        keyed.set(0, col, value)
    assert [tuple(p) for p in keyed.to_rgba()[0]] == [(0, 0, 0, 255), (128, 0, 0, 255), (255, 0, 0, 255)]
    assert keyed.value_of(Colour(0.5, 0.0, 0.0)) == pytest.approx(5.0)
    assert keyed.colour_of(20.0) is None

def test_from_rgba_decodes_pixels():
    pixels = np.array([
        [[0, 0, 0, 255], [255, 255, 255, 255]],
        [[255, 0, 0, 255], [0, 0, 0, 0]],
    ], dtype=np.uint8)
    keyed = KeyedRaster.from_rgba(pixels, {1: BLACK, 2: WHITE}, 5.0, 6.0, 2.0, kind=NumericKind.INT)

    assert isinstance(keyed.key, MappedKey)
    assert keyed.bounds == (5.0, 6.0, 9.0, 10.0)
    assert_cells(keyed, [[1, 2], [None, None]])

def test_from_rgba_rgb_and_bad_shape():
    rgb = np.array([[[255, 255, 255]]], dtype=np.uint8)
    assert KeyedRaster.from_rgba(rgb, IntegerKey(), kind=NumericKind.INT).get(0, 0) == -1

    with pytest.raises(RasterValidationError):
        KeyedRaster.from_rgba(np.zeros((2, 2), dtype=np.uint8), IntegerKey())

def test_key_must_be_key_or_dict():
    with pytest.raises(TypeError):
        KeyedRaster(1, 1, 0.0, 0.0, 1.0, [BLACK])

def test_raster_round_trip_through_keyed():
    raster = Raster(2, 1, 0.0, 0.0, 1.0, no_data_value=0, kind=NumericKind.INT)
    raster.set(0, 0, 1)
    raster.set(1, 0, 0)

    keyed = raster.as_keyed({1: RED})
    assert keyed.colour_at(0, 0) == RED
    assert keyed.colour_at(1, 0) == TRANSPARENT
    assert keyed.copy().key is keyed.key

    plain = keyed.as_raster()
    assert type(plain) is Raster
    assert plain == raster
