# tests/unit/test_colour.py

import pytest

from rasterkey.exceptions import IncomparableError
from rasterkey.key.colour import BLACK, TRANSPARENT, WHITE, Colour, ColourSpace
from rasterkey.key.ordering import PartialOrder

def test_colour_constructors_agree():
    red = Colour(1.0, 0.0, 0.0)
    assert Colour.from_rgb8(255, 0, 0) == red
    assert Colour.from_hsb(0.0, 1.0, 1.0) == red
    assert Colour.from_argb(0xFFFF0000) == red
    assert Colour.from_argb(-65536) == red

def test_colour_channels_validated():
    with pytest.raises(ValueError):
        Colour(1.5, 0.0, 0.0)
    with pytest.raises(ValueError):
        Colour(0.0, -0.1, 0.0)
    with pytest.raises(ValueError):
        Colour.from_rgb8(256, 0, 0)

def test_colour_representations():
    colour = Colour.from_rgb8(0x12, 0xAB, 0xFF)
    assert colour.hex == "#12ABFF"
    assert colour.to_rgba8() == (0x12, 0xAB, 0xFF, 255)
    assert str(colour) == "#12ABFF"
    assert WHITE.argb == -1
    assert TRANSPARENT.is_transparent
    assert not BLACK.is_transparent

def test_colour_is_hashable():
    assert {Colour.from_rgb8(0, 0, 0): "black"}[BLACK] == "black"

def test_colour_space_components():
    colour = Colour(0.5, 1.0, 0.0)
    assert ColourSpace.RGB.components_of(colour) == (0.5, 1.0, 0.0)
    assert ColourSpace.HSB.components_of(colour) == pytest.approx((0.25, 1.0, 1.0))
    assert ColourSpace.HSB.colour_of((0.25, 1.0, 1.0)) == colour

def test_partial_order_comparator():
    assert PartialOrder.LESS_THAN.comparator() == -1
    assert PartialOrder.EQUAL_TO.comparator() == 0
    assert PartialOrder.MORE_THAN.comparator() == 1
    with pytest.raises(IncomparableError):
        PartialOrder.INCOMPARABLE.comparator()

    assert PartialOrder.from_comparator(-5) is PartialOrder.LESS_THAN
    assert PartialOrder.from_comparator(0) is PartialOrder.EQUAL_TO
    assert PartialOrder.from_comparator(3) is PartialOrder.MORE_THAN

@pytest.mark.parametrize("a, b, expected", [
    (PartialOrder.LESS_THAN, PartialOrder.LESS_THAN, PartialOrder.LESS_THAN),
    (PartialOrder.LESS_THAN, PartialOrder.EQUAL_TO, PartialOrder.LESS_THAN),
    (PartialOrder.EQUAL_TO, PartialOrder.MORE_THAN, PartialOrder.MORE_THAN),
    (PartialOrder.LESS_THAN, PartialOrder.MORE_THAN, PartialOrder.INCOMPARABLE),
    (PartialOrder.INCOMPARABLE, PartialOrder.EQUAL_TO, PartialOrder.INCOMPARABLE),
])
def test_partial_order_generalise(a, b, expected):
    assert a.generalise(b) is expected
    assert b.generalise(a) is expected

def test_partial_order_strict_generalise_and_predicates():
    assert PartialOrder.LESS_THAN.strict_generalise(PartialOrder.EQUAL_TO) is PartialOrder.INCOMPARABLE
    assert PartialOrder.MORE_THAN.strict_generalise(PartialOrder.MORE_THAN) is PartialOrder.MORE_THAN

    assert PartialOrder.EQUAL_TO.is_less_or_equal
    assert PartialOrder.EQUAL_TO.is_more_or_equal
    assert not PartialOrder.EQUAL_TO.is_strict
    assert PartialOrder.LESS_THAN.is_strict
    assert not PartialOrder.INCOMPARABLE.is_comparable
