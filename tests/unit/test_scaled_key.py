# tests/unit/test_scaled_key.py

import math

import pytest

from helpers import assert_colour_close
from rasterkey.exceptions import ConversionError
from rasterkey.key.colour import BLACK, WHITE, Colour, ColourSpace
from rasterkey.key.ordering import PartialOrder
from rasterkey.key.scaled import (
    ScaledKey,
    ValueScale,
    hsb_log_scaled_key,
    hsb_scaled_key,
    rgb_log_scaled_key,
    rgb_scaled_key
)
from rasterkey.numeric import NumericKind

RED = Colour(1.0, 0.0, 0.0)

@pytest.mark.parametrize("value", [0.0, 0.1, 12.5, 50.0, 73.3, 99.9, 100.0])
def test_rgb_round_trip(value):
    key = rgb_scaled_key(0.0, 100.0, BLACK, WHITE)
    assert key.decode(key.encode(value)) == pytest.approx(value, abs=1e-9)

def test_endpoints_map_to_endpoint_colours():
    key = rgb_scaled_key(0.0, 100.0, BLACK, RED)
    assert_colour_close(key.encode(0.0), BLACK)
    assert_colour_close(key.encode(100.0), RED)
    assert_colour_close(key.encode(50.0), Colour(0.5, 0.0, 0.0))

def test_integer_kind_is_inferred_and_preserved():
    key = rgb_scaled_key(0, 255, BLACK, RED)
    assert key.kind is NumericKind.LONG
    decoded = key.decode(key.encode(128))
    assert decoded == 128
    assert isinstance(decoded, int)

def test_explicit_kind_casts_decoded_values():
    key = rgb_scaled_key(0.0, 10.0, BLACK, WHITE, kind=NumericKind.INT)
    assert key.decode(Colour(0.46, 0.46, 0.46)) == 5

@pytest.mark.parametrize("value", [1.0, 2.0, 10.0, 500.0, 1000.0])
def test_log_round_trip(value):
    key = rgb_log_scaled_key(1.0, 1000.0, BLACK, WHITE)
    assert key.decode(key.encode(value)) == pytest.approx(value, rel=1e-9)

def test_log_scale_positions():
    key = rgb_log_scaled_key(1.0, 100.0, BLACK, WHITE)
    # log10(10) is half of log10(100)
    assert_colour_close(key.encode(10.0), Colour(0.5, 0.5, 0.5))

def test_log_scale_rejects_non_positive_values():
    key = rgb_log_scaled_key(1.0, 100.0, BLACK, WHITE)
    assert key.encode(0.0) is None
    assert key.encode(-3.0) is None
    assert isinstance(key.last_failure, ConversionError)

def test_hsb_round_trip():
    key = hsb_scaled_key(0.0, 1.0, (0.0, 1.0, 1.0), (0.5, 1.0, 1.0))
    colour = key.encode(0.5)
    assert colour.hsb == pytest.approx((0.25, 1.0, 1.0))
    assert key.decode(colour) == pytest.approx(0.5)

def test_hsb_log_round_trip():
    key = hsb_log_scaled_key(1.0, 100.0, (0.0, 1.0, 1.0), (0.6, 1.0, 1.0))
    assert key.space is ColourSpace.HSB
    assert key.scale is ValueScale.LOG
    assert key.decode(key.encode(10.0)) == pytest.approx(10.0, rel=1e-9)

@pytest.mark.parametrize("value", [-0.001, 100.001, 1e9, math.nan])
def test_encode_outside_range_reports_reason(value):
    key = rgb_scaled_key(0.0, 100.0, BLACK, WHITE)
    assert key.encode(value) is None
    assert isinstance(key.last_failure, ConversionError)
    assert key.failure_message

def test_decode_out_of_range_colour():
    key = rgb_scaled_key(0.0, 1.0, BLACK, Colour(0.5, 0.5, 0.5))
    assert key.decode(WHITE) is None
    assert "not within range" in key.failure_message

def test_decode_colour_off_the_line():
    key = rgb_scaled_key(0.0, 1.0, BLACK, WHITE)
    assert key.decode(RED) is None
    assert "not on a line" in key.failure_message

def test_decode_uses_tolerance():
    key = rgb_scaled_key(0.0, 1.0, BLACK, WHITE, tolerance=0.01)
    assert key.decode(Colour(0.5, 0.505, 0.5)) == pytest.approx(0.5, abs=0.01)

def test_contains_and_in_range():
    key = rgb_scaled_key(10.0, 20.0, BLACK, WHITE)
    assert key.contains(10.0)
    assert key.contains(20.0)
    assert not key.contains(9.99)
    assert key.in_range(Colour(0.3, 0.3, 0.3))

@pytest.mark.parametrize("args", [
    (10.0, 10.0, BLACK, WHITE),
    (10.0, 0.0, BLACK, WHITE),
    (0.0, 1.0, WHITE, WHITE),
    (0.0, math.inf, BLACK, WHITE),
])
def test_invalid_scales_rejected(args):
    with pytest.raises(ValueError):
        rgb_scaled_key(*args)

def test_log_scale_needs_positive_range():
    with pytest.raises(ValueError):
        rgb_log_scaled_key(0.0, 10.0, BLACK, WHITE)

def test_component_triples_must_have_three_entries():
    with pytest.raises(ValueError):
        ScaledKey(0.0, 1.0, (0.0, 0.0), (1.0, 1.0, 1.0))

def test_partial_compare():
    low = rgb_scaled_key(0.0, 10.0, BLACK, WHITE)
    high = rgb_scaled_key(20.0, 30.0, BLACK, WHITE)
    touching = rgb_scaled_key(10.0, 20.0, BLACK, WHITE)
    overlapping = rgb_scaled_key(5.0, 15.0, BLACK, WHITE)

    assert low.partial_compare(high) is PartialOrder.LESS_THAN
    assert high.partial_compare(low) is PartialOrder.MORE_THAN
    assert low.partial_compare(rgb_scaled_key(0.0, 10.0, BLACK, RED)) is PartialOrder.EQUAL_TO
    assert low.partial_compare(touching) is PartialOrder.INCOMPARABLE
    assert low.partial_compare(overlapping) is PartialOrder.INCOMPARABLE
    assert low < high

def test_repr_names_space_and_scale():
    key = rgb_log_scaled_key(1.0, 10.0, BLACK, WHITE)
    assert repr(key).startswith("RGBLogScaledKey<DOUBLE>")

def test_round_trip_with_uneven_component_spans():
    # green spans a hundredth of what red does
    low, high = Colour(0.2, 0.5, 0.0), Colour(0.9, 0.51, 0.3)
    key = rgb_scaled_key(0, 1000, low, high)
    for value in range(0, 1001, 7):
        assert key.decode(key.encode(value)) == value, key.failure_message

    key = rgb_scaled_key(0.0, 1000.0, low, high)
    for value in (0.0, 21.0, 333.3, 999.9, 1000.0):
        assert key.decode(key.encode(value)) == pytest.approx(value, abs=1e-9), key.failure_message

@pytest.mark.parametrize("value", [0.0, 0.25, 0.75, 1.0])
def test_hsb_hue_endpoint_at_full_turn(value):
    key = hsb_scaled_key(0.0, 1.0, (0.5, 1.0, 1.0), (1.0, 1.0, 1.0))
    assert key.decode(key.encode(value)) == pytest.approx(value, abs=1e-9), key.failure_message
    assert key.in_range(RED)

@pytest.mark.parametrize("value", [0.0, 0.5, 1.0])
def test_hsb_zero_brightness_endpoint(value):
    key = hsb_scaled_key(0.0, 1.0, (0.5, 1.0, 0.0), (0.5, 1.0, 1.0))
    assert key.decode(key.encode(value)) == pytest.approx(value, abs=1e-9), key.failure_message

def test_hsb_greys_still_checked_for_saturation():
    key = hsb_scaled_key(0.0, 1.0, (0.0, 1.0, 1.0), (0.5, 1.0, 1.0))
    assert key.decode(Colour(0.5, 0.5, 0.5)) is None
    assert "not within range" in key.failure_message

def test_hsb_colour_off_the_line():
    key = hsb_scaled_key(0.0, 1.0, (0.0, 1.0, 1.0), (0.5, 1.0, 0.5))
    assert key.decode(key.encode(0.5)) == pytest.approx(0.5)
    assert key.decode(Colour.from_hsb(0.25, 1.0, 1.0)) is None
    assert "not on a line" in key.failure_message
