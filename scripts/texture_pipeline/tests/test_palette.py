"""
Tests for metal palette tinting and emission maps.
"""

import unittest
import numpy as np

from ..buffer import Pixel, PixelFormatError, RgbaBuffer
from ..processing.palette import (
    DEFAULT_SWAPS, METAL_SWAPS, MetalType, emission_map, get_metal_colors, tint,
)
from .helpers import indexed, ramp_palette


class TestMetalColors(unittest.TestCase):
    """Test cases for swap table lookup."""

    def test_every_table_has_sixteen_entries(self):
        for metal_type, swaps in METAL_SWAPS.items():
            self.assertEqual(len(swaps), 16, metal_type)

    def test_unlisted_type_is_identity(self):
        self.assertEqual(get_metal_colors(MetalType.NONE), DEFAULT_SWAPS)
        self.assertEqual(get_metal_colors(MetalType.STEEL), DEFAULT_SWAPS)

    def test_lookup_by_name(self):
        self.assertEqual(get_metal_colors("iron"), METAL_SWAPS[MetalType.IRON])

    def test_unknown_name(self):
        with self.assertRaises(ValueError):
            get_metal_colors("bronze")


class TestTint(unittest.TestCase):
    """Test cases for in-place tinting."""

    def test_iron_remaps_range(self):
        buffer = indexed([[0x70, 0x75, 0x7F, 0x10]])
        tint(buffer, MetalType.IRON)
        np.testing.assert_array_equal(buffer.pixels(), [[0x77, 0x59, 0x5F, 0x10]])

    def test_indices_outside_range_untouched(self):
        values = [i for i in range(256) if not 0x70 <= i <= 0x7F]
        buffer = indexed([values])
        tint(buffer, MetalType.DAEDRIC)
        np.testing.assert_array_equal(buffer.pixels(), [values])

    def test_every_range_index(self):
        buffer = indexed([list(range(0x70, 0x80))])
        tint(buffer, MetalType.ORCISH)
        np.testing.assert_array_equal(buffer.pixels()[0], METAL_SWAPS[MetalType.ORCISH])

    def test_steel_is_identity(self):
        buffer = indexed([list(range(0x70, 0x80))])
        tint(buffer, MetalType.STEEL)
        np.testing.assert_array_equal(buffer.pixels()[0], list(range(0x70, 0x80)))

    def test_rejects_rgba(self):
        with self.assertRaises(PixelFormatError):
            tint(RgbaBuffer(2, 2), MetalType.IRON)


class TestEmissionMap(unittest.TestCase):
    """Test cases for emission masks."""

    def test_only_emissive_index_keeps_colour(self):
        result = emission_map(indexed([[5, 6], [6, 5]]), ramp_palette(), 5)
        self.assertEqual(result.get_pixel(0, 0), Pixel(5, 250, 2, 255))
        self.assertEqual(result.get_pixel(1, 0), Pixel(0, 0, 0, 255))
        self.assertEqual(result.get_pixel(1, 1), Pixel(5, 250, 2, 255))

    def test_rejects_rgba(self):
        with self.assertRaises(PixelFormatError):
            emission_map(RgbaBuffer(1, 1), ramp_palette(), 0)


if __name__ == '__main__':
    unittest.main()
