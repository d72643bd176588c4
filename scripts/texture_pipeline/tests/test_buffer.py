"""
Tests for the pixel buffer data model.
"""

import unittest
import numpy as np

from ..buffer import (
    BufferSizeError, CLEAR, IndexedBuffer, Palette, Pixel, PixelBuffer, PixelFormat,
    PixelFormatError, Rect, RgbaBuffer, require_indexed, require_rgba, to_pixel,
)
from .helpers import indexed, ramp_palette


class TestPixelBuffer(unittest.TestCase):
    """Test cases for buffer construction and validation."""

    def test_blank_rgba_is_zeroed(self):
        buffer = RgbaBuffer.blank(3, 2)
        self.assertEqual(len(buffer.data), 3 * 2 * 4)
        self.assertEqual(buffer.pixels().shape, (2, 3, 4))
        self.assertFalse(buffer.pixels().any())

    def test_base_class_is_abstract(self):
        with self.assertRaises(TypeError):
            PixelBuffer(2, 2)

    def test_format_tags(self):
        self.assertEqual(RgbaBuffer.format, PixelFormat.RGBA32)
        self.assertEqual(IndexedBuffer.format, PixelFormat.INDEXED8)
        self.assertEqual(PixelFormat.RGBA32.bytes_per_pixel, 4)
        self.assertEqual(PixelFormat.INDEXED8.bytes_per_pixel, 1)

    def test_wrong_data_length(self):
        with self.assertRaises(BufferSizeError):
            RgbaBuffer(2, 2, bytearray(15))

    def test_non_positive_dimensions(self):
        with self.assertRaises(BufferSizeError):
            RgbaBuffer(0, 4)
        with self.assertRaises(BufferSizeError):
            IndexedBuffer(4, -1)

    def test_rgba_stride_must_match_width(self):
        with self.assertRaises(BufferSizeError):
            RgbaBuffer(2, 2, bytearray(24), stride=12)

    def test_indexed_stride_padding(self):
        data = bytearray([1, 2, 3, 99, 4, 5, 6, 99])
        buffer = IndexedBuffer(3, 2, data, stride=4)
        np.testing.assert_array_equal(buffer.pixels(), [[1, 2, 3], [4, 5, 6]])

    def test_bytearray_is_shared(self):
        data = bytearray(4 * 4)
        buffer = RgbaBuffer(2, 2, data)
        buffer.set_pixel(1, 0, (10, 20, 30, 40))
        self.assertEqual(list(data[4:8]), [10, 20, 30, 40])

    def test_bytes_are_copied(self):
        data = bytes(4 * 4)
        buffer = RgbaBuffer(2, 2, data)
        self.assertIsInstance(buffer.data, bytearray)
        buffer.set_pixel(0, 0, (1, 1, 1, 1))
        self.assertEqual(data[0], 0)

    def test_copy_is_independent(self):
        buffer = RgbaBuffer.filled(2, 2, (5, 6, 7, 8))
        clone = buffer.copy()
        clone.set_pixel(0, 0, (0, 0, 0, 0))
        self.assertEqual(buffer.get_pixel(0, 0), Pixel(5, 6, 7, 8))

    def test_to_pixels_flip(self):
        buffer = RgbaBuffer.from_array(np.array(
            [[[1, 1, 1, 255]], [[2, 2, 2, 255]]], dtype=np.uint8))
        self.assertEqual(buffer.to_pixels()[0].r, 1)
        self.assertEqual(buffer.to_pixels(flip_y=True)[0].r, 2)

    def test_from_array_rejects_bad_shape(self):
        with self.assertRaises(BufferSizeError):
            RgbaBuffer.from_array(np.zeros((2, 2, 3), dtype=np.uint8))
        with self.assertRaises(BufferSizeError):
            IndexedBuffer.from_array(np.zeros((2, 2, 1), dtype=np.uint8))


class TestIndexedConversion(unittest.TestCase):
    """Test cases for palette resolution."""

    def setUp(self):
        self.palette = ramp_palette()

    def test_to_rgba_resolves_palette(self):
        rgba = indexed([[0, 200]]).to_rgba(self.palette)
        self.assertEqual(rgba.get_pixel(0, 0), Pixel(0, 255, 0, 255))
        self.assertEqual(rgba.get_pixel(1, 0), Pixel(200, 55, 100, 255))

    def test_alpha_index_becomes_clear(self):
        rgba = indexed([[7, 8]]).to_rgba(self.palette, alpha_index=7)
        self.assertEqual(rgba.get_pixel(0, 0), CLEAR)
        self.assertEqual(rgba.get_pixel(1, 0).a, 255)

    def test_flip_y(self):
        rgba = indexed([[1], [2]]).to_rgba(self.palette, flip_y=True)
        self.assertEqual(rgba.get_pixel(0, 0).r, 2)
        self.assertEqual(rgba.get_pixel(0, 1).r, 1)

    def test_source_unchanged(self):
        source = indexed([[3, 4]])
        source.to_rgba(self.palette, alpha_index=3)
        np.testing.assert_array_equal(source.pixels(), [[3, 4]])


class TestPalette(unittest.TestCase):
    """Test cases for the colour table."""

    def test_from_rgb_bytes(self):
        palette = Palette.from_bytes(bytes(range(256)) * 3)
        self.assertEqual(palette.colors[0], Pixel(0, 1, 2, 255))
        self.assertEqual(len(palette.colors), Palette.SIZE)

    def test_from_rgba_bytes(self):
        palette = Palette.from_bytes(bytes([9, 8, 7, 6]) * 256)
        self.assertEqual(palette.colors[10], Pixel(9, 8, 7, 6))

    def test_rejects_wrong_length(self):
        with self.assertRaises(BufferSizeError):
            Palette.from_bytes(bytes(100))
        with self.assertRaises(BufferSizeError):
            Palette((CLEAR,) * 10)

    def test_grayscale_ramp(self):
        palette = Palette.grayscale()
        self.assertEqual(palette.colors[42], Pixel(42, 42, 42, 255))
        self.assertEqual(len(palette.to_rgb_bytes()), 768)


class TestHelpers(unittest.TestCase):
    """Test cases for colour coercion and format guards."""

    def test_to_pixel_rgb(self):
        self.assertEqual(to_pixel((1, 2, 3)), Pixel(1, 2, 3, 255))

    def test_to_pixel_rejects(self):
        with self.assertRaises(ValueError):
            to_pixel((1, 2))
        with self.assertRaises(ValueError):
            to_pixel((0, 0, 0, 300))

    def test_require_rgba(self):
        with self.assertRaises(PixelFormatError):
            require_rgba(IndexedBuffer(1, 1), "op")

    def test_require_indexed(self):
        with self.assertRaises(PixelFormatError):
            require_indexed(RgbaBuffer(1, 1), "op")


class TestRect(unittest.TestCase):
    """Test cases for rect arithmetic."""

    def test_edges(self):
        rect = Rect(2, 3, 4, 5)
        self.assertEqual((rect.x_min, rect.x_max, rect.y_min, rect.y_max), (2, 6, 3, 8))

    def test_flipped_vertical(self):
        rect = Rect(0, 16, 10, 12).flipped_vertical()
        self.assertEqual(rect.y_min, 28)
        self.assertEqual(rect.y_max, 16)
        self.assertEqual(rect.height, -12)

    def test_normalized(self):
        rect = Rect(64, 128, 32, 16).normalized(256, 256)
        self.assertEqual(rect, Rect(0.25, 0.5, 0.125, 0.0625))
        self.assertEqual(rect.to_dict(), {"x": 0.25, "y": 0.5, "w": 0.125, "h": 0.0625})


if __name__ == '__main__':
    unittest.main()
