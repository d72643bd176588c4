"""
Tests for Pillow interop.
"""

import shutil
import tempfile
import unittest
from pathlib import Path
from PIL import Image
import numpy as np

from ..buffer import IndexedBuffer, Palette, Pixel, RgbaBuffer
from ..utils.image import ImageUtils
from .helpers import indexed, ramp_palette, random_rgba


class TestImageUtils(unittest.TestCase):
    """Test cases for ImageUtils."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_rgba_round_trip(self):
        buffer = random_rgba(5, 3)
        image = ImageUtils.to_image(buffer)
        self.assertEqual(image.mode, "RGBA")
        self.assertEqual(image.size, (5, 3))
        np.testing.assert_array_equal(ImageUtils.to_rgba_buffer(image).pixels(), buffer.pixels())

    def test_rgb_image_gets_alpha(self):
        buffer = ImageUtils.to_rgba_buffer(Image.new("RGB", (2, 2), (1, 2, 3)))
        self.assertEqual(buffer.get_pixel(1, 1), Pixel(1, 2, 3, 255))

    def test_indexed_round_trip(self):
        palette = ramp_palette()
        image = ImageUtils.to_image(indexed([[0, 7], [200, 255]]), palette)
        self.assertEqual(image.mode, "P")

        buffer, loaded = ImageUtils.to_indexed_buffer(image)
        np.testing.assert_array_equal(buffer.pixels(), [[0, 7], [200, 255]])
        self.assertEqual(loaded.colors[200], palette.colors[200])

    def test_indexed_without_palette_is_grayscale(self):
        image = ImageUtils.to_image(IndexedBuffer.filled(2, 2, 9))
        self.assertEqual(image.mode, "L")

    def test_to_indexed_requires_palette_mode(self):
        with self.assertRaises(ValueError):
            ImageUtils.to_indexed_buffer(Image.new("RGBA", (1, 1)))

    def test_save_png_appends_suffix(self):
        path = ImageUtils.save_png(random_rgba(2, 2), self.temp_dir / "debug")
        self.assertEqual(path, self.temp_dir / "debug.png")
        self.assertTrue(path.exists())

        loaded = ImageUtils.load_rgba(path)
        self.assertEqual(loaded.size, (2, 2))

    def test_save_png_keeps_suffix(self):
        path = ImageUtils.save_png(random_rgba(2, 2), self.temp_dir / "debug.PNG")
        self.assertEqual(path.name, "debug.PNG")

    def test_save_webp_swaps_suffix(self):
        path = ImageUtils.save_buffer(random_rgba(3, 2), self.temp_dir / "debug.png", "webp")
        self.assertEqual(path, self.temp_dir / "debug.webp")
        with Image.open(path) as image:
            self.assertEqual(image.format, "WEBP")
            self.assertEqual(image.size, (3, 2))

    def test_save_buffer_rejects_unknown_format(self):
        with self.assertRaises(ValueError):
            ImageUtils.save_buffer(random_rgba(2, 2), self.temp_dir / "debug", "BMP")
        self.assertFalse(any(self.temp_dir.iterdir()))

    def test_load_indexed_file(self):
        palette = Palette.grayscale()
        path = ImageUtils.save_png(indexed([[3, 4]]), self.temp_dir / "indexed.png", palette)
        buffer, loaded = ImageUtils.load_indexed(path)
        np.testing.assert_array_equal(buffer.pixels(), [[3, 4]])
        self.assertEqual(loaded.colors[4], Pixel(4, 4, 4, 255))

    def test_load_image_bad_bytes(self):
        with self.assertRaises(ValueError):
            ImageUtils.load_image(b"not an image")

    def test_load_image_passthrough(self):
        image = Image.new("RGBA", (1, 1))
        self.assertIs(ImageUtils.load_image(image), image)

    def test_buffer_type(self):
        self.assertIsInstance(ImageUtils.to_rgba_buffer(Image.new("L", (1, 1))), RgbaBuffer)


if __name__ == '__main__':
    unittest.main()
