"""
Tests for font glyph atlas packing.
"""

import json
import shutil
import tempfile
import unittest
from pathlib import Path
from PIL import Image

from ..buffer import BufferSizeError, CLEAR, Pixel
from ..processing.glyph_atlas import ATLAS_DIMENSION, get_glyph_colors, pack_atlas
from ..utils.fonts import PilGlyphSource
from .helpers import FakeGlyphSource


BACK = (10, 10, 10, 255)
TEXT = (250, 240, 230, 255)


class TestGlyphColors(unittest.TestCase):
    """Test cases for single glyph rendering."""

    def test_colours_and_rect(self):
        cell, rect = get_glyph_colors(FakeGlyphSource(), 3, BACK, TEXT)
        self.assertEqual(cell.size, (16, 16))
        self.assertEqual(cell.get_pixel(5, 0), Pixel(*TEXT))
        self.assertEqual(cell.get_pixel(5, 1), Pixel(*BACK))
        self.assertEqual((rect.x, rect.y, rect.width, rect.height), (0, 0, 4, 12))

    def test_wrong_coverage_length(self):
        source = FakeGlyphSource()
        source.glyph_pixels = lambda index: bytes(10)
        with self.assertRaises(BufferSizeError):
            get_glyph_colors(source, 0, BACK, TEXT)


class TestPackAtlas(unittest.TestCase):
    """Test cases for atlas packing."""

    def setUp(self):
        self.result = pack_atlas(FakeGlyphSource(), BACK, TEXT)

    def test_atlas_dimensions(self):
        self.assertEqual(self.result.atlas.size, (ATLAS_DIMENSION, ATLAS_DIMENSION))
        self.assertEqual(len(self.result.rects), 240)

    def test_first_rect_is_flipped_and_normalized(self):
        rect = self.result.rects[0]
        self.assertEqual(rect.x_min, 0)
        self.assertAlmostEqual(rect.y_min, 12 / 256)
        self.assertAlmostEqual(rect.y_max, 0)
        self.assertAlmostEqual(rect.x_max, 1 / 256)

    def test_wraps_to_next_row(self):
        rect = self.result.rects[16]
        self.assertEqual(rect.x, 0)
        self.assertAlmostEqual(rect.y_min, 28 / 256)
        self.assertAlmostEqual(rect.y_max, 16 / 256)

        rect = self.result.rects[17]
        self.assertAlmostEqual(rect.x, 16 / 256)

    def test_cells_placed_top_down(self):
        atlas = self.result.atlas
        self.assertEqual(atlas.get_pixel(17, 16), Pixel(*TEXT))
        self.assertEqual(atlas.get_pixel(17, 17), Pixel(*BACK))

    def test_unused_area_stays_clear(self):
        self.assertEqual(self.result.atlas.get_pixel(0, 250), CLEAR)

    def test_metadata(self):
        self.assertEqual(self.result.metadata["glyph_dimension"], 16)
        self.assertEqual(self.result.metadata["line_height"], 12)

    def test_overflow(self):
        with self.assertRaises(BufferSizeError):
            pack_atlas(FakeGlyphSource(count=257), BACK, TEXT)

    def test_cell_larger_than_atlas(self):
        with self.assertRaises(BufferSizeError):
            pack_atlas(FakeGlyphSource(count=1, dimension=32), BACK, TEXT, atlas_dimension=16)

    def test_exact_fit(self):
        result = pack_atlas(FakeGlyphSource(count=256), BACK, TEXT)
        self.assertAlmostEqual(result.rects[-1].x, 240 / 256)
        self.assertAlmostEqual(result.rects[-1].y_max, 240 / 256)


class TestGlyphAtlasOutput(unittest.TestCase):
    """Test cases for saving atlases and rect maps."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.result = pack_atlas(FakeGlyphSource(count=20), BACK, TEXT)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_save_atlas(self):
        path = self.result.save_atlas(self.temp_dir / "font")
        self.assertEqual(path.suffix, ".png")
        with Image.open(path) as image:
            self.assertEqual(image.size, (256, 256))
            self.assertEqual(image.mode, "RGBA")

    def test_save_rect_map(self):
        path = self.temp_dir / "font.json"
        self.result.save_rect_map(path)
        with open(path) as f:
            data = json.load(f)

        self.assertEqual(len(data["glyphs"]), 20)
        self.assertEqual(data["meta"]["count"], 20)
        self.assertEqual(data["meta"]["size"], {"w": 256, "h": 256})
        self.assertEqual(data["meta"]["glyph_dimension"], 16)
        self.assertAlmostEqual(data["glyphs"][0]["h"], -12 / 256)


class TestPilGlyphSource(unittest.TestCase):
    """Test cases for the Pillow-backed glyph source."""

    def test_default_font(self):
        source = PilGlyphSource(glyph_count=95)
        self.assertEqual(source.glyph_count, 95)
        self.assertEqual(source.glyph_dimension, 16)
        self.assertTrue(1 <= source.line_height <= 16)

        total = 0
        for index in range(source.glyph_count):
            pixels = source.glyph_pixels(index)
            self.assertEqual(len(pixels), 256)
            self.assertTrue(0 <= source.glyph_width(index) <= 16)
            total += sum(pixels)
        self.assertGreater(total, 0)

    def test_space_is_empty(self):
        source = PilGlyphSource(glyph_count=1)
        self.assertEqual(sum(source.glyph_pixels(0)), 0)

    def test_packs_into_atlas(self):
        result = pack_atlas(PilGlyphSource(), BACK, TEXT)
        self.assertEqual(len(result.rects), 224)

    def test_missing_font(self):
        with self.assertRaises(FileNotFoundError):
            PilGlyphSource(font_path="/nonexistent/font.ttf")


if __name__ == '__main__':
    unittest.main()
