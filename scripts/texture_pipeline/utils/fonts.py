"""
Glyph source backed by a Pillow font.
"""

from pathlib import Path
from typing import List, Optional, Union
from PIL import Image, ImageDraw, ImageFont
import numpy as np


class PilGlyphSource:
    """
    Rasterises consecutive characters of a Pillow font into fixed square cells.

    The defaults cover Latin-1 from the space character up. Coverage is 1
    where the rendered glyph is at least ``threshold`` bright and 0 elsewhere.
    """

    def __init__(self, font_path: Optional[Union[str, Path]] = None, font_size: int = 12,
                 glyph_dimension: int = 16, first_char: int = 32, glyph_count: int = 224,
                 threshold: int = 128):
        if font_path is not None:
            if not Path(font_path).exists():
                raise FileNotFoundError(f"Font file not found: {font_path}")
            self.font = ImageFont.truetype(str(font_path), font_size)
        else:
            self.font = ImageFont.load_default()

        self._dimension = glyph_dimension
        self._count = glyph_count
        self.first_char = first_char
        self.threshold = threshold

        self._widths: List[int] = []
        self._pixels: List[bytes] = []
        self._line_height = 0
        self._rasterise()

    @property
    def glyph_count(self) -> int:
        return self._count

    @property
    def glyph_dimension(self) -> int:
        return self._dimension

    @property
    def line_height(self) -> int:
        return self._line_height

    def glyph_width(self, index: int) -> int:
        return self._widths[index]

    def glyph_pixels(self, index: int) -> bytes:
        return self._pixels[index]

    def _rasterise(self) -> None:
        dimension = self._dimension
        tallest = 0

        for index in range(self._count):
            char = chr(self.first_char + index)
            cell = Image.new('L', (dimension, dimension), 0)
            ImageDraw.Draw(cell).text((0, 0), char, fill=255, font=self.font)

            coverage = (np.array(cell, dtype=np.uint8) >= self.threshold).astype(np.uint8)
            self._pixels.append(coverage.tobytes())

            advance = int(round(self.font.getlength(char)))
            self._widths.append(min(max(advance, 0), dimension))

            bbox = self.font.getbbox(char)
            tallest = max(tallest, bbox[3])

        self._line_height = min(max(tallest, 1), dimension)
