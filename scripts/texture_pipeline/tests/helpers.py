"""
Shared buffer builders for texture pipeline tests.
"""

import numpy as np

from ..buffer import IndexedBuffer, Palette, Pixel, RgbaBuffer


def solid(width: int, height: int, color=(128, 64, 32, 255)) -> RgbaBuffer:
    """Buffer filled with one colour."""
    return RgbaBuffer.filled(width, height, color)


def gray_rows(rows, alpha: int = 255) -> RgbaBuffer:
    """RGBA buffer whose r, g and b equal the given 2D intensity rows."""
    values = np.array(rows, dtype=np.uint8)
    array = np.empty(values.shape + (4,), dtype=np.uint8)
    array[..., 0] = values
    array[..., 1] = values
    array[..., 2] = values
    array[..., 3] = alpha
    return RgbaBuffer.from_array(array)


def checkerboard(width: int, height: int) -> RgbaBuffer:
    """Opaque black and white checkerboard."""
    ys, xs = np.mgrid[0:height, 0:width]
    return gray_rows(np.where((xs + ys) % 2 == 0, 255, 0))


def random_rgba(width: int, height: int, seed: int = 0) -> RgbaBuffer:
    rng = np.random.default_rng(seed)
    return RgbaBuffer.from_array(rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8))


def indexed(rows) -> IndexedBuffer:
    return IndexedBuffer.from_array(np.array(rows, dtype=np.uint8))


def ramp_palette() -> Palette:
    """Palette where index N maps to (N, 255 - N, N // 2, 255)."""
    return Palette(tuple(Pixel(i, 255 - i, i // 2, 255) for i in range(256)))


class FakeGlyphSource:
    """Glyphs whose top row is fully covered and everything else empty."""

    def __init__(self, count: int = 240, dimension: int = 16, line_height: int = 12):
        self._count = count
        self._dimension = dimension
        self._line_height = line_height

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
        return index % self._dimension + 1

    def glyph_pixels(self, index: int) -> bytes:
        dimension = self._dimension
        return bytes([1] * dimension + [0] * (dimension * (dimension - 1)))
