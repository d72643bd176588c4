"""
Utility modules for Pillow interop and glyph rasterisation.
"""

from .image import ImageUtils
from .fonts import PilGlyphSource

__all__ = [
    "ImageUtils",
    "PilGlyphSource",
]
