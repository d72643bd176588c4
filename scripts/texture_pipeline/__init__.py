"""
Texture Pipeline

Pixel-exact texture preparation for palette-based game art: bicubic resizing,
intensity conversion, convolution, bump and normal maps, border treatment for
tiling textures, metal palette tints and font glyph atlases.
"""

__version__ = "0.1.0"
__author__ = "Texture Pipeline Development Team"

from .config import ProcessingConfig
from .buffer import (
    PixelFormat, Pixel, PixelBuffer, IndexedBuffer, RgbaBuffer, Palette, Rect,
    ImageProcessingError, PixelFormatError, BufferSizeError, KernelSizeError,
)
from .pipeline import TexturePipeline, TextureSettings, TextureResult, PipelineError

__all__ = [
    "ProcessingConfig",
    "PixelFormat",
    "Pixel",
    "PixelBuffer",
    "IndexedBuffer",
    "RgbaBuffer",
    "Palette",
    "Rect",
    "ImageProcessingError",
    "PixelFormatError",
    "BufferSizeError",
    "KernelSizeError",
    "TexturePipeline",
    "TextureSettings",
    "TextureResult",
    "PipelineError",
]
