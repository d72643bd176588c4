"""
Geometric and colour transforms on RGBA buffers.

``rotate`` and ``flip`` return new buffers. ``negative``, ``insert`` and
``copy_region`` write into a caller-owned buffer.
"""

from typing import Tuple
import numpy as np

from ..buffer import PixelBuffer, RgbaBuffer, BufferSizeError, require_rgba


def rotate(buffer: PixelBuffer) -> RgbaBuffer:
    """Rotate 90 degrees clockwise (counter-clockwise when rows run bottom-up)."""
    source = require_rgba(buffer, "rotate")
    return RgbaBuffer.from_array(np.rot90(source.pixels(), k=-1))


def flip(buffer: PixelBuffer) -> RgbaBuffer:
    """Flip horizontally and vertically."""
    source = require_rgba(buffer, "flip")
    return RgbaBuffer.from_array(source.pixels()[::-1, ::-1])


def negative(buffer: PixelBuffer) -> None:
    """Invert r, g and b in place; alpha is kept."""
    target = require_rgba(buffer, "negative")
    pixels = target.pixels()
    pixels[..., :3] = 255 - pixels[..., :3]


def copy_region(src: PixelBuffer, dst: PixelBuffer, src_pos: Tuple[int, int],
                dst_pos: Tuple[int, int], size: Tuple[int, int]) -> None:
    """
    Copy a ``size`` block from ``src`` at ``src_pos`` into ``dst`` at ``dst_pos``.

    Both rectangles must lie inside their buffers.
    """
    source = require_rgba(src, "copy_region")
    target = require_rgba(dst, "copy_region")
    width, height = size
    sx, sy = src_pos
    dx, dy = dst_pos

    if width < 0 or height < 0:
        raise BufferSizeError(f"Copy size must not be negative, got {width}x{height}")
    if sx < 0 or sy < 0 or sx + width > source.width or sy + height > source.height:
        raise BufferSizeError(f"Source block {size} at {src_pos} exceeds {source.size}")
    if dx < 0 or dy < 0 or dx + width > target.width or dy + height > target.height:
        raise BufferSizeError(f"Destination block {size} at {dst_pos} exceeds {target.size}")

    block = source.pixels()[sy:sy + height, sx:sx + width].copy()
    target.pixels()[dy:dy + height, dx:dx + width] = block


def insert(src: PixelBuffer, dst: PixelBuffer, x: int, y: int) -> None:
    """Paste the whole of ``src`` into ``dst`` with its top-left at (x, y)."""
    copy_region(src, dst, (0, 0), (x, y), (src.width, src.height))
