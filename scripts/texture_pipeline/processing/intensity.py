"""
Intensity reductions: perceptual grayscale and plain channel averaging.
"""

import numpy as np

from ..buffer import PixelBuffer, RgbaBuffer, require_rgba


LUMA_WEIGHTS = (0.30, 0.59, 0.11)


def grayscale(buffer: PixelBuffer) -> RgbaBuffer:
    """
    Luma grayscale, ``round(0.30 r + 0.59 g + 0.11 b)`` with alpha preserved.

    Copy-producing. Raises PixelFormatError for indexed input.
    """
    source = require_rgba(buffer, "grayscale")
    src = source.pixels()
    channels = src[..., :3].astype(np.float64)

    luma = (channels[..., 0] * LUMA_WEIGHTS[0]
            + channels[..., 1] * LUMA_WEIGHTS[1]
            + channels[..., 2] * LUMA_WEIGHTS[2])
    gray = np.clip(np.floor(luma + 0.5), 0, 255).astype(np.uint8)

    result = np.empty_like(src)
    result[..., 0] = gray
    result[..., 1] = gray
    result[..., 2] = gray
    result[..., 3] = src[..., 3]
    return RgbaBuffer.from_array(result)


def average_intensity_values(src: np.ndarray) -> np.ndarray:
    """Integer ``(r + g + b) // 3`` for an (H, W, 4) array."""
    return src[..., :3].astype(np.int32).sum(axis=2) // 3


def average_intensity(buffer: PixelBuffer) -> RgbaBuffer:
    """
    Average intensity ``(r + g + b) // 3`` with alpha preserved.

    Used ahead of edge and bump extraction. Copy-producing; raises
    PixelFormatError for indexed input.
    """
    source = require_rgba(buffer, "average_intensity")
    src = source.pixels()
    avg = average_intensity_values(src).astype(np.uint8)

    result = np.empty_like(src)
    result[..., 0] = avg
    result[..., 1] = avg
    result[..., 2] = avg
    result[..., 3] = src[..., 3]
    return RgbaBuffer.from_array(result)
