"""
Bicubic resampling of RGBA buffers.
"""

import logging
import math
from typing import Tuple
import numpy as np

from ..buffer import PixelBuffer, RgbaBuffer, BufferSizeError, require_rgba


logger = logging.getLogger(__name__)

# Absorbs floating point drift in the 16-tap sum so flat fields stay flat
# after truncation.
TRUNCATION_TOLERANCE = 1e-6


def bicubic_weight(t: float) -> float:
    """
    Piecewise cubic (B-spline) weight.

    Zero for ``|t| > 2``; continuous at 0, 1 and 2.
    """
    if t > 2.0:
        return 0.0

    tm1 = t - 1.0
    tp1 = t + 1.0
    tp2 = t + 2.0

    a = 0.0 if tp2 <= 0.0 else tp2 * tp2 * tp2
    b = 0.0 if tp1 <= 0.0 else tp1 * tp1 * tp1
    c = 0.0 if t <= 0.0 else t * t * t
    d = 0.0 if tm1 <= 0.0 else tm1 * tm1 * tm1

    return (a - 4.0 * b + 6.0 * c - 4.0 * d) / 6.0


def _axis_taps(src_size: int, dst_size: int, mirror_offset: bool) -> Tuple[np.ndarray, np.ndarray]:
    """
    Source indices and weights for every destination coordinate on one axis.

    Returns (taps, weights), both shaped (dst_size, 4). Tap indices are
    clamped to the source edge.
    """
    factor = src_size / dst_size
    taps = np.zeros((dst_size, 4), dtype=np.intp)
    weights = np.zeros((dst_size, 4), dtype=np.float64)
    last = src_size - 1

    for i in range(dst_size):
        origin = i * factor - 0.5
        base = math.floor(origin)
        frac = origin - base
        for k, n in enumerate(range(-1, 3)):
            # Rows weigh (frac - n), columns weigh (n - frac).
            t = (frac - n) if mirror_offset else (n - frac)
            weights[i, k] = bicubic_weight(t)
            taps[i, k] = min(max(base + n, 0), last)

    return taps, weights


def resize(buffer: PixelBuffer, new_width: int, new_height: int) -> RgbaBuffer:
    """
    Resize an RGBA buffer with a 4x4 bicubic kernel.

    Copy-producing: the source is left untouched.

    Args:
        buffer: RGBA32 source buffer
        new_width: Destination width in pixels
        new_height: Destination height in pixels

    Returns:
        New RGBA buffer of the requested size

    Raises:
        PixelFormatError: If the source is indexed
        BufferSizeError: If the target size is not positive
    """
    source = require_rgba(buffer, "resize")
    if new_width <= 0 or new_height <= 0:
        raise BufferSizeError(f"Target size must be positive, got {new_width}x{new_height}")

    logger.debug(f"Bicubic resize {source.width}x{source.height} -> {new_width}x{new_height}")

    src = source.pixels().astype(np.float64)
    row_taps, row_weights = _axis_taps(source.height, new_height, mirror_offset=True)
    col_taps, col_weights = _axis_taps(source.width, new_width, mirror_offset=False)

    result = np.zeros((new_height, new_width, 4), dtype=np.float64)
    for n in range(4):
        rows = src[row_taps[:, n]]
        for m in range(4):
            k = row_weights[:, n][:, None, None] * col_weights[:, m][None, :, None]
            result += k * rows[:, col_taps[:, m]]

    # Channel values are truncated, never rounded.
    result = np.floor(result + TRUNCATION_TOLERANCE)
    return RgbaBuffer.from_array(np.clip(result, 0, 255).astype(np.uint8))
