"""
Bump and normal map extraction.
"""

import logging
from typing import Tuple
import numpy as np

from ..buffer import PixelBuffer, RgbaBuffer, require_rgba
from .convolution import SOBEL_X, SOBEL_Y, convolve
from .intensity import average_intensity, average_intensity_values


logger = logging.getLogger(__name__)


def bump_map(buffer: PixelBuffer) -> RgbaBuffer:
    """
    Sobel bump map of the average intensity image.

    The horizontal and vertical Sobel responses are added per channel,
    clamped to [0, 255] and written with opaque alpha. Copy-producing.
    """
    source = require_rgba(buffer, "bump_map")
    intensity = average_intensity(source)
    horizontal = convolve(intensity, SOBEL_X).pixels().astype(np.int32)
    vertical = convolve(intensity, SOBEL_Y).pixels().astype(np.int32)

    result = np.empty(horizontal.shape, dtype=np.uint8)
    result[..., :3] = np.clip(horizontal[..., :3] + vertical[..., :3], 0, 255)
    result[..., 3] = 255
    return RgbaBuffer.from_array(result)


def _surface_normals(source: RgbaBuffer, strength: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Unit normals from edge-clamped neighbour intensities.

    Heights are ``((r + g + b) // 3) / 255``. Gradient vectors
    ``(1, 0, (right - left) * strength)`` and ``(0, 1, (bottom - top) * strength)``
    are crossed and normalized.
    """
    heights = average_intensity_values(source.pixels()).astype(np.float32) / np.float32(255)
    padded = np.pad(heights, 1, mode="edge")

    left = padded[1:-1, :-2]
    right = padded[1:-1, 2:]
    top = padded[:-2, 1:-1]
    bottom = padded[2:, 1:-1]

    strength = np.float32(strength)
    slope_x = (right - left) * strength
    slope_y = (bottom - top) * strength

    # cross((1, 0, sx), (0, 1, sy)) == (-sx, -sy, 1)
    length = np.sqrt(slope_x * slope_x + slope_y * slope_y + np.float32(1))
    return -slope_x / length, -slope_y / length, np.float32(1) / length


def _to_byte(values: np.ndarray) -> np.ndarray:
    return np.clip(np.trunc(values), 0, 255).astype(np.uint8)


def normal_map(buffer: PixelBuffer, strength: float = 1.0) -> RgbaBuffer:
    """
    Engine-packed normal map.

    Alpha carries ``(nx + 1) * 127.5`` and r, g, b all carry
    ``255 - (ny + 1) * 127.5``, both truncated; nz is discarded.
    Neighbour lookups clamp to the image edge. Copy-producing.

    Args:
        buffer: Original RGBA source (not a bump map)
        strength: Gradient multiplier

    Returns:
        New RGBA buffer with the packed normals
    """
    source = require_rgba(buffer, "normal_map")
    nx, ny, _ = _surface_normals(source, strength)

    packed_x = _to_byte((nx + np.float32(1)) * np.float32(127.5))
    packed_y = _to_byte(np.float32(255) - (ny + np.float32(1)) * np.float32(127.5))

    result = np.empty((source.height, source.width, 4), dtype=np.uint8)
    result[..., 0] = packed_y
    result[..., 1] = packed_y
    result[..., 2] = packed_y
    result[..., 3] = packed_x
    logger.debug(f"Packed normal map {source.width}x{source.height} at strength {strength}")
    return RgbaBuffer.from_array(result)


def normal_map_rgb(buffer: PixelBuffer, strength: float = 1.0) -> RgbaBuffer:
    """
    Standard tangent-space normal map with x, y, z in r, g, b.

    Uses the same gradients as ``normal_map`` and the same inverted y, with
    opaque alpha. Copy-producing.
    """
    source = require_rgba(buffer, "normal_map_rgb")
    nx, ny, nz = _surface_normals(source, strength)

    result = np.empty((source.height, source.width, 4), dtype=np.uint8)
    result[..., 0] = _to_byte((nx + np.float32(1)) * np.float32(127.5))
    result[..., 1] = _to_byte(np.float32(255) - (ny + np.float32(1)) * np.float32(127.5))
    result[..., 2] = _to_byte((nz + np.float32(1)) * np.float32(127.5))
    result[..., 3] = 255
    return RgbaBuffer.from_array(result)
