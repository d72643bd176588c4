"""
Border treatment for padded textures.

``dilate``, ``wrap_border`` and ``clamp_border`` mutate the caller's buffer
in place and return ``None``. ``add_border`` allocates a new, larger buffer.
"""

import logging
import numpy as np

from ..buffer import PixelBuffer, RgbaBuffer, BufferSizeError, require_rgba


logger = logging.getLogger(__name__)

# (dx, dy) from target to source, applied in increasing precedence. Sources
# are visited in row-major order, so the later source overwrites the earlier.
_DILATE_SOURCES = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0), (1, 0),
    (-1, 1), (0, 1), (1, 1),
)


def _shift(array: np.ndarray, dx: int, dy: int, fill) -> np.ndarray:
    """Return ``out`` where ``out[y, x] == array[y + dy, x + dx]``, ``fill`` outside."""
    height, width = array.shape[:2]
    out = np.full_like(array, fill)
    dst_y = slice(max(0, -dy), min(height, height - dy))
    dst_x = slice(max(0, -dx), min(width, width - dx))
    src_y = slice(max(0, dy), min(height, height + dy))
    src_x = slice(max(0, dx), min(width, width + dx))
    out[dst_y, dst_x] = array[src_y, src_x]
    return out


def dilate(buffer: PixelBuffer) -> None:
    """
    Bleed opaque colour one pixel into fully transparent neighbours.

    Every pixel with non-zero alpha blends its colour into each of its eight
    neighbours whose alpha is zero. The neighbour averages with its own
    colour from before the pass (or takes the source colour outright when it
    was clear) and keeps alpha 0. Pixels filled by this pass never act as
    sources, so each call reaches exactly one ring. In-place.
    """
    target = require_rgba(buffer, "dilate")
    pixels = target.pixels()
    before = pixels.copy()

    empty = before[..., 3] == 0
    before_rgb = before[..., :3].astype(np.int32)
    has_color = before_rgb.any(axis=2)
    count = np.where(has_color, 2, 1)[..., None]
    opaque = ~empty

    filled_rgb = before_rgb.copy()
    touched = np.zeros(empty.shape, dtype=bool)
    for dx, dy in _DILATE_SOURCES:
        source_rgb = _shift(before_rgb, dx, dy, 0)
        source_opaque = _shift(opaque, dx, dy, False)
        hit = empty & source_opaque
        if not hit.any():
            continue
        blended = (source_rgb + before_rgb) // count
        filled_rgb = np.where(hit[..., None], blended, filled_rgb)
        touched |= hit

    if touched.any():
        pixels[..., :3][touched] = filled_rgb[touched].astype(np.uint8)
        pixels[..., 3][touched] = 0
    logger.debug(f"Dilated {int(touched.sum())} pixels")


def _check_border(target: RgbaBuffer, border: int) -> None:
    if border < 0:
        raise BufferSizeError(f"Border must not be negative, got {border}")
    if border * 2 > target.width or border * 2 > target.height:
        raise BufferSizeError(
            f"Border {border} does not fit a {target.width}x{target.height} buffer"
        )


def wrap_border(buffer: PixelBuffer, border: int, left_right: bool = True,
                top_bottom: bool = True) -> None:
    """
    Copy each edge's interior strip into the border on the opposite side.

    Left-right wrapping covers the interior rows only; top-bottom wrapping
    then copies whole rows, corners included. In-place.

    Args:
        buffer: RGBA buffer whose outer ``border`` pixels are padding
        border: Border width in pixels
        left_right: Wrap the left and right borders
        top_bottom: Wrap the top and bottom borders
    """
    target = require_rgba(buffer, "wrap_border")
    _check_border(target, border)
    if border == 0:
        return

    pixels = target.pixels()
    width, height = target.width, target.height
    inner = slice(border, height - border)

    if left_right:
        from_right = pixels[inner, width - 2 * border:width - border].copy()
        from_left = pixels[inner, border:2 * border].copy()
        pixels[inner, :border] = from_right
        pixels[inner, width - border:] = from_left

    if top_bottom:
        from_bottom = pixels[height - 2 * border:height - border].copy()
        from_top = pixels[border:2 * border].copy()
        pixels[:border] = from_bottom
        pixels[height - border:] = from_top


def clamp_border(buffer: PixelBuffer, border: int, left_right: bool = True,
                 top_bottom: bool = True, top_left: bool = True, top_right: bool = True,
                 bottom_left: bool = True, bottom_right: bool = True) -> None:
    """
    Replicate the outermost interior pixels across the border.

    Sides copy the adjacent interior pixel of each row or column. The two top
    corners take the interior pixel one row below the interior's top edge;
    the bottom corners take the interior's bottom corner pixels. In-place.
    """
    target = require_rgba(buffer, "clamp_border")
    _check_border(target, border)
    if border == 0:
        return

    pixels = target.pixels()
    width, height = target.width, target.height
    b = border
    inner_rows = slice(b, height - b)
    inner_cols = slice(b, width - b)

    if left_right:
        left = pixels[inner_rows, b].copy()
        right = pixels[inner_rows, width - b - 1].copy()
        pixels[inner_rows, :b] = left[:, None]
        pixels[inner_rows, width - b:] = right[:, None]

    if top_bottom:
        top = pixels[b, inner_cols].copy()
        bottom = pixels[height - b - 1, inner_cols].copy()
        pixels[:b, inner_cols] = top[None, :]
        pixels[height - b:, inner_cols] = bottom[None, :]

    corner_row = min(b + 1, height - 1)
    if top_left:
        pixels[:b, :b] = pixels[corner_row, b].copy()
    if top_right:
        pixels[:b, width - b:] = pixels[corner_row, width - b - 1].copy()
    if bottom_left:
        pixels[height - b:, :b] = pixels[height - b - 1, b].copy()
    if bottom_right:
        pixels[height - b:, width - b:] = pixels[height - b - 1, width - b - 1].copy()


def add_border(buffer: PixelBuffer, border: int) -> RgbaBuffer:
    """
    Pad an RGBA buffer with ``border`` clear pixels on every side.

    Copy-producing; the source lands at ``(border, border)``.
    """
    source = require_rgba(buffer, "add_border")
    if border < 0:
        raise BufferSizeError(f"Border must not be negative, got {border}")

    src = source.pixels()
    result = np.zeros((source.height + border * 2, source.width + border * 2, 4), dtype=np.uint8)
    result[border:border + source.height, border:border + source.width] = src
    return RgbaBuffer.from_array(result)
