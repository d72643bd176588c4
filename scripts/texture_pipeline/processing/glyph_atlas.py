"""
Font glyph atlas packing.

Glyphs come from a ``GlyphSource`` collaborator and are laid out in fixed
square cells, left to right and top to bottom, inside a square RGBA atlas.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Protocol, Tuple, Union
import numpy as np

from ..buffer import BufferSizeError, ColorLike, Rect, RgbaBuffer, to_pixel
from ..utils.image import ImageUtils


logger = logging.getLogger(__name__)

ATLAS_DIMENSION = 256


class GlyphSource(Protocol):
    """Fixed-cell glyph provider."""

    @property
    def glyph_count(self) -> int: ...

    @property
    def glyph_dimension(self) -> int: ...

    @property
    def line_height(self) -> int: ...

    def glyph_width(self, index: int) -> int: ...

    def glyph_pixels(self, index: int) -> bytes: ...


@dataclass
class GlyphAtlasResult:
    """Packed atlas and one UV rect per glyph."""
    atlas: RgbaBuffer
    rects: List[Rect]
    metadata: Dict[str, Any] = field(default_factory=dict)

    def save_atlas(self, path: Union[str, Path]) -> Path:
        """Save the atlas as PNG."""
        return ImageUtils.save_png(self.atlas, path)

    def save_rect_map(self, path: Union[str, Path]) -> None:
        """Save glyph rects to JSON."""
        atlas_data = {
            "glyphs": [rect.to_dict() for rect in self.rects],
            "meta": {
                "size": {"w": self.atlas.width, "h": self.atlas.height},
                "format": self.atlas.format.value,
                "count": len(self.rects),
                **self.metadata
            }
        }
        with open(path, 'w') as f:
            json.dump(atlas_data, f, indent=2)


def get_glyph_colors(source: GlyphSource, index: int, back_color: ColorLike,
                     text_color: ColorLike) -> Tuple[RgbaBuffer, Rect]:
    """
    Render one glyph cell.

    Non-zero coverage bytes take ``text_color``, zero bytes ``back_color``.

    Returns:
        (cell buffer, pixel rect of advance width by line height)
    """
    dimension = source.glyph_dimension
    coverage = np.frombuffer(bytes(source.glyph_pixels(index)), dtype=np.uint8)
    if coverage.size != dimension * dimension:
        raise BufferSizeError(
            f"Glyph {index} has {coverage.size} coverage bytes, expected {dimension * dimension}"
        )

    coverage = coverage.reshape(dimension, dimension)
    colors = np.where(coverage[..., None] > 0,
                      np.array(to_pixel(text_color), dtype=np.uint8),
                      np.array(to_pixel(back_color), dtype=np.uint8))
    rect = Rect(0, 0, source.glyph_width(index), source.line_height)
    return RgbaBuffer.from_array(colors), rect


def pack_atlas(source: GlyphSource, back_color: ColorLike, text_color: ColorLike,
               atlas_dimension: int = ATLAS_DIMENSION) -> GlyphAtlasResult:
    """
    Pack every glyph into a square atlas.

    Cells are placed without spacing and wrap to the next row when the next
    cell would cross the right edge. Rects are normalized to [0, 1] with the
    vertical axis flipped, so ``y_min`` is the glyph's bottom edge.

    Raises:
        BufferSizeError: If the glyphs do not fit the atlas
    """
    dimension = source.glyph_dimension
    if dimension <= 0 or dimension > atlas_dimension:
        raise BufferSizeError(f"Glyph cell {dimension} does not fit a {atlas_dimension} atlas")

    atlas = RgbaBuffer.blank(atlas_dimension, atlas_dimension)
    pixels = atlas.pixels()
    rects: List[Rect] = []

    x_pos = y_pos = 0
    for index in range(source.glyph_count):
        if x_pos + dimension > atlas_dimension:
            x_pos = 0
            y_pos += dimension
        if y_pos + dimension > atlas_dimension:
            raise BufferSizeError(
                f"{source.glyph_count} glyphs of {dimension}px do not fit a {atlas_dimension} atlas"
            )

        cell, rect = get_glyph_colors(source, index, back_color, text_color)
        pixels[y_pos:y_pos + dimension, x_pos:x_pos + dimension] = cell.pixels()

        placed = Rect(rect.x + x_pos, rect.y + y_pos, rect.width, rect.height)
        rects.append(placed.flipped_vertical().normalized(atlas_dimension, atlas_dimension))

        x_pos += dimension

    logger.info(f"Packed {len(rects)} glyphs into {atlas_dimension}x{atlas_dimension} atlas")
    return GlyphAtlasResult(
        atlas=atlas,
        rects=rects,
        metadata={"glyph_dimension": dimension, "line_height": source.line_height}
    )
