"""
Palette index remapping for metal-tinted weapon art.
"""

from enum import Enum
from typing import Dict, Tuple, Union
import numpy as np

from ..buffer import Palette, PixelBuffer, RgbaBuffer, require_indexed


TINT_RANGE_START = 0x70
TINT_RANGE_END = 0x7F


class MetalType(Enum):
    """Material categories with their own tint tables."""
    NONE = "none"
    IRON = "iron"
    STEEL = "steel"
    SILVER = "silver"
    ELVEN = "elven"
    DWARVEN = "dwarven"
    MITHRIL = "mithril"
    ADAMANTIUM = "adamantium"
    EBONY = "ebony"
    ORCISH = "orcish"
    DAEDRIC = "daedric"


DEFAULT_SWAPS: Tuple[int, ...] = tuple(range(0x70, 0x80))

METAL_SWAPS: Dict[MetalType, Tuple[int, ...]] = {
    MetalType.IRON: (0x77, 0x78, 0x57, 0x79, 0x58, 0x59, 0x7A, 0x5A,
                     0x7B, 0x5B, 0x7C, 0x5C, 0x7D, 0x5D, 0x5E, 0x5F),
    MetalType.STEEL: DEFAULT_SWAPS,
    MetalType.SILVER: (0xE0, 0x70, 0x50, 0x71, 0x51, 0x72, 0x73, 0x52,
                       0x74, 0x53, 0x75, 0x54, 0x55, 0x56, 0x57, 0x58),
    MetalType.ELVEN: (0xE0, 0x70, 0x50, 0x71, 0x51, 0x72, 0x73, 0x52,
                      0x74, 0x53, 0x75, 0x54, 0x55, 0x56, 0x57, 0x58),
    MetalType.DWARVEN: (0x90, 0x91, 0x92, 0x93, 0x94, 0x95, 0x96, 0x97,
                        0x98, 0x99, 0x9A, 0x9B, 0x9C, 0x9D, 0x9E, 0x9F),
    MetalType.MITHRIL: (0x67, 0x68, 0x69, 0x6A, 0x6B, 0x6C, 0x6D, 0x6E,
                        0x6F, 0xD8, 0xD9, 0xDA, 0xDB, 0xDC, 0xDD, 0xDE),
    MetalType.ADAMANTIUM: (0x5A, 0x5B, 0x7C, 0x5C, 0x7D, 0x5D, 0x7E, 0x5E,
                           0x7F, 0xD8, 0xD9, 0xDA, 0xDB, 0xDC, 0xDD, 0xDE),
    MetalType.EBONY: (0x77, 0x78, 0x79, 0x7A, 0x7B, 0x7C, 0x7D, 0x7E,
                      0x7F, 0xD8, 0xD9, 0xDA, 0xDB, 0xDC, 0xDD, 0xDE),
    MetalType.ORCISH: (0xA2, 0xA3, 0xC8, 0xC9, 0xCA, 0xCB, 0xCC, 0xCD,
                       0xCE, 0xCF, 0xD8, 0xD9, 0xDA, 0xDB, 0xDC, 0xDD),
    MetalType.DAEDRIC: (0xEF, 0xF0, 0xF1, 0xF2, 0xF3, 0xF4, 0xF5, 0xF6,
                        0xF7, 0xF8, 0xF9, 0xFA, 0xFB, 0xFC, 0xFD, 0xFE),
}


def get_metal_colors(metal_type: Union[MetalType, str]) -> Tuple[int, ...]:
    """Replacement indices for source indices 0x70-0x7F."""
    metal_type = MetalType(metal_type) if isinstance(metal_type, str) else metal_type
    return METAL_SWAPS.get(metal_type, DEFAULT_SWAPS)


def tint(buffer: PixelBuffer, metal_type: Union[MetalType, str]) -> None:
    """
    Remap indices 0x70-0x7F through the metal's swap table.

    Every other index is left as it is. In-place; raises PixelFormatError
    for RGBA input.
    """
    target = require_indexed(buffer, "tint")
    swaps = np.array(get_metal_colors(metal_type), dtype=np.uint8)

    pixels = target.pixels()
    mask = (pixels >= TINT_RANGE_START) & (pixels <= TINT_RANGE_END)
    pixels[mask] = swaps[pixels[mask] - TINT_RANGE_START]


def emission_map(buffer: PixelBuffer, palette: Palette, emission_index: int) -> RgbaBuffer:
    """
    Emission mask for one palette index.

    Pixels holding ``emission_index`` take their palette colour; all others
    become opaque black. Copy-producing.
    """
    source = require_indexed(buffer, "emission_map")
    indices = source.pixels()
    colors = palette.lookup_table()[indices]

    result = np.zeros(colors.shape, dtype=np.uint8)
    result[..., 3] = 255
    emissive = indices == emission_index
    result[emissive] = colors[emissive]
    return RgbaBuffer.from_array(result)
