"""
Pixel-exact texture transforms.

Copy-producing operations return a new buffer and leave their input alone:
resize, grayscale, average_intensity, convolve, sharpen, bump_map,
normal_map, normal_map_rgb, add_border, rotate, flip, emission_map and
pack_atlas.

In-place operations mutate the caller's buffer and return None: dilate,
wrap_border, clamp_border, tint, negative, insert and copy_region.
"""

from .resample import resize, bicubic_weight
from .intensity import grayscale, average_intensity
from .convolution import Kernel, convolve, sharpen, SOBEL_X, SOBEL_Y, SHARPEN
from .normals import bump_map, normal_map, normal_map_rgb
from .border import dilate, wrap_border, clamp_border, add_border
from .palette import MetalType, METAL_SWAPS, get_metal_colors, tint, emission_map
from .transform import rotate, flip, negative, insert, copy_region
from .glyph_atlas import GlyphSource, GlyphAtlasResult, get_glyph_colors, pack_atlas

COPY_OPERATIONS = (
    resize, grayscale, average_intensity, convolve, sharpen, bump_map,
    normal_map, normal_map_rgb, add_border, rotate, flip, emission_map, pack_atlas,
)

IN_PLACE_OPERATIONS = (
    dilate, wrap_border, clamp_border, tint, negative, insert, copy_region,
)

__all__ = [
    # Copy-producing
    "resize",
    "bicubic_weight",
    "grayscale",
    "average_intensity",
    "convolve",
    "sharpen",
    "bump_map",
    "normal_map",
    "normal_map_rgb",
    "add_border",
    "rotate",
    "flip",
    "emission_map",
    "pack_atlas",
    "get_glyph_colors",

    # In-place
    "dilate",
    "wrap_border",
    "clamp_border",
    "tint",
    "negative",
    "insert",
    "copy_region",

    # Types and tables
    "Kernel",
    "SOBEL_X",
    "SOBEL_Y",
    "SHARPEN",
    "MetalType",
    "METAL_SWAPS",
    "get_metal_colors",
    "GlyphSource",
    "GlyphAtlasResult",
    "COPY_OPERATIONS",
    "IN_PLACE_OPERATIONS",
]
