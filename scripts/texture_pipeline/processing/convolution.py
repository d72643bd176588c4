"""
Generic matrix convolution over RGBA buffers.

Sampling is toroidal: taps that fall outside the image wrap to the opposite
edge so edge-finding filters do not introduce seams on tileable art.
"""

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple
import numpy as np

from ..buffer import PixelBuffer, RgbaBuffer, KernelSizeError, require_rgba


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Kernel:
    """
    Integer convolution matrix.

    ``matrix[x][y]`` is the coefficient for horizontal offset ``x - width // 2``
    and vertical offset ``y - height // 2``.
    """
    matrix: Tuple[Tuple[int, ...], ...]
    offset: int = 0
    absolute: bool = False

    def __post_init__(self):
        matrix = tuple(tuple(int(v) for v in column) for column in self.matrix)
        object.__setattr__(self, "matrix", matrix)

        if not matrix or not matrix[0]:
            raise KernelSizeError("Kernel matrix must not be empty")
        if any(len(column) != len(matrix[0]) for column in matrix):
            raise KernelSizeError("Kernel matrix must be rectangular")
        if self.width % 2 == 0 or self.height % 2 == 0:
            raise KernelSizeError(f"Kernel dimensions must be odd, got {self.width}x{self.height}")

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]], offset: int = 0,
                  absolute: bool = False) -> "Kernel":
        """Build a kernel from image-oriented rows (``rows[y][x]``)."""
        return cls(tuple(zip(*rows)), offset=offset, absolute=absolute)

    @property
    def width(self) -> int:
        return len(self.matrix)

    @property
    def height(self) -> int:
        return len(self.matrix[0])

    @property
    def weight(self) -> int:
        """Normalizing weight; a zero sum counts as 1."""
        total = sum(sum(column) for column in self.matrix)
        return total if total != 0 else 1


SOBEL_X = Kernel(((-1, 0, 1), (-2, 0, 2), (-1, 0, 1)))
SOBEL_Y = Kernel(((1, 2, 1), (0, 0, 0), (-1, -2, -1)))
SHARPEN = Kernel(((-1, -1, -1), (1, 12, 1), (-1, -1, -1)))


def _truncating_divide(values: np.ndarray, divisor: int) -> np.ndarray:
    """Integer division rounding toward zero."""
    quotient = np.abs(values) // abs(divisor)
    negative = (values < 0) != (divisor < 0)
    return np.where(negative, -quotient, quotient)


def convolve(buffer: PixelBuffer, kernel: Kernel) -> RgbaBuffer:
    """
    Convolve r, g and b with ``kernel`` using wrap-around sampling.

    Each channel sum is divided by the kernel weight (truncating), made
    absolute when the kernel asks for it, offset and clamped to
    [0, 255]. Alpha is not convolved: it is taken from the last tap visited,
    which sits at ``(x + width // 2, y + height // 2)``.

    Copy-producing. Raises PixelFormatError for indexed input.
    """
    source = require_rgba(buffer, "convolve")
    src = source.pixels().astype(np.int64)

    half_w = kernel.width // 2
    half_h = kernel.height // 2
    sums = np.zeros(src.shape[:2] + (3,), dtype=np.int64)

    for i, column in enumerate(kernel.matrix):
        dx = i - half_w
        for j, coefficient in enumerate(column):
            if coefficient == 0:
                continue
            dy = j - half_h
            # shifted[y, x] == src[(y + dy) % h, (x + dx) % w]
            shifted = np.roll(src[..., :3], shift=(-dy, -dx), axis=(0, 1))
            sums += coefficient * shifted

    values = _truncating_divide(sums, kernel.weight)
    if kernel.absolute:
        values = np.abs(values)
    values = values + kernel.offset
    alpha = np.roll(src[..., 3], shift=(-(kernel.height - 1 - half_h), -(kernel.width - 1 - half_w)),
                    axis=(0, 1))

    result = np.empty(src.shape, dtype=np.uint8)
    result[..., :3] = np.clip(values, 0, 255)
    result[..., 3] = alpha
    logger.debug(f"Convolved {source.width}x{source.height} with {kernel.width}x{kernel.height} kernel")
    return RgbaBuffer.from_array(result)


def sharpen(buffer: PixelBuffer) -> RgbaBuffer:
    """Sharpen with the fixed 3x3 sharpen kernel. Copy-producing."""
    return convolve(buffer, SHARPEN)
