"""
Pixel buffer data model shared by every texture operation.

Buffers come in two tagged variants, ``IndexedBuffer`` (one palette index per
byte) and ``RgbaBuffer`` (four 8-bit channels per pixel). Rows are stored
top-down.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, List, NamedTuple, Optional, Sequence, Tuple, Union
import numpy as np


class ImageProcessingError(Exception):
    """Base exception for texture processing errors."""
    pass


class PixelFormatError(ImageProcessingError):
    """Raised when an operation receives the wrong buffer variant."""
    pass


class BufferSizeError(ImageProcessingError):
    """Raised when buffer dimensions, stride or data length do not agree."""
    pass


class KernelSizeError(BufferSizeError):
    """Raised when a convolution kernel is not an odd-sized rectangle."""
    pass


class PixelFormat(Enum):
    """Storage format of a pixel buffer."""
    INDEXED8 = "Indexed8"
    RGBA32 = "RGBA32"

    @property
    def bytes_per_pixel(self) -> int:
        return 1 if self is PixelFormat.INDEXED8 else 4


class Pixel(NamedTuple):
    """Single RGBA colour with 8-bit channels."""
    r: int
    g: int
    b: int
    a: int


CLEAR = Pixel(0, 0, 0, 0)

ColorLike = Union[Pixel, Tuple[int, int, int, int], Sequence[int]]


def to_pixel(color: ColorLike) -> Pixel:
    """Coerce an RGB or RGBA sequence into a ``Pixel``."""
    values = [int(c) for c in color]
    if len(values) == 3:
        values.append(255)
    if len(values) != 4:
        raise ValueError(f"Color must have 3 or 4 channels, got {len(values)}")
    for value in values:
        if not 0 <= value <= 255:
            raise ValueError(f"Color channel out of range: {value}")
    return Pixel(*values)


@dataclass
class PixelBuffer(ABC):
    """
    Raw pixel samples plus dimensions.

    ``data`` holds exactly ``stride * height`` bytes. Passing a ``bytearray``
    hands its storage to the buffer, so in-place operations are visible to
    whoever owns that bytearray.
    """
    width: int
    height: int
    data: Optional[bytearray] = None
    stride: Optional[int] = None

    format: ClassVar[PixelFormat]

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise BufferSizeError(
                f"Buffer dimensions must be positive, got {self.width}x{self.height}"
            )

        row_bytes = self.width * self.format.bytes_per_pixel
        if self.stride is None:
            self.stride = row_bytes
        self._validate_stride(row_bytes)

        if self.data is None:
            self.data = bytearray(self.stride * self.height)
        elif not isinstance(self.data, bytearray):
            self.data = bytearray(self.data)

        expected = self.stride * self.height
        if len(self.data) != expected:
            raise BufferSizeError(
                f"{self.format.value} buffer {self.width}x{self.height} with stride "
                f"{self.stride} needs {expected} bytes, got {len(self.data)}"
            )

    def _validate_stride(self, row_bytes: int) -> None:
        if self.stride < row_bytes:
            raise BufferSizeError(f"Stride {self.stride} is smaller than row size {row_bytes}")

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @classmethod
    def blank(cls, width: int, height: int):
        """Create a zero-filled buffer."""
        return cls(width=width, height=height)

    def copy(self):
        """Return an independent copy of this buffer."""
        return type(self)(width=self.width, height=self.height,
                          data=bytearray(self.data), stride=self.stride)

    @abstractmethod
    def pixels(self) -> np.ndarray:
        """Writable numpy view over the pixel samples."""


@dataclass
class IndexedBuffer(PixelBuffer):
    """Palette-indexed buffer, one byte per pixel."""

    format: ClassVar[PixelFormat] = PixelFormat.INDEXED8

    def pixels(self) -> np.ndarray:
        rows = np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.stride)
        return rows[:, :self.width]

    @classmethod
    def from_array(cls, array: np.ndarray) -> "IndexedBuffer":
        """Build a buffer from an (H, W) array of palette indices."""
        array = np.asarray(array)
        if array.ndim != 2:
            raise BufferSizeError(f"Indexed array must be 2D, got shape {array.shape}")
        height, width = array.shape
        return cls(width=width, height=height,
                   data=bytearray(np.ascontiguousarray(array, dtype=np.uint8).tobytes()))

    @classmethod
    def filled(cls, width: int, height: int, index: int) -> "IndexedBuffer":
        return cls(width=width, height=height, data=bytearray([index]) * (width * height))

    def to_rgba(self, palette: "Palette", flip_y: bool = False,
                alpha_index: int = -1) -> "RgbaBuffer":
        """
        Resolve palette indices to colour.

        Args:
            palette: 256-entry palette
            flip_y: Emit rows bottom-up instead of top-down
            alpha_index: Palette index that becomes fully transparent (-1 disables)

        Returns:
            New RGBA buffer
        """
        lut = palette.lookup_table()
        if 0 <= alpha_index <= 255:
            lut = lut.copy()
            lut[alpha_index] = CLEAR
        colors = lut[self.pixels()]
        if flip_y:
            colors = colors[::-1]
        return RgbaBuffer.from_array(colors)


@dataclass
class RgbaBuffer(PixelBuffer):
    """True-colour buffer with four 8-bit channels per pixel."""

    format: ClassVar[PixelFormat] = PixelFormat.RGBA32

    def _validate_stride(self, row_bytes: int) -> None:
        if self.stride != row_bytes:
            raise BufferSizeError(
                f"RGBA32 stride must equal width * 4 ({row_bytes}), got {self.stride}"
            )

    def pixels(self) -> np.ndarray:
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, 4)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "RgbaBuffer":
        """Build a buffer from an (H, W, 4) array."""
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] != 4:
            raise BufferSizeError(f"RGBA array must have shape (H, W, 4), got {array.shape}")
        height, width = array.shape[:2]
        return cls(width=width, height=height,
                   data=bytearray(np.ascontiguousarray(array, dtype=np.uint8).tobytes()))

    @classmethod
    def filled(cls, width: int, height: int, color: ColorLike) -> "RgbaBuffer":
        """Create a buffer where every pixel is ``color``."""
        return cls(width=width, height=height,
                   data=bytearray(bytes(to_pixel(color))) * (width * height))

    def get_pixel(self, x: int, y: int) -> Pixel:
        return Pixel(*(int(c) for c in self.pixels()[y, x]))

    def set_pixel(self, x: int, y: int, color: ColorLike) -> None:
        self.pixels()[y, x] = to_pixel(color)

    def to_pixels(self, flip_y: bool = False) -> List[Pixel]:
        """Flatten to a row-major list of pixels, optionally bottom row first."""
        array = self.pixels()
        if flip_y:
            array = array[::-1]
        return [Pixel(*(int(c) for c in p)) for p in array.reshape(-1, 4)]


@dataclass
class Palette:
    """256-entry colour table used to resolve indexed buffers."""
    colors: Tuple[Pixel, ...]

    SIZE: ClassVar[int] = 256

    def __post_init__(self):
        self.colors = tuple(to_pixel(c) for c in self.colors)
        if len(self.colors) != self.SIZE:
            raise BufferSizeError(f"Palette needs {self.SIZE} entries, got {len(self.colors)}")

    @classmethod
    def from_bytes(cls, data: bytes) -> "Palette":
        """Load a palette from 768 RGB bytes or 1024 RGBA bytes."""
        if len(data) == cls.SIZE * 3:
            channels = np.frombuffer(bytes(data), dtype=np.uint8).reshape(cls.SIZE, 3)
            return cls(tuple(Pixel(int(r), int(g), int(b), 255) for r, g, b in channels))
        if len(data) == cls.SIZE * 4:
            channels = np.frombuffer(bytes(data), dtype=np.uint8).reshape(cls.SIZE, 4)
            return cls(tuple(Pixel(*(int(c) for c in entry)) for entry in channels))
        raise BufferSizeError(f"Palette data must be 768 or 1024 bytes, got {len(data)}")

    @classmethod
    def grayscale(cls) -> "Palette":
        """Identity ramp where index N maps to (N, N, N, 255)."""
        return cls(tuple(Pixel(i, i, i, 255) for i in range(cls.SIZE)))

    def lookup_table(self) -> np.ndarray:
        """Palette as a (256, 4) uint8 array."""
        return np.array(self.colors, dtype=np.uint8)

    def to_rgb_bytes(self) -> bytes:
        return self.lookup_table()[:, :3].tobytes()


@dataclass
class Rect:
    """
    Axis-aligned rectangle in pixel or normalized UV space.

    A negative height describes a vertically flipped rect whose ``y`` is the
    bottom edge.
    """
    x: float
    y: float
    width: float
    height: float

    @property
    def x_min(self) -> float:
        return self.x

    @property
    def x_max(self) -> float:
        return self.x + self.width

    @property
    def y_min(self) -> float:
        return self.y

    @property
    def y_max(self) -> float:
        return self.y + self.height

    def flipped_vertical(self) -> "Rect":
        """Swap the top and bottom edges."""
        return Rect(self.x, self.y_max, self.width, -self.height)

    def normalized(self, width: float, height: float) -> "Rect":
        """Scale pixel coordinates into [0, 1] UV space."""
        return Rect(self.x / width, self.y / height, self.width / width, self.height / height)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "w": self.width, "h": self.height}


def require_rgba(buffer: PixelBuffer, operation: str) -> RgbaBuffer:
    """Reject anything that is not an RGBA buffer."""
    if not isinstance(buffer, RgbaBuffer):
        raise PixelFormatError(f"{operation} requires an RGBA32 buffer, got {_describe(buffer)}")
    return buffer


def require_indexed(buffer: PixelBuffer, operation: str) -> IndexedBuffer:
    """Reject anything that is not an indexed buffer."""
    if not isinstance(buffer, IndexedBuffer):
        raise PixelFormatError(f"{operation} requires an Indexed8 buffer, got {_describe(buffer)}")
    return buffer


def _describe(buffer) -> str:
    buffer_format = getattr(buffer, "format", None)
    if isinstance(buffer_format, PixelFormat):
        return buffer_format.value
    return type(buffer).__name__
