"""
Pillow interop for pixel buffers: loading, conversion and PNG or WebP output.
"""

from pathlib import Path
from typing import Optional, Tuple, Union
from PIL import Image
import numpy as np
import io

from ..buffer import IndexedBuffer, Palette, PixelBuffer, RgbaBuffer


FORMAT_SUFFIXES = {
    'PNG': '.png',
    'WEBP': '.webp',
}


class ImageUtils:
    """Utility class for moving pixel buffers in and out of Pillow."""

    @staticmethod
    def load_image(data: Union[bytes, str, Path, Image.Image]) -> Image.Image:
        """
        Load image from various sources.

        Args:
            data: Image data as bytes, file path, or PIL Image

        Returns:
            PIL Image object

        Raises:
            ValueError: If data cannot be loaded as image
        """
        if isinstance(data, Image.Image):
            return data
        elif isinstance(data, bytes):
            try:
                return Image.open(io.BytesIO(data))
            except Exception as e:
                raise ValueError(f"Cannot load image from bytes: {e}")
        elif isinstance(data, (str, Path)):
            try:
                return Image.open(data)
            except Exception as e:
                raise ValueError(f"Cannot load image from path '{data}': {e}")
        else:
            raise ValueError(f"Unsupported image data type: {type(data)}")

    @staticmethod
    def ensure_rgba(image: Image.Image) -> Image.Image:
        """Convert image to RGBA mode if not already."""
        if image.mode != 'RGBA':
            return image.convert('RGBA')
        return image

    @staticmethod
    def to_rgba_buffer(image: Image.Image) -> RgbaBuffer:
        """Convert any Pillow image to an RGBA buffer."""
        image = ImageUtils.ensure_rgba(image)
        return RgbaBuffer.from_array(np.array(image, dtype=np.uint8))

    @staticmethod
    def to_indexed_buffer(image: Image.Image) -> Tuple[IndexedBuffer, Palette]:
        """
        Split a palette-mode image into indices and its palette.

        Raises:
            ValueError: If the image is not in 'P' mode
        """
        if image.mode != 'P':
            raise ValueError(f"Indexed conversion needs a 'P' mode image, got '{image.mode}'")

        indices = np.array(image, dtype=np.uint8)
        raw = bytes(image.getpalette() or [])
        raw = raw[:Palette.SIZE * 3].ljust(Palette.SIZE * 3, b'\x00')
        return IndexedBuffer.from_array(indices), Palette.from_bytes(raw)

    @staticmethod
    def to_image(buffer: PixelBuffer, palette: Optional[Palette] = None) -> Image.Image:
        """
        Convert a buffer to a Pillow image.

        Indexed buffers become 'P' images when a palette is given and 'L'
        images otherwise.
        """
        if isinstance(buffer, RgbaBuffer):
            return Image.fromarray(np.ascontiguousarray(buffer.pixels()))

        indices = np.ascontiguousarray(buffer.pixels())
        if palette is None:
            return Image.fromarray(indices)

        image = Image.frombytes('P', (buffer.width, buffer.height), indices.tobytes())
        image.putpalette(palette.to_rgb_bytes())
        return image

    @staticmethod
    def save_image(image: Image.Image, path: Union[str, Path], format: str = 'PNG', **kwargs) -> None:
        """
        Save image to file with quality preservation.

        Args:
            image: Image to save
            path: Output file path
            format: Image format (PNG, WEBP, etc.)
            **kwargs: Additional save parameters
        """
        save_kwargs = {
            'optimize': True,
        }

        if format.upper() == 'PNG':
            save_kwargs.update({
                'compress_level': kwargs.get('compress_level', 6),
            })
        elif format.upper() == 'WEBP':
            save_kwargs.update({
                'lossless': True,
            })

        save_kwargs.update(kwargs)
        image.save(path, format=format, **save_kwargs)

    @staticmethod
    def save_buffer(buffer: PixelBuffer, path: Union[str, Path], format: str = 'PNG',
                    palette: Optional[Palette] = None, compress_level: int = 6) -> Path:
        """
        Encode a buffer in one of the supported output formats.

        The path gets the suffix matching ``format``: a different image suffix
        is replaced, anything else is kept and the suffix appended.

        Returns:
            Path that was written

        Raises:
            ValueError: If the format is not PNG or WEBP
        """
        format = format.upper()
        if format not in FORMAT_SUFFIXES:
            raise ValueError(f"Unsupported output format: {format}")

        path = Path(path)
        suffix = FORMAT_SUFFIXES[format]
        if path.suffix.lower() in FORMAT_SUFFIXES.values():
            if path.suffix.lower() != suffix:
                path = path.with_suffix(suffix)
        else:
            path = path.with_name(path.name + suffix)

        image = ImageUtils.to_image(buffer, palette)
        ImageUtils.save_image(image, path, format, compress_level=compress_level)
        return path

    @staticmethod
    def save_png(buffer: PixelBuffer, path: Union[str, Path], palette: Optional[Palette] = None,
                 compress_level: int = 6) -> Path:
        """Encode a buffer as PNG for inspection, appending `.png` when missing."""
        return ImageUtils.save_buffer(buffer, path, 'PNG', palette, compress_level)

    @staticmethod
    def load_rgba(path: Union[str, Path]) -> RgbaBuffer:
        """Load an image file straight into an RGBA buffer."""
        return ImageUtils.to_rgba_buffer(ImageUtils.load_image(path))

    @staticmethod
    def load_indexed(path: Union[str, Path]) -> Tuple[IndexedBuffer, Palette]:
        """Load a palette image file into an indexed buffer and palette."""
        return ImageUtils.to_indexed_buffer(ImageUtils.load_image(path))
