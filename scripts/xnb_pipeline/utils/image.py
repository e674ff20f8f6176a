"""
Image decoding and pixel-layout utilities for the XNB pipeline.
"""

import io
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..errors import InputError

# Pillow modes that carry more than 8 bits per sample and cannot be expanded
# to RGBA by Image.convert() without first reducing the depth.
HIGH_DEPTH_MODES = ('I', 'I;16', 'I;16L', 'I;16B', 'I;16N')

# Pillow format names accepted as a decode hint.
FORMAT_HINTS = {
    'png': 'PNG',
    'gif': 'GIF',
    'jpg': 'JPEG',
    'jpeg': 'JPEG',
    'bmp': 'BMP',
    'tga': 'TGA',
    'webp': 'WEBP',
}


class ImageUtils:
    """Utility class for decoding images and converting their pixel layout."""

    @staticmethod
    def resolve_format_hint(hint: Optional[str]) -> Optional[str]:
        """
        Map a user supplied format hint (extension or Pillow name) to a Pillow format name.

        Raises:
            InputError: If the hint names a format we do not decode
        """
        if not hint:
            return None
        key = hint.lower().lstrip('.')
        if key not in FORMAT_HINTS:
            raise InputError(f"Unsupported image format hint: {hint}")
        return FORMAT_HINTS[key]

    @staticmethod
    def load_image(data: Union[bytes, str, Path, Image.Image],
                   format_hint: Optional[str] = None) -> Image.Image:
        """
        Decode an image from a file path, raw bytes, or an already opened PIL Image.

        The pixel data is fully loaded before returning, so the input handle
        is released as soon as this call returns.

        Args:
            data: Image file path, encoded bytes, or PIL Image
            format_hint: Optional format name ('png', 'gif', 'jpeg', ...);
                auto-detected when omitted

        Returns:
            Decoded PIL Image

        Raises:
            InputError: If the source is missing, unreadable, or not a supported image
        """
        if isinstance(data, Image.Image):
            return data

        formats = None
        pillow_format = ImageUtils.resolve_format_hint(format_hint)
        if pillow_format:
            formats = [pillow_format]

        if isinstance(data, bytes):
            try:
                with Image.open(io.BytesIO(data), formats=formats) as image:
                    image.load()
                    return image
            except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
                raise InputError(f"Cannot decode image from bytes: {e}") from e

        if isinstance(data, (str, Path)):
            path = Path(data)
            try:
                with open(path, 'rb') as f:
                    with Image.open(f, formats=formats) as image:
                        image.load()
                        return image
            except FileNotFoundError as e:
                raise InputError(f"Input file not found: {path}", path) from e
            except PermissionError as e:
                raise InputError(f"Permission denied reading {path}", path) from e
            except IsADirectoryError as e:
                raise InputError(f"Input path is a directory: {path}", path) from e
            except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
                raise InputError(f"Cannot decode image '{path}': {e}", path) from e

        raise InputError(f"Unsupported image data type: {type(data)}")

    @staticmethod
    def is_canonical(image: Image.Image) -> bool:
        """
        Check whether an image already stores 8-bit straight RGBA, row-major.

        Pillow's 'RGBA' mode is exactly that layout; premultiplied alpha uses
        the separate 'RGBa' mode and colour-keyed images carry a
        'transparency' entry in their info dict.
        """
        return image.mode == 'RGBA' and 'transparency' not in image.info

    @staticmethod
    def reduce_depth(image: Image.Image) -> Image.Image:
        """Reduce 16/32-bit grayscale images to 8-bit 'L' by keeping the high byte."""
        array = np.asarray(image)
        array = np.clip(array.astype(np.int64), 0, 0xFFFF) >> 8
        return Image.fromarray(array.astype(np.uint8))

    @staticmethod
    def to_rgba(image: Image.Image) -> Image.Image:
        """
        Convert any pixel representation into a new 8-bit straight RGBA image.

        Source pixels replace destination pixels; nothing is blended. Palette
        and colour-key transparency become alpha, premultiplied alpha is
        undone.
        """
        if image.mode in HIGH_DEPTH_MODES:
            image = ImageUtils.reduce_depth(image)
        converted = image.convert('RGBA')
        if converted is image:
            converted = image.copy()
        return converted

    @staticmethod
    def zero_transparent_rgb(pixels: bytes) -> bytes:
        """
        Force R, G and B to 0 for every fully transparent pixel of an RGBA buffer.

        Args:
            pixels: RGBA8 buffer, length a multiple of 4

        Returns:
            Buffer with the same length; the input is returned unchanged when
            no pixel has alpha 0
        """
        array = np.frombuffer(pixels, dtype=np.uint8).reshape(-1, 4)
        mask = array[:, 3] == 0
        if not mask.any():
            return pixels

        array = array.copy()
        array[mask, :3] = 0
        return array.tobytes()
