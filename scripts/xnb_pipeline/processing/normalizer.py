"""
Image normalization into the canonical pixel layout accepted by the XNB encoder.
"""

import logging
from dataclasses import dataclass
from typing import Union

from PIL import Image

from ..errors import XnbPipelineError
from ..utils.image import ImageUtils

logger = logging.getLogger(__name__)

BYTES_PER_PIXEL = 4


@dataclass(frozen=True)
class CanonicalImage:
    """8-bit straight RGBA pixels, row-major top-to-bottom."""
    width: int
    height: int
    pixels: bytes

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise NormalizationError(f"Image bounds must be positive, got {self.width}x{self.height}")
        expected = self.width * self.height * BYTES_PER_PIXEL
        if len(self.pixels) != expected:
            raise NormalizationError(
                f"Pixel buffer is {len(self.pixels)} bytes, expected {expected} for {self.width}x{self.height}"
            )

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def pixel_data_size(self) -> int:
        """Number of bytes in the pixel payload."""
        return self.width * self.height * BYTES_PER_PIXEL

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Return the (R, G, B, A) tuple at column x, row y."""
        offset = (y * self.width + x) * BYTES_PER_PIXEL
        return tuple(self.pixels[offset:offset + BYTES_PER_PIXEL])

    def to_image(self) -> Image.Image:
        """Build a PIL 'RGBA' image from the canonical buffer."""
        return Image.frombytes('RGBA', self.size, self.pixels)


@dataclass
class NormalizationConfig:
    """Configuration for image normalization."""
    zero_transparent_rgb: bool = True


class ImageNormalizer:
    """Brings decoded images into the canonical RGBA8 layout."""

    def __init__(self, config: NormalizationConfig = None):
        self.config = config or NormalizationConfig()

    def normalize(self, image: Union[Image.Image, CanonicalImage]) -> CanonicalImage:
        """
        Normalize a decoded image.

        Images already stored as 8-bit straight RGBA are used as-is; anything
        else is converted into a freshly allocated RGBA buffer of the same
        bounds. Fully transparent pixels then get their colour channels
        zeroed when the config asks for it.

        Args:
            image: Decoded PIL Image (any mode) or an existing CanonicalImage

        Returns:
            CanonicalImage

        Raises:
            NormalizationError: If the image has empty bounds or an unconvertible mode
        """
        if isinstance(image, CanonicalImage):
            pixels = image.pixels
            width, height = image.size
        else:
            width, height = image.size
            if width <= 0 or height <= 0:
                raise NormalizationError(f"Cannot normalize an empty image ({width}x{height})")

            if ImageUtils.is_canonical(image):
                rgba = image
            else:
                logger.debug(f"Converting {image.mode} image to RGBA")
                try:
                    rgba = ImageUtils.to_rgba(image)
                except ValueError as e:
                    raise NormalizationError(f"Cannot convert {image.mode} pixels to RGBA: {e}") from e
            pixels = rgba.tobytes()

        if self.config.zero_transparent_rgb:
            pixels = ImageUtils.zero_transparent_rgb(pixels)

        return CanonicalImage(width=width, height=height, pixels=pixels)


class NormalizationError(XnbPipelineError):
    """Exception raised when an image cannot be brought into canonical layout."""
