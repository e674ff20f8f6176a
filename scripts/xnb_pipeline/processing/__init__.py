"""
Image normalization, XNB encoding and container validation.
"""

from .normalizer import CanonicalImage, ImageNormalizer, NormalizationConfig, NormalizationError
from .encoder import EncodingOptions, XnbEncoder, metadata_preamble_size
from .validator import XnbReader, XnbValidator, XnbTexture, ValidationResult, XnbFormatError
from .xnb_format import XnbFormat, XNB_FORMAT

__all__ = [
    "CanonicalImage",
    "ImageNormalizer",
    "NormalizationConfig",
    "NormalizationError",
    "EncodingOptions",
    "XnbEncoder",
    "metadata_preamble_size",
    "XnbReader",
    "XnbValidator",
    "XnbTexture",
    "ValidationResult",
    "XnbFormatError",
    "XnbFormat",
    "XNB_FORMAT",
]
