"""
XNB Pipeline

Converts PNG, GIF and JPEG images into XNB Texture2D containers that the
XNA / MonoGame runtime can load without the content pipeline toolchain.
"""

__version__ = "0.1.0"

from .config import ConverterConfig
from .errors import (
    XnbPipelineError,
    InputError,
    UnsupportedFeatureError,
    UsageError,
    OutputError,
)
from .processing.normalizer import CanonicalImage, ImageNormalizer
from .processing.encoder import EncodingOptions, XnbEncoder
from .processing.validator import XnbReader, XnbValidator
from .pipeline import ConversionPipeline

__all__ = [
    "ConverterConfig",
    "XnbPipelineError",
    "InputError",
    "UnsupportedFeatureError",
    "UsageError",
    "OutputError",
    "CanonicalImage",
    "ImageNormalizer",
    "EncodingOptions",
    "XnbEncoder",
    "XnbReader",
    "XnbValidator",
    "ConversionPipeline",
]
