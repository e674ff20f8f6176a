"""
Utility modules for image decoding and little-endian binary I/O.
"""

from .image import ImageUtils
from .binary import BinaryReader, BinaryWriter, encode_7bit_int

__all__ = [
    "ImageUtils",
    "BinaryReader",
    "BinaryWriter",
    "encode_7bit_int",
]
