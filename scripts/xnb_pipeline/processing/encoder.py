"""
XNB container serializer for single Texture2D assets.

Writes the container in one forward pass:

    header        "XNB" 'w' 5 flags
    file size     uint32, uncompressed containers only
    type readers  7-bit count, then (7-bit length + UTF-8 name, uint32 version)
    shared        7-bit count (always 0)
    object        type id + 1, surface format, width, height, mip count,
                  data length, pixel bytes

All multi-byte integers are little-endian.
"""

import io
import logging
from dataclasses import dataclass
from typing import BinaryIO

from ..errors import OutputError, UnsupportedFeatureError
from ..utils.binary import BinaryWriter
from .normalizer import CanonicalImage
from .xnb_format import XNB_FORMAT, XnbFormat

logger = logging.getLogger(__name__)

UINT32_MAX = 0xFFFFFFFF


@dataclass
class EncodingOptions:
    """Options for XNB encoding."""
    compressed: bool = False
    reach: bool = True  # False selects the HiDef profile

    @property
    def flags(self) -> int:
        flags = 0
        if not self.reach:
            flags |= XNB_FORMAT.hidef_flag
        if self.compressed:
            flags |= XNB_FORMAT.compressed_flag
        return flags


def metadata_preamble_size(xnb_format: XnbFormat = XNB_FORMAT) -> int:
    """Size in bytes of everything in an uncompressed container except the pixel data."""
    return xnb_format.metadata_size


def uncompressed_file_size(image: CanonicalImage, xnb_format: XnbFormat = XNB_FORMAT) -> int:
    return xnb_format.metadata_size + image.pixel_data_size


class XnbEncoder:
    """Serializes a CanonicalImage into an XNB Texture2D container."""

    def __init__(self, options: EncodingOptions = None, xnb_format: XnbFormat = XNB_FORMAT):
        self.options = options or EncodingOptions()
        self.format = xnb_format

    def encode(self, image: CanonicalImage, sink: BinaryIO) -> int:
        """
        Write the XNB container for an image to a binary sink.

        Args:
            image: Canonical RGBA8 image
            sink: Writable binary stream

        Returns:
            Number of bytes written

        Raises:
            UnsupportedFeatureError: If compression was requested; the header
                and flag byte have already been written at that point
            OutputError: If writing to the sink fails or the container does
                not fit the uint32 size field
        """
        writer = BinaryWriter(sink)
        try:
            self._write_header(writer)

            if self.options.compressed:
                raise UnsupportedFeatureError("Compressed XNB files are not supported")

            file_size = uncompressed_file_size(image, self.format)
            if file_size > UINT32_MAX:
                raise OutputError(
                    f"{image.width}x{image.height} texture needs {file_size} bytes, "
                    f"more than the uint32 size field can hold"
                )
            writer.write_uint32(file_size)
            self._write_type_readers(writer)
            writer.write_7bit_int(self.format.shared_resource_count)
            self._write_texture(writer, image)
        except OSError as e:
            raise OutputError(f"Failed to write XNB data: {e}") from e

        if writer.bytes_written != file_size:
            raise OutputError(
                f"Wrote {writer.bytes_written} bytes but the header declares {file_size}"
            )

        logger.debug(f"Encoded {image.width}x{image.height} texture ({writer.bytes_written} bytes)")
        return writer.bytes_written

    def encode_to_bytes(self, image: CanonicalImage) -> bytes:
        """Encode an image and return the complete container."""
        buffer = io.BytesIO()
        self.encode(image, buffer)
        return buffer.getvalue()

    def _write_header(self, writer: BinaryWriter) -> None:
        writer.write_bytes(self.format.magic)
        writer.write_bytes(self.format.platform)
        writer.write_byte(self.format.version)
        writer.write_byte(self.options.flags)

    def _write_type_readers(self, writer: BinaryWriter) -> None:
        writer.write_7bit_int(self.format.type_reader_count)
        writer.write_string(self.format.texture2d_reader)
        writer.write_uint32(self.format.reader_version)

    def _write_texture(self, writer: BinaryWriter, image: CanonicalImage) -> None:
        writer.write_byte(self.format.type_id)
        writer.write_uint32(self.format.surface_format)
        writer.write_uint32(image.width)
        writer.write_uint32(image.height)
        writer.write_uint32(self.format.mip_count)
        writer.write_uint32(image.pixel_data_size)
        writer.write_bytes(image.pixels)
