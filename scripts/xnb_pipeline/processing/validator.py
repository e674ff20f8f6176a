"""
Reader and validator for uncompressed XNB Texture2D containers.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Any, Union

from ..errors import XnbPipelineError
from ..utils.binary import BinaryReader
from .normalizer import CanonicalImage
from .xnb_format import XNB_FORMAT, XnbFormat


@dataclass
class XnbHeader:
    """Fixed header of an XNB container."""
    platform: str
    version: int
    flags: int
    file_size: int

    @property
    def hidef(self) -> bool:
        return bool(self.flags & XNB_FORMAT.hidef_flag)

    @property
    def compressed(self) -> bool:
        return bool(self.flags & XNB_FORMAT.compressed_flag)


@dataclass
class TypeReaderEntry:
    """Type reader name and version from the container's reader table."""
    name: str
    version: int


@dataclass
class XnbTexture:
    """Parsed content of a Texture2D container."""
    header: XnbHeader
    type_readers: List[TypeReaderEntry]
    shared_resource_count: int
    type_id: int
    surface_format: int
    width: int
    height: int
    mip_count: int
    data_size: int
    pixels: bytes
    total_length: int
    end_offset: int

    def to_canonical(self) -> CanonicalImage:
        return CanonicalImage(width=self.width, height=self.height, pixels=self.pixels)


class XnbReader:
    """Parses the byte layout written by XnbEncoder."""

    def __init__(self, xnb_format: XnbFormat = XNB_FORMAT):
        self.format = xnb_format

    def read_file(self, path: Union[str, Path]) -> XnbTexture:
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise XnbFormatError(f"Cannot read {path}: {e}", path) from e
        return self.read(data)

    def read(self, data: bytes) -> XnbTexture:
        """
        Parse an XNB container.

        Args:
            data: Complete container bytes

        Returns:
            XnbTexture with header fields and the first mip level's pixels

        Raises:
            XnbFormatError: If the data is not an uncompressed Texture2D container
        """
        reader = BinaryReader(data)
        try:
            magic = reader.read_bytes(len(self.format.magic))
            if magic != self.format.magic:
                raise XnbFormatError(f"Bad magic {magic!r}, expected {self.format.magic!r}")

            platform = chr(reader.read_byte())
            version = reader.read_byte()
            flags = reader.read_byte()
            if flags & self.format.compressed_flag:
                raise XnbFormatError("Compressed XNB files are not supported")
            header = XnbHeader(platform=platform, version=version, flags=flags,
                               file_size=reader.read_uint32())

            readers = []
            for _ in range(reader.read_7bit_int()):
                name = reader.read_string()
                readers.append(TypeReaderEntry(name=name, version=reader.read_uint32()))

            shared_count = reader.read_7bit_int()

            type_id = reader.read_7bit_int()
            if type_id == 0 or type_id > len(readers):
                raise XnbFormatError(f"Primary asset type id {type_id} does not reference a type reader")

            surface_format = reader.read_uint32()
            width = reader.read_uint32()
            height = reader.read_uint32()
            mip_count = reader.read_uint32()
            data_size = reader.read_uint32()
            pixels = reader.read_bytes(data_size)
        except (EOFError, ValueError) as e:
            raise XnbFormatError(f"Truncated or malformed XNB data: {e}") from e

        return XnbTexture(
            header=header,
            type_readers=readers,
            shared_resource_count=shared_count,
            type_id=type_id,
            surface_format=surface_format,
            width=width,
            height=height,
            mip_count=mip_count,
            data_size=data_size,
            pixels=pixels,
            total_length=len(data),
            end_offset=reader.offset,
        )


@dataclass
class ValidationResult:
    """Result of container validation."""
    asset_name: str
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        """Check if validation passed (no errors)."""
        return len(self.errors) == 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


class XnbValidator:
    """Checks a container against the layout the runtime's Texture2D reader expects."""

    def __init__(self, xnb_format: XnbFormat = XNB_FORMAT):
        self.format = xnb_format
        self.reader = XnbReader(xnb_format)

    def validate_file(self, path: Union[str, Path]) -> ValidationResult:
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            result = ValidationResult(path.name)
            result.add_error(f"Cannot read file: {e}")
            return result
        return self.validate_bytes(data, path.name)

    def validate_bytes(self, data: bytes, name: str = "<memory>") -> ValidationResult:
        """
        Validate container bytes.

        Args:
            data: Complete container bytes
            name: Label used in the result

        Returns:
            ValidationResult; parsed fields are stored in ``metadata``
        """
        result = ValidationResult(name)

        try:
            texture = self.reader.read(data)
        except XnbFormatError as e:
            result.add_error(e.message)
            return result

        header = texture.header
        result.metadata = {
            "platform": header.platform,
            "version": header.version,
            "profile": "HiDef" if header.hidef else "Reach",
            "file_size": header.file_size,
            "width": texture.width,
            "height": texture.height,
            "surface_format": texture.surface_format,
            "mip_count": texture.mip_count,
            "data_size": texture.data_size,
        }

        if header.file_size != texture.total_length:
            result.add_error(
                f"File size field {header.file_size} != actual length {texture.total_length}"
            )

        if header.version != self.format.version:
            result.add_warning(f"Unexpected format version {header.version}")

        if header.platform != self.format.platform.decode("ascii"):
            result.add_warning(f"Unexpected target platform '{header.platform}'")

        reader_name = texture.type_readers[texture.type_id - 1].name
        if not reader_name.startswith("Microsoft.Xna.Framework.Content.Texture2DReader"):
            result.add_error(f"Primary asset reader is not Texture2DReader: {reader_name}")

        if texture.shared_resource_count != 0:
            result.add_warning(f"Container declares {texture.shared_resource_count} shared resources")

        if texture.surface_format != self.format.surface_format:
            result.add_error(f"Unsupported surface format {texture.surface_format}")

        if texture.mip_count < 1:
            result.add_error("Texture has no mip levels")
        elif texture.mip_count > 1:
            result.add_warning(f"Only the first of {texture.mip_count} mip levels was checked")

        expected_size = texture.width * texture.height * 4
        if texture.data_size != expected_size:
            result.add_error(
                f"Pixel data length {texture.data_size} != {texture.width}x{texture.height}x4"
            )

        if texture.mip_count == 1:
            trailing = texture.total_length - texture.end_offset
            if trailing:
                result.add_warning(f"{trailing} trailing bytes after pixel data")

        return result


class XnbFormatError(XnbPipelineError):
    """Exception raised when a container cannot be parsed."""
