"""
Fixed constants of the XNB container as written for a single Texture2D asset.
"""

from dataclasses import dataclass

from ..utils.binary import encode_7bit_int


@dataclass(frozen=True)
class XnbFormat:
    """Static description of the XNB layout this pipeline produces."""
    magic: bytes = b"XNB"
    platform: bytes = b"w"  # Windows
    version: int = 5  # XNA Game Studio 4.0
    hidef_flag: int = 0x01
    compressed_flag: int = 0x80
    texture2d_reader: str = (
        "Microsoft.Xna.Framework.Content.Texture2DReader, "
        "Microsoft.Xna.Framework.Graphics, Version=4.0.0.0, "
        "Culture=neutral, PublicKeyToken=842cf8be1de50553"
    )
    reader_version: int = 0
    type_reader_count: int = 1
    shared_resource_count: int = 0
    type_id: int = 1  # index of the Texture2D reader + 1
    surface_format: int = 0  # SurfaceFormat.Color
    mip_count: int = 1

    @property
    def header_size(self) -> int:
        """magic + platform + version + flags"""
        return len(self.magic) + len(self.platform) + 1 + 1

    @property
    def file_size_field_size(self) -> int:
        return 4

    @property
    def type_reader_table_size(self) -> int:
        name = self.texture2d_reader.encode("utf-8")
        return (
            len(encode_7bit_int(self.type_reader_count))
            + len(encode_7bit_int(len(name)))
            + len(name)
            + 4
        )

    @property
    def shared_resource_table_size(self) -> int:
        return len(encode_7bit_int(self.shared_resource_count))

    @property
    def object_header_size(self) -> int:
        """type id byte + surface format, width, height, mip count, data length"""
        return 1 + 5 * 4

    @property
    def metadata_size(self) -> int:
        """Bytes preceding the pixel payload in an uncompressed container."""
        return (
            self.header_size
            + self.file_size_field_size
            + self.type_reader_table_size
            + self.shared_resource_table_size
            + self.object_header_size
        )

    @property
    def object_offset(self) -> int:
        """Offset of the type id byte of the primary asset."""
        return self.metadata_size - self.object_header_size


XNB_FORMAT = XnbFormat()
