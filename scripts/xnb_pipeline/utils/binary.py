"""
Little-endian binary stream helpers used by the XNB encoder and reader.
"""

import struct
from typing import BinaryIO


def encode_7bit_int(value: int) -> bytes:
    """
    Encode a non-negative integer the way .NET's ``BinaryWriter.Write7BitEncodedInt`` does.

    Seven payload bits per byte, least significant group first; every byte
    except the last carries the 0x80 continuation bit.

    Args:
        value: Integer to encode (0 <= value < 2**32)

    Returns:
        Encoded bytes (1 to 5 bytes)

    Raises:
        ValueError: If value is negative or does not fit in 32 bits
    """
    if value < 0 or value > 0xFFFFFFFF:
        raise ValueError(f"7-bit encoded integer out of range: {value}")

    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


class BinaryWriter:
    """Writes primitive little-endian values to a binary stream and counts bytes written."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.bytes_written = 0

    def write_bytes(self, data: bytes) -> None:
        self.stream.write(data)
        self.bytes_written += len(data)

    def write_byte(self, value: int) -> None:
        self.write_bytes(struct.pack("<B", value))

    def write_uint32(self, value: int) -> None:
        self.write_bytes(struct.pack("<I", value))

    def write_7bit_int(self, value: int) -> None:
        self.write_bytes(encode_7bit_int(value))

    def write_string(self, text: str) -> None:
        """Write a UTF-8 string prefixed with its 7-bit encoded byte length."""
        data = text.encode("utf-8")
        self.write_7bit_int(len(data))
        self.write_bytes(data)


class BinaryReader:
    """Reads primitive little-endian values from an in-memory buffer."""

    def __init__(self, data: bytes, offset: int = 0):
        self.data = data
        self.offset = offset

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset

    def read_bytes(self, count: int) -> bytes:
        if count < 0 or count > self.remaining:
            raise EOFError(
                f"Unexpected end of data at offset {self.offset}: wanted {count} bytes, {self.remaining} left"
            )
        chunk = self.data[self.offset:self.offset + count]
        self.offset += count
        return chunk

    def read_byte(self) -> int:
        return self.read_bytes(1)[0]

    def read_uint32(self) -> int:
        return struct.unpack("<I", self.read_bytes(4))[0]

    def read_7bit_int(self) -> int:
        result = 0
        shift = 0
        while True:
            if shift > 28:
                raise ValueError(f"Malformed 7-bit encoded integer at offset {self.offset}")
            value = self.read_byte()
            result |= (value & 0x7F) << shift
            shift += 7
            if not value & 0x80:
                return result

    def read_string(self) -> str:
        length = self.read_7bit_int()
        return self.read_bytes(length).decode("utf-8")
