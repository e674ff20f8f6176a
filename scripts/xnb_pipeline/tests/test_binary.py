"""
Tests for little-endian binary helpers and 7-bit encoded integers.
"""

import io
import unittest

from xnb_pipeline.utils.binary import BinaryReader, BinaryWriter, encode_7bit_int


class TestEncode7BitInt(unittest.TestCase):
    """Test cases for the .NET 7-bit integer encoding."""

    def test_single_byte_values(self):
        self.assertEqual(encode_7bit_int(0), b"\x00")
        self.assertEqual(encode_7bit_int(1), b"\x01")
        self.assertEqual(encode_7bit_int(0x7F), b"\x7f")

    def test_continuation_bit_set_on_non_final_bytes(self):
        self.assertEqual(encode_7bit_int(0x80), b"\x80\x01")
        self.assertEqual(encode_7bit_int(300), b"\xac\x02")
        self.assertEqual(encode_7bit_int(16384), b"\x80\x80\x01")

    def test_texture_reader_name_length(self):
        """The 148-byte reader name encodes as 0x94 0x01."""
        self.assertEqual(encode_7bit_int(148), b"\x94\x01")

    def test_max_uint32(self):
        self.assertEqual(encode_7bit_int(0xFFFFFFFF), b"\xff\xff\xff\xff\x0f")

    def test_out_of_range(self):
        with self.assertRaises(ValueError):
            encode_7bit_int(-1)
        with self.assertRaises(ValueError):
            encode_7bit_int(1 << 32)


class TestBinaryWriter(unittest.TestCase):
    """Test cases for BinaryWriter."""

    def setUp(self):
        self.stream = io.BytesIO()
        self.writer = BinaryWriter(self.stream)

    def test_write_uint32_little_endian(self):
        self.writer.write_uint32(0x01020304)
        self.assertEqual(self.stream.getvalue(), b"\x04\x03\x02\x01")
        self.assertEqual(self.writer.bytes_written, 4)

    def test_write_string_length_prefixed(self):
        self.writer.write_string("XNB")
        self.assertEqual(self.stream.getvalue(), b"\x03XNB")

    def test_bytes_written_accumulates(self):
        self.writer.write_byte(5)
        self.writer.write_7bit_int(200)
        self.writer.write_bytes(b"abc")
        self.assertEqual(self.writer.bytes_written, 6)
        self.assertEqual(len(self.stream.getvalue()), 6)


class TestBinaryReader(unittest.TestCase):
    """Test cases for BinaryReader."""

    def test_reads_what_writer_wrote(self):
        stream = io.BytesIO()
        writer = BinaryWriter(stream)
        writer.write_byte(7)
        writer.write_uint32(123456)
        writer.write_string("Texture2DReader")
        writer.write_7bit_int(148)

        reader = BinaryReader(stream.getvalue())
        self.assertEqual(reader.read_byte(), 7)
        self.assertEqual(reader.read_uint32(), 123456)
        self.assertEqual(reader.read_string(), "Texture2DReader")
        self.assertEqual(reader.read_7bit_int(), 148)
        self.assertEqual(reader.remaining, 0)

    def test_read_past_end(self):
        reader = BinaryReader(b"\x01\x02")
        with self.assertRaises(EOFError):
            reader.read_uint32()

    def test_malformed_7bit_int(self):
        reader = BinaryReader(b"\xff\xff\xff\xff\xff\xff")
        with self.assertRaises(ValueError):
            reader.read_7bit_int()


if __name__ == '__main__':
    unittest.main()
