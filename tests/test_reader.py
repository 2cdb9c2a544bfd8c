"""Tests for the big-endian primitive reader."""
import struct

import pytest

from relic.core.content import JavaLong
from relic.core.errors import StreamBoundsError, StreamFormatError
from relic.parsers.reader import PrimitiveReader


class TestFixedWidth:
    """Fixed-width reads and their signedness."""

    def test_signed_and_unsigned_byte(self):
        reader = PrimitiveReader(b"\xff\xff")
        assert reader.read_ubyte() == 255
        assert reader.read_byte() == -1

    def test_short_int_long(self):
        data = struct.pack(">hHiIq", -2, 0xFFFE, -3, 0xFFFFFFFD, -4)
        reader = PrimitiveReader(data)
        assert reader.read_short() == -2
        assert reader.read_ushort() == 0xFFFE
        assert reader.read_int() == -3
        assert reader.read_uint() == 0xFFFFFFFD
        value = reader.read_long()
        assert value == -4
        assert isinstance(value, JavaLong)
        assert not reader.has_more()

    def test_long_keeps_full_precision(self):
        reader = PrimitiveReader(struct.pack(">q", 2**63 - 1))
        assert int(reader.read_long()) == 9223372036854775807

    def test_float_and_double(self):
        reader = PrimitiveReader(struct.pack(">fd", 2.2, 1.1))
        assert reader.read_float() == pytest.approx(2.2, rel=1e-6)
        assert reader.read_double() == 1.1

    def test_boolean_and_char(self):
        reader = PrimitiveReader(b"\x00\x02\x00\x61")
        assert reader.read_boolean() is False
        # any non-zero byte is true
        reader = PrimitiveReader(b"\x02\x00\x61")
        assert reader.read_boolean() is True
        assert reader.read_char() == "a"

    def test_offset_tracks_consumption(self):
        reader = PrimitiveReader(b"\x00" * 7)
        reader.read_int()
        assert reader.offset == 4
        assert reader.remaining == 3


class TestBounds:
    """Reads past the end of the buffer."""

    def test_short_read_raises(self):
        reader = PrimitiveReader(b"\x00\x01")
        with pytest.raises(StreamBoundsError) as exc_info:
            reader.read_int()
        assert exc_info.value.offset == 0

    def test_bounds_error_is_format_error(self):
        with pytest.raises(StreamFormatError):
            PrimitiveReader(b"").read_ubyte()

    def test_negative_length(self):
        with pytest.raises(StreamBoundsError):
            PrimitiveReader(b"abc").read_bytes(-1)

    def test_utf_length_past_end(self):
        with pytest.raises(StreamBoundsError):
            PrimitiveReader(b"\x00\x05ab").read_utf()


class TestModifiedUtf8:
    """Java's modified UTF-8 string encoding."""

    def test_ascii(self):
        assert PrimitiveReader(b"\x00\x03abc").read_utf() == "abc"

    def test_encoded_nul(self):
        assert PrimitiveReader.decode_modified_utf8(b"a\xc0\x80b") == "a\x00b"

    def test_multibyte(self):
        raw = "Grüße".encode("utf-8")
        data = struct.pack(">H", len(raw)) + raw
        assert PrimitiveReader(data).read_utf() == "Grüße"

    def test_malformed_is_replaced(self):
        assert PrimitiveReader.decode_modified_utf8(b"a\xffb") == "a\ufffdb"

    def test_supplementary_character_as_surrogate_pair(self):
        # U+1F600 as writeUTF emits it: D83D and DE00, three bytes each
        raw = b"\xed\xa0\xbd\xed\xb8\x80"
        data = struct.pack(">H", len(raw)) + raw
        assert PrimitiveReader(data).read_utf() == "\U0001F600"

    def test_surrogate_pair_between_text(self):
        raw = b"x\xed\xa0\xbd\xed\xb8\x80y"
        assert PrimitiveReader.decode_modified_utf8(raw) == "x\U0001F600y"

    def test_four_byte_utf8_still_decodes(self):
        assert PrimitiveReader.decode_modified_utf8("\U0001F600".encode("utf-8")) == "\U0001F600"

    def test_lone_surrogate_is_kept(self):
        assert PrimitiveReader.decode_modified_utf8(b"\xed\xa0\xbd") == "\ud83d"

    def test_malformed_next_to_surrogate_pair(self):
        raw = b"\xff\xed\xa0\xbd\xed\xb8\x80"
        assert PrimitiveReader.decode_modified_utf8(raw) == "\ufffd\U0001F600"

    def test_empty(self):
        assert PrimitiveReader(b"\x00\x00").read_utf() == ""
