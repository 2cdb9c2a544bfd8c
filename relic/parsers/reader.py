"""
Big-Endian Primitive Reader
============================

Sequential cursor over an immutable byte buffer.  Every read consumes
exactly the width of the primitive it decodes; reading past the end of
the buffer raises :class:`~relic.core.errors.StreamBoundsError`.

All multi-byte values in a serialization stream are big-endian
(network order), as written by ``java.io.DataOutputStream``.
"""

from __future__ import annotations

import codecs
import struct

from relic.core.content import JavaLong
from relic.core.errors import StreamBoundsError

_U8 = struct.Struct(">B")
_S8 = struct.Struct(">b")
_U16 = struct.Struct(">H")
_S16 = struct.Struct(">h")
_S32 = struct.Struct(">i")
_U32 = struct.Struct(">I")
_S64 = struct.Struct(">q")
_F32 = struct.Struct(">f")
_F64 = struct.Struct(">d")

_SURROGATEPASS = codecs.lookup_error("surrogatepass")
_REPLACE = codecs.lookup_error("replace")


def _surrogatepass_or_replace(exc: UnicodeError) -> tuple[str, int]:
    """Keep 3-byte encoded surrogates; replace anything else malformed."""
    try:
        return _SURROGATEPASS(exc)
    except UnicodeError:
        return _REPLACE(exc)


MUTF8_ERRORS = "relic.mutf8"
codecs.register_error(MUTF8_ERRORS, _surrogatepass_or_replace)


class PrimitiveReader:
    """Cursor over a serialization stream buffer.

    Usage::

        reader = PrimitiveReader(raw_bytes)
        magic = reader.read_ushort()
        name = reader.read_utf()
    """

    __slots__ = ("_data", "_pos")

    def __init__(self, data: bytes) -> None:
        self._data: bytes = bytes(data)
        self._pos: int = 0

    # ------------------------------------------------------------------ #
    #  Cursor state
    # ------------------------------------------------------------------ #

    @property
    def offset(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def has_more(self) -> bool:
        return self._pos < len(self._data)

    def _take(self, fmt: struct.Struct) -> int | float:
        self._require(fmt.size)
        (value,) = fmt.unpack_from(self._data, self._pos)
        self._pos += fmt.size
        return value

    def _require(self, width: int) -> None:
        if width > self.remaining:
            raise StreamBoundsError(
                f"Read of {width} byte(s) past end of stream "
                f"({self.remaining} remaining)",
                offset=self._pos,
            )

    # ------------------------------------------------------------------ #
    #  Fixed-width primitives
    # ------------------------------------------------------------------ #

    def read_ubyte(self) -> int:
        """Unsigned 8-bit value (type codes, flags, short lengths)."""
        return int(self._take(_U8))

    def read_byte(self) -> int:
        """Signed 8-bit Java ``byte``."""
        return int(self._take(_S8))

    def read_boolean(self) -> bool:
        return self.read_ubyte() != 0

    def read_char(self) -> str:
        """Java ``char``: one UTF-16 code unit."""
        return chr(self.read_ushort())

    def read_ushort(self) -> int:
        return int(self._take(_U16))

    def read_short(self) -> int:
        return int(self._take(_S16))

    def read_int(self) -> int:
        return int(self._take(_S32))

    def read_uint(self) -> int:
        return int(self._take(_U32))

    def read_long(self) -> JavaLong:
        return JavaLong(self._take(_S64))

    def read_float(self) -> float:
        return float(self._take(_F32))

    def read_double(self) -> float:
        return float(self._take(_F64))

    # ------------------------------------------------------------------ #
    #  Runs
    # ------------------------------------------------------------------ #

    def read_bytes(self, length: int) -> bytes:
        if length < 0:
            raise StreamBoundsError(f"Negative read length {length}", offset=self._pos)
        self._require(length)
        value = self._data[self._pos:self._pos + length]
        self._pos += length
        return value

    def read_utf(self) -> str:
        """16-bit length prefix followed by modified UTF-8 text."""
        return self.decode_modified_utf8(self.read_bytes(self.read_ushort()))

    @staticmethod
    def decode_modified_utf8(raw: bytes) -> str:
        """Decode Java's modified UTF-8.

        NUL is written as the overlong pair ``C0 80``, and characters
        outside the BMP as a surrogate pair with each half encoded on its
        own (six bytes).  The halves are joined back into one character.
        Malformed sequences are replaced rather than rejected.
        """
        text = raw.replace(b"\xc0\x80", b"\x00").decode("utf-8", errors=MUTF8_ERRORS)
        return text.encode("utf-16-be", "surrogatepass").decode("utf-16-be", "surrogatepass")
