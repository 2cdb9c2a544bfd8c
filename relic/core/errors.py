"""
Relic Exceptions
=================

Every decode failure is fatal for the session and surfaces as one of
the typed exceptions below, all rooted at :class:`RelicError`.
"""

from __future__ import annotations


class RelicError(Exception):
    """Base class for all Relic decoding failures.

    Attributes:
        offset: Byte offset in the stream where the failure was detected,
                or ``None`` when it is not tied to a stream position.
    """

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        self.offset = offset
        if offset is not None:
            message = f"{message} (at offset 0x{offset:x})"
        super().__init__(message)


class StreamFormatError(RelicError):
    """The stream violates the wire grammar or uses an unsupported form."""

    pass


class StreamBoundsError(StreamFormatError):
    """A read ran past the end of the buffer."""

    pass


class NestingDepthError(RelicError):
    """A content graph is nested deeper than the interpreter's recursion limit."""

    pass


class HandleResolutionError(RelicError):
    """A back-reference could not be honoured.

    Raised for handles never registered in the current session and for
    "must be new" positions that received a null or a back-reference.
    """

    pass


class ExceptionRecordError(RelicError):
    """A ``TC_EXCEPTION`` record is malformed."""

    pass


class ReconnectionError(RelicError):
    """Inner-class names could not be demangled or relinked consistently."""

    pass


class FieldFixupError(RelicError):
    """A reference type name was set on a field that is not an object field."""

    pass
