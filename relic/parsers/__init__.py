"""
Relic Parsers
==============

Byte-level decoding: the big-endian primitive reader, the per-session
handle table and the recursive stream parser built on both.
"""

from relic.parsers.reader import PrimitiveReader
from relic.parsers.handles import HandleTable
from relic.parsers.stream_parser import StreamParser

__all__ = [
    "HandleTable",
    "PrimitiveReader",
    "StreamParser",
]
