"""
Relic -- Java Serialization Stream Decoder
===========================================

Relic reads the binary stream produced by ``java.io.ObjectOutputStream``
without a JVM and without the classes that wrote it.  It rebuilds the
object graph, recovers every class descriptor, and renders both in
forms a person (or a script) can inspect.

Capabilities:
    - Single-pass decoding of stream version 5 (objects, arrays, enums,
      strings, block data, class objects, exceptions, proxies, resets)
    - Back-reference resolution, including self-referencing structures
    - Reconnection of compiler-flattened nested classes (``Outer$Inner``)
    - Normalization of the object graph to JSON-compatible values, with
      built-in recognisers for common ``java.util`` collections and boxed
      primitives, and cycle sentinels for recursive structures
    - Pseudo-Java source rendering of decoded class descriptors
    - Rich console display and JSON / source reports

Modules:
    - relic.core: Constants, content nodes, errors, models and the engine
    - relic.parsers: Primitive reader, handle table and stream parser
    - relic.analyzers: Member-class reconnector and normalizer
    - relic.output: Class printer, console display and report writer
    - relic.cli: Click-based command-line interface

References:
    - Oracle. Java Object Serialization Specification, chapter 6.
    - unsynchronized/jdeserialize (public domain reference decoder).
"""

from relic.core.engine import DeserializationResult, RelicEngine, deserialize
from relic.core.errors import (
    ExceptionRecordError,
    FieldFixupError,
    HandleResolutionError,
    NestingDepthError,
    ReconnectionError,
    RelicError,
    StreamBoundsError,
    StreamFormatError,
)
from relic.analyzers.normalizer import normalize
from relic.output.printer import print_classes

__version__ = "1.0.0"
__tool_name__ = "relic"
__all__ = [
    "DeserializationResult",
    "RelicEngine",
    "deserialize",
    "normalize",
    "print_classes",
    "RelicError",
    "StreamFormatError",
    "StreamBoundsError",
    "HandleResolutionError",
    "NestingDepthError",
    "ExceptionRecordError",
    "ReconnectionError",
    "FieldFixupError",
]
