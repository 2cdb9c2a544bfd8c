"""
Relic Core Module
==================

Wire constants, decoded content nodes, error types, report models and
the decode engine.
"""

from relic.core.constants import ClassDescriptionType, FieldType
from relic.core.errors import RelicError
from relic.core.content import (
    ArrayContent,
    BlockData,
    ClassDescription,
    Content,
    EnumContent,
    Field,
    Instance,
    JavaLong,
    StringContent,
)
from relic.core.models import ClassSummary, DecodeReport, FieldSummary, StreamInfo
from relic.core.engine import DeserializationResult, RelicEngine, deserialize

__all__ = [
    "ArrayContent",
    "BlockData",
    "ClassDescription",
    "ClassDescriptionType",
    "ClassSummary",
    "Content",
    "DecodeReport",
    "DeserializationResult",
    "EnumContent",
    "Field",
    "FieldSummary",
    "FieldType",
    "Instance",
    "JavaLong",
    "RelicEngine",
    "RelicError",
    "StreamInfo",
    "StringContent",
    "deserialize",
]
