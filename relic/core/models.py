"""
Relic Report Models
====================

Pydantic models summarising a decoded stream for reporting: where the
stream came from, what classes it declared and the normalized values of
its top-level objects.  These are snapshots built after decoding; the
live content graph itself lives in :mod:`relic.core.content`.

References:
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from relic.core.constants import flag_names
from relic.core.content import ClassDescription


class StreamInfo(BaseModel):
    """Top-level metadata about a decoded stream.

    Attributes:
        path: Filesystem path, or ``<memory>`` for in-memory input.
        size: Stream size in bytes.
        md5: MD5 hash of the stream bytes.
        sha256: SHA-256 hash of the stream bytes.
        version: Stream protocol version from the header.
        handles_assigned: Handles registered at the end of decoding
            (after the last reset, if any).
        resets: Number of ``TC_RESET`` markers and exception-record resets.
    """
    path: str = ""
    size: int = 0
    md5: str = ""
    sha256: str = ""
    version: int = 0
    handles_assigned: int = 0
    resets: int = 0


class FieldSummary(BaseModel):
    """A field declared by a class descriptor."""
    name: str
    type: str
    java_type: str
    is_inner_class_reference: bool = False


class ClassSummary(BaseModel):
    """A decoded class descriptor, after inner-class reconnection.

    Attributes:
        handle: Wire handle of the descriptor.
        name: Class name (simple name for reconnected member classes).
        kind: ``"normal"`` or ``"proxy"``.
        serial_version_uid: Declared ``serialVersionUID``.
        flags: Names of the ``SC_*`` flags set.
        fields: Declared fields in wire order.
        super_class: Name of the superclass descriptor, if any.
        interfaces: Proxy interface names.
        enum_constants: Constant names seen for enum classes.
        inner_classes: Names of linked member classes.
    """
    handle: int
    name: str
    kind: str
    serial_version_uid: int = 0
    flags: list[str] = Field(default_factory=list)
    fields: list[FieldSummary] = Field(default_factory=list)
    super_class: Optional[str] = None
    interfaces: list[str] = Field(default_factory=list)
    enum_constants: list[str] = Field(default_factory=list)
    inner_classes: list[str] = Field(default_factory=list)
    is_inner_class: bool = False
    is_static_member_class: bool = False

    @classmethod
    def from_description(cls, cd: ClassDescription) -> ClassSummary:
        return cls(
            handle=cd.handle,
            name=cd.name,
            kind=cd.type.value,
            serial_version_uid=cd.serial_version_uid,
            flags=flag_names(cd.flags),
            fields=[
                FieldSummary(
                    name=f.name,
                    type=f.type.value,
                    java_type=f.java_type,
                    is_inner_class_reference=f.is_inner_class_reference,
                )
                for f in cd.fields
            ],
            super_class=cd.super_class.name if cd.super_class is not None else None,
            interfaces=list(cd.interfaces),
            enum_constants=list(cd.enum_constants),
            inner_classes=[inner.name for inner in cd.inner_classes],
            is_inner_class=cd.is_inner_class,
            is_static_member_class=cd.is_static_member_class,
        )


class DecodeReport(BaseModel):
    """Complete result of decoding one stream.

    Attributes:
        stream: Input metadata.
        objects: Normalized top-level objects.
        object_kinds: Count of top-level content items per kind.
        classes: Summaries of every decoded class descriptor.
        renamed_classes: Old flattened name -> new simple name.
        class_source: Pseudo-Java rendering of the classes.
        duration_seconds: Wall-clock decode time.
    """

    model_config = ConfigDict(extra="ignore")

    stream: StreamInfo = Field(default_factory=StreamInfo)
    objects: list[Any] = Field(default_factory=list)
    object_kinds: dict[str, int] = Field(default_factory=dict)
    classes: list[ClassSummary] = Field(default_factory=list)
    renamed_classes: dict[str, str] = Field(default_factory=dict)
    class_source: str = ""
    duration_seconds: float = Field(default=0.0, ge=0.0)

    @property
    def object_count(self) -> int:
        return sum(self.object_kinds.values())

    @property
    def class_count(self) -> int:
        return len(self.classes)
