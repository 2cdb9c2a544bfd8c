"""
Java Serialization Stream Parser
=================================

Single-pass decoder for the Java Object Serialization Stream protocol
(``java.io.ObjectOutputStream``, stream version 5).

The parser reads one type code at a time and dispatches on it.  The
grammar is recursive: class descriptors carry annotation blocks that may
contain arbitrary content, objects carry field values that may be
further objects, and any position may instead hold a back-reference to
something decoded earlier.  Back-references are resolved through a
:class:`~relic.parsers.handles.HandleTable`; nodes are registered the
moment their handle is assigned, so a structure that refers to itself
while its body is still being read resolves to the (partially built)
node.

The parser extracts:
    - Top-level content items (objects, arrays, strings, enums, block
      data, class objects, exceptions)
    - Every class descriptor met in the stream, ordinary and proxy

References:
    - Oracle. Java Object Serialization Specification, section 6.4
      "Grammar for the Stream Format".
    - unsynchronized/jdeserialize (public domain reference decoder).
"""

from __future__ import annotations

from typing import Any, Optional

from relic.core.constants import (
    PROXY_CLASS_NAME,
    SC_BLOCK_DATA,
    SC_ENUM,
    SC_EXTERNALIZABLE,
    SC_SERIALIZABLE,
    SC_WRITE_METHOD,
    STREAM_MAGIC,
    STREAM_VERSION,
    TC_ARRAY,
    TC_BLOCKDATA,
    TC_BLOCKDATALONG,
    TC_CLASS,
    TC_CLASSDESC,
    TC_ENDBLOCKDATA,
    TC_ENUM,
    TC_EXCEPTION,
    TC_LONGSTRING,
    TC_NULL,
    TC_OBJECT,
    TC_PROXYCLASSDESC,
    TC_REFERENCE,
    TC_RESET,
    TC_STRING,
    ClassDescriptionType,
    FieldType,
    tc_name,
)
from relic.core.content import (
    ArrayContent,
    BlockData,
    ClassDescription,
    Content,
    EnumContent,
    Field,
    Instance,
    StringContent,
)
from relic.core.errors import (
    ExceptionRecordError,
    HandleResolutionError,
    NestingDepthError,
    StreamFormatError,
)
from relic.parsers.handles import HandleTable
from relic.parsers.reader import PrimitiveReader


class StreamParser:
    """Decoder for one serialization stream.

    A parser instance is one decoding session: it owns the cursor, the
    handle table and the list of class descriptors seen.  It is not
    reusable and must not be shared between threads.

    Usage::

        parser = StreamParser(raw_bytes)
        objects = parser.parse()
        classes = parser.class_descriptions
    """

    def __init__(self, data: bytes) -> None:
        """Initialise the parser with a complete stream.

        Args:
            data: The whole serialized stream, header included.
        """
        self._reader = PrimitiveReader(data)
        self._handles = HandleTable()
        self._class_descriptions: list[ClassDescription] = []
        self._reset_count: int = 0

    # ------------------------------------------------------------------ #
    #  Public interface
    # ------------------------------------------------------------------ #

    def parse(self) -> list[Content]:
        """Decode the whole stream.

        Returns:
            Every non-null top-level content item, in stream order.

        Raises:
            RelicError: On any malformed or unsupported construct.
            NestingDepthError: If nesting exhausts the recursion limit.
        """
        self._read_header()

        objects: list[Content] = []
        while self._reader.has_more():
            tag = self._reader.read_ubyte()
            if tag == TC_RESET:
                self._reset()
                continue
            try:
                content = self.read_content(tag, block_data=True)
            except RecursionError:
                raise NestingDepthError(
                    "Object graph nested too deeply", offset=self._reader.offset
                ) from None
            if content is not None:
                objects.append(content)
        return objects

    @property
    def class_descriptions(self) -> list[ClassDescription]:
        """Descriptors in completion order (superclasses before subclasses)."""
        return self._class_descriptions

    @property
    def handles(self) -> HandleTable:
        return self._handles

    @property
    def reset_count(self) -> int:
        """Number of handle-table resets performed so far."""
        return self._reset_count

    @property
    def offset(self) -> int:
        return self._reader.offset

    # ------------------------------------------------------------------ #
    #  Content dispatch
    # ------------------------------------------------------------------ #

    def read_content(self, tag: int, block_data: bool) -> Optional[Content]:
        """Decode one content item whose type code *tag* was just read.

        Args:
            tag: The type code.
            block_data: Whether raw block data is legal at this position.

        Returns:
            The decoded content, or ``None`` for ``TC_NULL``.
        """
        if tag == TC_NULL:
            return None
        if tag == TC_CLASS:
            return self._handle_class_desc(self._reader.read_ubyte(), must_be_new=True)
        if tag == TC_OBJECT:
            return self._read_new_object()
        if tag == TC_ARRAY:
            return self._read_new_array()
        if tag == TC_ENUM:
            return self._read_new_enum()
        if tag in (TC_STRING, TC_LONGSTRING):
            return self._read_new_string(tag)
        if tag == TC_REFERENCE:
            return self._read_prev_object()
        if tag in (TC_BLOCKDATA, TC_BLOCKDATALONG):
            if not block_data:
                raise StreamFormatError(
                    f"Got {tc_name(tag)} where block data is not allowed",
                    offset=self._tag_offset(),
                )
            return self._read_block_data(tag)
        if tag == TC_EXCEPTION:
            return self._read_exception()
        if tag in (TC_CLASSDESC, TC_PROXYCLASSDESC):
            return self._handle_class_desc(tag, must_be_new=True)
        raise StreamFormatError(
            f"Unknown content type code {tc_name(tag)}", offset=self._tag_offset()
        )

    # ------------------------------------------------------------------ #
    #  Header / session state
    # ------------------------------------------------------------------ #

    def _read_header(self) -> None:
        magic = self._reader.read_ushort()
        if magic != STREAM_MAGIC:
            raise StreamFormatError(
                f"Stream magic mismatch: expected 0x{STREAM_MAGIC:04x}, got 0x{magic:04x}",
                offset=0,
            )
        version = self._reader.read_ushort()
        if version != STREAM_VERSION:
            raise StreamFormatError(
                f"Stream version mismatch: expected 0x{STREAM_VERSION:04x}, got 0x{version:04x}",
                offset=2,
            )

    def _reset(self) -> None:
        self._handles.reset()
        self._reset_count += 1

    def _tag_offset(self) -> int:
        return self._reader.offset - 1

    def _read_prev_object(self) -> Content:
        offset = self._reader.offset
        handle = self._reader.read_uint()
        return self._handles.resolve(handle, offset=offset)

    # ------------------------------------------------------------------ #
    #  Class descriptors
    # ------------------------------------------------------------------ #

    def _read_class_desc(self) -> Optional[ClassDescription]:
        """Read a descriptor position that may be null or a back-reference."""
        return self._handle_class_desc(self._reader.read_ubyte(), must_be_new=False)

    def _handle_class_desc(self, tag: int, must_be_new: bool) -> Optional[ClassDescription]:
        if tag == TC_CLASSDESC:
            return self._read_new_class_desc()
        if tag == TC_PROXYCLASSDESC:
            return self._read_new_proxy_class_desc()
        if tag == TC_NULL:
            if must_be_new:
                raise HandleResolutionError(
                    "Expected a new class description, got TC_NULL",
                    offset=self._tag_offset(),
                )
            return None
        if tag == TC_REFERENCE:
            if must_be_new:
                raise HandleResolutionError(
                    "Expected a new class description, got a back-reference",
                    offset=self._tag_offset(),
                )
            content = self._read_prev_object()
            if not isinstance(content, ClassDescription):
                raise StreamFormatError(
                    f"Back-reference 0x{content.handle:x} is a {content.kind}, "
                    f"expected a class description"
                )
            return content
        raise StreamFormatError(
            f"Expected a class description, got {tc_name(tag)}",
            offset=self._tag_offset(),
        )

    def _read_new_class_desc(self) -> ClassDescription:
        name = self._reader.read_utf()
        serial_version_uid = self._reader.read_long()

        handle = self._handles.new_handle()
        cd = ClassDescription(handle, ClassDescriptionType.NORMAL)
        cd.name = name
        cd.serial_version_uid = int(serial_version_uid)
        self._handles.save(handle, cd)

        cd.flags = self._reader.read_ubyte()

        count_offset = self._reader.offset
        field_count = self._reader.read_short()
        if field_count < 0:
            raise StreamFormatError(
                f"Invalid field count {field_count} in class {name!r}",
                offset=count_offset,
            )
        cd.fields = [self._read_field_desc() for _ in range(field_count)]

        cd.annotations = self._read_annotation_block()
        cd.super_class = self._read_class_desc()

        self._class_descriptions.append(cd)
        return cd

    def _read_field_desc(self) -> Field:
        type_offset = self._reader.offset
        code = chr(self._reader.read_ubyte())
        try:
            field_type = FieldType(code)
        except ValueError:
            raise StreamFormatError(
                f"Invalid field type code {code!r}", offset=type_offset
            ) from None

        name = self._reader.read_utf()
        if field_type.is_primitive:
            return Field(name, field_type)

        type_name = self._read_new_string(self._reader.read_ubyte())
        return Field(name, field_type, type_name.data)

    def _read_new_proxy_class_desc(self) -> ClassDescription:
        handle = self._handles.new_handle()
        cd = ClassDescription(handle, ClassDescriptionType.PROXY)
        cd.name = PROXY_CLASS_NAME
        self._handles.save(handle, cd)

        count_offset = self._reader.offset
        count = self._reader.read_int()
        if count < 0:
            raise StreamFormatError(
                f"Invalid proxy interface count {count}", offset=count_offset
            )
        cd.interfaces = [self._reader.read_utf() for _ in range(count)]

        cd.annotations = self._read_annotation_block()
        cd.super_class = self._read_class_desc()

        self._class_descriptions.append(cd)
        return cd

    def _read_annotation_block(self) -> list[Optional[Content]]:
        """Read content items up to ``TC_ENDBLOCKDATA``."""
        items: list[Optional[Content]] = []
        while True:
            if not self._reader.has_more():
                raise StreamFormatError(
                    "Stream ended inside an annotation block "
                    "(missing TC_ENDBLOCKDATA)",
                    offset=self._reader.offset,
                )
            tag = self._reader.read_ubyte()
            if tag == TC_ENDBLOCKDATA:
                return items
            if tag == TC_RESET:
                self._reset()
                continue
            items.append(self.read_content(tag, block_data=True))

    # ------------------------------------------------------------------ #
    #  Strings / block data
    # ------------------------------------------------------------------ #

    def _read_new_string(self, tag: int) -> StringContent:
        if tag == TC_REFERENCE:
            content = self._read_prev_object()
            if not isinstance(content, StringContent):
                raise StreamFormatError(
                    f"Back-reference 0x{content.handle:x} is a {content.kind}, "
                    f"expected a string"
                )
            return content
        if tag == TC_STRING:
            handle = self._handles.new_handle()
            string = StringContent(handle, self._reader.read_utf())
            self._handles.save(handle, string)
            return string
        if tag == TC_LONGSTRING:
            raise StreamFormatError(
                "TC_LONGSTRING content is not supported", offset=self._tag_offset()
            )
        if tag == TC_NULL:
            raise StreamFormatError(
                "Stream signalled TC_NULL where a string was expected",
                offset=self._tag_offset(),
            )
        raise StreamFormatError(
            f"Invalid type code {tc_name(tag)} for a string", offset=self._tag_offset()
        )

    def _read_block_data(self, tag: int) -> BlockData:
        size_offset = self._reader.offset
        if tag == TC_BLOCKDATA:
            size = self._reader.read_ubyte()
        else:
            size = self._reader.read_int()
        if size < 0:
            raise StreamFormatError(f"Invalid block data size {size}", offset=size_offset)
        return BlockData(self._reader.read_bytes(size))

    # ------------------------------------------------------------------ #
    #  Objects, arrays, enums
    # ------------------------------------------------------------------ #

    def _require_class_desc(self, what: str) -> ClassDescription:
        offset = self._reader.offset
        cd = self._read_class_desc()
        if cd is None:
            raise StreamFormatError(f"{what} has a null class description", offset=offset)
        return cd

    def _read_new_object(self) -> Instance:
        cd = self._require_class_desc("Object")
        handle = self._handles.new_handle()
        instance = Instance(handle, cd)
        self._handles.save(handle, instance)
        self._read_class_data(instance)
        return instance

    def _read_class_data(self, instance: Instance) -> None:
        """Read field values and annotations, root class first."""
        for cd in instance.class_description.hierarchy():
            if cd.flags & SC_SERIALIZABLE:
                for field in cd.fields:
                    instance.add_field_data(
                        cd.name, field.name, self._read_field_value(field.type)
                    )
                if cd.flags & SC_WRITE_METHOD:
                    if cd.flags & SC_ENUM:
                        raise StreamFormatError(
                            f"Class {cd.name!r} sets both SC_ENUM and SC_WRITE_METHOD",
                            offset=self._reader.offset,
                        )
                    instance.annotations[cd.name] = self._read_annotation_block()
            elif cd.flags & SC_EXTERNALIZABLE:
                if cd.flags & SC_BLOCK_DATA:
                    raise StreamFormatError(
                        f"Externalizable class {cd.name!r} with SC_BLOCK_DATA "
                        f"cannot be interpreted",
                        offset=self._reader.offset,
                    )
                instance.annotations[cd.name] = self._read_annotation_block()

    def _read_field_value(self, field_type: FieldType) -> Any:
        reader = self._reader
        if field_type is FieldType.BYTE:
            return reader.read_byte()
        if field_type is FieldType.CHAR:
            return reader.read_char()
        if field_type is FieldType.DOUBLE:
            return reader.read_double()
        if field_type is FieldType.FLOAT:
            return reader.read_float()
        if field_type is FieldType.INTEGER:
            return reader.read_int()
        if field_type is FieldType.LONG:
            return reader.read_long()
        if field_type is FieldType.SHORT:
            return reader.read_short()
        if field_type is FieldType.BOOLEAN:
            return reader.read_boolean()
        # object / array
        return self.read_content(reader.read_ubyte(), block_data=False)

    def _read_new_array(self) -> ArrayContent:
        cd = self._require_class_desc("Array")
        handle = self._handles.new_handle()

        if len(cd.name) < 2:
            raise StreamFormatError(f"Invalid array class name {cd.name!r}")
        try:
            element_type = FieldType(cd.name[1])
        except ValueError:
            raise StreamFormatError(
                f"Invalid array element type in class name {cd.name!r}"
            ) from None

        array = ArrayContent(handle, cd.name, [])
        self._handles.save(handle, array)

        size_offset = self._reader.offset
        size = self._reader.read_int()
        if size < 0:
            raise StreamFormatError(f"Invalid array length {size}", offset=size_offset)
        array.data = [self._read_field_value(element_type) for _ in range(size)]
        return array

    def _read_new_enum(self) -> EnumContent:
        cd = self._require_class_desc("Enum constant")
        handle = self._handles.new_handle()
        name = self._read_new_string(self._reader.read_ubyte())

        constant = EnumContent(handle, cd, name.data)
        self._handles.save(handle, constant)
        cd.add_enum_constant(name.data)
        return constant

    # ------------------------------------------------------------------ #
    #  Exceptions
    # ------------------------------------------------------------------ #

    def _read_exception(self) -> Instance:
        """Read a ``TC_EXCEPTION`` record: reset, one object, reset."""
        self._reset()

        tag = self._reader.read_ubyte()
        if tag == TC_RESET:
            raise ExceptionRecordError(
                "TC_RESET where a serialized exception object was expected",
                offset=self._tag_offset(),
            )

        content = self.read_content(tag, block_data=False)
        if content is None:
            raise ExceptionRecordError("Stream signalled an exception, but the object was null")
        if not isinstance(content, Instance):
            raise ExceptionRecordError(
                f"Stream signalled an exception, but the content is a {content.kind}"
            )
        if content.is_exception_object:
            raise ExceptionRecordError(
                f"Exception object 0x{content.handle:x} was already read as an exception"
            )
        content.is_exception_object = True

        self._reset()
        return content
