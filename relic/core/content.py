"""
Decoded Stream Content
=======================

In-memory representation of everything a serialization stream can
contain.  Nodes are plain ``__slots__`` classes rather than validated
models: the decoded graph is cyclic (objects refer back to themselves,
descriptors share superclasses) and a few attributes are filled in after
construction by the decoder and the inner-class reconnector.

Every node is created once per decode session.  ``Instance`` field and
annotation maps grow while the instance body is read; descriptor
inner-class and naming attributes are set once by the reconnector.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from relic.core.constants import (
    PRIMITIVE_TYPE_NAMES,
    ClassDescriptionType,
    FieldType,
)
from relic.core.errors import FieldFixupError, StreamFormatError


class JavaLong(int):
    """A decoded Java ``long``.

    Behaves as a plain :class:`int`; the distinct type lets the normalizer
    render longs as exact decimal text while ``byte``/``short``/``int``
    values stay numeric.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f"{int(self)}L"


# ---------------------------------------------------------------------------
# Type descriptor helpers
# ---------------------------------------------------------------------------

def _decode_class_name(name: str) -> str:
    """``Lcom/example/Foo;`` -> ``com.example.Foo``."""
    return name[1:-1].replace("/", ".")


def resolve_java_type(type_code: Union[FieldType, str], class_name: Optional[str]) -> str:
    """Resolve a field type code and wire descriptor to a Java type name.

    ``L`` descriptors resolve to the dotted class name.  ``[`` descriptors
    count each leading ``[`` as one ``[]`` suffix, then resolve either the
    trailing ``L...;`` class name or the trailing primitive code::

        resolve_java_type("[", "[[I")                  -> "int[][]"
        resolve_java_type("[", "[Ljava/lang/String;")  -> "java.lang.String[]"
        resolve_java_type("J", None)                   -> "long"
    """
    code = type_code.value if isinstance(type_code, FieldType) else type_code

    if code == FieldType.OBJECT.value:
        return _decode_class_name(class_name or "")
    if code == FieldType.ARRAY.value:
        if class_name is None:
            return "unknown[]"
        suffix = ""
        for idx, ch in enumerate(class_name):
            if ch == "[":
                suffix += "[]"
                continue
            if ch == "L":
                return _decode_class_name(class_name[idx:]) + suffix
            return PRIMITIVE_TYPE_NAMES.get(ch, "unknown") + suffix
        return class_name
    return PRIMITIVE_TYPE_NAMES.get(code, "unknown")


# ---------------------------------------------------------------------------
# Field
# ---------------------------------------------------------------------------

class Field:
    """A field declared by a class descriptor.

    Attributes:
        name: Field name.
        type: Wire type code.
        class_name: Wire type descriptor (``Lpkg/Name;`` or ``[...``) for
            object and array fields, ``None`` for primitives.
        is_inner_class_reference: Set by the reconnector when the field is
            the compiler-generated pointer to the enclosing instance.
    """

    __slots__ = ("name", "type", "class_name", "is_inner_class_reference")

    def __init__(self, name: str, type: FieldType, class_name: Optional[str] = None) -> None:
        self.name = name
        self.type = type
        self.class_name = class_name
        self.is_inner_class_reference = False

    @property
    def java_type(self) -> str:
        return resolve_java_type(self.type, self.class_name)

    def set_reference_type_name(self, new_name: str) -> None:
        """Point this object field at class *new_name* (dotted form)."""
        if self.type is not FieldType.OBJECT:
            raise FieldFixupError(
                f"Cannot set a reference type name on non-object field "
                f"{self.name!r} of type {self.type.value!r}"
            )
        self.class_name = "L" + new_name.replace(".", "/") + ";"

    def __repr__(self) -> str:
        return f"Field({self.java_type} {self.name})"


# ---------------------------------------------------------------------------
# Content nodes
# ---------------------------------------------------------------------------

class Content:
    """Base class of every decodable stream item.

    Attributes:
        handle: Wire handle, or ``None`` for items that never get one
            (block data).
        kind: Short tag naming the concrete variant.
        is_exception_object: Set once when the item was read as the
            payload of a ``TC_EXCEPTION`` record.
    """

    __slots__ = ("handle", "is_exception_object")

    kind: str = "content"

    def __init__(self, handle: Optional[int]) -> None:
        self.handle = handle
        self.is_exception_object = False

    def _handle_str(self) -> str:
        return "-" if self.handle is None else f"0x{self.handle:x}"


class BlockData(Content):
    """Opaque bytes written by custom ``writeObject``/``writeExternal`` code."""

    __slots__ = ("data",)

    kind = "block"

    def __init__(self, data: bytes) -> None:
        super().__init__(None)
        self.data = data

    def __repr__(self) -> str:
        return f"BlockData({len(self.data)} bytes: {self.data[:16].hex()}{'...' if len(self.data) > 16 else ''})"


class StringContent(Content):
    __slots__ = ("data",)

    kind = "string"

    def __init__(self, handle: int, data: str) -> None:
        super().__init__(handle)
        self.data = data

    def __repr__(self) -> str:
        return f"StringContent({self._handle_str()}, {self.data!r})"


class ArrayContent(Content):
    """A decoded Java array.

    Attributes:
        class_name: Wire array descriptor, e.g. ``[I``.
        data: Element values in order.
    """

    __slots__ = ("class_name", "data")

    kind = "array"

    def __init__(self, handle: Optional[int], class_name: str, data: list[Any]) -> None:
        super().__init__(handle)
        self.class_name = class_name
        self.data = data

    def __repr__(self) -> str:
        return (
            f"ArrayContent({self._handle_str()}, "
            f"{resolve_java_type(FieldType.ARRAY, self.class_name)}, len={len(self.data)})"
        )


class EnumContent(Content):
    __slots__ = ("class_description", "value")

    kind = "enum"

    def __init__(self, handle: int, class_description: ClassDescription, value: str) -> None:
        super().__init__(handle)
        self.class_description = class_description
        self.value = value

    def __repr__(self) -> str:
        return f"EnumContent({self._handle_str()}, {self.class_description.name}.{self.value})"


class Instance(Content):
    """A decoded ordinary object.

    Attributes:
        class_description: Descriptor of the object's class.
        field_data: ``{declaring class name: {field name: value}}``; a
            subclass and a superclass may both declare a field ``x`` and
            both values stay reachable.
        annotations: ``{declaring class name: [content, ...]}`` holding
            the extra items written by that class's custom serialization.
    """

    __slots__ = ("class_description", "field_data", "annotations")

    kind = "instance"

    def __init__(self, handle: int, class_description: ClassDescription) -> None:
        super().__init__(handle)
        self.class_description = class_description
        self.field_data: dict[str, dict[str, Any]] = {}
        self.annotations: dict[str, list[Optional[Content]]] = {}

    def add_field_data(self, class_name: str, field_name: str, value: Any) -> None:
        self.field_data.setdefault(class_name, {})[field_name] = value

    def __repr__(self) -> str:
        return f"Instance({self._handle_str()}, {self.class_description.name})"


class ClassDescription(Content):
    """A decoded class descriptor (ordinary or dynamic proxy).

    ``fields`` keeps wire order, which is also the order instance data
    is read in.  ``super_class`` may be shared by many descriptors.
    ``inner_classes`` and the ``is_*`` naming flags are only set by the
    inner-class reconnector.
    """

    __slots__ = (
        "type",
        "name",
        "serial_version_uid",
        "flags",
        "fields",
        "inner_classes",
        "annotations",
        "super_class",
        "interfaces",
        "enum_constants",
        "is_inner_class",
        "is_local_inner_class",
        "is_static_member_class",
    )

    kind = "class"

    def __init__(self, handle: int, type: ClassDescriptionType) -> None:
        super().__init__(handle)
        self.type = type
        self.name: str = ""
        self.serial_version_uid: int = 0
        self.flags: int = 0
        self.fields: list[Field] = []
        self.inner_classes: list[ClassDescription] = []
        self.annotations: list[Optional[Content]] = []
        self.super_class: Optional[ClassDescription] = None
        self.interfaces: list[str] = []
        # dict keys as an insertion-ordered set
        self.enum_constants: dict[str, None] = {}
        self.is_inner_class = False
        self.is_local_inner_class = False
        self.is_static_member_class = False

    @property
    def is_proxy(self) -> bool:
        return self.type is ClassDescriptionType.PROXY

    def is_array_class(self) -> bool:
        return len(self.name) > 1 and self.name[0] == "["

    def add_enum_constant(self, value: str) -> None:
        self.enum_constants[value] = None

    def add_inner_class(self, cd: ClassDescription) -> None:
        self.inner_classes.append(cd)

    def hierarchy(self) -> list[ClassDescription]:
        """Return the superclass chain, most-ancestral class first.

        Proxy superclasses end the chain.  A chain that loops back on
        itself is a malformed stream.
        """
        chain: list[ClassDescription] = []
        seen: set[int] = set()
        cd: Optional[ClassDescription] = self
        while cd is not None:
            if id(cd) in seen:
                raise StreamFormatError(
                    f"Cyclic superclass chain through class {cd.name!r}"
                )
            seen.add(id(cd))
            chain.append(cd)
            sup = cd.super_class
            cd = sup if sup is not None and not sup.is_proxy else None
        chain.reverse()
        return chain

    def __repr__(self) -> str:
        return f"ClassDescription({self._handle_str()}, {self.name})"
