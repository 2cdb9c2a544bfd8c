"""
Java Serialization Stream Constants
====================================

Wire-level constants of the Java Object Serialization Stream protocol:
stream header, type codes (``TC_*``), class-descriptor flags (``SC_*``)
and field type codes.

References:
    - Oracle. Java Object Serialization Specification, chapter 6
      "Object Serialization Stream Protocol".
"""

from __future__ import annotations

import enum

# ---------------------------------------------------------------------------
# Stream header
# ---------------------------------------------------------------------------

STREAM_MAGIC: int = 0xACED
STREAM_VERSION: int = 0x0005

# ---------------------------------------------------------------------------
# Type codes
# ---------------------------------------------------------------------------

TC_BASE: int = 0x70
TC_NULL: int = 0x70
TC_REFERENCE: int = 0x71
TC_CLASSDESC: int = 0x72
TC_OBJECT: int = 0x73
TC_STRING: int = 0x74
TC_ARRAY: int = 0x75
TC_CLASS: int = 0x76
TC_BLOCKDATA: int = 0x77
TC_ENDBLOCKDATA: int = 0x78
TC_RESET: int = 0x79
TC_BLOCKDATALONG: int = 0x7A
TC_EXCEPTION: int = 0x7B
TC_LONGSTRING: int = 0x7C
TC_PROXYCLASSDESC: int = 0x7D
TC_ENUM: int = 0x7E
TC_MAX: int = 0x7E

TC_NAMES: dict[int, str] = {
    TC_NULL: "TC_NULL",
    TC_REFERENCE: "TC_REFERENCE",
    TC_CLASSDESC: "TC_CLASSDESC",
    TC_OBJECT: "TC_OBJECT",
    TC_STRING: "TC_STRING",
    TC_ARRAY: "TC_ARRAY",
    TC_CLASS: "TC_CLASS",
    TC_BLOCKDATA: "TC_BLOCKDATA",
    TC_ENDBLOCKDATA: "TC_ENDBLOCKDATA",
    TC_RESET: "TC_RESET",
    TC_BLOCKDATALONG: "TC_BLOCKDATALONG",
    TC_EXCEPTION: "TC_EXCEPTION",
    TC_LONGSTRING: "TC_LONGSTRING",
    TC_PROXYCLASSDESC: "TC_PROXYCLASSDESC",
    TC_ENUM: "TC_ENUM",
}

# First handle assigned in a session (and after every TC_RESET)
BASE_WIRE_HANDLE: int = 0x7E0000

# ---------------------------------------------------------------------------
# Class descriptor flags
# ---------------------------------------------------------------------------

SC_WRITE_METHOD: int = 0x01
SC_SERIALIZABLE: int = 0x02
SC_EXTERNALIZABLE: int = 0x04
SC_BLOCK_DATA: int = 0x08
SC_ENUM: int = 0x10

SC_NAMES: dict[int, str] = {
    SC_WRITE_METHOD: "WRITE_METHOD",
    SC_SERIALIZABLE: "SERIALIZABLE",
    SC_EXTERNALIZABLE: "EXTERNALIZABLE",
    SC_BLOCK_DATA: "BLOCK_DATA",
    SC_ENUM: "ENUM",
}

PROXY_CLASS_NAME: str = "(proxy class; no name)"


def tc_name(tag: int) -> str:
    """Return a readable name for a type code, e.g. ``TC_OBJECT (0x73)``."""
    name = TC_NAMES.get(tag)
    if name is None:
        return f"0x{tag:02x}"
    return f"{name} (0x{tag:02x})"


def flag_names(flags: int) -> list[str]:
    """Decompose a descriptor flag byte into its ``SC_*`` names."""
    return [name for bit, name in SC_NAMES.items() if flags & bit]


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ClassDescriptionType(str, enum.Enum):
    """Kind of class descriptor."""
    NORMAL = "normal"
    PROXY = "proxy"


class FieldType(str, enum.Enum):
    """Field type codes as written in a class descriptor."""
    BYTE = "B"
    CHAR = "C"
    DOUBLE = "D"
    FLOAT = "F"
    INTEGER = "I"
    LONG = "J"
    SHORT = "S"
    BOOLEAN = "Z"
    ARRAY = "["
    OBJECT = "L"

    @property
    def is_primitive(self) -> bool:
        return self not in (FieldType.ARRAY, FieldType.OBJECT)


PRIMITIVE_TYPE_NAMES: dict[str, str] = {
    FieldType.BYTE.value: "byte",
    FieldType.CHAR.value: "char",
    FieldType.DOUBLE.value: "double",
    FieldType.FLOAT.value: "float",
    FieldType.INTEGER.value: "int",
    FieldType.LONG.value: "long",
    FieldType.SHORT.value: "short",
    FieldType.BOOLEAN.value: "boolean",
}
