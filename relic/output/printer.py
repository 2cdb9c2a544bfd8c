"""
Class Definition Printer
=========================

Renders decoded class descriptors as pseudo-Java source: one class
(or enum, or proxy comment) per top-level descriptor, with nested
member classes printed inside their enclosing class once the
reconnector has linked them.

The printer only formats; it reads the descriptor graph and never
changes it.
"""

from __future__ import annotations

import io
from typing import Iterable

from relic.core.constants import SC_ENUM, SC_EXTERNALIZABLE, FieldType
from relic.core.content import ClassDescription, resolve_java_type


class ClassPrinter:
    """Pseudo-source renderer for a list of class descriptors.

    Usage::

        text = ClassPrinter(result.classes).dump_all()
    """

    def __init__(self, class_descriptions: Iterable[ClassDescription], indent_width: int = 2) -> None:
        self._classes = list(class_descriptions)
        self._unit = " " * indent_width

    def dump_all(self) -> str:
        out = io.StringIO()
        for cd in self._classes:
            if cd.is_array_class():
                continue
            # Member classes are printed inside their enclosing class
            if cd.is_static_member_class or cd.is_inner_class:
                continue
            out.write(f"// handle: {cd.handle:x}\n")
            self.dump(0, cd, out)
            out.write("\n")
        return out.getvalue()

    def dump(self, level: int, cd: ClassDescription, out: io.StringIO) -> None:
        pad = self._unit * level

        if cd.annotations:
            out.write(f"{pad}// annotations: \n")
            for item in cd.annotations:
                out.write(f"{pad}// {self._unit}{item!r}\n")

        if cd.is_proxy:
            self._dump_proxy(pad, cd, out)
        elif cd.flags & SC_ENUM:
            self._dump_enum(level, cd, out)
        else:
            self._dump_class(level, cd, out)

    # ------------------------------------------------------------------ #
    #  Descriptor kinds
    # ------------------------------------------------------------------ #

    def _dump_enum(self, level: int, cd: ClassDescription, out: io.StringIO) -> None:
        pad = self._unit * level
        inner_pad = self._unit * (level + 1)
        out.write(f"{pad}enum {cd.name} {{")
        if cd.enum_constants:
            out.write("\n")
            out.write(inner_pad + f",\n{inner_pad}".join(cd.enum_constants) + ";")
        out.write("\n")
        out.write(f"{pad}}}\n")

    def _dump_class(self, level: int, cd: ClassDescription, out: io.StringIO) -> None:
        pad = self._unit * level
        inner_pad = self._unit * (level + 1)

        name = cd.name
        if cd.is_array_class():
            name = resolve_java_type(FieldType.ARRAY, cd.name)

        header = pad
        if cd.is_static_member_class:
            header += "static "
        header += f"class {name}"
        if cd.super_class is not None:
            header += f" extends {cd.super_class.name}"
        header += " implements "
        header += "java.io.Externalizable" if cd.flags & SC_EXTERNALIZABLE else "java.io.Serializable"
        for interface in cd.interfaces:
            header += f", {interface}"
        out.write(header + " {\n")

        out.write(f"{inner_pad}static final long serialVersionUID = {cd.serial_version_uid}L;\n")
        out.write("\n")

        for inner in cd.inner_classes:
            self.dump(level + 1, inner, out)
            out.write("\n")

        for field in cd.fields:
            if field.is_inner_class_reference:
                continue
            out.write(f"{inner_pad}{field.java_type} {field.name};\n")

        out.write(f"{pad}}}\n")

    def _dump_proxy(self, pad: str, cd: ClassDescription, out: io.StringIO) -> None:
        line = f"{pad}// proxy class {cd.handle:x}"
        if cd.super_class is not None:
            line += f" extends {cd.super_class.name}"
        out.write(line + " implements \n")
        for interface in cd.interfaces:
            out.write(f"{pad}//    {interface}, \n")
        if cd.flags & SC_EXTERNALIZABLE:
            out.write(f"{pad}//    java.io.Externalizable\n")
        else:
            out.write(f"{pad}//    java.io.Serializable\n")


def print_classes(class_descriptions: Iterable[ClassDescription], indent_width: int = 2) -> str:
    """Render *class_descriptions* as pseudo-Java source text."""
    return ClassPrinter(class_descriptions, indent_width=indent_width).dump_all()
