"""
Member Class Reconnection
==========================

Java compilers flatten nested classes into top-level names joined with
``$`` (``Outer$Inner``) and give non-static inner classes a synthetic
field ``this$0`` pointing at the enclosing instance.  The serialization
stream only ever carries the flattened form.

:class:`MemberClassConnector` undoes that flattening after a stream has
been decoded:

    1. Descriptors declaring a ``this$N`` object field are inner classes
       of the descriptor named by everything before their last ``$``.
    2. Remaining descriptors whose prefix names a known descriptor are
       static member classes of it.
    3. Every linked descriptor is renamed to its final segment, and
       object fields elsewhere that referred to the old name are
       rewritten to the new one.  Earlier declarations of the same name
       (a class re-declared after ``TC_RESET``) are renamed along with it.

The connector mutates descriptors and fields in place and is meant to
run exactly once over a decoded graph, before anything reads the names.
"""

from __future__ import annotations

from typing import Iterable, Optional

from relic.core.constants import FieldType
from relic.core.content import ClassDescription, Field
from relic.core.errors import ReconnectionError

_ENCLOSING_FIELD_PREFIX = "this$"
_NESTED_SEPARATOR = "$"


def is_enclosing_instance_field(name: str) -> bool:
    """``this$0``, ``this$12`` -> True; ``this$``, ``this$x``, ``that$0`` -> False."""
    if not name.startswith(_ENCLOSING_FIELD_PREFIX):
        return False
    index = name[len(_ENCLOSING_FIELD_PREFIX):]
    return index.isascii() and index.isdigit()


def split_nested_name(name: str) -> Optional[tuple[str, str]]:
    """Split a flattened class name at its last ``$``.

    Every ``$``-separated segment must be non-empty::

        split_nested_name("a.B$C$D")  -> ("a.B$C", "D")
        split_nested_name("a.B")      -> None
        split_nested_name("a.B$$C")   -> None
    """
    segments = name.split(_NESTED_SEPARATOR)
    if len(segments) < 2 or not all(segments):
        return None
    return _NESTED_SEPARATOR.join(segments[:-1]), segments[-1]


class MemberClassConnector:
    """Relinks and renames nested classes across a set of descriptors.

    Usage::

        connector = MemberClassConnector(parser.class_descriptions)
        renames = connector.connect()
    """

    def __init__(self, class_descriptions: Iterable[ClassDescription]) -> None:
        self._all: list[ClassDescription] = [
            cd for cd in class_descriptions if not cd.is_proxy
        ]
        # Last descriptor seen for a name wins (re-declared after TC_RESET)
        self._classes: dict[str, ClassDescription] = {cd.name: cd for cd in self._all}
        self._live_names: set[str] = set(self._classes)
        self._pending: dict[int, tuple[ClassDescription, str]] = {}

    # ------------------------------------------------------------------ #
    #  Public interface
    # ------------------------------------------------------------------ #

    def connect(self) -> dict[str, str]:
        """Link nested classes to their enclosing classes and rename them.

        Returns:
            Mapping of old flattened name to new simple name, in the order
            the renames were applied.

        Raises:
            ReconnectionError: On inconsistent names or rename collisions.
        """
        self._link_inner_classes()
        self._link_static_member_classes()
        return self._apply_renames()

    # ------------------------------------------------------------------ #
    #  Linking passes
    # ------------------------------------------------------------------ #

    def _link_inner_classes(self) -> None:
        for cd in list(self._classes.values()):
            for field in cd.fields:
                if field.type is not FieldType.OBJECT:
                    continue
                if not is_enclosing_instance_field(field.name):
                    continue
                self._link_inner_class(cd, field)

    def _link_inner_class(self, cd: ClassDescription, field: Field) -> None:
        parts = split_nested_name(cd.name)
        if parts is None:
            raise ReconnectionError(
                f"Class {cd.name!r} has enclosing-instance field {field.name!r}, "
                f"but its name is not of the form Outer$Inner"
            )
        outer_name, inner_name = parts

        outer = self._classes.get(outer_name)
        if outer is None:
            raise ReconnectionError(
                f"Outer class {outer_name!r} not found for field {field.name!r} "
                f"of class {cd.name!r}"
            )
        if outer.name != field.java_type:
            raise ReconnectionError(
                f"Enclosing-instance field {field.name!r} has type "
                f"{field.java_type!r}, but the outer class is {outer.name!r}"
            )

        if not cd.is_inner_class:
            outer.add_inner_class(cd)
        cd.is_local_inner_class = False
        cd.is_inner_class = True
        field.is_inner_class_reference = True
        self._pending[id(cd)] = (cd, inner_name)

    def _link_static_member_classes(self) -> None:
        for cd in list(self._classes.values()):
            if cd.is_inner_class:
                continue
            parts = split_nested_name(cd.name)
            if parts is None:
                continue
            outer_name, inner_name = parts
            outer = self._classes.get(outer_name)
            if outer is None:
                continue
            outer.add_inner_class(cd)
            cd.is_static_member_class = True
            self._pending[id(cd)] = (cd, inner_name)

    # ------------------------------------------------------------------ #
    #  Renaming
    # ------------------------------------------------------------------ #

    def _apply_renames(self) -> dict[str, str]:
        applied: dict[str, str] = {}
        for cd, new_name in self._pending.values():
            old_name = cd.name
            if new_name in self._live_names:
                raise ReconnectionError(
                    f"Cannot rename class {old_name!r} to {new_name!r}: "
                    f"a class with that name already exists"
                )

            for other in self._all:
                for field in other.fields:
                    if field.type is FieldType.OBJECT and field.java_type == old_name:
                        field.set_reference_type_name(new_name)

            try:
                self._live_names.remove(old_name)
            except KeyError:
                raise ReconnectionError(
                    f"Class name {old_name!r} missing from the live name set"
                ) from None

            for twin in self._all:
                if twin is not cd and twin.name == old_name:
                    self._mirror_nesting(cd, twin)
                    twin.name = new_name
            cd.name = new_name
            self._live_names.add(new_name)
            applied[old_name] = new_name
        return applied

    @staticmethod
    def _mirror_nesting(cd: ClassDescription, twin: ClassDescription) -> None:
        """Copy nesting markers onto an earlier declaration of the same class."""
        twin.is_inner_class = cd.is_inner_class
        twin.is_local_inner_class = cd.is_local_inner_class
        twin.is_static_member_class = cd.is_static_member_class
        if not cd.is_inner_class:
            return
        for field in twin.fields:
            if field.type is FieldType.OBJECT and is_enclosing_instance_field(field.name):
                field.is_inner_class_reference = True


def connect_member_classes(class_descriptions: Iterable[ClassDescription]) -> dict[str, str]:
    """Run :class:`MemberClassConnector` over *class_descriptions* once."""
    return MemberClassConnector(class_descriptions).connect()
