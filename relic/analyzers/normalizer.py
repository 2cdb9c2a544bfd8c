"""
Content Normalization
======================

Flattens a decoded content graph into plain, JSON-compatible values:
``dict`` for objects and maps, ``list`` for arrays and collections,
scalars for everything else.

A handful of well-known ``java.util`` / ``java.lang`` classes are
recognised by exact class name and rendered by what they hold rather
than by their internal fields.  Recognisers are tried in a fixed
priority order and the first match wins; anything unrecognised becomes a
mapping of its field names to normalized values.

Cycles are cut with a sentinel string ``<cycle-ref-HANDLE>``: each step
of the traversal carries its own copy of the handles already on the
current path, so siblings never see each other's visits, only their
ancestors'.
"""

from __future__ import annotations

import json
from typing import Any, ClassVar, Iterable, Optional, Sequence

from relic.core.content import (
    ArrayContent,
    BlockData,
    Content,
    EnumContent,
    Instance,
    JavaLong,
    StringContent,
)
from relic.core.errors import NestingDepthError

CYCLE_SENTINEL_PREFIX = "<cycle-ref-"


def cycle_sentinel(handle: int) -> str:
    return f"{CYCLE_SENTINEL_PREFIX}{handle}>"


def is_cycle_sentinel(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(CYCLE_SENTINEL_PREFIX)


# ---------------------------------------------------------------------------
# Recognisers
# ---------------------------------------------------------------------------

class ObjectNormalizer:
    """Base class of a built-in class recogniser.

    Subclasses list the class names they accept in ``class_names`` and
    implement :meth:`normalize`.  They receive the :class:`Normalizer` so
    nested values go through the same cycle-aware path.
    """

    class_names: ClassVar[frozenset[str]] = frozenset()

    def matches(self, instance: Instance) -> bool:
        return instance.class_description.name in self.class_names

    def normalize(self, normalizer: Normalizer, instance: Instance, history: frozenset[int]) -> Any:
        raise NotImplementedError

    @staticmethod
    def _annotation_values(
        normalizer: Normalizer, instance: Instance, history: frozenset[int]
    ) -> list[Any]:
        """Normalize every non-block-data annotation item, in recorded order."""
        values: list[Any] = []
        for items in instance.annotations.values():
            for item in items:
                if isinstance(item, BlockData):
                    continue
                values.append(normalizer.content_value(item, history))
        return values


class VectorNormalizer(ObjectNormalizer):
    """``java.util.Vector``: the first ``elementCount`` slots of ``elementData``."""

    class_names = frozenset({"java.util.Vector"})

    def normalize(self, normalizer: Normalizer, instance: Instance, history: frozenset[int]) -> list[Any]:
        fields = instance.field_data.get("java.util.Vector")
        if not fields:
            return []
        backing = fields.get("elementData")
        count = fields.get("elementCount", 0)
        if not isinstance(backing, ArrayContent) or not isinstance(count, int):
            return []
        return [
            normalizer.content_value(element, history)
            for element in backing.data[:max(count, 0)]
        ]


class ListNormalizer(ObjectNormalizer):
    """Collections that write their elements as annotation objects."""

    class_names = frozenset({
        "java.util.ArrayList",
        "java.util.LinkedList",
        "java.util.ArrayDeque",
        "java.util.concurrent.ConcurrentLinkedQueue",
        "java.util.HashSet",
        "java.util.LinkedHashSet",
    })

    def normalize(self, normalizer: Normalizer, instance: Instance, history: frozenset[int]) -> list[Any]:
        return self._annotation_values(normalizer, instance, history)


class MapNormalizer(ObjectNormalizer):
    """Maps that write alternating key / value annotation objects."""

    class_names = frozenset({
        "java.util.HashMap",
        "java.util.TreeMap",
        "java.util.LinkedHashMap",
        "java.util.Hashtable",
        "java.util.IdentityHashMap",
    })

    def normalize(self, normalizer: Normalizer, instance: Instance, history: frozenset[int]) -> dict[str, Any]:
        flat = self._annotation_values(normalizer, instance, history)
        result: dict[str, Any] = {}
        # [k1, v1, k2, v2, ...]
        for idx in range(0, len(flat), 2):
            value = flat[idx + 1] if idx + 1 < len(flat) else None
            result[self.mapping_key(flat[idx])] = value
        return result

    @staticmethod
    def mapping_key(key: Any) -> str:
        if isinstance(key, str):
            return key
        return json.dumps(key, ensure_ascii=False, sort_keys=True, default=str)


class WrappedPrimitiveNormalizer(ObjectNormalizer):
    """Boxed primitives collapse to the scalar in their ``value`` field."""

    class_names = frozenset({
        "java.lang.Integer",
        "java.lang.Long",
        "java.lang.Boolean",
        "java.lang.Float",
        "java.lang.Byte",
        "java.lang.Short",
        "java.lang.Double",
        "java.lang.Character",
    })

    def normalize(self, normalizer: Normalizer, instance: Instance, history: frozenset[int]) -> Any:
        for fields in instance.field_data.values():
            if "value" in fields:
                return normalizer.content_value(fields["value"], history)
        return None


DEFAULT_OBJECT_NORMALIZERS: tuple[ObjectNormalizer, ...] = (
    VectorNormalizer(),
    ListNormalizer(),
    MapNormalizer(),
    WrappedPrimitiveNormalizer(),
)


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------

class Normalizer:
    """Cycle-safe flattening of decoded content.

    A normalizer never mutates the content graph; several may run over
    the same graph independently.

    Usage::

        values = Normalizer(objects).normalize()
    """

    def __init__(
        self,
        objects: Iterable[Optional[Content]],
        normalizers: Sequence[ObjectNormalizer] = DEFAULT_OBJECT_NORMALIZERS,
    ) -> None:
        self._objects = list(objects)
        self._normalizers = tuple(normalizers)

    def normalize(self) -> list[Any]:
        """Normalize every top-level item, dropping those that yield ``None``.

        Raises:
            NestingDepthError: If an item nests deeper than the recursion limit.
        """
        normalized: list[Any] = []
        for obj in self._objects:
            try:
                value = self.normalize_object(obj, frozenset())
            except RecursionError:
                raise NestingDepthError(
                    f"Object 0x{obj.handle:x} is nested too deeply to normalize"
                ) from None
            if value is not None:
                normalized.append(value)
        return normalized

    def content_value(self, value: Any, history: frozenset[int]) -> Any:
        """Normalize one value reached along a path whose handles are *history*."""
        if isinstance(value, Content) and value.handle is not None:
            if value.handle in history:
                return cycle_sentinel(value.handle)
            history = history | {value.handle}

        if isinstance(value, Instance):
            return self.normalize_object(value, history)
        if isinstance(value, StringContent):
            return value.data
        if isinstance(value, ArrayContent):
            return [self.content_value(item, history) for item in value.data]
        if isinstance(value, EnumContent):
            return value.value
        if isinstance(value, Content):
            return None
        if isinstance(value, JavaLong):
            return str(int(value))
        return value

    def normalize_object(self, content: Optional[Content], history: frozenset[int]) -> Any:
        """Render an instance through the first matching recogniser.

        Anything that is not an :class:`Instance` yields ``None``.
        """
        if not isinstance(content, Instance):
            return None
        history = history | {content.handle}

        for normalizer in self._normalizers:
            if normalizer.matches(content):
                return normalizer.normalize(self, content, history)

        merged: dict[str, Any] = {}
        for fields in content.field_data.values():
            for name, value in fields.items():
                merged[name] = self.content_value(value, history)
        return merged


def normalize(objects: Iterable[Optional[Content]]) -> list[Any]:
    """Normalize a list of top-level content items."""
    return Normalizer(objects).normalize()
