"""
Wire Handle Table
==================

Maps wire handles to the content registered under them.  Handles are
handed out sequentially from :data:`BASE_WIRE_HANDLE`, one per
reference-eligible item regardless of its kind, and the whole table is
cleared by ``TC_RESET``.
"""

from __future__ import annotations

from typing import Iterator

from relic.core.constants import BASE_WIRE_HANDLE
from relic.core.content import Content
from relic.core.errors import HandleResolutionError


class HandleTable:
    """Per-session handle registry.

    A handle may be reserved with :meth:`new_handle` and registered with
    :meth:`save` before the node behind it is fully decoded, so that
    references met while decoding that node's body find it.
    """

    __slots__ = ("_next", "_entries")

    def __init__(self) -> None:
        self._next: int = BASE_WIRE_HANDLE
        self._entries: dict[int, Content] = {}

    def new_handle(self) -> int:
        handle = self._next
        self._next += 1
        return handle

    def save(self, handle: int, content: Content) -> None:
        self._entries[handle] = content

    def resolve(self, handle: int, *, offset: int | None = None) -> Content:
        try:
            return self._entries[handle]
        except KeyError:
            raise HandleResolutionError(
                f"No content registered for handle 0x{handle:x}", offset=offset
            ) from None

    def reset(self) -> None:
        self._entries.clear()
        self._next = BASE_WIRE_HANDLE

    @property
    def next_handle(self) -> int:
        return self._next

    def contents(self) -> Iterator[Content]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, handle: object) -> bool:
        return handle in self._entries
