"""Exceptions raised by heap operations.

Every operation validates its arguments before touching the heap, so when one
of these is raised the heap is exactly as it was before the call.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "DuplicateTag",
    "HeapError",
    "InvalidKey",
    "KeyNotLarger",
    "KeyNotSmaller",
    "ReservedKey",
    "TagNotFound",
]


class HeapError(Exception):
    """Base class for all recoverable heap failures."""

    pass


class DuplicateTag(HeapError, KeyError):
    """The tag (or, for union, some tag of the other heap) is already present."""

    def __init__(self, tag: Any, heap: Any = None):
        super().__init__(tag)
        self.tag = tag
        self.heap = heap

    def __str__(self) -> str:
        if self.heap is not None:
            return f"duplicate tags found while merging {self.heap!r}"
        return f"duplicate tag: {self.tag!r}"


class TagNotFound(HeapError, KeyError):
    """No live entry carries the tag."""

    def __init__(self, tag: Any):
        super().__init__(tag)
        self.tag = tag

    def __str__(self) -> str:
        return f"tag not found: {self.tag!r}"


class InvalidKey(HeapError, ValueError):
    """The key is not a totally ordered real number (NaN, or not a number at all)."""

    def __init__(self, key: Any):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"invalid key: {self.key!r}"


class ReservedKey(InvalidKey):
    """Negative infinity is reserved for internal deletion."""

    def __str__(self) -> str:
        return "negative infinity key is reserved for internal usage"


class KeyNotSmaller(HeapError, ValueError):
    def __init__(self, tag: Any, current: Any, key: Any):
        super().__init__(tag, current, key)
        self.tag = tag
        self.current = current
        self.key = key

    def __str__(self) -> str:
        return (
            f"new key {self.key!r} is not smaller than "
            f"current key {self.current!r} for {self.tag!r}"
        )


class KeyNotLarger(HeapError, ValueError):
    def __init__(self, tag: Any, current: Any, key: Any):
        super().__init__(tag, current, key)
        self.tag = tag
        self.current = current
        self.key = key

    def __str__(self) -> str:
        return (
            f"new key {self.key!r} is not larger than "
            f"current key {self.current!r} for {self.tag!r}"
        )
