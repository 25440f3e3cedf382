from fibheap.common import EMPTY, NEG_INF, Impossible
from fibheap.config import HeapConfig
from fibheap.debug import HeapStats
from fibheap.errors import (
    DuplicateTag,
    HeapError,
    InvalidKey,
    KeyNotLarger,
    KeyNotSmaller,
    ReservedKey,
    TagNotFound,
)
from fibheap.heap import FibHeap

__all__ = [
    "DuplicateTag",
    "EMPTY",
    "FibHeap",
    "HeapConfig",
    "HeapError",
    "HeapStats",
    "Impossible",
    "InvalidKey",
    "KeyNotLarger",
    "KeyNotSmaller",
    "NEG_INF",
    "ReservedKey",
    "TagNotFound",
]
