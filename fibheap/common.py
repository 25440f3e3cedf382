"""Common utility types and functions for the fibheap package.

This module provides the small abstract interfaces and key helpers shared by
the arena, the heap and the debugging utilities.
"""

from __future__ import annotations

import math
import numbers
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from typing import Iterator, List, Tuple, Union

from fibheap.errors import InvalidKey, ReservedKey

__all__ = [
    "EMPTY",
    "Impossible",
    "Iterating",
    "Key",
    "MISSING",
    "Missing",
    "NEG_INF",
    "Sized",
    "check_key",
]


Key = Union[int, float]

NEG_INF: float = -math.inf

# Result of minimum/extract queries on an empty heap
EMPTY: Tuple[None, float] = (None, NEG_INF)


class Impossible(Exception):
    """Exception raised when encountering theoretically impossible states.

    Used to indicate internal consistency violations in heap operations.
    """

    pass


@dataclass(frozen=True)
class Missing:
    """Marker for an argument that was not supplied."""

    pass


MISSING = Missing()


class Sized(metaclass=ABCMeta):
    @abstractmethod
    def size(self) -> int: ...

    def null(self) -> bool:
        return self.size() == 0

    def __bool__(self) -> bool:
        return not self.null()

    def __len__(self) -> int:
        return self.size()


class Iterating[U](metaclass=ABCMeta):
    @abstractmethod
    def iter(self) -> Iterator[U]: ...

    def list(self) -> List[U]:
        return list(self.iter())

    def __iter__(self) -> Iterator[U]:
        return self.iter()


def check_key(key: Key) -> None:
    """Reject keys that may not be set through the public interface.

    Args:
        key: The candidate key.

    Raises:
        ReservedKey: If the key is negative infinity.
        InvalidKey: If the key is not a real number, or is NaN.
    """
    if not isinstance(key, numbers.Real):
        raise InvalidKey(key)
    if key == NEG_INF:
        raise ReservedKey(key)
    if isinstance(key, float) and math.isnan(key):
        raise InvalidKey(key)
