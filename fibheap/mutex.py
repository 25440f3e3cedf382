from __future__ import annotations

from contextlib import AbstractContextManager, ExitStack, nullcontext
from threading import Lock
from typing import Tuple

__all__ = ["Mutex", "lock_both"]


class Mutex[T]:
    """Guards a value so that only one thread at a time can use it.

    Entering the context acquires the lock and hands back the value.
    """

    def __init__(self, value: T, synchronized: bool = True):
        """Initialize mutex with the given value.

        Args:
            value: The value to protect with mutual exclusion.
            synchronized: If False, no lock is taken and the caller is
                responsible for keeping access to a single thread.
        """
        self._lock: AbstractContextManager = Lock() if synchronized else nullcontext()
        self._value = value

    def __enter__(self) -> T:
        """Take the lock and return the guarded value."""
        self._lock.__enter__()
        return self._value

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._lock.__exit__(exc_type, exc_val, exc_tb)


def lock_both[A, B](
    stack: ExitStack, first: Mutex[A], second: Mutex[B]
) -> Tuple[A, B]:
    """Enter two distinct mutexes in a globally consistent order.

    Locks are taken in object id order, whichever order the arguments come in.

    Args:
        stack: Exit stack that releases both locks on exit.
        first: The first mutex.
        second: The second mutex, which must not be first.

    Returns:
        The protected values, in argument order.
    """
    if id(first) < id(second):
        a = stack.enter_context(first)
        b = stack.enter_context(second)
    else:
        b = stack.enter_context(second)
        a = stack.enter_context(first)
    return a, b
