"""Configuration for heap instances."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["HeapConfig"]


@dataclass(frozen=True)
class HeapConfig:
    """Settings fixed at heap construction.

    Attributes:
        synchronized: Guard every operation with a lock. Disable only when a
            single thread owns the heap.
        key_format: Format spec applied to keys in dump().
    """

    synchronized: bool = True
    key_format: str = "f"

    @staticmethod
    def default() -> HeapConfig:
        """Get the shared default configuration.

        Returns:
            The global default HeapConfig instance.
        """
        return _DEFAULT


_DEFAULT = HeapConfig()
