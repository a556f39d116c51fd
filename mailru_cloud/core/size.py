"""Byte count value type with a human-scale view."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Self

_KIB = 1024


class StorageUnit(IntEnum):
    """Units of the human-scale representation, by power of 1024."""

    B = 0
    KB = 1
    MB = 2
    GB = 3
    TB = 4


@dataclass(frozen=True, slots=True, order=True)
class Size:
    """
    Immutable byte count.

    ``unit`` and ``magnitude`` are derived from ``bytes`` on every access.
    """

    bytes: int = 0

    @classmethod
    def from_mebibytes(cls, value: int) -> Self:
        """Build a Size from a MiB count (disk usage endpoints report MiB)."""
        return cls(value * _KIB * _KIB)

    @property
    def unit(self) -> StorageUnit:
        for unit in StorageUnit:
            if self.bytes < _KIB ** (unit + 1):
                return unit
        return StorageUnit.TB

    @property
    def magnitude(self) -> float:
        return round(self.bytes / _KIB**self.unit, 2)

    def __int__(self) -> int:
        return self.bytes

    def __str__(self) -> str:
        if self.unit == StorageUnit.B:
            return f"{self.bytes} B"
        return f"{self.magnitude:.2f} {self.unit.name}"
