"""Immutable value types describing a BFAST header."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from .constants import (
    PREAMBLE_SIZE,
    RANGE_SIZE,
    SWAPPED_ENDIAN,
    NATIVE_BYTE_ORDER,
    SWAPPED_BYTE_ORDER,
    MAGIC,
    NAMES_INDEX,
)

__all__ = ["Preamble", "Range", "Header"]


@dataclass(frozen=True, slots=True)
class Preamble:
    """Fixed 32-byte leading record.

    ``magic`` holds the sentinel exactly as it reads in native (little-endian)
    order, so a stream from a foreign-endian writer keeps ``SWAPPED_ENDIAN``
    here while every other field is stored already converted.
    """

    magic: int = MAGIC
    data_start: int = 0
    data_end: int = 0
    num_arrays: int = 0

    @property
    def ranges_end(self) -> int:
        return PREAMBLE_SIZE + self.num_arrays * RANGE_SIZE

    @property
    def byte_order(self) -> str:
        if self.magic == SWAPPED_ENDIAN:
            return SWAPPED_BYTE_ORDER
        return NATIVE_BYTE_ORDER


@dataclass(frozen=True, slots=True)
class Range:
    begin: int
    end: int

    @property
    def count(self) -> int:
        return self.end - self.begin


@dataclass(frozen=True, slots=True)
class Header:
    """Preamble plus range table plus buffer names.

    ``ranges[0]`` locates the name blob; ``ranges[i + 1]`` belongs to
    ``names[i]``.
    """

    preamble: Preamble
    ranges: Tuple[Range, ...] = field(default_factory=tuple)
    names: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def name_range(self) -> Range:
        return self.ranges[NAMES_INDEX]

    @property
    def buffer_ranges(self) -> Tuple[Range, ...]:
        return self.ranges[1:]

    def entries(self):
        """Yield ``(index, name, range)`` for each data buffer."""
        for i, (name, rng) in enumerate(zip(self.names, self.ranges[1:])):
            yield i, name, rng
