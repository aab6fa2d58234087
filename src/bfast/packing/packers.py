"""Pure binary packing functions for the BFAST header records.

All functions are side-effect free and validate sizes. Records are encoded
field by field with :mod:`struct`, never by reinterpreting memory.
"""

from __future__ import annotations

import struct
from typing import List, Sequence

from .constants import (
    PREAMBLE_SIZE,
    PREAMBLE_FORMAT,
    RANGE_SIZE,
    RANGE_FORMAT,
    SWAPPED_ENDIAN,
    NATIVE_BYTE_ORDER,
    SWAPPED_BYTE_ORDER,
)
from .errors import ErrorKind, StructuralError, internal_error
from .models import Preamble, Range

__all__ = [
    "swap_endian_u64",
    "pack_preamble",
    "unpack_preamble",
    "pack_range",
    "pack_ranges",
    "unpack_ranges",
]


def swap_endian_u64(value: int) -> int:
    return int.from_bytes(value.to_bytes(8, "little"), "big")


def pack_preamble(preamble: Preamble) -> bytes:
    # magic is always emitted as its native reading; the rest follow its order
    order = preamble.byte_order
    out = struct.pack("<Q", preamble.magic) + struct.pack(
        f"{order}{PREAMBLE_FORMAT[1:]}",
        preamble.data_start,
        preamble.data_end,
        preamble.num_arrays,
    )
    if len(out) != PREAMBLE_SIZE:  # pragma: no cover
        raise internal_error(f"Preamble size mismatch: {len(out)}")
    return out


def unpack_preamble(raw: bytes) -> Preamble:
    if len(raw) != PREAMBLE_SIZE:
        raise StructuralError(
            ErrorKind.TRUNCATED,
            f"Preamble requires {PREAMBLE_SIZE} bytes, got {len(raw)}",
            {"field": "preamble", "expected": PREAMBLE_SIZE, "got": len(raw)},
        )
    (magic,) = struct.unpack_from("<Q", raw, 0)
    order = (
        SWAPPED_BYTE_ORDER if magic == SWAPPED_ENDIAN else NATIVE_BYTE_ORDER
    )
    data_start, data_end, num_arrays = struct.unpack_from(
        f"{order}{PREAMBLE_FORMAT[1:]}", raw, 8
    )
    return Preamble(
        magic=magic,
        data_start=data_start,
        data_end=data_end,
        num_arrays=num_arrays,
    )


def pack_range(rng: Range, byte_order: str = NATIVE_BYTE_ORDER) -> bytes:
    return struct.pack(f"{byte_order}{RANGE_FORMAT}", rng.begin, rng.end)


def pack_ranges(
    ranges: Sequence[Range], byte_order: str = NATIVE_BYTE_ORDER
) -> bytes:
    return b"".join(pack_range(r, byte_order) for r in ranges)


def unpack_ranges(
    raw: bytes, count: int, byte_order: str = NATIVE_BYTE_ORDER
) -> List[Range]:
    expected = count * RANGE_SIZE
    if len(raw) != expected:
        raise StructuralError(
            ErrorKind.TRUNCATED,
            f"Range table requires {expected} bytes, got {len(raw)}",
            {"field": "ranges", "expected": expected, "got": len(raw)},
        )
    return [
        Range(begin, end)
        for begin, end in struct.iter_unpack(f"{byte_order}{RANGE_FORMAT}", raw)
    ]
