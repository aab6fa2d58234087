"""Header assembly: compute the range layout for a set of named buffers.

The layout is fully determined by the names and byte sizes:

* the preamble and range table come first, padded to ``ALIGNMENT``;
* the packed name blob is buffer 0;
* each data buffer follows in order, every one starting on an aligned offset.
"""

from __future__ import annotations
from typing import Any, Dict, List, Sequence

from ..logging import get_logger
from .constants import ALIGNMENT, MAGIC, PREAMBLE_SIZE, RANGE_SIZE
from .errors import (
    BFastError,
    ErrorKind,
    LayoutError,
    SizeError,
    internal_error,
    layout_error,
)
from .layout import next_aligned, pack_strings, padding
from .models import Header, Preamble, Range
from .validator import validate_header

__all__ = [
    "create_header",
    "compute_size",
    "check_names",
    "check_sizes",
    "padding_total",
    "to_header_dict",
]


def check_sizes(names: Sequence[str], sizes: Sequence[int]) -> None:
    if len(names) != len(sizes):
        raise layout_error(
            f"The number of buffer names {len(names)} is not equal to the number of buffer sizes {len(sizes)}",
            {"names": len(names), "sizes": len(sizes)},
        )
    for i, size in enumerate(sizes):
        if size < 0:
            raise SizeError(
                ErrorKind.NEGATIVE_SIZE,
                f"Buffer {i} ({names[i]!r}) has negative size {size}",
                {"index": i, "name": names[i], "size": size},
            )


def check_names(names: Sequence[str]) -> None:
    """Names are stored NUL-terminated, so they must be NUL-free strings."""
    for i, name in enumerate(names):
        if not isinstance(name, str) or "\x00" in name:
            raise LayoutError(
                ErrorKind.INVALID_NAME,
                f"Buffer {i} has invalid name {name!r}: names must be strings without NUL",
                {"index": i, "name": name},
            )


def create_header(names: Sequence[str], sizes: Sequence[int]) -> Header:
    """Assemble and validate the header for ``names`` / ``sizes``."""
    check_names(names)
    check_sizes(names, sizes)
    num_arrays = len(sizes) + 1
    data_start = next_aligned(PREAMBLE_SIZE + num_arrays * RANGE_SIZE)
    effective = [len(pack_strings(names))] + [int(s) for s in sizes]

    ranges: List[Range] = []
    cursor = data_start
    for size in effective:
        cursor = next_aligned(cursor)
        begin = cursor
        cursor += size
        ranges.append(Range(begin, cursor))

    header = Header(
        preamble=Preamble(
            magic=MAGIC,
            data_start=data_start,
            data_end=cursor,
            num_arrays=num_arrays,
        ),
        ranges=tuple(ranges),
        names=tuple(names),
    )
    try:
        validate_header(header)
    except BFastError as e:
        raise internal_error(
            f"Assembled header is inconsistent: {e.message}",
            {"violation": e.code, **(e.context or {})},
        ) from e
    get_logger().debug(
        "assembled header: arrays=%d data_start=%d data_end=%d",
        num_arrays,
        data_start,
        cursor,
    )
    return header


def compute_size(names: Sequence[str], sizes: Sequence[int]) -> int:
    """Byte offset where the last buffer ends (the ``data_end`` field)."""
    return create_header(names, sizes).preamble.data_end


def padding_total(header: Header) -> int:
    """Zero bytes the writer emits for ``header`` (header and body)."""
    p = header.preamble
    total = p.data_start - p.ranges_end
    for rng in header.ranges:
        total += padding(rng.count)
    return total


def to_header_dict(header: Header) -> Dict[str, Any]:
    p = header.preamble
    names = ("<names>",) + tuple(header.names)
    return {
        "preamble": {
            "magic": f"{p.magic:#018x}",
            "byte_order": "little" if p.byte_order == "<" else "big",
            "data_start": p.data_start,
            "data_end": p.data_end,
            "num_arrays": p.num_arrays,
            "ranges_end": p.ranges_end,
        },
        "alignment": ALIGNMENT,
        "ranges": [
            {
                "index": i,
                "name": names[i] if i < len(names) else None,
                "begin": r.begin,
                "end": r.end,
                "count": r.count,
            }
            for i, r in enumerate(header.ranges)
        ],
        "padding": padding_total(header),
    }
