"""Sequential BFAST reader.

Mirrors the writer: preamble (validated before anything else is trusted),
range table, padding, name blob, padding, then one ``on_buffer(source, name,
count)`` call per data buffer. The callback decides the representation (raw
bytes, a typed array, a file on disk...) and must consume exactly ``count``
bytes.

A stream whose magic is the byte-swapped sentinel has its header fields
decoded in the swapped order. Payloads are handed over untouched.
"""

from __future__ import annotations
from array import array
from typing import Any, BinaryIO, Callable, List, Optional, Tuple, TypeVar

from ..logging import get_logger
from .constants import PREAMBLE_SIZE, RANGE_SIZE
from .errors import ErrorKind, SizeError, StructuralError, truncated_error
from .layout import next_aligned, unpack_strings
from .models import Header, Range
from .packers import unpack_preamble, unpack_ranges
from .validator import validate_header, validate_preamble
from .writer import check_alignment, stream_position

__all__ = [
    "OnBufferFn",
    "read_exact",
    "read_bytes",
    "array_reader",
    "read_header",
    "read_bfast",
    "read_typed",
]

T = TypeVar("T")
OnBufferFn = Callable[[BinaryIO, str, int], T]

_CHUNK = 1 << 20


def read_exact(source: BinaryIO, n: int, label: str = "data") -> bytes:
    """Read exactly ``n`` bytes or raise a truncation error.

    Raw streams (pipes, sockets) may return fewer bytes than requested, so
    only an empty read counts as end of stream. Counts come from untrusted
    ranges; the buffer grows as data arrives rather than up front.
    """
    buf = bytearray()
    while len(buf) < n:
        chunk = source.read(min(_CHUNK, n - len(buf)))
        if not chunk:
            raise truncated_error(label, n, len(buf))
        buf.extend(chunk)
    return bytes(buf)


def _skip(source: BinaryIO, n: int) -> int:
    skipped = 0
    while skipped < n:
        chunk = source.read(min(_CHUNK, n - skipped))
        if not chunk:
            break
        skipped += len(chunk)
    return skipped


def read_bytes(source: BinaryIO, name: str, count: int) -> bytes:
    return read_exact(source, count, f"buffer {name!r}")


def array_reader(typecode: str) -> Callable[[BinaryIO, str, int], array]:
    """Build an ``on_buffer`` callback producing ``array(typecode)`` values."""
    itemsize = array(typecode).itemsize

    def on_buffer(source: BinaryIO, name: str, count: int) -> array:
        if count % itemsize:
            raise SizeError(
                ErrorKind.SIZE_MISMATCH,
                f"Buffer {name!r} of {count} bytes is not a whole number of {itemsize}-byte elements",
                {"name": name, "count": count, "itemsize": itemsize},
            )
        values = array(typecode)
        values.frombytes(read_exact(source, count, f"buffer {name!r}"))
        return values

    return on_buffer


class _Cursor:
    """Tracks the offset (relative to the BFAST start) of a forward-only read."""

    def __init__(self, source: BinaryIO, checked: bool) -> None:
        self.source = source
        self.origin = stream_position(source) or 0
        self.offset = 0
        self.checked = checked

    def read(self, n: int, label: str) -> bytes:
        data = read_exact(self.source, n, label)
        self.offset += n
        return data

    def skip_to(self, target: int, label: str, *, trailing: bool = False) -> None:
        """Consume padding up to ``target``.

        Trailing padding after the last buffer may be missing at end of
        stream; anywhere else a short read is a truncation.
        """
        n = target - self.offset
        got = _skip(self.source, n)
        self.offset += got
        if got != n:
            if trailing:
                return
            raise truncated_error(label, n, got)
        if self.checked:
            check_alignment(self.source, self.origin, label)

    def next_begin(self, ranges: Tuple[Range, ...], index: int) -> Tuple[int, bool]:
        if index + 1 < len(ranges):
            return ranges[index + 1].begin, False
        return next_aligned(ranges[index].end), True


def _read_header(cursor: _Cursor, strict_names: bool) -> Header:
    preamble = validate_preamble(
        unpack_preamble(cursor.read(PREAMBLE_SIZE, "preamble"))
    )
    if preamble.num_arrays < 1:
        raise StructuralError(
            ErrorKind.NAME_COUNT_MISMATCH,
            "Range table has no entry for the name buffer",
            {"num_arrays": preamble.num_arrays},
        )
    ranges = tuple(
        unpack_ranges(
            cursor.read(preamble.num_arrays * RANGE_SIZE, "range table"),
            preamble.num_arrays,
            preamble.byte_order,
        )
    )
    # Ranges drive every following read, so they are checked before use
    validate_header(Header(preamble, ranges, ("",) * (len(ranges) - 1)))
    cursor.skip_to(ranges[0].begin, "range table")
    names = unpack_strings(
        cursor.read(ranges[0].count, "name blob"), strict=strict_names
    )
    header = validate_header(Header(preamble, ranges, tuple(names)))
    target, trailing = cursor.next_begin(ranges, 0)
    cursor.skip_to(target, "name blob", trailing=trailing)
    get_logger().debug(
        "read header: arrays=%d data_start=%d data_end=%d byte_order=%s",
        preamble.num_arrays,
        preamble.data_start,
        preamble.data_end,
        preamble.byte_order,
    )
    return header


def read_header(
    source: BinaryIO,
    *,
    strict_names: bool = False,
    checked: bool = True,
) -> Header:
    """Parse and validate a BFAST header, leaving ``source`` at the first buffer."""
    return _read_header(_Cursor(source, checked), strict_names)


def read_bfast(
    source: BinaryIO,
    on_buffer: Optional[OnBufferFn] = None,
    *,
    strict_names: bool = False,
    checked: bool = True,
) -> List[Tuple[str, Any]]:
    """Read a whole BFAST as ``(name, on_buffer(...))`` pairs in stored order."""
    if on_buffer is None:
        on_buffer = read_bytes
    cursor = _Cursor(source, checked)
    header = _read_header(cursor, strict_names)
    out: List[Tuple[str, Any]] = []
    for i, name, rng in header.entries():
        before = stream_position(source)
        value = on_buffer(source, name, rng.count)
        if checked and before is not None:
            consumed = source.tell() - before
            if consumed != rng.count:
                raise SizeError(
                    ErrorKind.SIZE_MISMATCH,
                    f"Buffer {i} ({name!r}) spans {rng.count} bytes but {consumed} were consumed",
                    {"index": i, "name": name, "count": rng.count, "consumed": consumed},
                )
        cursor.offset += rng.count
        out.append((name, value))
        target, trailing = cursor.next_begin(header.ranges, i + 1)
        cursor.skip_to(target, f"buffer {name!r}", trailing=trailing)
    get_logger().debug("read bfast: buffers=%d", len(out))
    return out


def read_typed(
    source: BinaryIO,
    typecode: str,
    *,
    strict_names: bool = False,
    checked: bool = True,
) -> List[Tuple[str, array]]:
    return read_bfast(
        source,
        array_reader(typecode),
        strict_names=strict_names,
        checked=checked,
    )
