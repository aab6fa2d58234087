"""Sequential BFAST writer.

Emission order: preamble, range table, zero padding, name blob, zero padding,
then every buffer followed by its own padding. Buffer payloads are produced by
a caller-supplied ``emit(sink, index, name, size)`` callback which must write
exactly ``size`` bytes; the codec never holds on to payload memory.

When the sink is seekable, positions are checked against the layout (relative
to where the BFAST started) and any divergence raises.
"""

from __future__ import annotations
from typing import Any, BinaryIO, Callable, Optional, Sequence, Tuple

from ..logging import get_logger
from .errors import AlignmentError, ErrorKind, SizeError, layout_error
from .layout import is_aligned, pack_strings, padding
from .models import Header
from .packers import pack_preamble, pack_ranges
from .planner import check_sizes, create_header
from .validator import validate_header

__all__ = [
    "EmitFn",
    "write_header",
    "write_body",
    "write_bfast",
    "write_buffers",
    "buffer_size",
    "byte_view",
    "stream_position",
    "check_alignment",
]

EmitFn = Callable[[BinaryIO, int, str, int], Any]


def stream_position(stream) -> Optional[int]:
    """Current position, or None for streams that cannot seek."""
    seekable = getattr(stream, "seekable", None)
    if seekable is None or not seekable():
        return None
    return stream.tell()


def check_alignment(stream, origin: int = 0, label: str = "") -> None:
    pos = stream_position(stream)
    if pos is None:
        return
    if not is_aligned(pos - origin):
        raise AlignmentError(
            ErrorKind.ALIGNMENT_DRIFT,
            f"Stream position {pos} is not well aligned"
            + (f" after {label}" if label else ""),
            {"position": pos, "origin": origin, "at": label},
        )


def _write_zeros(sink: BinaryIO, n: int) -> None:
    if n:
        sink.write(b"\x00" * n)


def write_header(
    sink: BinaryIO,
    header: Header,
    *,
    origin: Optional[int] = None,
    checked: bool = True,
) -> int:
    """Write preamble, ranges and name blob. Returns the bytes written."""
    if len(header.ranges) != len(header.names) + 1:
        raise layout_error(
            f"The number of ranges {len(header.ranges)} must be one more than the number of names {len(header.names)}",
            {"ranges": len(header.ranges), "names": len(header.names)},
        )
    validate_header(header)
    if origin is None:
        origin = stream_position(sink) or 0
    order = header.preamble.byte_order
    head = pack_preamble(header.preamble) + pack_ranges(header.ranges, order)
    sink.write(head)
    gap = padding(len(head))
    _write_zeros(sink, gap)
    if checked:
        check_alignment(sink, origin, "range table")
    blob = pack_strings(header.names)
    sink.write(blob)
    tail = padding(len(blob))
    _write_zeros(sink, tail)
    if checked:
        check_alignment(sink, origin, "name blob")
    return len(head) + gap + len(blob) + tail


def write_body(
    sink: BinaryIO,
    names: Sequence[str],
    sizes: Sequence[int],
    emit: EmitFn,
    *,
    origin: Optional[int] = None,
    checked: bool = True,
) -> int:
    """Emit every buffer through ``emit`` and pad it. Returns bytes written."""
    check_sizes(names, sizes)
    if origin is None:
        origin = stream_position(sink) or 0
    total = 0
    for i, (name, size) in enumerate(zip(names, sizes)):
        before = stream_position(sink)
        emit(sink, i, name, size)
        if checked and before is not None:
            written = sink.tell() - before
            if written != size:
                raise SizeError(
                    ErrorKind.SIZE_MISMATCH,
                    f"Buffer {i} ({name!r}) declared {size} bytes but {written} were written",
                    {"index": i, "name": name, "declared": size, "written": written},
                )
        pad = padding(size)
        _write_zeros(sink, pad)
        if checked:
            check_alignment(sink, origin, f"buffer {name!r}")
        total += size + pad
    return total


def write_bfast(
    sink: BinaryIO,
    names: Sequence[str],
    sizes: Sequence[int],
    emit: EmitFn,
    *,
    checked: bool = True,
) -> Header:
    """Assemble the header for ``names``/``sizes`` and write the whole BFAST."""
    names = list(names)
    sizes = list(sizes)
    header = create_header(names, sizes)
    origin = stream_position(sink) or 0
    written = write_header(sink, header, origin=origin, checked=checked)
    written += write_body(
        sink, names, sizes, emit, origin=origin, checked=checked
    )
    get_logger().debug(
        "wrote bfast: buffers=%d bytes=%d", len(names), written
    )
    return header


def buffer_size(data: Any) -> int:
    """Byte length of any object supporting the buffer protocol."""
    return memoryview(data).nbytes


def byte_view(data: Any) -> memoryview:
    """Flat unsigned-byte view of ``data``.

    Strided (non-contiguous) views cannot be cast, so they are copied.
    """
    view = memoryview(data)
    if not view.c_contiguous:
        return memoryview(view.tobytes())
    return view.cast("B")


def write_buffers(
    sink: BinaryIO,
    buffers: Sequence[Tuple[str, Any]],
    *,
    checked: bool = True,
) -> Header:
    """Write ``(name, bytes-like)`` pairs as a BFAST."""
    buffers = list(buffers)

    def emit(out: BinaryIO, index: int, name: str, size: int) -> None:
        out.write(byte_view(buffers[index][1]))

    return write_bfast(
        sink,
        [name for name, _ in buffers],
        [buffer_size(data) for _, data in buffers],
        emit,
        checked=checked,
    )
