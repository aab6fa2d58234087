"""High-level API for bfast.

In-memory helpers (``pack`` / ``unpack``) and file helpers wrap the streaming
codec in :mod:`bfast.packing`. File-level operations report progress through
the active reporter.
"""

from __future__ import annotations

import io
from array import array
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence, Set, Tuple

from .buffers import NamedBuffer
from .logging import get_logger
from .manifest import load_manifest
from .packing.constants import MAX_FILE_SIZE
from .packing.inspector import inspect_bfast, validate_bfast
from .packing.models import Header
from .packing.planner import compute_size, create_header, padding_total
from .packing.reader import (
    OnBufferFn,
    array_reader,
    read_bfast,
    read_bytes,
    read_header,
)
from .packing.writer import EmitFn, buffer_size, byte_view, write_bfast
from .reporting import phase
from .utils.paths import safe_output_name

__all__ = [
    "WriteOptions",
    "ReadOptions",
    "PackResult",
    "pack",
    "unpack",
    "pack_buffers",
    "unpack_buffers",
    "unpack_typed",
    "write_bfast_file",
    "read_bfast_file",
    "read_header_file",
    "build_from_manifest",
    "unpack_to_directory",
    "compute_size",
    "create_header",
    "inspect_bfast",
    "validate_bfast",
]


@dataclass(slots=True)
class WriteOptions:
    # Verify emitted sizes and alignment when the sink can seek
    check_alignment: bool = True


@dataclass(slots=True)
class ReadOptions:
    # Reject a name blob whose last name lacks its NUL terminator
    strict_names: bool = False
    check_alignment: bool = True
    # Refuse files larger than this (file helpers only)
    max_size: int = MAX_FILE_SIZE


@dataclass(slots=True)
class PackResult:
    output_file: Path
    bytes_written: int
    buffers: int
    header: Header


def pack(
    names: Sequence[str],
    sizes: Sequence[int],
    emit: EmitFn,
    options: Optional[WriteOptions] = None,
) -> bytes:
    """Serialize buffers produced by ``emit`` into an in-memory BFAST."""
    options = options or WriteOptions()
    out = io.BytesIO()
    write_bfast(out, names, sizes, emit, checked=options.check_alignment)
    return out.getvalue()


def unpack(
    data: bytes,
    on_buffer: Optional[OnBufferFn] = None,
    options: Optional[ReadOptions] = None,
) -> List[Tuple[str, Any]]:
    """Parse an in-memory BFAST into ``(name, payload)`` pairs."""
    options = options or ReadOptions()
    return read_bfast(
        io.BytesIO(data),
        on_buffer or read_bytes,
        strict_names=options.strict_names,
        checked=options.check_alignment,
    )


def pack_buffers(
    buffers: Sequence[Tuple[str, Any] | NamedBuffer],
    options: Optional[WriteOptions] = None,
) -> bytes:
    """Pack ``(name, bytes-like)`` pairs or :class:`NamedBuffer` objects."""
    pairs = [
        (b.name, b.data) if isinstance(b, NamedBuffer) else (b[0], b[1])
        for b in buffers
    ]

    def emit(sink, index: int, name: str, size: int) -> None:
        sink.write(byte_view(pairs[index][1]))

    return pack(
        [name for name, _ in pairs],
        [buffer_size(data) for _, data in pairs],
        emit,
        options,
    )


def unpack_buffers(
    data: bytes, options: Optional[ReadOptions] = None
) -> List[NamedBuffer]:
    return [NamedBuffer(name, payload) for name, payload in unpack(data, options=options)]


def unpack_typed(
    data: bytes, typecode: str, options: Optional[ReadOptions] = None
) -> List[Tuple[str, array]]:
    """Unpack every buffer as ``array(typecode)``.

    Elements are taken in the stream's byte order as-is; no swapping is done
    for payloads even when the header was written with the other endianness.
    """
    return unpack(data, array_reader(typecode), options)


def _write_file(
    path: Path,
    names: Sequence[str],
    sizes: Sequence[int],
    emit: EmitFn,
    options: WriteOptions,
) -> Tuple[Header, int]:
    with path.open("wb") as f:
        header = write_bfast(f, names, sizes, emit, checked=options.check_alignment)
        written = f.tell()
    get_logger().debug("wrote %s (%d bytes)", path.name, written)
    return header, written


def write_bfast_file(
    path: str | Path,
    names: Sequence[str],
    sizes: Sequence[int],
    emit: EmitFn,
    options: Optional[WriteOptions] = None,
) -> int:
    """Write a BFAST to ``path``. Returns the number of bytes written."""
    _, written = _write_file(Path(path), names, sizes, emit, options or WriteOptions())
    return written


def _check_file_size(p: Path, max_size: int) -> None:
    size = p.stat().st_size
    if size > max_size:
        raise ValueError(
            f"File size {size} exceeds maximum {max_size} bytes. "
            f"Pass max_size= to override."
        )


def read_bfast_file(
    path: str | Path,
    on_buffer: Optional[OnBufferFn] = None,
    options: Optional[ReadOptions] = None,
) -> List[Tuple[str, Any]]:
    options = options or ReadOptions()
    p = Path(path)
    _check_file_size(p, options.max_size)
    with p.open("rb") as f:
        return read_bfast(
            f,
            on_buffer or read_bytes,
            strict_names=options.strict_names,
            checked=options.check_alignment,
        )


def read_header_file(
    path: str | Path, options: Optional[ReadOptions] = None
) -> Header:
    options = options or ReadOptions()
    with Path(path).open("rb") as f:
        return read_header(
            f,
            strict_names=options.strict_names,
            checked=options.check_alignment,
        )


def build_from_manifest(
    manifest_path: str | Path,
    output_path: str | Path,
    options: Optional[WriteOptions] = None,
) -> PackResult:
    """Pack the buffers listed in a JSON/YAML manifest into ``output_path``."""
    manifest = load_manifest(manifest_path)
    buffers = manifest.load_buffers()
    out = Path(output_path)
    with phase("pack", "Write buffers", expected=len(buffers)) as rep:

        def emit(sink, index: int, name: str, size: int) -> None:
            sink.write(buffers[index].data)
            rep.buffer_done("pack", name, size)

        header, written = _write_file(
            out,
            [b.name for b in buffers],
            [b.size for b in buffers],
            emit,
            options or WriteOptions(),
        )
    rep.summary(
        "pack",
        file=out.name,
        buffers=len(buffers),
        bytes=written,
        padding=padding_total(header),
    )
    return PackResult(
        output_file=out, bytes_written=written, buffers=len(buffers), header=header
    )


def unpack_to_directory(
    input_path: str | Path,
    out_dir: str | Path,
    options: Optional[ReadOptions] = None,
) -> List[Path]:
    """Extract every buffer of a BFAST file into ``out_dir``, one file each.

    Buffers whose names cannot be used as a distinct file below ``out_dir``
    (empty, escaping, duplicated, ``"."``) are written as
    ``buffer_<index>.bin``.
    """
    options = options or ReadOptions()
    src = Path(input_path)
    dest = Path(out_dir)
    dest.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    taken: Set[Path] = set()
    header = read_header_file(src, options)
    with phase("unpack", "Extract buffers", expected=len(header.names)) as rep:

        def on_buffer(source, name: str, count: int) -> Path:
            target = safe_output_name(dest, name, len(written), taken)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(read_bytes(source, name, count))
            written.append(target)
            taken.add(target)
            rep.buffer_done("unpack", name, count)
            return target

        read_bfast_file(src, on_buffer, options)
    rep.summary("unpack", file=src.name, buffers=len(written), dir=str(dest))
    return written
