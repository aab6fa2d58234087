"""Low-level layout helpers (alignment, name packing)."""

from __future__ import annotations
from typing import Iterable, List

from ..logging import get_logger
from .constants import ALIGNMENT
from .errors import ErrorKind, StructuralError

__all__ = [
    "is_aligned",
    "next_aligned",
    "padding",
    "pack_strings",
    "unpack_strings",
]


def is_aligned(n: int) -> bool:
    return n % ALIGNMENT == 0


def next_aligned(n: int) -> int:
    """Smallest aligned offset >= ``n``."""
    if is_aligned(n):
        return n
    return n + ALIGNMENT - (n % ALIGNMENT)


def padding(n: int) -> int:
    """Zero bytes needed after offset ``n`` to reach the next boundary."""
    return next_aligned(n) - n


def pack_strings(names: Iterable[str]) -> bytes:
    buf = bytearray()
    for name in names:
        buf.extend(name.encode("utf-8"))
        buf.append(0)
    return bytes(buf)


def unpack_strings(data: bytes, *, strict: bool = False) -> List[str]:
    """Split a NUL-terminated name blob back into names.

    A trailing fragment without a terminator is kept as a final name (with a
    warning) unless ``strict`` is set, in which case it is rejected.
    """
    if not data:
        return []
    parts = bytes(data).split(b"\x00")
    # split() leaves an empty tail when the blob ends with a terminator
    tail = parts.pop()
    if tail:
        if strict:
            raise StructuralError(
                ErrorKind.NAME_COUNT_MISMATCH,
                "Name blob ends with an unterminated fragment",
                {"fragment": tail.decode("utf-8", errors="replace")},
            )
        get_logger().warning(
            "name blob has unterminated trailing fragment (%d bytes)", len(tail)
        )
        parts.append(tail)
    names: List[str] = []
    offset = 0
    for i, raw in enumerate(parts):
        try:
            names.append(raw.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise StructuralError(
                ErrorKind.NAME_ENCODING,
                f"Name {i} is not valid UTF-8 (byte {offset + e.start} of the name blob)",
                {"index": i, "offset": offset + e.start, "reason": e.reason},
            ) from e
        offset += len(raw) + 1
    return names
