"""Payload sources for manifest entries.

An entry names at most one of ``path`` (file relative to the manifest),
``data`` (UTF-8 text) or ``data_hex``; an entry with none packs as an empty
buffer.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Callable, Dict

from .paths import safe_file_path

__all__ = ["DataError", "read_limited", "read_data_from_entry"]

MAX_HEX_STRING_LENGTH = 16 * 1024 * 1024


class DataError(RuntimeError):
    pass


def read_limited(path: Path, max_size: int) -> bytes:
    """Read ``path`` whole, refusing anything over ``max_size`` bytes."""
    try:
        with path.open("rb") as f:
            data = f.read(max_size + 1)
    except FileNotFoundError as e:
        raise DataError(f"File not found: {path}") from e
    if len(data) > max_size:
        raise DataError(f"{path.name} exceeds {max_size} bytes")
    return data


def _from_path(value: Any, base_dir: Path, max_size: int) -> bytes:
    if not isinstance(value, str):
        raise DataError("path must be a string")
    try:
        resolved = safe_file_path(base_dir, value)
    except ValueError as e:
        raise DataError(f"path escapes manifest directory: {value}") from e
    return read_limited(resolved, max_size)


def _from_text(value: Any, base_dir: Path, max_size: int) -> bytes:
    if isinstance(value, bytes):
        return value
    if not isinstance(value, str):
        raise DataError("data must be a string")
    return value.encode("utf-8")


def _from_hex(value: Any, base_dir: Path, max_size: int) -> bytes:
    if not isinstance(value, str):
        raise DataError("data_hex must be a string")
    digits = "".join(value.split())
    if len(digits) > MAX_HEX_STRING_LENGTH:
        raise DataError(f"data_hex longer than {MAX_HEX_STRING_LENGTH} digits")
    try:
        return bytes.fromhex(digits)
    except ValueError as e:
        raise DataError(f"data_hex is not valid hex: {e}") from e


_SOURCES: Dict[str, Callable[[Any, Path, int], bytes]] = {
    "path": _from_path,
    "data": _from_text,
    "data_hex": _from_hex,
}


def read_data_from_entry(
    entry: dict[str, Any], base_dir: Path, max_size: int
) -> bytes:
    given = [key for key in _SOURCES if entry.get(key) is not None]
    if not given:
        return b""
    if len(given) > 1:
        raise DataError(f"entry sets {' and '.join(given)}; pick one")
    key = given[0]
    return _SOURCES[key](entry[key], base_dir, max_size)
