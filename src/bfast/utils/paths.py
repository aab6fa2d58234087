"""Path utilities (safe resolution)."""

from __future__ import annotations
from pathlib import Path
from typing import AbstractSet

__all__ = ["safe_file_path", "safe_output_name"]


def safe_file_path(base_dir: Path, file_path: str) -> Path:
    base_dir = base_dir.resolve()
    resolved = (base_dir / file_path).resolve()
    resolved.relative_to(base_dir)  # raises ValueError if escapes
    return resolved


def safe_output_name(
    out_dir: Path,
    name: str,
    index: int,
    taken: AbstractSet[Path] = frozenset(),
) -> Path:
    """Destination file for buffer ``index`` extracted into ``out_dir``.

    Buffer names are arbitrary strings. A name falls back to
    ``buffer_<index>.bin`` when it is empty, escapes ``out_dir``, names
    ``out_dir`` itself or an existing directory, or collides with (or nests
    under) a path in ``taken``.
    """
    base = out_dir.resolve()
    fallback = base / f"buffer_{index}.bin"
    if not name or "\x00" in name:
        return fallback
    try:
        target = safe_file_path(base, name)
    except ValueError:
        return fallback
    if target == base or target.is_dir():
        return fallback
    if target in taken or any(parent in taken for parent in target.parents):
        return fallback
    return target
