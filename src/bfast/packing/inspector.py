"""Binary BFAST inspection utilities.

Public functions:
- inspect_bfast(path) -> dict
- validate_bfast(path) -> list[str]

Inspection works on the raw bytes of a file and reports what it finds even
for malformed input; only ``validate_bfast`` turns findings into issues.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

from .constants import PREAMBLE_SIZE, RANGE_SIZE
from .errors import BFastError, StructuralError
from .layout import is_aligned, next_aligned, unpack_strings
from .models import Header
from .packers import unpack_preamble, unpack_ranges
from .planner import to_header_dict
from .validator import check_header, check_preamble

__all__ = [
    "inspect_bytes",
    "inspect_bfast",
    "validate_bfast",
]


def _read_exact(data: bytes, offset: int, size: int, label: str) -> bytes:
    end = offset + size
    if end > len(data):
        raise ValueError(
            f"Out of range read for {label}: {offset}+{size}>{len(data)}"
        )
    return data[offset:end]


def inspect_bytes(data: bytes) -> Dict[str, Any]:
    result: Dict[str, Any] = {"file_size": len(data), "issues": []}
    issues: List[str] = result["issues"]
    try:
        preamble = unpack_preamble(_read_exact(data, 0, PREAMBLE_SIZE, "preamble"))
    except ValueError as e:
        issues.append(str(e))
        return result
    violation = check_preamble(preamble)
    if violation is not None:
        issues.append(f"{violation.kind.code}: {violation.message}")
        result["preamble"] = {
            "magic": f"{preamble.magic:#018x}",
            "data_start": preamble.data_start,
            "data_end": preamble.data_end,
            "num_arrays": preamble.num_arrays,
        }
        return result
    try:
        raw_ranges = _read_exact(
            data, PREAMBLE_SIZE, preamble.num_arrays * RANGE_SIZE, "range table"
        )
    except ValueError as e:
        issues.append(str(e))
        return result
    ranges = tuple(
        unpack_ranges(raw_ranges, preamble.num_arrays, preamble.byte_order)
    )
    names: List[str] = []
    if ranges:
        try:
            blob = _read_exact(data, ranges[0].begin, ranges[0].count, "name blob")
            names = unpack_strings(blob)
        except (ValueError, StructuralError) as e:
            issues.append(f"Unreadable name blob: {e}")
    header = Header(preamble, ranges, tuple(names))
    violation = check_header(header)
    if violation is not None:
        issues.append(f"{violation.kind.code}: {violation.message}")
    result.update(to_header_dict(header))
    expected_size = next_aligned(preamble.data_end)
    if len(data) < preamble.data_end:
        issues.append(
            f"File size {len(data)} is smaller than data end {preamble.data_end}"
        )
    result["expected_size"] = expected_size
    result["trailing_bytes"] = max(0, len(data) - expected_size)
    result["buffers"] = len(names)
    result["aligned"] = all(is_aligned(r.begin) for r in ranges)
    return result


def inspect_bfast(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    info = inspect_bytes(p.read_bytes())
    info["path"] = str(p)
    return info


def validate_bfast(path: str | Path) -> List[str]:
    try:
        info = inspect_bfast(path)
    except (OSError, BFastError) as e:
        return [str(e)]
    return list(info["issues"])
