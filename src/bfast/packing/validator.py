"""Structural validation of BFAST preambles and headers.

Checks run in a fixed order (magic, bounds, counts, range table length,
ranges, names count) and stop at the first violation. ``check_*`` return that
violation as a value; ``validate_*`` raise it as a :class:`StructuralError`.
Nothing is mutated, so validation may be repeated on the same header.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .constants import PREAMBLE_SIZE, SAME_ENDIAN, SWAPPED_ENDIAN
from .errors import ErrorKind, StructuralError
from .layout import is_aligned
from .models import Header, Preamble

__all__ = [
    "Violation",
    "check_preamble",
    "check_header",
    "validate_preamble",
    "validate_header",
]


@dataclass(frozen=True, slots=True)
class Violation:
    kind: ErrorKind
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    def to_error(self) -> StructuralError:
        return StructuralError(self.kind, self.message, dict(self.context))

    def to_dict(self) -> dict:
        return {
            "code": self.kind.code,
            "message": self.message,
            "context": dict(self.context),
        }


def check_preamble(preamble: Preamble) -> Optional[Violation]:
    p = preamble
    if p.magic not in (SAME_ENDIAN, SWAPPED_ENDIAN):
        return Violation(
            ErrorKind.MAGIC_MISMATCH,
            f"Invalid magic number {p.magic:#018x}",
            {"magic": p.magic},
        )
    if p.data_start < PREAMBLE_SIZE:
        return Violation(
            ErrorKind.BOUNDS_VIOLATION,
            f"Data start {p.data_start} cannot be before the preamble size {PREAMBLE_SIZE}",
            {"data_start": p.data_start, "preamble_size": PREAMBLE_SIZE},
        )
    if p.data_start > p.data_end:
        return Violation(
            ErrorKind.BOUNDS_VIOLATION,
            f"Data start {p.data_start} cannot be after the data end {p.data_end}",
            {"data_start": p.data_start, "data_end": p.data_end},
        )
    if p.num_arrays < 0:
        return Violation(
            ErrorKind.BOUNDS_VIOLATION,
            f"Number of arrays {p.num_arrays} is negative",
            {"num_arrays": p.num_arrays},
        )
    if p.num_arrays > p.data_end:
        return Violation(
            ErrorKind.BOUNDS_VIOLATION,
            f"Number of arrays {p.num_arrays} can't be more than the total size {p.data_end}",
            {"num_arrays": p.num_arrays, "data_end": p.data_end},
        )
    if p.ranges_end > p.data_start:
        return Violation(
            ErrorKind.BOUNDS_VIOLATION,
            f"End of ranges {p.ranges_end} can't be after data start {p.data_start}",
            {"ranges_end": p.ranges_end, "data_start": p.data_start},
        )
    return None


def check_header(header: Header) -> Optional[Violation]:
    violation = check_preamble(header.preamble)
    if violation is not None:
        return violation
    lo = header.preamble.data_start
    hi = header.preamble.data_end
    ranges = header.ranges
    if len(ranges) != header.preamble.num_arrays:
        return Violation(
            ErrorKind.BOUNDS_VIOLATION,
            f"Range table has {len(ranges)} entries but the preamble declares {header.preamble.num_arrays} arrays",
            {"ranges": len(ranges), "num_arrays": header.preamble.num_arrays},
        )
    for i, rng in enumerate(ranges):
        if not is_aligned(rng.begin):
            return Violation(
                ErrorKind.MISALIGNED_OFFSET,
                f"Range {i} begin {rng.begin} is not aligned",
                {"index": i, "begin": rng.begin},
            )
        if rng.begin < lo or rng.begin > hi:
            return Violation(
                ErrorKind.RANGE_OUT_OF_BOUNDS,
                f"Range {i} begin {rng.begin} is outside {lo}..{hi}",
                {"index": i, "begin": rng.begin, "data_start": lo, "data_end": hi},
            )
        if i > 0 and rng.begin < ranges[i - 1].end:
            return Violation(
                ErrorKind.RANGE_OVERLAP,
                f"Range {i} begin {rng.begin} overlaps previous range end {ranges[i - 1].end}",
                {"index": i, "begin": rng.begin, "previous_end": ranges[i - 1].end},
            )
        if rng.end < rng.begin or rng.end > hi:
            return Violation(
                ErrorKind.RANGE_OUT_OF_BOUNDS,
                f"Range {i} end {rng.end} is outside {rng.begin}..{hi}",
                {"index": i, "begin": rng.begin, "end": rng.end, "data_end": hi},
            )
    if len(header.names) != len(ranges) - 1:
        return Violation(
            ErrorKind.NAME_COUNT_MISMATCH,
            f"Number of buffer names {len(header.names)} is not one less than the number of ranges {len(ranges)}",
            {"names": len(header.names), "ranges": len(ranges)},
        )
    return None


def validate_preamble(preamble: Preamble) -> Preamble:
    violation = check_preamble(preamble)
    if violation is not None:
        raise violation.to_error()
    return preamble


def validate_header(header: Header) -> Header:
    violation = check_header(header)
    if violation is not None:
        raise violation.to_error()
    return header
