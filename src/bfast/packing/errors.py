"""Error definitions for the BFAST codec.

Every failure is fatal to the current read or write call. Each error carries
an :class:`ErrorKind` so callers can branch on the violated invariant without
parsing messages.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    MAGIC_MISMATCH = "E_MAGIC"
    BOUNDS_VIOLATION = "E_BOUNDS"
    RANGE_OVERLAP = "E_OVERLAP"
    RANGE_OUT_OF_BOUNDS = "E_RANGE_BOUNDS"
    MISALIGNED_OFFSET = "E_MISALIGNED"
    NAME_COUNT_MISMATCH = "E_NAME_COUNT"
    NAME_ENCODING = "E_NAME_ENCODING"
    INVALID_NAME = "E_INVALID_NAME"
    NEGATIVE_SIZE = "E_NEGATIVE_SIZE"
    ALIGNMENT_DRIFT = "E_ALIGNMENT"
    COUNT_MISMATCH = "E_COUNT_MISMATCH"
    SIZE_MISMATCH = "E_SIZE_MISMATCH"
    TRUNCATED = "E_TRUNCATED"
    INTERNAL = "E_INTERNAL"

    @property
    def code(self) -> str:
        return self.value


@dataclass(eq=False)
class BFastError(Exception):
    kind: ErrorKind
    message: str
    context: Optional[Dict[str, Any]] = None

    @property
    def code(self) -> str:
        return self.kind.code

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "kind": self.kind.name,
            "message": self.message,
            "context": self.context or {},
        }


class LayoutError(BFastError):
    """Name/size/range counts disagree."""


class SizeError(BFastError):
    """A declared or observed buffer size is unusable."""


class StructuralError(BFastError):
    """A header invariant does not hold, or the stream is cut short."""


class AlignmentError(BFastError):
    """The stream position is not on an alignment boundary when it must be."""


def layout_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> LayoutError:
    return LayoutError(ErrorKind.COUNT_MISMATCH, message, context)


def truncated_error(
    label: str, expected: int, got: int
) -> StructuralError:
    return StructuralError(
        ErrorKind.TRUNCATED,
        f"Stream ended while reading {label}: expected {expected} bytes, got {got}",
        {"field": label, "expected": expected, "got": got},
    )


def internal_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> BFastError:
    return BFastError(ErrorKind.INTERNAL, message, context)


__all__ = [
    "ErrorKind",
    "BFastError",
    "LayoutError",
    "SizeError",
    "StructuralError",
    "AlignmentError",
    "layout_error",
    "truncated_error",
    "internal_error",
]
