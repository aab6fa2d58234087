"""Binary layout constants for the BFAST container format."""

from __future__ import annotations

# Every buffer (and the name blob) starts on a multiple of this many bytes.
ALIGNMENT = 32

# Preamble: magic:u64, data_start:u64, data_end:u64, num_arrays:i64
PREAMBLE_SIZE = 32
PREAMBLE_FORMAT = "QQQq"

# Range: begin:u64, end:u64
RANGE_SIZE = 16
RANGE_FORMAT = "QQ"

# Low byte 0xA5, second byte 0xBF, remaining six bytes zero.
SAME_ENDIAN = 0xBFA5
# Exact byte reversal of SAME_ENDIAN (what a foreign-endian writer produces).
SWAPPED_ENDIAN = 0xA5BF000000000000
MAGIC = SAME_ENDIAN

NATIVE_BYTE_ORDER = "<"
SWAPPED_BYTE_ORDER = ">"

# Index of the synthetic name buffer in the range table.
NAMES_INDEX = 0

# Guard used by the file helpers (not a format limit).
MAX_FILE_SIZE = 4 * 1024 * 1024 * 1024

__all__ = [
    "ALIGNMENT",
    "PREAMBLE_SIZE",
    "PREAMBLE_FORMAT",
    "RANGE_SIZE",
    "RANGE_FORMAT",
    "SAME_ENDIAN",
    "SWAPPED_ENDIAN",
    "MAGIC",
    "NATIVE_BYTE_ORDER",
    "SWAPPED_BYTE_ORDER",
    "NAMES_INDEX",
    "MAX_FILE_SIZE",
]
