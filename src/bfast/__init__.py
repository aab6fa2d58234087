"""BFAST: named, 32-byte aligned binary buffers in a single container."""

from .api import (
    ReadOptions,
    WriteOptions,
    compute_size,
    pack,
    pack_buffers,
    read_bfast_file,
    unpack,
    unpack_typed,
    write_bfast_file,
)
from .buffers import BFastBuilder, NamedBuffer
from .packing.errors import BFastError, ErrorKind

__version__ = "0.1.0"

__all__ = [
    "BFastBuilder",
    "BFastError",
    "ErrorKind",
    "NamedBuffer",
    "ReadOptions",
    "WriteOptions",
    "compute_size",
    "pack",
    "pack_buffers",
    "read_bfast_file",
    "unpack",
    "unpack_typed",
    "write_bfast_file",
]
