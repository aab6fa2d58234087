"""Named buffers and an accumulating builder on top of the codec."""

from __future__ import annotations

from array import array
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Iterable, List, Tuple

from .packing.models import Header
from .packing.writer import buffer_size, byte_view, write_buffers

__all__ = ["NamedBuffer", "BFastBuilder"]


@dataclass(frozen=True, slots=True)
class NamedBuffer:
    """A name plus any object exposing the buffer protocol."""

    name: str
    data: Any

    @property
    def size(self) -> int:
        return buffer_size(self.data)

    def to_bytes(self) -> bytes:
        return memoryview(self.data).tobytes()

    def as_array(self, typecode: str) -> array:
        values = array(typecode)
        values.frombytes(self.to_bytes())
        return values

    def as_str(self) -> str:
        return self.to_bytes().decode("utf-8")

    @classmethod
    def from_str(cls, name: str, text: str) -> NamedBuffer:
        return cls(name, text.encode("utf-8"))


@dataclass
class BFastBuilder:
    """Collects named buffers, then serializes them in insertion order.

    Usage:
        builder = BFastBuilder().add("xs", array("i", [1, 2, 3]))
        data = builder.to_bytes()
    """

    buffers: List[NamedBuffer] = field(default_factory=list)

    def add(self, name: str, data: Any) -> BFastBuilder:
        self.buffers.append(NamedBuffer(name, data))
        return self

    def add_buffer(self, buffer: NamedBuffer) -> BFastBuilder:
        self.buffers.append(buffer)
        return self

    def add_many(self, buffers: Iterable[NamedBuffer | Tuple[str, Any]]) -> BFastBuilder:
        for b in buffers:
            if isinstance(b, NamedBuffer):
                self.add_buffer(b)
            else:
                self.add(*b)
        return self

    @property
    def names(self) -> List[str]:
        return [b.name for b in self.buffers]

    @property
    def sizes(self) -> List[int]:
        return [b.size for b in self.buffers]

    def __len__(self) -> int:
        return len(self.buffers)

    def write(self, sink: BinaryIO) -> Header:
        return write_buffers(sink, [(b.name, b.data) for b in self.buffers])

    def to_bytes(self) -> bytes:
        from .api import pack_buffers

        return pack_buffers([(b.name, b.data) for b in self.buffers])

    def write_file(self, path: str | Path) -> int:
        from .api import write_bfast_file

        sizes = self.sizes

        def emit(sink: BinaryIO, index: int, name: str, size: int) -> None:
            sink.write(byte_view(self.buffers[index].data))

        return write_bfast_file(path, self.names, sizes, emit)
